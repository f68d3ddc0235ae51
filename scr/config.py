# REPL settings: defaults, then SCR_* environment variables (a .env file is
# honoured), then command line flags.

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from .diagnostics import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_FILE = os.path.join("~", ".scr_history")

_ENV_FIELDS = {
    "SCR_PROMPT": "prompt",
    "SCR_HISTORY_FILE": "history_file",
    "SCR_EDIT_MODE": "edit_mode",
    "SCR_LOG_LEVEL": "log_level",
    "SCR_BANNER": "banner",
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseModel):
    """Settings for the interactive shell."""
    prompt: str = Field("scr > ", description="Prompt shown before every line")
    history_file: Path = Field(Path(DEFAULT_HISTORY_FILE), description="Line editing history file")
    edit_mode: str = Field("vi", description="Key bindings: vi or emacs")
    log_level: str = Field("WARNING", description="Logging level name")
    banner: bool = Field(True, description="Print the welcome banner on start")

    @field_validator('history_file')
    @classmethod
    def expand_history_file(cls, v: Path) -> Path:
        return v.expanduser()

    @field_validator('edit_mode')
    @classmethod
    def edit_mode_must_be_known(cls, v: str) -> str:
        mode = v.strip().lower()
        if mode not in ('vi', 'emacs'):
            raise ValueError("edit_mode must be 'vi' or 'emacs'")
        return mode

    @field_validator('log_level')
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="scr", description="scr - simple calculation REPL.")
    parser.add_argument(
        "--history-file",
        type=str,
        help=f"File used to keep line editing history (default: {DEFAULT_HISTORY_FILE}).",
    )
    parser.add_argument(
        "--edit-mode",
        type=str,
        choices=["vi", "emacs"],
        help="Key bindings for line editing (default: vi).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level, e.g. DEBUG or INFO (default: WARNING).",
    )
    parser.add_argument(
        "--no-banner",
        action="store_true",
        help="Do not print the welcome banner.",
    )
    return parser


def load_settings(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build the settings from environment variables and command line flags.

    Args:
        argv: Command line arguments without the program name
        environ: Environment to read; defaults to os.environ after loading .env

    Returns:
        Validated settings

    Raises:
        ConfigError: If any value is invalid
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    values = {field: environ[key] for key, field in _ENV_FIELDS.items() if key in environ}

    args = build_arg_parser().parse_args(argv)
    if args.history_file:
        values["history_file"] = args.history_file
    if args.edit_mode:
        values["edit_mode"] = args.edit_mode
    if args.log_level:
        values["log_level"] = args.log_level
    if args.no_banner:
        values["banner"] = False

    try:
        settings = Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e
    logger.info(f"Loaded settings: {settings}")
    return settings
