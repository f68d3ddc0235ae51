# Interactive shell for scr (simple calculation REPL).
#
# The shell reads a line, hands it to the Session, prints any diagnostics and
# the result, and carries out the commands the parser recognises: exit, clear,
# help and list. Line editing, history and completion come from prompt_toolkit.

from __future__ import annotations

import logging
import sys
from typing import Callable, Dict, List, Optional, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.enums import EditingMode
from prompt_toolkit.history import FileHistory
from prompt_toolkit.shortcuts import clear

from .config import Settings, load_settings
from .diagnostics import ConfigError
from .parser import COMMANDS, LET
from .session import Session

logger = logging.getLogger(__name__)

BANNER = (
    "Welcome to scr (simple calculation repl), double press tab to show available "
    "commands in the completion list.\n"
)

HELP_TEXT = """
scr (simple calculation REPL) is a simplistic math REPL for quick calculations:
    Available commands:
        exit    - Exits the REPL.
        clear   - Clears the current terminal screen.
        let     - Defines variables: let x = 2 ** 10
        list    - Lists all variables in order with their values.
        help    - Prints this message.

    Operators:
        ||  &&  |  ^  &  == !=  > < >= <=  >> <<  + -  * / % **
    Everything after an operator is its right operand, so operators group
    to the right: 10 - 3 - 2 is 10 - (3 - 2) and 2 * 3 + 1 is 2 * (3 + 1).
    Use parentheses to group otherwise.
    Integers are unsigned 64-bit; any float operand makes the result a float.
    / always produces a float.
"""


class SpaceIgnoringHistory(FileHistory):
    """File history that leaves out lines starting with a space."""

    def append_string(self, string: str) -> None:
        if string.startswith(" "):
            return
        super().append_string(string)


class REPL:
    """Read-Eval-Print Loop for the calculator."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings if settings is not None else Settings()
        self.session = Session()
        self.completions = set(COMMANDS) | {LET}
        self._prompt_session: Optional[PromptSession] = None

    def _create_prompt_session(self) -> PromptSession:
        self.settings.history_file.parent.mkdir(parents=True, exist_ok=True)
        editing_mode = EditingMode.VI if self.settings.edit_mode == 'vi' else EditingMode.EMACS
        return PromptSession(
            history=SpaceIgnoringHistory(str(self.settings.history_file)),
            editing_mode=editing_mode,
        )

    def _completer(self) -> WordCompleter:
        return WordCompleter(sorted(self.completions))

    def _list_variables(self) -> str:
        return "\n".join(f"{name} = {value}" for name, value in self.session.bindings())

    def _exit(self) -> Optional[str]:
        raise EOFError()

    def _clear(self) -> Optional[str]:
        clear()
        return None

    def _help(self) -> Optional[str]:
        return HELP_TEXT.strip("\n")

    def _run_command(self, name: str) -> Optional[str]:
        """Carry out a REPL command. Raises EOFError for exit so the loop can shut down."""
        handlers: Dict[str, Callable[[], Optional[str]]] = {
            'exit': self._exit,
            'clear': self._clear,
            'help': self._help,
            'list': self._list_variables,
        }
        return handlers[name]()

    def evaluate_line(self, line: str) -> Tuple[bool, str]:
        """Evaluate a single line. Returns (ok, output); ok is False when diagnostics were reported."""
        try:
            outcome = self.session.execute(line)
        except Exception as e:
            logger.exception(f"Unhandled error evaluating {line!r}")
            return False, f"Unhandled error: {e}"
        lines: List[str] = outcome.lines()
        if outcome.binding is not None:
            self.completions.add(outcome.binding[0])
        if outcome.command is not None:
            text = self._run_command(outcome.command)
            if text:
                lines.append(text)
        return outcome.ok, "\n".join(lines)

    def repl_loop(self) -> None:
        """Interactive loop; ends on exit or Ctrl-D."""
        if self.settings.banner:
            print(BANNER)
        if self._prompt_session is None:
            self._prompt_session = self._create_prompt_session()
        logger.info("scr session started")
        while True:
            try:
                line = self._prompt_session.prompt(self.settings.prompt, completer=self._completer())
            except KeyboardInterrupt:
                continue
            except EOFError:
                break
            try:
                ok, out = self.evaluate_line(line)
            except EOFError:
                break
            if out:
                print(out)
        logger.info("scr session finished")


# ---------------------------
# Entry point
# ---------------------------

def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = load_settings(argv)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    repl = REPL(settings)
    repl.repl_loop()
    return 0


if __name__ == '__main__':
    sys.exit(main())
