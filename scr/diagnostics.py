# Error channel shared by the tokenizer, parser and evaluator.
#
# Bad input never raises. Each stage reports a Diagnostic and carries on with a
# safe default (skip the character, collapse the statement to Nop, substitute
# Integer(0)). Exceptions are kept for faults in the program or its settings.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


# --------------------------
# Exceptions
# --------------------------

class ScrError(Exception):
    """Base class for calculator errors."""
    pass


class ConfigError(ScrError):
    """Raised when the REPL settings are invalid."""
    pass


# --------------------------
# Diagnostics
# --------------------------

class DiagnosticKind(Enum):
    """Which stage reported the problem."""
    LEXICAL = "lexical"
    SYNTACTIC = "syntactic"
    SEMANTIC = "semantic"


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal problem found while processing a line."""
    kind: DiagnosticKind
    message: str
    offset: Optional[int] = None

    def __str__(self) -> str:
        return self.message


class Diagnostics:
    """Ordered collector of diagnostics for one input line.

    Stages receive the same instance so the caller sees every problem in the
    order it was found.
    """

    def __init__(self) -> None:
        self._items: List[Diagnostic] = []

    def report(self, kind: DiagnosticKind, message: str, offset: Optional[int] = None) -> Diagnostic:
        diagnostic = Diagnostic(kind, message, offset)
        self._items.append(diagnostic)
        logger.debug(f"{kind.value} diagnostic at {offset}: {message}")
        return diagnostic

    def lexical(self, message: str, offset: Optional[int] = None) -> Diagnostic:
        return self.report(DiagnosticKind.LEXICAL, message, offset)

    def syntactic(self, message: str, offset: Optional[int] = None) -> Diagnostic:
        return self.report(DiagnosticKind.SYNTACTIC, message, offset)

    def semantic(self, message: str, offset: Optional[int] = None) -> Diagnostic:
        return self.report(DiagnosticKind.SEMANTIC, message, offset)

    def messages(self) -> List[str]:
        return [d.message for d in self._items]

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self._items if d.kind is kind]

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"Diagnostics({self._items!r})"


# --------------------------
# Outcome
# --------------------------

@dataclass
class Outcome:
    """Result of running one line through the engine.

    Exactly one of ``value``, ``binding`` or ``command`` is set unless the
    statement was a Nop. ``diagnostics`` is always present; the value fields
    hold the fallback results even when problems were reported.
    """
    statement: Any
    value: Any = None
    binding: Optional[Tuple[str, Any]] = None
    command: Optional[str] = None
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    @property
    def ok(self) -> bool:
        return not self.diagnostics

    def lines(self) -> List[str]:
        """Text to show the user: diagnostics first, then the result."""
        out = self.diagnostics.messages()
        if self.binding is not None:
            name, value = self.binding
            out.append(f"{name} = {value}")
        elif self.value is not None:
            out.append(str(self.value))
        return out
