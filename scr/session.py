# Session: owns the variable environment and runs one line at a time through
# tokenize -> parse -> evaluate.

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from .diagnostics import Diagnostics, Outcome
from .expression import Literal, evaluate
from .lexer import tokenize
from .parser import Command, ExpressionStatement, Nop, VariableDecl, parse

logger = logging.getLogger(__name__)


class Session:
    """Evaluation state for one REPL process.

    ``env`` maps variable names to fully evaluated literals, in the order the
    names were first declared. It changes only when a ``let`` succeeds.
    """

    def __init__(self) -> None:
        self.env: Dict[str, Literal] = {}

    def execute(self, line: str) -> Outcome:
        """Run a single input line and report what happened.

        Commands are not carried out here; their name is handed back in the
        outcome for the shell to act on.
        """
        diagnostics = Diagnostics()
        tokens = tokenize(line, diagnostics)
        try:
            statement = parse(tokens, diagnostics)
        except RecursionError:
            logger.warning("parenthesis nesting exceeded the interpreter stack")
            diagnostics.syntactic("expression nested too deeply")
            return Outcome(Nop(), diagnostics=diagnostics)
        outcome = Outcome(statement, diagnostics=diagnostics)

        if isinstance(statement, ExpressionStatement):
            outcome.value = evaluate(statement.expression, self.env, diagnostics)
        elif isinstance(statement, VariableDecl):
            value = evaluate(statement.expression, self.env, diagnostics)
            self.env[statement.name] = value
            outcome.binding = (statement.name, value)
            logger.debug(f"bound {statement.name!r} to {value!r}")
        elif isinstance(statement, Command):
            outcome.command = statement.name
        elif not isinstance(statement, Nop):
            raise TypeError(f"Unsupported statement: {type(statement).__name__}")
        return outcome

    def bindings(self) -> List[Tuple[str, Literal]]:
        """Variables in declaration order."""
        return list(self.env.items())

    def names(self) -> List[str]:
        return list(self.env)
