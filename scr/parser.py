# Parser producing one statement per input line.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from .diagnostics import Diagnostics
from .expression import (
    INTEGER_MASK,
    BinaryExpression,
    Expression,
    Float,
    Integer,
    LiteralExpression,
    Name,
)
from .lexer import Token, TokenType

logger = logging.getLogger(__name__)


# ---------------------------
# Statements
# ---------------------------

@dataclass(frozen=True)
class Command:
    """A REPL command (exit, clear, help, list) for the shell to carry out."""
    name: str


@dataclass(frozen=True)
class ExpressionStatement:
    expression: Expression


@dataclass(frozen=True)
class VariableDecl:
    name: str
    expression: Expression


@dataclass(frozen=True)
class Nop:
    pass


Statement = Union[Command, ExpressionStatement, VariableDecl, Nop]

COMMANDS = ('exit', 'clear', 'help', 'list')
LET = 'let'

_MAX_INTEGER_DIGITS = len(str(INTEGER_MASK))


# ---------------------------
# Parser
# ---------------------------

class Parser:
    """
    Recursive descent parser for a single statement.
    Grammar (lowest to highest binding):
        statement      : COMMAND | 'let' IDENTIFIER '=' expr | expr | <empty>
        expr           : logical_or
        logical_or     : logical_and ('||' expr)?
        logical_and    : bitwise_or ('&&' expr)?
        bitwise_or     : bitwise_xor ('|' expr)?
        bitwise_xor    : bitwise_and ('^' expr)?
        bitwise_and    : equality ('&' expr)?
        equality       : relational (('==' | '!=') expr)?
        relational     : shift (('>' | '<' | '>=' | '<=') expr)?
        shift          : additive (('>>' | '<<') expr)?
        additive       : multiplicative (('+' | '-') expr)?
        multiplicative : primary (('*' | '/' | '%' | '**') expr)?
        primary        : IDENTIFIER | DECIMAL | FLOAT | '(' expr ')'
    Every right operand re-enters ``expr``, so all operators associate to the
    right: ``10 - 3 - 2`` is ``10 - (3 - 2)``, and a left operand is always a
    single primary: ``2 * 3 + 1`` is ``2 * (3 + 1)``. The ladder therefore
    only decides which tokens are operators (``_LADDER``); ``expression``
    reads primary (operator primary)* and nests the result to the right.
    Only the leading statement is consumed; trailing tokens are ignored.
    """

    def __init__(self, tokens: List[Token], diagnostics: Optional[Diagnostics] = None):
        self.tokens = tokens
        self.pos = 0
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def _current(self) -> Optional[Token]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _advance(self) -> Optional[Token]:
        self.pos += 1
        return self._current()

    def _report_expected(self, expected: TokenType, token: Optional[Token]) -> None:
        got = token.describe() if token is not None else "nothing"
        offset = token.offset if token is not None else None
        self.diagnostics.syntactic(f"expected: {expected.describe()}, got: {got}", offset)

    def eat(self, expected: TokenType) -> bool:
        """
        Consume the current token if it has the expected type.
        On a mismatch the problem is reported and the cursor stays put.
        """
        token = self._current()
        if token is None:
            return False
        if token.type is not expected:
            self._report_expected(expected, token)
            return False
        self._advance()
        return True

    def parse(self) -> Statement:
        """
        Parses the leading statement of the token list.
        """
        token = self._current()
        if token is None or token.type is TokenType.EOL:
            statement: Statement = Nop()
        elif token.type is TokenType.IDENTIFIER:
            statement = self._parse_name(token)
        elif token.type in (TokenType.DECIMAL, TokenType.FLOAT, TokenType.LPAREN):
            statement = self._parse_expression_statement()
        else:
            self.diagnostics.syntactic("expected statement", token.offset)
            statement = Nop()
        logger.debug(f"parsed statement {statement!r}")
        return statement

    def _parse_name(self, token: Token) -> Statement:
        if token.text in COMMANDS:
            self._advance()
            return Command(token.text)
        if token.text == LET:
            return self._parse_variable()
        return self._parse_expression_statement()

    def _parse_variable(self) -> Statement:
        """
        'let' IDENTIFIER '=' expr
        A missing name becomes the empty name; a missing '=' is reported and
        parsing continues with the value.
        """
        token = self._advance()
        if token is not None and token.type is TokenType.IDENTIFIER:
            name = token.text
        else:
            name = ''
            self._report_expected(TokenType.IDENTIFIER, token)
        self._advance()
        self.eat(TokenType.ASSIGN)
        value = self.expression()
        if value is None:
            return Nop()
        return VariableDecl(name, value)

    def _parse_expression_statement(self) -> Statement:
        expression = self.expression()
        if expression is None:
            return Nop()
        return ExpressionStatement(expression)

    # Expression ladder

    def expression(self) -> Optional[Expression]:
        # read the right spine in a loop, then nest it from the right
        spine: List[Tuple[Expression, Token]] = []
        while True:
            left = self.primary()
            if left is None:
                return None
            operator = self._current()
            if operator is None or operator.type not in _BINARY_OPERATORS:
                break
            self._advance()
            spine.append((left, operator))
        result = left
        for left, operator in reversed(spine):
            result = BinaryExpression(left, operator, result)
        return result

    def primary(self) -> Optional[Expression]:
        """
        primary : IDENTIFIER | DECIMAL | FLOAT | '(' expr ')'
        """
        token = self._current()
        if token is None:
            self.diagnostics.syntactic("expected literal")
            return None
        if token.type is TokenType.IDENTIFIER:
            self._advance()
            return LiteralExpression(Name(token.text), token.offset)
        if token.type is TokenType.DECIMAL:
            self._advance()
            return self._integer_literal(token)
        if token.type is TokenType.FLOAT:
            self._advance()
            return self._float_literal(token)
        if token.type is TokenType.LPAREN:
            self._advance()
            inner = self.expression()
            self.eat(TokenType.RPAREN)
            return inner
        self.diagnostics.syntactic("expected literal", token.offset)
        return None

    def _integer_literal(self, token: Token) -> Optional[Expression]:
        if not token.text:
            # the lexer's marker for a malformed number
            self.diagnostics.syntactic("expected literal", token.offset)
            return None
        # int() refuses very long digit strings, so the length is checked first
        if len(token.text.lstrip('0')) > _MAX_INTEGER_DIGITS or int(token.text) > INTEGER_MASK:
            self.diagnostics.syntactic(f"integer literal out of range: {token.text}", token.offset)
            return None
        return LiteralExpression(Integer(int(token.text)), token.offset)

    def _float_literal(self, token: Token) -> Optional[Expression]:
        try:
            value = float(token.text)
        except ValueError:
            self.diagnostics.syntactic(f"invalid float literal: {token.text}", token.offset)
            return None
        return LiteralExpression(Float(value), token.offset)


_LOGICAL_OR = frozenset({TokenType.PIPE_PIPE})
_LOGICAL_AND = frozenset({TokenType.AMPERSAND_AMPERSAND})
_BITWISE_OR = frozenset({TokenType.PIPE})
_BITWISE_XOR = frozenset({TokenType.CARET})
_BITWISE_AND = frozenset({TokenType.AMPERSAND})
_EQUALITY = frozenset({TokenType.EQUAL_EQUAL, TokenType.BANG_EQUAL})
_RELATIONAL = frozenset({TokenType.GREATER, TokenType.LESS, TokenType.GREATER_EQUAL, TokenType.LESS_EQUAL})
_SHIFT = frozenset({TokenType.SHIFT_RIGHT, TokenType.SHIFT_LEFT})
_ADDITIVE = frozenset({TokenType.PLUS, TokenType.MINUS})
_MULTIPLICATIVE = frozenset({TokenType.STAR, TokenType.SLASH, TokenType.PERCENT, TokenType.STAR_STAR})

# rungs from lowest to highest binding
_LADDER = (
    _LOGICAL_OR,
    _LOGICAL_AND,
    _BITWISE_OR,
    _BITWISE_XOR,
    _BITWISE_AND,
    _EQUALITY,
    _RELATIONAL,
    _SHIFT,
    _ADDITIVE,
    _MULTIPLICATIVE,
)
_BINARY_OPERATORS = frozenset().union(*_LADDER)


def parse(tokens: List[Token], diagnostics: Optional[Diagnostics] = None) -> Statement:
    """Parse one statement from ``tokens``."""
    return Parser(tokens, diagnostics).parse()
