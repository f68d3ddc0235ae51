# Tokenizer for scr input lines.
#
# One left-to-right pass with a single character of lookahead. Problems are
# reported on the diagnostics channel and scanning continues; the token list
# always ends with exactly one EOL token.

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from itertools import accumulate
from typing import Dict, List, Optional, Tuple

from .diagnostics import Diagnostics

logger = logging.getLogger(__name__)


# --------------------------
# Tokens
# --------------------------

class TokenType(Enum):
    """Every kind of token the lexer can produce."""
    IDENTIFIER = "identifier"
    DECIMAL = "integer literal"
    FLOAT = "float literal"

    PLUS = "+"
    MINUS = "-"
    SLASH = "/"
    STAR = "*"
    PERCENT = "%"
    AMPERSAND = "&"
    PIPE = "|"
    CARET = "^"
    ASSIGN = "="
    GREATER = ">"
    LESS = "<"

    STAR_STAR = "**"
    AMPERSAND_AMPERSAND = "&&"
    PIPE_PIPE = "||"
    EQUAL_EQUAL = "=="
    SHIFT_RIGHT = ">>"
    SHIFT_LEFT = "<<"
    BANG_EQUAL = "!="
    GREATER_EQUAL = ">="
    LESS_EQUAL = "<="

    LPAREN = "("
    RPAREN = ")"

    EOL = "end of line"

    def describe(self) -> str:
        if self in _WORD_TYPES:
            return self.value
        return f"'{self.value}'"


_VALUE_TYPES = frozenset({TokenType.IDENTIFIER, TokenType.DECIMAL, TokenType.FLOAT})
_WORD_TYPES = _VALUE_TYPES | {TokenType.EOL}


@dataclass(frozen=True)
class Token:
    """A token with its source text and the byte offset where it starts."""
    type: TokenType
    text: str
    offset: int

    def describe(self) -> str:
        if self.type in _VALUE_TYPES:
            return f"{self.type.value} {self.text!r}"
        return self.type.describe()

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, offset={self.offset})"


_SINGLE_CHAR_TOKENS: Dict[str, TokenType] = {
    '+': TokenType.PLUS,
    '-': TokenType.MINUS,
    '/': TokenType.SLASH,
    '%': TokenType.PERCENT,
    '^': TokenType.CARET,
    '(': TokenType.LPAREN,
    ')': TokenType.RPAREN,
}

# First character -> (token when the lookahead does not match, {lookahead: token}).
# '!' has no single-character form.
_TWO_CHAR_TOKENS: Dict[str, Tuple[Optional[TokenType], Dict[str, TokenType]]] = {
    '*': (TokenType.STAR, {'*': TokenType.STAR_STAR}),
    '&': (TokenType.AMPERSAND, {'&': TokenType.AMPERSAND_AMPERSAND}),
    '|': (TokenType.PIPE, {'|': TokenType.PIPE_PIPE}),
    '=': (TokenType.ASSIGN, {'=': TokenType.EQUAL_EQUAL}),
    '!': (None, {'=': TokenType.BANG_EQUAL}),
    '>': (TokenType.GREATER, {'>': TokenType.SHIFT_RIGHT, '=': TokenType.GREATER_EQUAL}),
    '<': (TokenType.LESS, {'<': TokenType.SHIFT_LEFT, '=': TokenType.LESS_EQUAL}),
}

_WHITESPACE = frozenset(" \t\n\r\x0c")


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def _is_identifier_start(ch: str) -> bool:
    return ch == '_' or ('a' <= ch <= 'z') or ('A' <= ch <= 'Z')


def _is_identifier_part(ch: str) -> bool:
    return _is_identifier_start(ch) or _is_digit(ch)


# --------------------------
# Lexer
# --------------------------

class Lexer:
    """Tokenizer for calculator statements.

    Produces IDENTIFIER, DECIMAL, FLOAT, operator, parenthesis and EOL tokens.
    '-' is always an operator; there are no negative literals.
    """

    def __init__(self, text: str, diagnostics: Optional[Diagnostics] = None):
        self.text = text
        self.pos = 0
        self.len = len(text)
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()
        # byte offset of every character index, plus the end of the line
        self._byte_offsets = list(accumulate((len(ch.encode('utf-8')) for ch in text), initial=0))

    def _peek(self, n: int = 0) -> str:
        i = self.pos + n
        return self.text[i] if i < self.len else ''

    def _advance(self, n: int = 1) -> None:
        self.pos += n

    def _offset(self) -> int:
        return self._byte_offsets[min(self.pos, self.len)]

    def _skip_whitespace(self) -> None:
        while self._peek() in _WHITESPACE:
            self._advance()

    def _read_identifier(self) -> Token:
        start, offset = self.pos, self._offset()
        while _is_identifier_part(self._peek()):
            self._advance()
        return Token(TokenType.IDENTIFIER, self.text[start:self.pos], offset)

    def _read_number(self) -> Token:
        start, offset = self.pos, self._offset()
        is_float = False
        while True:
            ch = self._peek()
            if ch == '.':
                if is_float:
                    # the scan resumes at this second '.'
                    self.diagnostics.lexical("syntax error: malformed number literal", offset)
                    return Token(TokenType.DECIMAL, '', offset)
                is_float = True
            elif not _is_digit(ch):
                break
            self._advance()
        text = self.text[start:self.pos]
        return Token(TokenType.FLOAT if is_float else TokenType.DECIMAL, text, offset)

    def _read_operator(self) -> Optional[Token]:
        """Read a one- or two-character operator; None when nothing was produced."""
        ch, offset = self._peek(), self._offset()
        single, pairs = _TWO_CHAR_TOKENS[ch]
        self._advance()
        follow = self._peek()
        if follow in pairs:
            self._advance()
            token_type = pairs[follow]
            return Token(token_type, token_type.value, offset)
        if single is None:
            self.diagnostics.lexical(f"({ch}) is unsupported", offset)
            return None
        return Token(single, single.value, offset)

    def _next_token(self) -> Token:
        while True:
            self._skip_whitespace()
            ch = self._peek()
            if ch == '':
                return Token(TokenType.EOL, '', self._offset())
            if _is_identifier_start(ch):
                return self._read_identifier()
            if _is_digit(ch) or ch == '.':
                return self._read_number()
            if ch in _SINGLE_CHAR_TOKENS:
                token_type = _SINGLE_CHAR_TOKENS[ch]
                token = Token(token_type, ch, self._offset())
                self._advance()
                return token
            if ch in _TWO_CHAR_TOKENS:
                token = self._read_operator()
                if token is not None:
                    return token
                continue
            self.diagnostics.lexical(f"unhandled character: {ch}", self._offset())
            self._advance()

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            token = self._next_token()
            tokens.append(token)
            if token.type is TokenType.EOL:
                logger.debug(f"tokenized {self.text!r} into {len(tokens)} tokens")
                return tokens


def tokenize(text: str, diagnostics: Optional[Diagnostics] = None) -> List[Token]:
    """Tokenize one input line."""
    return Lexer(text, diagnostics).tokenize()
