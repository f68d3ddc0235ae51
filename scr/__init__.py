from .diagnostics import ConfigError, Diagnostic, DiagnosticKind, Diagnostics, Outcome, ScrError
from .expression import Float, Integer, Name, evaluate
from .lexer import Token, TokenType, tokenize
from .parser import Command, ExpressionStatement, Nop, VariableDecl, parse
from .session import Session

__all__ = [
    'ConfigError', 'Diagnostic', 'DiagnosticKind', 'Diagnostics', 'Outcome', 'ScrError',
    'Float', 'Integer', 'Name', 'evaluate',
    'Token', 'TokenType', 'tokenize',
    'Command', 'ExpressionStatement', 'Nop', 'VariableDecl', 'parse',
    'Session',
]
