# Literals, expression trees and the tree-walking evaluator.
#
# Integers are 64-bit unsigned machine words: results wrap around instead of
# going negative or growing without bound. Floats are IEEE doubles and follow
# IEEE rules for overflow and zero divisors.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from .diagnostics import Diagnostics
from .lexer import Token, TokenType

logger = logging.getLogger(__name__)

INTEGER_BITS = 64
INTEGER_MASK = (1 << INTEGER_BITS) - 1
EXPONENT_MASK = (1 << 32) - 1


# --------------------------
# Literals
# --------------------------

@dataclass(frozen=True)
class Name:
    """Reference to a variable, resolved at evaluation time."""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Integer:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Float:
    value: float

    def __str__(self) -> str:
        return repr(self.value)


Literal = Union[Name, Integer, Float]
Number = Union[Integer, Float]


# --------------------------
# Expression tree
# --------------------------

@dataclass(frozen=True)
class LiteralExpression:
    literal: Literal
    offset: int


@dataclass(frozen=True)
class BinaryExpression:
    left: "Expression"
    operator: Token
    right: "Expression"


Expression = Union[LiteralExpression, BinaryExpression]


# --------------------------
# Numeric helpers
# --------------------------

def _wrap(value: int) -> int:
    return value & INTEGER_MASK


def _as_float(literal: Number) -> float:
    return float(literal.value)


def _truth(literal: Number) -> bool:
    return literal.value > 0


def _divide(left: float, right: float) -> float:
    """IEEE division: a zero divisor gives a signed infinity or nan."""
    if right == 0.0:
        if left == 0.0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


def _remainder(left: float, right: float) -> float:
    """Truncated remainder; the sign follows the dividend."""
    if right == 0.0 or math.isinf(left) or math.isnan(left) or math.isnan(right):
        return math.nan
    return math.fmod(left, right)


def _power(base: float, exponent: float) -> float:
    odd = exponent.is_integer() and exponent % 2 == 1
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return -math.inf if base < 0 and odd else math.inf
    except ValueError:
        # zero to a negative power is a pole, anything else here is undefined
        if base == 0.0:
            return math.copysign(math.inf, base) if odd else math.inf
        return math.nan


# --------------------------
# Operator tables
# --------------------------

# (integer implementation, float implementation)
_ARITHMETIC: Dict[TokenType, tuple] = {
    TokenType.PLUS: (lambda a, b: _wrap(a + b), lambda a, b: a + b),
    TokenType.MINUS: (lambda a, b: _wrap(a - b), lambda a, b: a - b),
    TokenType.STAR: (lambda a, b: _wrap(a * b), lambda a, b: a * b),
    TokenType.PERCENT: (lambda a, b: a % b, _remainder),
    TokenType.STAR_STAR: (lambda a, b: pow(a, b & EXPONENT_MASK, 1 << INTEGER_BITS), _power),
}

# operator -> (integer implementation, name used in diagnostics)
_BITWISE: Dict[TokenType, tuple] = {
    TokenType.AMPERSAND: (lambda a, b: a & b, "and"),
    TokenType.PIPE: (lambda a, b: a | b, "inclusive or"),
    TokenType.CARET: (lambda a, b: a ^ b, "exclusive or"),
    TokenType.SHIFT_RIGHT: (lambda a, b: a >> (b & (INTEGER_BITS - 1)), "shift"),
    TokenType.SHIFT_LEFT: (lambda a, b: _wrap(a << (b & (INTEGER_BITS - 1))), "shift"),
}

_COMPARISON: Dict[TokenType, Callable] = {
    TokenType.GREATER: lambda a, b: a > b,
    TokenType.LESS: lambda a, b: a < b,
    TokenType.GREATER_EQUAL: lambda a, b: a >= b,
    TokenType.LESS_EQUAL: lambda a, b: a <= b,
    TokenType.EQUAL_EQUAL: lambda a, b: a == b,
    TokenType.BANG_EQUAL: lambda a, b: a != b,
}

_LOGICAL: Dict[TokenType, Callable[[bool, bool], bool]] = {
    TokenType.AMPERSAND_AMPERSAND: lambda a, b: a and b,
    TokenType.PIPE_PIPE: lambda a, b: a or b,
}


def _boolean(result: bool, left: Number, right: Number) -> Number:
    """Encode a truth value using the operand types: Integer only when both are."""
    if isinstance(left, Integer) and isinstance(right, Integer):
        return Integer(int(result))
    return Float(float(result))


# --------------------------
# Evaluator
# --------------------------

class Evaluator:
    """Evaluates expression trees against a variable environment.

    The environment is read, never written. Every problem is reported on the
    diagnostics channel and replaced by Integer(0), so evaluation always
    produces a number.
    """

    def __init__(self, env: Mapping[str, Literal], diagnostics: Optional[Diagnostics] = None):
        self.env = env
        self.diagnostics = diagnostics if diagnostics is not None else Diagnostics()

    def eval(self, node: Expression) -> Number:
        # Operators nest to the right, so walk the right spine in a loop and
        # only recurse into left operands (parenthesised groups).
        pending: List[Tuple[Token, Number]] = []
        while isinstance(node, BinaryExpression):
            pending.append((node.operator, self.eval(node.left)))
            node = node.right
        if not isinstance(node, LiteralExpression):
            raise TypeError(f"Unsupported expression node: {type(node).__name__}")
        result = self._eval_literal(node)
        for operator, left in reversed(pending):
            result = self.apply(operator, left, result)
        return result

    def _eval_literal(self, node: LiteralExpression) -> Number:
        literal = node.literal
        if isinstance(literal, Name):
            value = self.env.get(literal.name)
            if value is None:
                self.diagnostics.semantic(f"undefined name: {literal.name}", node.offset)
                return Integer(0)
            return value
        return literal

    def apply(self, operator: Token, left: Number, right: Number) -> Number:
        """Apply a binary operator to two evaluated operands."""
        op = operator.type
        both_integers = isinstance(left, Integer) and isinstance(right, Integer)

        if op is TokenType.SLASH:
            return Float(_divide(_as_float(left), _as_float(right)))

        if op in _ARITHMETIC:
            int_impl, float_impl = _ARITHMETIC[op]
            if both_integers:
                if op is TokenType.PERCENT and right.value == 0:
                    self.diagnostics.semantic("division by zero", operator.offset)
                    return Integer(0)
                return Integer(int_impl(left.value, right.value))
            return Float(float_impl(_as_float(left), _as_float(right)))

        if op in _BITWISE:
            impl, description = _BITWISE[op]
            if not both_integers:
                self.diagnostics.semantic(
                    f"cannot perform bitwise {description} ({op.value}) on non-integer literals",
                    operator.offset,
                )
                return Integer(0)
            return Integer(impl(left.value, right.value))

        if op in _COMPARISON:
            compare = _COMPARISON[op]
            if both_integers:
                return Integer(int(compare(left.value, right.value)))
            return Float(float(compare(_as_float(left), _as_float(right))))

        if op in _LOGICAL:
            return _boolean(_LOGICAL[op](_truth(left), _truth(right)), left, right)

        logger.debug(f"no evaluation rule for operator {op.name}, using 0")
        return Integer(0)


def evaluate(expression: Expression, env: Mapping[str, Literal], diagnostics: Optional[Diagnostics] = None) -> Number:
    """Evaluate ``expression`` against ``env``."""
    return Evaluator(env, diagnostics).eval(expression)
