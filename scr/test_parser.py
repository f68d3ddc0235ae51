# test_parser.py

import pytest

from scr.diagnostics import DiagnosticKind, Diagnostics
from scr.expression import BinaryExpression, Float, Integer, LiteralExpression, Name
from scr.lexer import TokenType, tokenize
from scr.parser import (
    Command,
    ExpressionStatement,
    Nop,
    Parser,
    VariableDecl,
    parse,
)


def parse_line(text, diagnostics=None):
    return parse(tokenize(text, diagnostics), diagnostics)


def parse_expr(text):
    statement = parse_line(text)
    assert isinstance(statement, ExpressionStatement)
    return statement.expression


def shape(node):
    """Render a tree as nested tuples so groupings are easy to compare."""
    if isinstance(node, LiteralExpression):
        literal = node.literal
        return literal.name if isinstance(literal, Name) else literal.value
    return (shape(node.left), node.operator.type.value, shape(node.right))


# ---------------------------
# Statements
# ---------------------------

@pytest.mark.parametrize("name", ["exit", "clear", "help", "list"])
def test_commands(name):
    assert parse_line(name) == Command(name)


def test_command_consumes_only_its_token():
    parser = Parser(tokenize("list 1 2"))
    assert parser.parse() == Command("list")
    assert parser.pos == 1


def test_empty_and_whitespace_lines_are_nop():
    diagnostics = Diagnostics()
    assert parse_line("", diagnostics) == Nop()
    assert parse_line("   \t", diagnostics) == Nop()
    assert not diagnostics


def test_empty_token_list_is_nop():
    assert parse([]) == Nop()


def test_unexpected_leading_token_reports_expected_statement():
    diagnostics = Diagnostics()
    assert parse_line("+ 1", diagnostics) == Nop()
    assert diagnostics.messages() == ["expected statement"]
    assert list(diagnostics)[0].kind is DiagnosticKind.SYNTACTIC


def test_variable_declaration():
    statement = parse_line("let x = 5")
    assert isinstance(statement, VariableDecl)
    assert statement.name == "x"
    assert shape(statement.expression) == 5


def test_variable_declaration_with_expression():
    statement = parse_line("let total = a + 2.5")
    assert statement.name == "total"
    assert shape(statement.expression) == ("a", "+", 2.5)


def test_variable_declaration_missing_assign_still_binds():
    diagnostics = Diagnostics()
    statement = parse_line("let x 5", diagnostics)
    assert statement == VariableDecl("x", statement.expression)
    assert shape(statement.expression) == 5
    assert diagnostics.messages() == ["expected: '=', got: integer literal '5'"]


def test_variable_declaration_missing_name_uses_empty_name():
    diagnostics = Diagnostics()
    statement = parse_line("let = 5", diagnostics)
    assert isinstance(statement, VariableDecl)
    assert statement.name == ""
    assert diagnostics.messages() == [
        "expected: identifier, got: '='",
        "expected: '=', got: integer literal '5'",
    ]


def test_variable_declaration_without_value_is_nop():
    diagnostics = Diagnostics()
    assert parse_line("let x =", diagnostics) == Nop()
    assert diagnostics.messages() == ["expected literal"]


def test_bare_let_is_nop():
    assert parse_line("let") == Nop()


def test_identifier_expression_statement():
    assert shape(parse_expr("x")) == "x"
    assert shape(parse_expr("exits")) == "exits"


# ---------------------------
# Primaries
# ---------------------------

def test_literals_keep_type_and_offset():
    node = parse_expr("  7")
    assert node == LiteralExpression(Integer(7), 2)
    assert parse_expr("2.5") == LiteralExpression(Float(2.5), 0)
    assert parse_expr("abc") == LiteralExpression(Name("abc"), 0)


def test_parentheses_return_inner_tree():
    assert shape(parse_expr("(((4)))")) == 4


def test_missing_close_paren_is_reported_but_kept():
    diagnostics = Diagnostics()
    statement = parse_line("(1 + 2", diagnostics)
    assert shape(statement.expression) == (1, "+", 2)
    assert diagnostics.messages() == ["expected: ')', got: end of line"]


def test_lone_open_paren_is_nop():
    diagnostics = Diagnostics()
    assert parse_line("(", diagnostics) == Nop()
    assert diagnostics.messages() == ["expected literal", "expected: ')', got: end of line"]


def test_missing_right_operand_is_nop():
    diagnostics = Diagnostics()
    assert parse_line("1 +", diagnostics) == Nop()
    assert diagnostics.messages() == ["expected literal"]


def test_malformed_number_is_nop():
    diagnostics = Diagnostics()
    assert parse_line("1.2.3", diagnostics) == Nop()
    assert diagnostics.messages() == ["syntax error: malformed number literal", "expected literal"]


def test_lone_dot_is_invalid_float():
    diagnostics = Diagnostics()
    assert parse_line(".", diagnostics) == Nop()
    assert diagnostics.messages() == ["invalid float literal: ."]


def test_integer_literal_out_of_range():
    diagnostics = Diagnostics()
    assert parse_line("18446744073709551616", diagnostics) == Nop()
    assert diagnostics.messages() == ["integer literal out of range: 18446744073709551616"]
    assert shape(parse_expr("18446744073709551615")) == 18446744073709551615


def test_huge_integer_literal_is_out_of_range():
    digits = "1" * 5000
    diagnostics = Diagnostics()
    assert parse_line(digits, diagnostics) == Nop()
    assert diagnostics.messages() == [f"integer literal out of range: {digits}"]


def test_leading_zeros_do_not_count_towards_range():
    assert shape(parse_expr("0" * 30 + "42")) == 42


# ---------------------------
# Precedence and associativity
# ---------------------------

def test_multiplication_binds_tighter_on_the_right():
    assert shape(parse_expr("1 + 2 * 3")) == (1, "+", (2, "*", 3))


def test_right_operand_restarts_at_the_top():
    # the right side of '*' is a whole expression
    assert shape(parse_expr("2 * 3 + 1")) == (2, "*", (3, "+", 1))


@pytest.mark.parametrize("text, expected", [
    ("10 - 3 - 2", (10, "-", (3, "-", 2))),
    ("8 / 4 / 2", (8, "/", (4, "/", 2))),
    ("1 << 2 << 3", (1, "<<", (2, "<<", 3))),
    ("1 < 2 < 3", (1, "<", (2, "<", 3))),
    ("2 ** 3 ** 2", (2, "**", (3, "**", 2))),
])
def test_same_level_operators_group_right(text, expected):
    assert shape(parse_expr(text)) == expected


def test_parentheses_override_grouping():
    assert shape(parse_expr("(10 - 3) - 2")) == ((10, "-", 3), "-", 2)


@pytest.mark.parametrize("text, expected", [
    ("1 & 2 ^ 3", (1, "&", (2, "^", 3))),
    ("1 ^ 2 | 3", (1, "^", (2, "|", 3))),
    ("1 == 1 && 2 > 1", (1, "==", (1, "&&", (2, ">", 1)))),
    ("a || b && c", ("a", "||", ("b", "&&", "c"))),
])
def test_left_operand_is_a_single_primary(text, expected):
    # whatever follows an operator is parsed as a full expression
    assert shape(parse_expr(text)) == expected


def test_xor_is_recognised_as_an_operator():
    node = parse_expr("6 ^ 3")
    assert isinstance(node, BinaryExpression)
    assert node.operator.type is TokenType.CARET
    assert shape(node) == (6, "^", 3)


def test_long_chain_nests_to_the_right():
    node = parse_expr(" + ".join(["1"] * 500))
    operators = 0
    while isinstance(node, BinaryExpression):
        assert isinstance(node.left, LiteralExpression)
        assert node.operator.type is TokenType.PLUS
        operators += 1
        node = node.right
    assert operators == 499
    assert node.literal == Integer(1)


def test_deeply_nested_parentheses():
    assert shape(parse_expr("(" * 100 + "7" + ")" * 100)) == 7
    assert shape(parse_expr("(" * 100 + "1 - 2" + ")" * 100)) == (1, "-", 2)


def test_trailing_tokens_are_ignored():
    assert shape(parse_expr("1 2")) == 1


def test_eat_leaves_cursor_on_mismatch():
    diagnostics = Diagnostics()
    parser = Parser(tokenize("5"), diagnostics)
    assert parser.eat(TokenType.RPAREN) is False
    assert parser.pos == 0
    assert parser.eat(TokenType.DECIMAL) is True
    assert parser.pos == 1
    assert len(diagnostics) == 1
