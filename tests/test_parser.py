from __future__ import annotations

import sys

import pytest

from minilang import ast
from minilang.diagnostics import ParseError
from minilang.parser import parse_program


def _stmts(source: str) -> list:
    return list(ast.statements(parse_program(source).body))


def test_multiplication_binds_tighter_than_addition() -> None:
    (stmt,) = _stmts("2 + 3 * 4;")
    assert isinstance(stmt, ast.Print)
    expr = stmt.value
    assert isinstance(expr, ast.BinaryOp)
    assert expr.op is ast.BinaryOperator.ADD
    assert expr.left == ast.IntLiteral(loc=expr.left.loc, value=2)
    assert isinstance(expr.right, ast.BinaryOp)
    assert expr.right.op is ast.BinaryOperator.MUL


def test_subtraction_is_left_associative() -> None:
    (stmt,) = _stmts("10 - 3 - 2;")
    expr = stmt.value
    assert expr.op is ast.BinaryOperator.SUB
    assert isinstance(expr.left, ast.BinaryOp)
    assert expr.left.left.value == 10
    assert expr.left.right.value == 3
    assert expr.right.value == 2


def test_parentheses_override_precedence() -> None:
    (stmt,) = _stmts("print((2 + 3) * 4);")
    expr = stmt.value
    assert expr.op is ast.BinaryOperator.MUL
    assert expr.left.op is ast.BinaryOperator.ADD


def test_declaration_and_assignment_wrap_variable_reference() -> None:
    decl, assign = _stmts("int a = 1;\na = a + 2;")
    assert isinstance(decl, ast.Declare)
    assert decl.target == ast.VarRef(loc=decl.target.loc, id=0)
    assert isinstance(assign, ast.Assign)
    assert assign.target.id == 0
    assert assign.loc.line == 2


def test_identifiers_get_ids_in_order_of_first_appearance() -> None:
    program = parse_program("int y = x;\nint z = y;\nx = z;")
    assert program.identifiers == {"y": 0, "x": 1, "z": 2}
    first = next(iter(ast.statements(program.body)))
    assert first.target.id == 0
    assert first.value.id == 1


def test_expression_statement_becomes_print() -> None:
    (stmt,) = _stmts("1 + 1;")
    assert isinstance(stmt, ast.Print)


def test_statement_list_is_left_leaning_chain() -> None:
    body = parse_program("print(1);\nprint(2);\nprint(3);").body
    assert isinstance(body, ast.StmtList)
    assert body.stmt.value.value == 3
    assert body.prev.stmt.value.value == 2
    assert body.prev.prev.stmt.value.value == 1
    assert body.prev.prev.prev is None


def test_empty_program_has_no_body() -> None:
    program = parse_program("  // nothing here\n")
    assert program.body is None
    assert program.identifiers == {}


def test_if_without_else_has_no_else_list() -> None:
    (stmt,) = _stmts("if (1 < 2): print(1); end")
    assert isinstance(stmt, ast.If)
    assert isinstance(stmt.condition, ast.BinaryOp)
    assert stmt.condition.op is ast.BinaryOperator.LT
    assert stmt.then_list is not None
    assert stmt.else_list is None


def test_if_else_keeps_both_blocks() -> None:
    (stmt,) = _stmts("if (1 >= 2): print(1); else: print(2); print(3); end")
    assert len(list(ast.statements(stmt.then_list))) == 1
    assert len(list(ast.statements(stmt.else_list))) == 2
    assert stmt.condition.op is ast.BinaryOperator.GE


def test_empty_block_builds_none() -> None:
    (stmt,) = _stmts("if (1 == 1): end")
    assert stmt.then_list is None
    assert stmt.else_list is None


def test_consecutive_ifs_resolve_independently() -> None:
    first, second = _stmts(
        "if (a > b): print(1); end if (c > d): print(2); else: print(3); end"
    )
    assert first.else_list is None
    assert second.else_list is not None


def test_else_belongs_to_nearest_open_if() -> None:
    (outer,) = _stmts(
        "if (1 > 2): if (3 > 4): print(1); else: print(2); end end"
    )
    assert outer.else_list is None
    (inner,) = list(ast.statements(outer.then_list))
    assert isinstance(inner, ast.If)
    assert inner.else_list is not None


def test_all_comparison_operators_parse() -> None:
    ops = []
    for symbol in ("==", "!=", "<", "<=", ">", ">="):
        (stmt,) = _stmts(f"if (1 {symbol} 2): end")
        ops.append(stmt.condition.op.symbol)
    assert ops == ["==", "!=", "<", "<=", ">", ">="]


def test_keywords_are_not_identifiers() -> None:
    program = parse_program("int integer = 1; print(integer);")
    assert program.identifiers == {"integer": 0}


def test_operator_location_is_recorded() -> None:
    (stmt,) = _stmts("print(\n1\n/\n2);")
    assert stmt.value.loc.line == 3


def test_syntax_error_reports_line() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_program("int a = 1;\nint = 2;\n")
    assert excinfo.value.line == 2
    assert excinfo.value.message.startswith("syntax error")


def test_unexpected_character_is_syntax_error() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_program("print(1);\nprint(2 @ 3);")
    assert excinfo.value.line == 2


def test_unterminated_statement_is_syntax_error() -> None:
    with pytest.raises(ParseError) as excinfo:
        parse_program("print(1);\nprint(2)")
    assert excinfo.value.message.startswith("syntax error")


def test_comparison_outside_condition_is_rejected() -> None:
    with pytest.raises(ParseError):
        parse_program("print(1 < 2);")


def test_missing_end_is_rejected() -> None:
    with pytest.raises(ParseError):
        parse_program("if (1 < 2): print(1);")


@pytest.mark.skipif(
    not getattr(sys, "get_int_max_str_digits", lambda: 0)(), reason="no int conversion limit"
)
def test_oversized_integer_literal_is_a_parse_error() -> None:
    literal = "9" * (sys.get_int_max_str_digits() + 10)
    with pytest.raises(ParseError) as excinfo:
        parse_program(f"int a = 1;\nprint({literal});")
    assert excinfo.value.line == 2
    assert "integer literal too long" in excinfo.value.message
