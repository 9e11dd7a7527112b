from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from lark import Lark, Token
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError
from lark.visitors import Transformer_NonRecursive, v_args

from .ast import (
    Assign,
    BinaryOp,
    BinaryOperator,
    Declare,
    If,
    IntLiteral,
    Located,
    Node,
    Print,
    Program,
    StmtList,
    VarRef,
)
from .diagnostics import ParseError

logger = logging.getLogger("minilang.parser")
logger.addHandler(logging.NullHandler())

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()


_PARSER = Lark(
    _GRAMMAR_SRC,
    parser="lalr",
    start="program",
    propagate_positions=True,
    maybe_placeholders=False,
)


class IdentifierTable:
    """Hands out variable ids in order of first appearance."""

    def __init__(self) -> None:
        self.ids: Dict[str, int] = {}

    def intern(self, name: str) -> int:
        if name not in self.ids:
            self.ids[name] = len(self.ids)
        return self.ids[name]


class TreeBuilder(Transformer_NonRecursive):
    """Builds one AST node per completed grammar production.

    Callbacks run bottom-up and left to right; children arrive already
    built. Nothing here evaluates, prints or touches a store.
    """

    def __init__(self, identifiers: Optional[IdentifierTable] = None) -> None:
        super().__init__()
        self.identifiers = identifiers or IdentifierTable()

    # terminals

    def VARIABLE(self, token: Token) -> VarRef:
        return VarRef(loc=_loc_from_token(token), id=self.identifiers.intern(token.value))

    # expressions

    def int_lit(self, children: List[Token]) -> IntLiteral:
        token = children[0]
        try:
            value = int(token.value)
        except ValueError:
            # Longer than the interpreter will convert.
            raise ParseError(
                f"integer literal too long ({len(token.value)} digits)", _loc_from_token(token)
            ) from None
        return IntLiteral(loc=_loc_from_token(token), value=value)

    def var_ref(self, children: List[VarRef]) -> VarRef:
        return children[0]

    def binary(self, children: List) -> BinaryOp:
        left, op_token, right = children
        return _binary(left, op_token, right)

    def condition(self, children: List) -> BinaryOp:
        left, op_token, right = children
        return _binary(left, op_token, right)

    # statements

    def declaration(self, children: List[Node]) -> Declare:
        target, value = children
        return Declare(loc=target.loc, target=target, value=value)

    def assignment(self, children: List[Node]) -> Assign:
        target, value = children
        return Assign(loc=target.loc, target=target, value=value)

    @v_args(meta=True)
    def print_stmt(self, meta, children: List[Node]) -> Print:
        return Print(loc=_loc(meta), value=children[0])

    @v_args(meta=True)
    def expr_stmt(self, meta, children: List[Node]) -> Print:
        # An expression statement prints its value.
        return Print(loc=_loc(meta), value=children[0])

    @v_args(meta=True)
    def if_else(self, meta, children: List) -> If:
        condition, then_list, else_list = children
        return If(loc=_loc(meta), condition=condition, then_list=then_list, else_list=else_list)

    @v_args(meta=True)
    def if_then(self, meta, children: List) -> If:
        condition, then_list = children
        return If(loc=_loc(meta), condition=condition, then_list=then_list, else_list=None)

    def stmts(self, children: List) -> Optional[StmtList]:
        if not children:
            return None
        prev, stmt = children
        return StmtList(loc=stmt.loc, prev=prev, stmt=stmt)

    def program(self, children: List) -> Program:
        return Program(body=children[0], identifiers=dict(self.identifiers.ids))


def parse_program(source: str) -> Program:
    """Parse `source` to completion and build its tree.

    Raises `ParseError` when the token stream matches no production; no
    partial tree is returned.
    """
    try:
        tree = _PARSER.parse(source)
    except UnexpectedInput as exc:
        raise _syntax_error(exc, source) from exc
    try:
        program = TreeBuilder().transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, ParseError):
            raise exc.orig_exc from None
        raise ParseError(f"cannot build {exc.rule}: {exc.orig_exc}", _visit_loc(exc)) from exc
    logger.debug("parsed program with %d identifier(s)", len(program.identifiers))
    return program


def _binary(left: Node, op_token: Token, right: Node) -> BinaryOp:
    return BinaryOp(
        loc=_loc_from_token(op_token),
        op=BinaryOperator.from_symbol(op_token.value),
        left=left,
        right=right,
    )


def _syntax_error(exc: UnexpectedInput, source: str) -> ParseError:
    if isinstance(exc, UnexpectedCharacters):
        message = f"syntax error, unexpected character {exc.char!r}"
    elif isinstance(exc, UnexpectedToken) and exc.token.type == "$END":
        message = "syntax error, unexpected end of input"
    elif isinstance(exc, UnexpectedToken):
        message = f"syntax error, unexpected {exc.token.value!r}"
    else:
        message = "syntax error"
    line = getattr(exc, "line", None)
    column = getattr(exc, "column", None)
    if line is None or line < 1:
        # End of input: report the last source line.
        line = max(source.count("\n") + (0 if source.endswith("\n") else 1), 1)
        column = 0
    return ParseError(message, Located(line=line, column=column or 0))


def _visit_loc(exc: VisitError) -> Located:
    meta = getattr(exc.obj, "meta", exc.obj)
    return Located(line=getattr(meta, "line", 0) or 0, column=getattr(meta, "column", 0) or 0)


def _loc(meta) -> Located:
    return Located(line=meta.line, column=meta.column)


def _loc_from_token(token: Token) -> Located:
    return Located(line=token.line, column=token.column)
