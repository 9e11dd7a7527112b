from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional


@dataclass(frozen=True)
class Located:
    line: int
    column: int


class BinaryOperator(enum.Enum):
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    @classmethod
    def from_symbol(cls, symbol: str) -> "BinaryOperator":
        try:
            return cls(symbol)
        except ValueError:
            raise ValueError(f"unknown operator symbol {symbol!r}") from None

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISONS


_COMPARISONS = frozenset(
    {
        BinaryOperator.EQ,
        BinaryOperator.NE,
        BinaryOperator.LT,
        BinaryOperator.LE,
        BinaryOperator.GT,
        BinaryOperator.GE,
    }
)


class Node:
    loc: Located


class Expr(Node):
    loc: Located


class Stmt(Node):
    loc: Located


@dataclass
class IntLiteral(Expr):
    loc: Located
    value: int


@dataclass
class VarRef(Expr):
    loc: Located
    id: int


@dataclass
class BinaryOp(Expr):
    loc: Located
    op: BinaryOperator
    left: Node
    right: Node


@dataclass
class Declare(Stmt):
    loc: Located
    target: Node
    value: Node


@dataclass
class Assign(Stmt):
    loc: Located
    target: Node
    value: Node


@dataclass
class Print(Stmt):
    loc: Located
    value: Node


@dataclass
class If(Stmt):
    loc: Located
    condition: Node
    then_list: Optional["StmtList"]
    else_list: Optional["StmtList"] = None


@dataclass
class StmtList(Node):
    """One link of a left-leaning statement chain.

    `prev` holds every statement parsed before `stmt` (None for the first
    one), so the newest statement sits at the root.
    """

    loc: Located
    prev: Optional["StmtList"]
    stmt: Node


@dataclass
class Program:
    body: Optional[StmtList]
    identifiers: Dict[str, int] = field(default_factory=dict)


def statements(chain: Optional[Node]) -> Iterator[Node]:
    """Yield the statements of a chain oldest first.

    Walks the chain iteratively; a long program is a deep left spine.
    """
    newest_first: List[Node] = []
    node = chain
    while isinstance(node, StmtList):
        newest_first.append(node.stmt)
        node = node.prev
    if node is not None:
        newest_first.append(node)
    return reversed(newest_first)
