from __future__ import annotations

import sys
from typing import List, Optional, TextIO, Tuple, Union

from . import ast

SEPARATOR = "-" * 50


class _Branches:
    """Pseudo-node drawn under `if`: then-list on the left, else-list on the right."""

    label = "branches"

    def __init__(self, then_list: Optional[ast.StmtList], else_list: Optional[ast.StmtList]) -> None:
        self.then_list = then_list
        self.else_list = else_list


class TreePrinter:
    """Draws nodes as a rotated tree: right subtree above, left subtree below.

    Diagnostic only; it reads nodes and never evaluates them.
    """

    def __init__(self, stream: Optional[TextIO] = None, spacing: int = 5) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.spacing = spacing

    def write(self, node: Optional[ast.Node]) -> None:
        self.stream.write(self.render(node))

    def render(self, node: Optional[ast.Node]) -> str:
        """Render a statement (or every statement of a chain) with separators."""
        if node is None:
            return ""
        if isinstance(node, ast.StmtList):
            return "".join(self.render(stmt) for stmt in ast.statements(node))
        lines: List[str] = []
        self._draw(node, lines)
        return "".join(lines) + "\n" + SEPARATOR + "\n\n"

    def _draw(self, root, lines: List[str]) -> None:
        # Work stack of (node, indent) pairs and ready-made label lines,
        # popped in drawing order: right subtree, label, left subtree.
        work: List[Union[Tuple[object, int], str]] = [(root, 0)]
        while work:
            item = work.pop()
            if isinstance(item, str):
                lines.append(item)
                continue
            node, space = item
            if node is None:
                continue
            if isinstance(node, ast.StmtList):
                # Lists are not drawn; their statements stack newest on top.
                work.extend((stmt, space) for stmt in ast.statements(node))
                continue
            left, right = _children(node)
            work.append((left, space + self.spacing))
            work.append("\n" + " " * space + label(node) + "\n")
            work.append((right, space + self.spacing))


def label(node) -> str:
    if isinstance(node, ast.IntLiteral):
        return f"INTEGER({node.value})"
    if isinstance(node, ast.VarRef):
        return f"VAR(id={node.id})"
    if isinstance(node, ast.BinaryOp):
        return getattr(node.op, "symbol", str(node.op))
    if isinstance(node, ast.Declare):
        return "dec"
    if isinstance(node, ast.Assign):
        return "assign"
    if isinstance(node, ast.Print):
        return "print"
    if isinstance(node, ast.If):
        return "if"
    if isinstance(node, _Branches):
        return node.label
    return type(node).__name__


def _children(node) -> Tuple[object, object]:
    if isinstance(node, ast.BinaryOp):
        return node.left, node.right
    if isinstance(node, (ast.Declare, ast.Assign)):
        return node.target, node.value
    if isinstance(node, ast.Print):
        return node.value, None
    if isinstance(node, ast.If):
        return node.condition, _Branches(node.then_list, node.else_list)
    if isinstance(node, _Branches):
        return node.then_list, node.else_list
    return None, None
