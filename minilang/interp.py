from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, TextIO, Tuple, Union

from . import ast
from .diagnostics import FaultKind, FaultLog, MinilangError, SemanticError
from .store import SymbolStore
from .tree_printer import TreePrinter

logger = logging.getLogger("minilang.interp")
logger.addHandler(logging.NullHandler())


class EventKind(enum.Enum):
    DECLARED = "declared"
    ASSIGNED = "assigned"
    PRINT = "print"


@dataclass(frozen=True)
class RuntimeEvent:
    kind: EventKind
    value: int
    var_id: Optional[int] = None

    def render(self) -> str:
        if self.kind is EventKind.DECLARED:
            return f"Declared var[{self.var_id}] = {self.value}"
        if self.kind is EventKind.ASSIGNED:
            return f"Assigned var[{self.var_id}] = {self.value}"
        return f"Print: {self.value}"


def _truncating_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


_ARITHMETIC: Dict[ast.BinaryOperator, Callable[[int, int], int]] = {
    ast.BinaryOperator.ADD: lambda a, b: a + b,
    ast.BinaryOperator.SUB: lambda a, b: a - b,
    ast.BinaryOperator.MUL: lambda a, b: a * b,
    ast.BinaryOperator.DIV: _truncating_div,
}

_COMPARISON: Dict[ast.BinaryOperator, Callable[[int, int], bool]] = {
    ast.BinaryOperator.EQ: lambda a, b: a == b,
    ast.BinaryOperator.NE: lambda a, b: a != b,
    ast.BinaryOperator.LT: lambda a, b: a < b,
    ast.BinaryOperator.LE: lambda a, b: a <= b,
    ast.BinaryOperator.GT: lambda a, b: a > b,
    ast.BinaryOperator.GE: lambda a, b: a >= b,
}


class Interpreter:
    """Executes a finished tree against one symbol store.

    Semantic faults abort the statement that raised them and execution
    moves on to the next statement. Division by zero is reported and the
    division yields 0, so the enclosing statement still completes.
    """

    def __init__(
        self,
        store: Optional[SymbolStore] = None,
        stdout: Optional[TextIO] = None,
        tree_out: Optional[TextIO] = None,
        faults: Optional[FaultLog] = None,
    ) -> None:
        self.store = store if store is not None else SymbolStore()
        self.stdout = stdout if stdout is not None else sys.stdout
        self.printer = TreePrinter(tree_out) if tree_out is not None else None
        self.faults = faults if faults is not None else FaultLog()
        self.events: List[RuntimeEvent] = []

    def run(self, program: Union[ast.Program, ast.Node, None]) -> None:
        if isinstance(program, ast.Program):
            program = program.body
        self.execute_list(program)

    def execute_list(self, chain: Optional[ast.Node]) -> None:
        # Taken branches are queued instead of recursed into; nesting depth
        # is bounded only by memory.
        pending: List[Iterator[ast.Node]] = [iter(ast.statements(chain))]
        while pending:
            stmt = next(pending[-1], None)
            if stmt is None:
                pending.pop()
                continue
            branch = self._step(stmt)
            if branch is not None:
                pending.append(iter(ast.statements(branch)))

    def execute_statement(self, stmt: ast.Node) -> None:
        self.execute_list(stmt)

    def _step(self, stmt: ast.Node) -> Optional[ast.Node]:
        """Run one statement; return the chain it hands control to, if any."""
        if isinstance(stmt, ast.StmtList):
            return stmt
        if self.printer is not None:
            self.printer.write(stmt)
        try:
            return self._exec_stmt(stmt)
        except MinilangError as exc:
            logger.debug("statement at line %d aborted: %s", exc.line, exc.message)
            self.faults.report_error(exc)
            return None

    def _exec_stmt(self, stmt: ast.Node) -> Optional[ast.Node]:
        if isinstance(stmt, ast.Declare):
            value = self.evaluate(stmt.value)
            var_id = self._target_id(stmt.target, "Declaration", stmt.loc)
            self.store.set(var_id, value, stmt.loc)
            self._emit(RuntimeEvent(EventKind.DECLARED, value, var_id))
            return None
        if isinstance(stmt, ast.Assign):
            value = self.evaluate(stmt.value)
            var_id = self._target_id(stmt.target, "Assignment", stmt.loc)
            self.store.set(var_id, value, stmt.loc)
            self._emit(RuntimeEvent(EventKind.ASSIGNED, value, var_id))
            return None
        if isinstance(stmt, ast.Print):
            value = self.evaluate(stmt.value)
            self._emit(RuntimeEvent(EventKind.PRINT, value))
            return None
        if isinstance(stmt, ast.If):
            if self.evaluate(stmt.condition):
                return stmt.then_list
            return stmt.else_list
        raise SemanticError("Unknown statement kind", getattr(stmt, "loc", None))

    def evaluate(self, expr: ast.Node) -> int:
        """Evaluate an expression tree, left operand fully before right.

        Uses an explicit work stack so long operator chains do not hit the
        interpreter recursion limit.
        """
        values: List[int] = []
        work: List[Tuple[ast.Node, bool]] = [(expr, False)]
        while work:
            node, operands_done = work.pop()
            if isinstance(node, ast.IntLiteral):
                values.append(node.value)
            elif isinstance(node, ast.VarRef):
                values.append(self.store.get(node.id, node.loc))
            elif isinstance(node, ast.BinaryOp):
                if not operands_done:
                    work.append((node, True))
                    work.append((node.right, False))
                    work.append((node.left, False))
                    continue
                right = values.pop()
                left = values.pop()
                values.append(self._apply(node, left, right))
            else:
                raise SemanticError("expected expression node", getattr(node, "loc", None))
        return values[0]

    def _apply(self, expr: ast.BinaryOp, left: int, right: int) -> int:
        op = expr.op
        if op in _COMPARISON:
            return 1 if _COMPARISON[op](left, right) else 0
        if op is ast.BinaryOperator.DIV and right == 0:
            self.faults.report(FaultKind.RUNTIME, "Division by zero", expr.loc.line)
            return 0
        if op in _ARITHMETIC:
            return _ARITHMETIC[op](left, right)
        raise SemanticError("Unknown operator in expression", expr.loc)

    def _target_id(self, target: ast.Node, what: str, loc: ast.Located) -> int:
        if not isinstance(target, ast.VarRef):
            raise SemanticError(f"{what} left side is not a variable", loc)
        return target.id

    def _emit(self, event: RuntimeEvent) -> None:
        self.events.append(event)
        self.stdout.write(event.render() + "\n")


def run_program(
    program: Union[ast.Program, ast.Node, None],
    store: Optional[SymbolStore] = None,
    stdout: Optional[TextIO] = None,
    tree_out: Optional[TextIO] = None,
    faults: Optional[FaultLog] = None,
) -> Interpreter:
    interpreter = Interpreter(store=store, stdout=stdout, tree_out=tree_out, faults=faults)
    interpreter.run(program)
    return interpreter
