"""
Fault taxonomy and the fault channel.

Faults are raised as exceptions where they are detected and reported as
`Error: <message> at line <line>` records by whoever catches them. The
interpreter catches semantic faults at the statement boundary; the driver
catches syntax faults around the parse.
"""

from __future__ import annotations

import enum
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from .ast import Located

logger = logging.getLogger("minilang.diagnostics")
logger.addHandler(logging.NullHandler())


class FaultKind(enum.Enum):
    SYNTAX = "syntax"
    SEMANTIC = "semantic"
    RUNTIME = "runtime"


class MinilangError(Exception):
    kind = FaultKind.SEMANTIC

    def __init__(self, message: str, loc: Optional[Located] = None) -> None:
        super().__init__(message)
        self.message = message
        self.loc = loc

    @property
    def line(self) -> int:
        return self.loc.line if self.loc is not None else 0


class ParseError(MinilangError):
    kind = FaultKind.SYNTAX


class SemanticError(MinilangError):
    pass


class StoreError(SemanticError):
    pass


@dataclass(frozen=True)
class Fault:
    kind: FaultKind
    message: str
    line: int

    def render(self) -> str:
        return f"Error: {self.message} at line {self.line}"


class FaultLog:
    """Append-only fault channel: keeps every fault and echoes it to a stream."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream if stream is not None else sys.stderr
        self.faults: List[Fault] = []

    def report(self, kind: FaultKind, message: str, line: int) -> Fault:
        fault = Fault(kind=kind, message=message, line=line)
        self.faults.append(fault)
        logger.debug("%s fault: %s (line %d)", kind.value, message, line)
        self.stream.write(fault.render() + "\n")
        return fault

    def report_error(self, error: MinilangError) -> Fault:
        return self.report(error.kind, error.message, error.line)
