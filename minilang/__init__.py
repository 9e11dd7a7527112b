"""
minilang: a two-phase interpreter for a small integer language.

The source is parsed to completion by an LALR grammar, the statement tree is
built bottom-up, and the finished tree is executed once against a
fixed-capacity symbol store.
"""

from .diagnostics import Fault, FaultKind, FaultLog, ParseError, SemanticError, StoreError
from .interp import Interpreter, RuntimeEvent, run_program
from .parser import parse_program
from .store import SymbolStore

__all__ = [
    "Fault",
    "FaultKind",
    "FaultLog",
    "Interpreter",
    "ParseError",
    "RuntimeEvent",
    "SemanticError",
    "StoreError",
    "SymbolStore",
    "parse_program",
    "run_program",
]
