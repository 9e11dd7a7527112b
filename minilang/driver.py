from __future__ import annotations

import argparse
import contextlib
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, TextIO

from .diagnostics import FaultLog, ParseError
from .interp import Interpreter
from .parser import parse_program
from .store import DEFAULT_CAPACITY, SymbolStore

logger = logging.getLogger("minilang.driver")
logger.addHandler(logging.NullHandler())

CAPACITY_ENV = "MINILANG_STORE_CAPACITY"


@dataclass
class RunConfig:
    source: str = "in.txt"
    out: str = "out.txt"
    tree: str = "tree.txt"
    errors: str = "outError.txt"
    capacity: int = DEFAULT_CAPACITY
    log_level: str = "WARNING"


def _default_capacity() -> int:
    raw = os.environ.get(CAPACITY_ENV)
    if not raw:
        return DEFAULT_CAPACITY
    try:
        return int(raw)
    except ValueError:
        raise SystemExit(f"{CAPACITY_ENV} must be an integer, got {raw!r}")


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="minilang",
        description="minilang: parse a program, then execute its statement tree",
    )
    ap.add_argument("source", nargs="?", default="in.txt", help="Program source ('-' for stdin)")
    ap.add_argument("--out", default="out.txt", help="Runtime output file ('-' for stdout)")
    ap.add_argument("--tree", default="tree.txt", help="Diagnostic tree file ('-' for stdout)")
    ap.add_argument("--errors", default="outError.txt", help="Fault file ('-' for stderr)")
    ap.add_argument(
        "--capacity",
        type=int,
        default=_default_capacity(),
        help=f"Symbol store capacity (default {DEFAULT_CAPACITY}, or ${CAPACITY_ENV})",
    )
    ap.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for interpreter diagnostics on stderr",
    )
    return ap


def config_from_args(argv: Optional[list[str]] = None) -> RunConfig:
    args = build_arg_parser().parse_args(argv)
    return RunConfig(
        source=args.source,
        out=args.out,
        tree=args.tree,
        errors=args.errors,
        capacity=args.capacity,
        log_level=args.log_level,
    )


@contextlib.contextmanager
def _open_sink(path: str, fallback: TextIO) -> Iterator[TextIO]:
    if path == "-":
        yield fallback
        return
    with open(path, "w") as handle:
        yield handle


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text()


def run(config: RunConfig) -> int:
    try:
        source = _read_source(config.source)
    except OSError as exc:
        print(f"open {config.source}: {exc.strerror}", file=sys.stderr)
        return 2
    with _open_sink(config.out, sys.stdout) as out, _open_sink(
        config.tree, sys.stdout
    ) as tree_out, _open_sink(config.errors, sys.stderr) as err_out:
        faults = FaultLog(err_out)
        try:
            program = parse_program(source)
        except ParseError as exc:
            faults.report_error(exc)
            return 1
        interpreter = Interpreter(
            store=SymbolStore(config.capacity),
            stdout=out,
            tree_out=tree_out,
            faults=faults,
        )
        interpreter.run(program)
        logger.info(
            "executed %d event(s) with %d fault(s)", len(interpreter.events), len(faults.faults)
        )
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    config = config_from_args(argv)
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    if config.capacity < 1:
        print(f"--capacity must be positive, got {config.capacity}", file=sys.stderr)
        return 2
    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())
