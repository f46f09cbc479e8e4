"""
main.py
-------
Command-line entry point for PgRowMap.

Responsibilities:
    - Initialize the database connection pool (and the demo schema on request).
    - Call a stored function and print its result in the chosen mapping mode.
    - Export a table-returning function's result to CSV or Excel.
    - Print the mapping modes comparison table.
"""

import argparse
import json
import math
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

import psycopg2

from config import EXPORT_DIR
from db.connection import close_pool, init_pool
from db.exceptions import PgRowMapError
from db.init_db import create_tables, seed_demo_data
from mapping.modes import MappingMode, format_modes_table
from repositories.function_repo import FunctionRepository
from services.export_service import ExportService
from utils.logger import get_logger

logger = get_logger(__name__)


def coerce_arg(raw: str) -> Any:
    """Turn a CLI string into int, float, bool or None where it clearly is one."""
    lowered = raw.lower()
    if lowered == "null":
        return None
    if lowered in ("true", "false"):
        return lowered == "true"
    try:
        return int(raw)
    except ValueError:
        pass
    try:
        value = float(raw)
    except ValueError:
        return raw
    return value if math.isfinite(value) else raw


def parse_named(pairs: Sequence[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs into named function arguments."""
    named = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"Expected key=value, got {pair!r}")
        named[key] = coerce_arg(value)
    return named


def build_params(args: argparse.Namespace):
    """Positional args, or named args when --named was given (not both)."""
    if args.named and args.args:
        raise argparse.ArgumentTypeError("Use either positional arguments or --named, not both.")
    if args.named:
        return parse_named(args.named)
    return [coerce_arg(a) for a in args.args]


def render(result: Any, mode: MappingMode) -> str:
    """Format a mapped result for the terminal."""
    if mode in (MappingMode.DICT, MappingMode.JSON):
        return json.dumps(result, indent=2, default=str, ensure_ascii=False)
    if mode is MappingMode.HYBRID:
        return "\n".join(repr(dict(r)) for r in result)
    if mode is MappingMode.TUPLE:
        columns, rows = result
        return "\n".join([repr(tuple(columns)), *(repr(r) for r in rows)])
    return "\n".join(repr(r) for r in result)


# ── Commands ──────────────────────────────────────────────


def cmd_init_db(args: argparse.Namespace) -> None:
    create_tables()
    if args.seed:
        seed_demo_data()


def cmd_call(args: argparse.Namespace) -> None:
    mode = MappingMode(args.mode)
    result = FunctionRepository().call(args.function, build_params(args), mode)
    print(render(result, mode))


def cmd_export(args: argparse.Namespace) -> None:
    service = ExportService()
    params = build_params(args)
    if args.format == "csv":
        buffer = service.export_csv(args.function, params)
    else:
        buffer = service.export_excel(args.function, params)

    output = Path(args.output or Path(EXPORT_DIR) / f"{args.function}.{args.format}")
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(buffer.getvalue())
    print(f"Wrote {output}")


def cmd_modes(args: argparse.Namespace) -> None:
    print(format_modes_table())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pgrowmap",
        description="Call PostgreSQL functions and map their results.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_init = sub.add_parser("init-db", help="create the demo schema")
    p_init.add_argument("--seed", action="store_true", help="insert demo rows")
    p_init.set_defaults(func=cmd_init_db, needs_db=True)

    def add_call_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("function", help="function name, optionally schema-qualified")
        p.add_argument("args", nargs="*", help="positional function arguments")
        p.add_argument(
            "--named", nargs="+", default=[], metavar="KEY=VALUE",
            help="named function arguments",
        )

    p_call = sub.add_parser("call", help="call a function and print the mapped result")
    add_call_args(p_call)
    p_call.add_argument(
        "--mode", choices=[m.value for m in MappingMode], default=MappingMode.DICT.value,
    )
    p_call.set_defaults(func=cmd_call, needs_db=True)

    p_export = sub.add_parser("export", help="export a table-returning function")
    add_call_args(p_export)
    p_export.add_argument("--format", choices=["csv", "xlsx"], default="csv")
    p_export.add_argument("--output", help="destination file (default: EXPORT_DIR/<function>.<format>)")
    p_export.set_defaults(func=cmd_export, needs_db=True)

    p_modes = sub.add_parser("modes", help="show the mapping modes table")
    p_modes.set_defaults(func=cmd_modes, needs_db=False)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Parse arguments, run the command, and return the process exit code."""
    args = build_parser().parse_args(argv)

    if not args.needs_db:
        args.func(args)
        return 0

    try:
        init_pool()
        args.func(args)
        return 0
    except (psycopg2.Error, PgRowMapError, argparse.ArgumentTypeError, ValueError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    finally:
        close_pool()


if __name__ == "__main__":
    sys.exit(main())
