"""Command-line interface for rqm.

Subcommands:

  - ``stamp [--fix-duplicates] [--dry-run] [files...]``: add missing
    identifiers to requirement documents (all documents by default), or repair
    duplicated identifiers using the registry's stored declarations.
  - ``index``: rebuild the registry from the whole corpus.
  - ``check``: report stale references and unreferenced entries.
  - ``clean``: prune entries and references that no longer exist.
  - ``show ID``: print one registry entry.

Exit status is 0 on success (warnings included) and 1 on any error.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from . import __version__
from .check import run_check
from .clean import run_clean
from .config import Settings, load_settings
from .duplicates import fix_duplicates
from .errors import RqmError
from .files import as_replaced, iter_documents
from .ids import IdGenerator, is_valid_id
from .index import Conflict, build_registry
from .registry import load_registry
from .stamp import stamp_files

PREFIX = "[rqm]"


def _info(message: str) -> None:
    print(f"{PREFIX} {message}")


def _error(message: str) -> None:
    print(f"{PREFIX} Error: {message}", file=sys.stderr)


def _warn(message: str) -> None:
    print(f"{PREFIX} Warning: {message}", file=sys.stderr)


def _loc(path: Path, lineno: int) -> str:
    return f"{path.as_posix()}:{lineno}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rqm", description="requirements traceability identifiers", allow_abbrev=False
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    st = sub.add_parser("stamp", parents=[common], help="Insert missing identifiers into documents")
    st.add_argument(
        "--fix-duplicates",
        action="store_true",
        help="Reassign duplicated identifiers using the registry's stored declarations",
    )
    st.add_argument("--dry-run", action="store_true", help="Report changes without writing files")
    st.add_argument("files", nargs="*", help="Documents to process (defaults to every document)")

    sub.add_parser("index", parents=[common], help="Rebuild the registry from the corpus")
    sub.add_parser("check", parents=[common], help="Report stale references and unreferenced entries")
    sub.add_parser("clean", parents=[common], help="Prune entries and references that no longer exist")

    sh = sub.add_parser("show", parents=[common], help="Print one registry entry as JSON")
    sh.add_argument("rq_id", metavar="ID", help="Identifier to look up (rq-XXXXXXXX)")
    return parser


def _report_conflict(conflict: Conflict) -> None:
    _error(f"duplicate ID {conflict.rq_id} declared {len(conflict.occurrences)} times:")
    verdicts = conflict.verdicts()
    for i, occ in enumerate(conflict.occurrences):
        note = f" ({verdicts[i]})" if verdicts else ""
        print(f"  {_loc(occ.path, occ.lineno)}: {as_replaced(occ.decl)}{note}", file=sys.stderr)
    if verdicts is None:
        if conflict.stored_decl is None:
            print("  no stored declaration to compare against", file=sys.stderr)
        print(
            "  cannot tell the original from the copy; fix the annotation by hand "
            "or run 'rqm stamp --fix-duplicates'",
            file=sys.stderr,
        )


def cmd_stamp(args: argparse.Namespace, settings: Settings, generator: IdGenerator) -> int:
    if args.files:
        paths = [Path(f) for f in args.files]
        missing = [p for p in paths if not p.is_file()]
        if missing:
            for p in missing:
                _error(f"file not found: {p.as_posix()}")
            return 1
    else:
        paths = iter_documents(settings)

    if args.fix_duplicates:
        result = fix_duplicates(paths, settings, generator, dry_run=args.dry_run)
        for fix in result.fixes:
            _info(f"fixed: {fix.old_id} -> {fix.new_id} ({_loc(fix.path, fix.lineno)})")
        for conflict in result.unresolved:
            _report_conflict(conflict)
        if not result.fixes and result.ok:
            _info("no duplicate IDs found")
        return 0 if result.ok else 1

    result = stamp_files(paths, settings, generator, dry_run=args.dry_run)
    for stamp in result.stamps:
        _info(f"{_loc(stamp.path, stamp.lineno)}: {stamp.kind} -> {stamp.rq_id} ({as_replaced(stamp.decl)})")
    verb = "would stamp" if args.dry_run else "stamped"
    _info(f"{verb} {len(result.stamps)} entities in {len(paths)} documents")
    return 0


def cmd_index(args: argparse.Namespace, settings: Settings) -> int:
    result = build_registry(settings)
    if result.conflicts:
        for conflict in result.conflicts:
            _report_conflict(conflict)
        _error(f"{len(result.conflicts)} duplicate ID(s); registry not written")
        return 1
    _info(f"indexed {len(result.registry)} entries into {settings.registry_path.as_posix()}")
    return 0


def cmd_check(args: argparse.Namespace, settings: Settings) -> int:
    result = run_check(settings)
    for path, rq_id in result.stale:
        _error(f"stale reference {rq_id} in {path.as_posix()}")
    for rq_id in result.unreferenced:
        _warn(f"{rq_id} has no references")
    if result.ok:
        _info("check passed")
        return 0
    _error(f"{len(result.stale)} stale reference(s)")
    return 1


def cmd_clean(args: argparse.Namespace, settings: Settings) -> int:
    result = run_clean(settings)
    for rq_id, reason in result.removed_entries:
        _info(f"removed {rq_id}: {reason}")
    for rq_id, ref_file in result.removed_refs:
        _info(f"removed reference to {rq_id} from {ref_file}")
    if not result.changed:
        _info("registry already clean")
    return 0


def cmd_show(args: argparse.Namespace, settings: Settings) -> int:
    if not is_valid_id(args.rq_id):
        _error(f"not an identifier: {args.rq_id}")
        return 1
    registry = load_registry(settings.registry_path)
    entry = registry.get(args.rq_id)
    if entry is None:
        _error(f"{args.rq_id} is not in the registry")
        return 1
    print(json.dumps({args.rq_id: entry.to_dict()}, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


def main(
    argv: List[str] | None = None,
    *,
    settings: Settings | None = None,
    generator: IdGenerator | None = None,
) -> int:
    """Entry point for the CLI; returns the process exit status."""
    parser = build_parser()
    try:
        args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    except SystemExit as exc:
        return 0 if exc.code in (0, None) else 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        settings = settings or load_settings()
        if args.command == "stamp":
            return cmd_stamp(args, settings, generator or IdGenerator())
        if args.command == "index":
            return cmd_index(args, settings)
        if args.command == "check":
            return cmd_check(args, settings)
        if args.command == "clean":
            return cmd_clean(args, settings)
        if args.command == "show":
            return cmd_show(args, settings)
    except RqmError as exc:
        _error(str(exc))
        return 1
    _error(f"unknown command {args.command!r}")
    return 1
