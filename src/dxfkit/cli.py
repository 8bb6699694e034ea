from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter, OrderedDict
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Sequence

from .codecs import SUPPORTED_ENTITY_TYPES
from .context import DxfContext
from .convert import export_ezdxf
from .diagnostics import DiagnosticKind
from .errors import DxfError
from .sections import readfile, writefile
from .versions import DxfVersion


def _package_version() -> str:
    try:
        return version("dxfkit")
    except PackageNotFoundError:
        return "0.0.0"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dxfkit", description="Inspect, rewrite, and convert DXF files.")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_package_version()}",
    )
    parser.add_argument(
        "--log-level",
        default="ERROR",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging level for diagnostics printed to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command")

    inspect_parser = subparsers.add_parser("inspect", help="Show basic DXF information.")
    inspect_parser.add_argument("path", help="Path to DXF file.")
    inspect_parser.add_argument(
        "--verbose",
        action="store_true",
        help="List every diagnostic instead of a per-kind summary.",
    )

    rewrite_parser = subparsers.add_parser(
        "rewrite",
        help="Read a DXF file and write it again for a target release.",
    )
    rewrite_parser.add_argument("input_path", help="Path to input DXF file.")
    rewrite_parser.add_argument("output_path", help="Path to output DXF file.")
    rewrite_parser.add_argument(
        "--dxf-version",
        default=None,
        help="Target release, e.g. R12/R2000/R2010 or AC1015 (default: input version).",
    )
    rewrite_parser.add_argument(
        "--flatland",
        action="store_true",
        help="Write the legacy elevation group for SOLID and TRACE on R11 and older.",
    )
    rewrite_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if any entity is refused by the writer.",
    )

    convert_parser = subparsers.add_parser(
        "convert",
        help="Re-create the drawing with ezdxf as the writing backend.",
    )
    convert_parser.add_argument("input_path", help="Path to DXF file.")
    convert_parser.add_argument("output_path", help="Path to output DXF file.")
    convert_parser.add_argument(
        "--types",
        default=None,
        help='Entity filter passed to query(), e.g. "LINE ARC LWPOLYLINE".',
    )
    convert_parser.add_argument(
        "--dxf-version",
        default="R2010",
        help="DXF version for ezdxf.new(), e.g. R2000/R2010/R2018.",
    )
    convert_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if any entity cannot be converted.",
    )
    return parser


def _run_inspect(path: str, *, verbose: bool = False) -> int:
    file_path = Path(path)
    if not file_path.exists():
        print(f"error: file not found: {file_path}", file=sys.stderr)
        return 2

    try:
        doc = readfile(file_path)
    except (DxfError, OSError) as exc:
        print(f"error: failed to read DXF: {exc}", file=sys.stderr)
        return 2

    counts: OrderedDict[str, int] = OrderedDict()
    total = 0
    for entity in doc.query("*"):
        counts[entity.dxftype] = counts.get(entity.dxftype, 0) + 1
        total += 1

    print(f"file: {file_path}")
    print(f"version: {doc.version.name} ({doc.version.acadver})")
    print(f"total_entities: {total}")
    for dxftype in SUPPORTED_ENTITY_TYPES:
        count = counts.get(dxftype, 0)
        if count > 0:
            print(f"{dxftype}: {count}")
    print(f"blocks: {len(doc.blocks)}")
    for name, records in doc.tables.items():
        print(f"table[{name}]: {len(records)}")

    diagnostics = [d for d in doc.diagnostics if d.kind is not DiagnosticKind.COMMENT]
    print(f"diagnostics: {len(diagnostics)}")
    if verbose:
        for diagnostic in diagnostics:
            print(f"  {diagnostic}")
    else:
        by_kind: Counter[str] = Counter(d.kind.value for d in diagnostics)
        for kind, count in sorted(by_kind.items()):
            print(f"diagnostic[{kind}]: {count}")
    return 0


def _run_rewrite(
    input_path: str,
    output_path: str,
    *,
    dxf_version: str | None = None,
    flatland: bool = False,
    strict: bool = False,
) -> int:
    dxf_path = Path(input_path)
    if not dxf_path.exists():
        print(f"error: file not found: {dxf_path}", file=sys.stderr)
        return 2

    try:
        doc = readfile(dxf_path)
        target = DxfVersion.parse(dxf_version) if dxf_version else doc.version
        ctx = DxfContext(version=target, flatland=flatland, source=output_path)
        result = writefile(doc, output_path, ctx)
    except (DxfError, OSError, ValueError) as exc:
        print(f"error: failed to rewrite DXF: {exc}", file=sys.stderr)
        return 2

    print(f"input: {dxf_path}")
    print(f"output: {result.output}")
    print(f"target_version: {result.version.name}")
    print(f"written_entities: {result.written_entities}")
    print(f"skipped_entities: {result.skipped_entities}")
    for dxftype, count in result.skipped_by_type.items():
        print(f"skipped[{dxftype}]: {count}")
    if strict and result.skipped_entities:
        print("error: some entities were refused by the writer", file=sys.stderr)
        return 1
    return 0


def _run_convert(
    input_path: str,
    output_path: str,
    *,
    types: str | None = None,
    dxf_version: str = "R2010",
    strict: bool = False,
) -> int:
    dxf_path = Path(input_path)
    if not dxf_path.exists():
        print(f"error: file not found: {dxf_path}", file=sys.stderr)
        return 2

    try:
        result = export_ezdxf(
            str(dxf_path),
            output_path,
            types=types,
            dxf_version=dxf_version,
            strict=strict,
        )
    except Exception as exc:
        print(f"error: failed to convert DXF: {exc}", file=sys.stderr)
        return 2

    print(f"input: {result.source_path}")
    print(f"output: {result.output_path}")
    print(f"total_entities: {result.total_entities}")
    print(f"written_entities: {result.written_entities}")
    print(f"skipped_entities: {result.skipped_entities}")
    for dxftype, count in result.skipped_by_type.items():
        print(f"skipped[{dxftype}]: {count}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "inspect":
        return _run_inspect(args.path, verbose=bool(args.verbose))
    if args.command == "rewrite":
        return _run_rewrite(
            args.input_path,
            args.output_path,
            dxf_version=args.dxf_version,
            flatland=bool(args.flatland),
            strict=bool(args.strict),
        )
    if args.command == "convert":
        return _run_convert(
            args.input_path,
            args.output_path,
            types=args.types,
            dxf_version=args.dxf_version,
            strict=bool(args.strict),
        )

    parser.print_help()
    return 0
