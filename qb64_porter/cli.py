"""
QB64 Porter – command-line interface
====================================

Usage
-----
::

    python -m qb64_porter.cli SOURCE [OPTIONS]

Options
-------
--dialect, -d           Source dialect (default: qbasic).
--no-modern-features    Skip $Resize/_Title, _Pi, System 0, _Delay rewrites.
--no-graphics           Skip PUT/GET array syntax and _AllowFullScreen.
--no-performance        Skip the Timer precision / busy-wait advisories.
--analyze               Dry run: report compatibility, do not port.
--list-dialects         Print the supported dialects and their rules.
--output, -o            Output file path (default: stdout).
--format, -f            ``code`` (default), ``json`` or ``text``.
--verbose, -v           Enable DEBUG logging.

Exit status is 0 on success, 1 when the port reported errors and 2 for
usage or I/O problems.

Examples
--------
::

    python -m qb64_porter.cli game.bas -o game_qb64pe.bas
    python -m qb64_porter.cli old.bas --dialect gwbasic -f text
    python -m qb64_porter.cli old.bas --analyze -f json
    python -m qb64_porter.cli --list-dialects
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .errors import PortingError
from .models import CompatibilityAnalysis, PortingResult
from .options import PortingOptions
from .pipeline.compatibility_analysis import analyze
from .pipeline.port_program import PortProgramTask
from .pipeline.rules import get_dialect_rules, get_supported_dialects


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="qb64-porter",
        description="QB64 Porter – port legacy BASIC source to QB64 Phoenix Edition",
    )
    p.add_argument("source", nargs="?", help="BASIC source file to port ('-' for stdin)")
    p.add_argument(
        "--dialect", "-d",
        choices=get_supported_dialects(),
        default="qbasic",
        metavar="DIALECT",
        help="Source dialect (default: qbasic; see --list-dialects)",
    )
    p.add_argument(
        "--no-modern-features",
        action="store_true",
        help="Do not add QB64PE metacommands or modern idioms",
    )
    p.add_argument(
        "--no-graphics",
        action="store_true",
        help="Do not convert graphics statements",
    )
    p.add_argument(
        "--no-performance",
        action="store_true",
        help="Do not report performance advisories",
    )
    p.add_argument(
        "--analyze",
        action="store_true",
        help="Analyse compatibility only; the ported code is not written",
    )
    p.add_argument(
        "--list-dialects",
        action="store_true",
        help="List supported dialects with their conversion rules and exit",
    )
    p.add_argument(
        "--output", "-o",
        default="-",
        metavar="FILE",
        help="Output file (default: stdout)",
    )
    p.add_argument(
        "--format", "-f",
        choices=["code", "json", "text"],
        default="code",
        help="Output format (default: code, the ported program)",
    )
    p.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return p


def _format_result_text(result: PortingResult) -> str:
    lines: List[str] = [result.summary]
    if result.transformations:
        lines.append(f"\n{'─'*60}\n  TRANSFORMATIONS ({len(result.transformations)})\n{'─'*60}")
        for t in result.transformations:
            marker = " (best effort)" if t.best_effort else ""
            lines.append(f"  [{t.category:<16}] {t.description}{marker}")
    if result.warnings:
        lines.append(f"\n{'─'*60}\n  WARNINGS ({len(result.warnings)})\n{'─'*60}")
        lines.extend(f"  - {w}" for w in result.warnings)
    if result.errors:
        lines.append(f"\n{'─'*60}\n  ERRORS ({len(result.errors)})\n{'─'*60}")
        lines.extend(f"  - {e}" for e in result.errors)
    lines.append(f"\n{'═'*60}\n  PORTED CODE\n{'═'*60}")
    lines.append(result.ported_code)
    return "\n".join(lines)


def _format_analysis_text(analysis: CompatibilityAnalysis) -> str:
    lines = [
        f"Dialect       : {analysis.source_dialect}",
        f"Lines         : {analysis.total_lines}",
        f"Compatibility : {analysis.level}",
        f"Transforms    : {analysis.transformations_needed}",
        f"Issues        : {analysis.issues_found}",
        f"\n{'─'*60}\n  FEATURES\n{'─'*60}",
    ]
    for name, present in analysis.features.items():
        lines.append(f"  {name:<24} {'yes' if present else 'no'}")
    for title, entries in (
        ("POTENTIAL PROBLEMS", analysis.potential_problems),
        ("CRITICAL ISSUES", analysis.critical_issues),
    ):
        if entries:
            lines.append(f"\n{'─'*60}\n  {title}\n{'─'*60}")
            lines.extend(f"  - {e}" for e in entries)
    return "\n".join(lines)


def _format_dialects(fmt: str) -> str:
    dialects = {d: get_dialect_rules(d) for d in get_supported_dialects()}
    if fmt == "json":
        return json.dumps(dialects, indent=2)
    lines: List[str] = []
    for dialect, rules in dialects.items():
        lines.append(dialect)
        lines.extend(f"  - {rule}" for rule in rules)
    return "\n".join(lines)


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8", errors="replace")


def _write_output(output_text: str, output: str) -> None:
    if output == "-":
        print(output_text)
    else:
        Path(output).write_text(output_text, encoding="utf-8")
        print(f"Output written to {output}", file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.list_dialects:
        _write_output(_format_dialects(args.format), args.output)
        return 0

    if not args.source:
        print("error: a SOURCE file is required", file=sys.stderr)
        return 2

    try:
        source = _read_source(args.source)
    except OSError as exc:
        print(f"error: cannot read {args.source}: {exc}", file=sys.stderr)
        return 2

    # ------------------------------------------------------------------
    # Dry-run mode
    # ------------------------------------------------------------------
    if args.analyze:
        analysis = analyze(source, args.dialect)
        if args.format == "json":
            output_text = json.dumps(analysis.to_dict(), indent=2)
        else:
            output_text = _format_analysis_text(analysis)
        try:
            _write_output(output_text, args.output)
        except OSError as exc:
            print(f"error: cannot write {args.output}: {exc}", file=sys.stderr)
            return 2
        return 1 if analysis.critical_issues else 0

    # ------------------------------------------------------------------
    # Porting mode
    # ------------------------------------------------------------------
    try:
        options = PortingOptions(
            source_dialect=args.dialect,
            add_modern_features=not args.no_modern_features,
            convert_graphics=not args.no_graphics,
            optimize_performance=not args.no_performance,
        )
        result = PortProgramTask(options).transform(source)
    except PortingError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.format == "json":
        output_text = json.dumps(result.to_dict(), indent=2)
    elif args.format == "text":
        output_text = _format_result_text(result)
    else:
        output_text = result.ported_code
        # Keep the report visible when only the code goes to stdout.
        print(result.summary, file=sys.stderr)
        for warning in result.warnings:
            print(f"  WARNING: {warning}", file=sys.stderr)
        for error in result.errors:
            print(f"  ERROR: {error}", file=sys.stderr)

    try:
        _write_output(output_text, args.output)
    except OSError as exc:
        print(f"error: cannot write {args.output}: {exc}", file=sys.stderr)
        return 2

    return 1 if result.errors else 0


if __name__ == "__main__":
    sys.exit(main())
