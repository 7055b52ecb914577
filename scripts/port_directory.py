"""
port_directory.py
=================
Port every BASIC source file in a directory to QB64PE and write the results
to ``<output-dir>/<source-name>``.  One line per file is printed with its
compatibility level; ``--report`` also writes the full JSON result next to
each ported file.

Usage
-----
    python scripts/port_directory.py \\
        --source-dir legacy/ \\
        --output-dir outputs/qb64pe \\
        --dialect gwbasic \\
        --report
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from qb64_porter.options import PortingOptions
from qb64_porter.pipeline.port_program import PortProgramTask
from qb64_porter.pipeline.rules import get_supported_dialects

SOURCE_SUFFIXES = (".bas", ".bi", ".bm")


def port_directory(
    source_dir: Path,
    output_dir: Path,
    options: PortingOptions,
    report: bool = False,
) -> int:
    """Port every source file under *source_dir*; return the number with errors."""
    task = PortProgramTask(options)
    output_dir.mkdir(parents=True, exist_ok=True)
    failed = 0

    for src in sorted(source_dir.iterdir()):
        if src.suffix.lower() not in SOURCE_SUFFIXES or not src.is_file():
            continue
        result = task.transform(src.read_text(encoding="utf-8", errors="replace"))
        out_file = output_dir / src.name
        out_file.write_text(result.ported_code, encoding="utf-8")
        if report:
            report_file = output_dir / f"{src.stem}.json"
            report_file.write_text(json.dumps(result.to_dict(), indent=2), encoding="utf-8")
        if result.errors:
            failed += 1
        print(
            f"  {src.name:<30} {result.compatibility:<7} "
            f"{len(result.transformations):>3} transformation(s) "
            f"{len(result.warnings):>3} warning(s) {len(result.errors):>3} error(s)"
        )
    return failed


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Port a directory of legacy BASIC programs to QB64PE"
    )
    parser.add_argument("--source-dir", "-s", required=True, metavar="DIR")
    parser.add_argument("--output-dir", "-o", default="outputs/qb64pe", metavar="DIR")
    parser.add_argument("--dialect", "-d", choices=get_supported_dialects(), default="qbasic")
    parser.add_argument("--report", "-r", action="store_true")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    source_dir = Path(args.source_dir)
    if not source_dir.is_dir():
        print(f"error: {source_dir} is not a directory", file=sys.stderr)
        return 2

    print(f"\n=== {source_dir} ===")
    failed = port_directory(
        source_dir=source_dir,
        output_dir=Path(args.output_dir),
        options=PortingOptions(source_dialect=args.dialect),
        report=args.report,
    )
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
