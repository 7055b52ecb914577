"""
Compatibility analysis
======================

Dry-run helpers for callers that want to know how a program will port
without keeping the rewrite:

* :func:`analyze` – detect program traits and run the pipeline with every
  optional rewrite switched off.
* :func:`run_diagnostics` – the diagnostics rules alone, over arbitrary text.

Neither function modifies its input or keeps any state between calls.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List

from ..models import CompatibilityAnalysis, Diagnostic
from ..options import PortingOptions
from ..passes.masking import code_only, uses_keyword
from .diagnostics import collect_diagnostics
from .port_program import OptionsLike, PortProgramTask
from .rules import GRAPHICS_KEYWORDS, SOUND_KEYWORDS

logger = logging.getLogger(__name__)

_FILE_IO_RE = re.compile(
    r"\b(?:OPEN|CLOSE)\b|\b(?:LINE\s+INPUT|PRINT|INPUT|WRITE)\s*#", re.IGNORECASE
)
_DEF_FN_RE = re.compile(r"\bDEF\s*FN\s*[A-Za-z_]", re.IGNORECASE)
_GOSUB_RE = re.compile(r"\bGO\s*SUB\b", re.IGNORECASE)
_MULTI_STATEMENT_RE = re.compile(r":\s*(?:IF|FOR|WHILE|DO)\b", re.IGNORECASE)
_DECLARE_RE = re.compile(r"\bDECLARE\s+(?:SUB|FUNCTION)\b", re.IGNORECASE)


def _any_line(pattern: re.Pattern, codes: List[str]) -> bool:
    return any(pattern.search(code) for code in codes)


def detect_features(source: str) -> Dict[str, bool]:
    """Program traits, looked up in code only (strings and comments ignored)."""
    codes = [code_only(line) for line in source.split("\n")]
    return {
        "has_graphics": uses_keyword(source, GRAPHICS_KEYWORDS),
        "has_sound": uses_keyword(source, SOUND_KEYWORDS),
        "has_file_io": _any_line(_FILE_IO_RE, codes),
        "has_def_fn": _any_line(_DEF_FN_RE, codes),
        "has_gosub": _any_line(_GOSUB_RE, codes),
        "has_multi_statement": _any_line(_MULTI_STATEMENT_RE, codes),
        "has_declare_statements": _any_line(_DECLARE_RE, codes),
    }


def analyze(source: str, dialect: str = "qbasic") -> CompatibilityAnalysis:
    """
    Analyse *source* for QB64PE compatibility.

    Parameters
    ----------
    source:
        Program text in the *dialect* given.
    dialect:
        One of :func:`~qb64_porter.pipeline.rules.get_supported_dialects`.

    Returns
    -------
    CompatibilityAnalysis
        Program traits plus the outcome of a dry-run port (level, warnings
        as potential problems, errors as critical issues).
    """
    options = PortingOptions.coerce({"source_dialect": dialect}).dry_run()
    result = PortProgramTask(options).transform(source)
    analysis = CompatibilityAnalysis(
        source_dialect=options.source_dialect,
        total_lines=len(source.split("\n")),
        features=detect_features(source),
        level=result.compatibility,
        transformations_needed=len(result.transformations),
        potential_problems=result.warnings,
        critical_issues=result.errors,
    )
    logger.info(
        "Analysis (%s): %s, %d issue(s)",
        analysis.source_dialect,
        analysis.level,
        analysis.issues_found,
    )
    return analysis


def run_diagnostics(text: str, options: OptionsLike = None) -> List[Diagnostic]:
    """The pipeline's diagnostics rules over *text*, without any rewriting."""
    opts = PortingOptions.coerce(options)
    return collect_diagnostics(text, performance_advisories=opts.optimize_performance)
