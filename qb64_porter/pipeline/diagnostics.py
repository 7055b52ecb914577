"""
Diagnostics
===========

Read-only scan of (already ported) source for shapes that are known to cause
trouble in QB64PE.  Each *category* produces at most one warning; the number
of occurrences and their line numbers are part of the message.

+------------------------------+-------------------------------------------+
| Category                     | Shape                                     |
+==============================+===========================================+
| Chained conditionals         | ``IF ...: IF ...`` packed on one line, or |
|                              | several ``:`` statements with an ``IF``   |
+------------------------------+-------------------------------------------+
| Multi-array declarations     | ``DIM a(10), b(20)``                      |
+------------------------------+-------------------------------------------+
| AS return types              | ``FUNCTION f (x) AS INTEGER``             |
+------------------------------+-------------------------------------------+
| Timer precision *            | ``TIMER - start#`` elapsed-time arithmetic|
+------------------------------+-------------------------------------------+
| Busy-wait loops *            | ``FOR i = 1 TO 5000: NEXT i``             |
+------------------------------+-------------------------------------------+

\\* performance advisories, only with ``optimizePerformance``.

:func:`collect_diagnostics` is the pure entry point used for dry runs;
:class:`DiagnosticsPass` is the same rule set as a pipeline stage.
"""
from __future__ import annotations

import logging
import re
from typing import List, Tuple

from ..models import Diagnostic, PortingReport
from ..passes.masking import code_only

logger = logging.getLogger(__name__)

_IF_RE = re.compile(r"\bIF\s", re.IGNORECASE)
_CHAINED_IF_RE = re.compile(r":\s*IF\s", re.IGNORECASE)
_MULTI_ARRAY_RE = re.compile(
    r"\bDIM\s+(?:SHARED\s+)?[\w.]+[%&!#@$]?\s*\([^)]+\)[^,]*,\s*[\w.]+[%&!#@$]?\s*\([^)]+\)",
    re.IGNORECASE,
)
_RETURN_TYPE_RE = re.compile(
    r"^\s*FUNCTION\s+[\w.]+(?:\s*\([^)]*\))?\s+AS\s+\w+", re.IGNORECASE
)
_TIMER_DELTA_RE = re.compile(r"\bTIMER\s*-\s*[A-Za-z_][\w.]*[#!]?", re.IGNORECASE)
_BUSY_WAIT_RE = re.compile(
    r"\bFOR\s+[\w.]+[%&!#]?\s*=\s*[^:]+?\s+TO\s+[^:]+?:\s*NEXT\b(?:\s+[\w.]+[%&!#]?)?\s*$",
    re.IGNORECASE,
)


def _lines(text: str) -> List[Tuple[int, str]]:
    return [(number, code_only(line)) for number, line in enumerate(text.split("\n"), start=1)]


def _numbers(numbers: List[int]) -> str:
    return ", ".join(str(n) for n in numbers)


def check_multi_statement_lines(text: str) -> List[Diagnostic]:
    flagged: List[int] = []
    for number, code in _lines(text):
        if not _IF_RE.search(code):
            continue
        if _CHAINED_IF_RE.search(code) or code.count(":") > 1:
            flagged.append(number)
    if not flagged:
        return []
    return [
        Diagnostic(
            "warning",
            f"Multi-statement lines with chained conditionals detected "
            f"({len(flagged)} occurrence(s), line(s) {_numbers(flagged)}) - "
            f"consider splitting for better QB64PE compatibility",
        )
    ]


def check_array_declarations(text: str) -> List[Diagnostic]:
    count = sum(len(_MULTI_ARRAY_RE.findall(code)) for _, code in _lines(text))
    if not count:
        return []
    return [
        Diagnostic(
            "warning",
            f"{count} multi-array declaration(s) found - consider declaring "
            f"arrays separately for better QB64PE compatibility",
        )
    ]


def check_function_return_types(text: str) -> List[Diagnostic]:
    flagged = [number for number, code in _lines(text) if _RETURN_TYPE_RE.match(code)]
    if not flagged:
        return []
    return [
        Diagnostic(
            "warning",
            f"{len(flagged)} function(s) using AS clause for return type "
            f"(line(s) {_numbers(flagged)}) - QB64PE prefers type sigils "
            f"(%, &, !, #, $)",
        )
    ]


def check_timer_precision(text: str) -> List[Diagnostic]:
    count = sum(len(_TIMER_DELTA_RE.findall(code)) for _, code in _lines(text))
    if not count:
        return []
    return [
        Diagnostic(
            "warning",
            f"Consider using Timer(.001) for more precise timing in QB64PE "
            f"({count} elapsed-time calculation(s))",
        )
    ]


def check_busy_wait_loops(text: str) -> List[Diagnostic]:
    flagged = [number for number, code in _lines(text) if _BUSY_WAIT_RE.search(code)]
    if not flagged:
        return []
    return [
        Diagnostic(
            "warning",
            f"{len(flagged)} empty FOR...NEXT delay loop(s) at line(s) "
            f"{_numbers(flagged)} - their speed depends on the CPU; use _Delay "
            f"or _Limit in QB64PE",
        )
    ]


def collect_diagnostics(text: str, performance_advisories: bool = False) -> List[Diagnostic]:
    """
    Run every diagnostic check over *text* without modifying it.

    Parameters
    ----------
    text:
        BASIC source, normally the output of the porting passes.
    performance_advisories:
        Also run the timer-precision and busy-wait checks.

    Returns
    -------
    List[Diagnostic]
        At most one warning per category, in a fixed order.
    """
    diagnostics = (
        check_multi_statement_lines(text)
        + check_array_declarations(text)
        + check_function_return_types(text)
    )
    if performance_advisories:
        diagnostics += check_timer_precision(text) + check_busy_wait_loops(text)
    return diagnostics


class DiagnosticsPass:
    """Pipeline stage wrapper around :func:`collect_diagnostics`."""

    def __init__(self, performance_advisories: bool = False) -> None:
        self.performance_advisories = performance_advisories

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        for diagnostic in collect_diagnostics(text, self.performance_advisories):
            report = report.with_warning(diagnostic.message)
        logger.debug("Diagnostics: %d warning(s) so far", len(report.warnings))
        return text, report
