"""
Type, array and idiom passes
============================

Small passes with the same shape: find a legacy fragment, rewrite it, count
the rewrites, write one transformation record.

* :class:`TypeFieldCasingPass` – ``x AS INTEGER`` → ``x As INTEGER`` inside
  ``TYPE ... END TYPE`` blocks.
* :class:`ArraySyntaxPass` – ``PUT (x, y), sprite`` → ``PUT (x, y), sprite()``.
* :class:`PiConstantPass` – ``4 * ATN(1)`` → ``_Pi``.
* :class:`ExitStatementPass` – a bare ``END`` statement → ``System 0``.
* :class:`TimingPass` – ``Rest n`` busy-wait calls → ``_Delay n``.

All of them are 1:1 line rewrites and leave comments and strings alone.
"""
from __future__ import annotations

import logging
import re
from typing import List, Tuple

from ..models import PortingReport
from ..pipeline.rules import PLAIN_TYPES
from .masking import code_only, sub_code

logger = logging.getLogger(__name__)

_TYPE_START_RE = re.compile(r"^\s*TYPE\s+[A-Za-z_]\w*\s*$", re.IGNORECASE)
_TYPE_END_RE = re.compile(r"^\s*END\s+TYPE\b", re.IGNORECASE)
_FIELD_RE = re.compile(
    rf"\b([A-Za-z_][\w.]*)\s+AS\s+({'|'.join(PLAIN_TYPES)})\b", re.IGNORECASE
)

_PUT_GET_RE = re.compile(
    r"\b(?:PUT|GET)\s*(?:STEP\s*)?\([^()]*\)"
    r"(?:\s*-\s*(?:STEP\s*)?\([^()]*\))?"
    r"\s*,\s*[A-Za-z_][\w.]*[%&!#@$]?"
    r"(?=\s*(?:,|:|$))",
    re.IGNORECASE,
)

_PI_RE = re.compile(
    r"(?<![\w.])4[#!]?\s*\*\s*ATN\s*\(\s*1[#!]?\s*\)"
    r"|(?<![\w.])ATN\s*\(\s*1[#!]?\s*\)\s*\*\s*4[#!]?(?![\w.])",
    re.IGNORECASE,
)
_TIGHTER_BEFORE = ("^", "/", "\\")

_END_RE = re.compile(r"(?<![\w.])END(?=\s*(?:$|:|ELSE\b))", re.IGNORECASE)

_REST_RE = re.compile(
    r"(^|:|\bTHEN\b|\bELSE\b)(\s*)Rest(?!\s*[(=])\s+([^:]*?)(\s*)(?=:|$)",
    re.IGNORECASE,
)


class TypeFieldCasingPass:
    """Normalises ``AS <type>`` field declarations inside TYPE blocks."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        out: List[str] = []
        inside = False
        total = 0
        for line in text.split("\n"):
            code = code_only(line)
            if _TYPE_START_RE.match(code):
                inside = True
            elif _TYPE_END_RE.match(code):
                inside = False
            elif inside:
                line, count = sub_code(
                    _FIELD_RE, lambda m: f"{m.group(1)} As {m.group(2)}", line
                )
                total += count
            out.append(line)

        if total:
            report = report.with_transformation(
                "TYPE",
                f"Converted {total} TYPE field declaration(s) to modern syntax",
            )
        return "\n".join(out), report


class ArraySyntaxPass:
    """Adds ``()`` to whole-array operands of graphics PUT / GET."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        text, count = sub_code(_PUT_GET_RE, lambda m: m.group(0) + "()", text)
        if count:
            report = report.with_transformation(
                "ARRAY",
                f"Converted {count} array syntax statement(s) to QB64PE format",
            )
        return text, report


class PiConstantPass:
    """Replaces the ``4 * ATN(1)`` idiom with the built-in ``_Pi``."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        text, count = sub_code(_PI_RE, self._replace, text)
        if count:
            report = report.with_transformation(
                "IDIOM",
                f"Converted {count} manual pi calculation(s) to built-in _Pi constant",
            )
        return text, report

    @staticmethod
    def _replace(m: re.Match) -> str:
        # "x / 4 * ATN(1)" is (x / 4) * ATN(1): only rewrite when the
        # product is not bound to an operator on its left or right.
        before = m.string[: m.start()].rstrip()
        after = m.string[m.end():].lstrip()
        if before.endswith(_TIGHTER_BEFORE) or before.upper().endswith("MOD"):
            return m.group(0)
        if after.startswith("^"):
            return m.group(0)
        return "_Pi"


class ExitStatementPass:
    """Turns a plain ``END`` statement into ``System 0``."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        text, count = sub_code(_END_RE, "System 0", text)
        if count:
            report = report.with_transformation(
                "IDIOM", f"Converted {count} END statement(s) to System 0"
            )
        return text, report


class TimingPass:
    """Replaces ``Rest n`` delay calls with ``_Delay n``."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        text, count = sub_code(
            _REST_RE,
            lambda m: f"{m.group(1)}{m.group(2)}_Delay {m.group(3)}{m.group(4)}",
            text,
        )
        if count:
            report = report.with_transformation(
                "IDIOM", f"Converted {count} Rest call(s) to _Delay command"
            )
            logger.debug("Rest -> _Delay: %d", count)
        return text, report
