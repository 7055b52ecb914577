"""
Metacommand and window passes
=============================

Three passes that deal with program-level QB64PE settings rather than with
individual statements:

* :class:`DeprecatedMetacommandPass` – drops ``$NOPREFIX`` lines.  QB64PE
  deprecated the metacommand; the porter emits the ``_``-prefixed keyword
  forms instead.  Always on.
* :class:`GraphicsEnhancementPass` – adds ``_AllowFullScreen`` after the
  first ``SCREEN`` statement (``convertGraphics``).
* :class:`WindowMetacommandPass` – inserts ``$Resize:Smooth`` and a
  ``_Title`` for graphics programs after the leading comment block
  (``addModernFeatures``).

The last two are no-ops when the program already carries the feature, so a
ported program passes through them unchanged.
"""
from __future__ import annotations

import logging
import re
from typing import List, Tuple

from ..models import PortingReport
from ..pipeline.rules import DEFAULT_TITLE, GRAPHICS_KEYWORDS
from .masking import (
    COMMENT,
    code_only,
    is_blank_or_comment,
    split_segments,
    uses_keyword,
)

logger = logging.getLogger(__name__)

_NOPREFIX_RE = re.compile(r"^\s*\$NOPREFIX\s*$", re.IGNORECASE)
_SCREEN_RE = re.compile(r"^(\s*)Screen\b(?!\s*\()", re.IGNORECASE)
_FULLSCREEN_RE = re.compile(r"\b_?AllowFullScreen\b", re.IGNORECASE)
_RESIZE_RE = re.compile(r"^\s*\$RESIZE\b", re.IGNORECASE | re.MULTILINE)
_TITLE_RE = re.compile(r'^\s*_?Title\s*"', re.IGNORECASE)

FULLSCREEN_STATEMENT = "_AllowFullScreen _SquarePixels , _Smooth"
RESIZE_METACOMMAND = "$Resize:Smooth"


class DeprecatedMetacommandPass:
    """Removes ``$NOPREFIX`` metacommand lines."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        lines = text.split("\n")
        kept = [line for line in lines if not _NOPREFIX_RE.match(line)]
        removed = len(lines) - len(kept)
        if not removed:
            return text, report

        report = report.with_transformation(
            "METACOMMAND", "Removed deprecated $NOPREFIX metacommand"
        )
        report = report.with_warning(
            "$NOPREFIX is deprecated in QB64PE - QB64-specific keywords need "
            "their underscore prefix (e.g. _Title, _Delay)"
        )
        logger.debug("Removed %d $NOPREFIX line(s)", removed)
        return "\n".join(kept), report


class GraphicsEnhancementPass:
    """Adds full-screen scaling after the first ``SCREEN`` statement."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        lines = text.split("\n")
        if any(_FULLSCREEN_RE.search(code_only(line)) for line in lines):
            return text, report

        for index, line in enumerate(lines):
            m = _SCREEN_RE.match(code_only(line))
            if m:
                lines.insert(index + 1, m.group(1) + FULLSCREEN_STATEMENT)
                report = report.with_transformation(
                    "GRAPHICS",
                    f"Added {FULLSCREEN_STATEMENT} after SCREEN statement "
                    f"(line {index + 1}) for enhanced graphics",
                )
                return "\n".join(lines), report

        return text, report


class WindowMetacommandPass:
    """Inserts ``$Resize:Smooth`` and ``_Title`` into graphics programs."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        if not uses_keyword(text, GRAPHICS_KEYWORDS):
            return text, report

        lines = text.split("\n")
        inserted: List[str] = []

        if not _RESIZE_RE.search(text):
            inserted.append(RESIZE_METACOMMAND)
            report = report.with_transformation(
                "METACOMMAND",
                f"Added {RESIZE_METACOMMAND} for smooth window resizing",
            )

        if not any(_TITLE_RE.match(code_only(line)) for line in lines):
            title = self._title_from_comments(lines)
            inserted.append(f'_Title "{title}"')
            report = report.with_transformation(
                "METACOMMAND", f'Added window title: "{title}"'
            )

        if not inserted:
            return text, report

        inserted.append("")
        at = self._insertion_index(lines)
        lines[at:at] = inserted
        logger.debug("Inserted %d metacommand line(s) at line %d", len(inserted), at + 1)
        return "\n".join(lines), report

    @staticmethod
    def _insertion_index(lines: List[str]) -> int:
        """First line that is not blank and not a comment."""
        for index, line in enumerate(lines):
            if not is_blank_or_comment(line):
                return index
        return 0

    @staticmethod
    def _title_from_comments(lines: List[str]) -> str:
        for line in lines:
            for kind, segment in split_segments(line):
                if kind != COMMENT:
                    continue
                body = segment[1:] if segment.startswith("'") else segment[3:]
                title = body.strip().replace('"', "'")
                # '$DYNAMIC, '$INCLUDE: and friends are metacommands, not titles.
                if title and not title.startswith("$"):
                    return title
        return DEFAULT_TITLE
