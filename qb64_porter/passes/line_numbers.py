"""
LineNumberLabelPass
===================

Converts line-numbered programs (GW-BASIC, Applesoft, Commodore, Atari) to
label-based code.

Rules:

+--------------------------------------------------+-----------------------------+
| Line                                             | Result                      |
+==================================================+=============================+
| Number is the target of GOTO / GOSUB / THEN ...  | ``L<n>:`` label on its own  |
|                                                  | line, statement below it    |
+--------------------------------------------------+-----------------------------+
| Number is never referenced                       | Number stripped             |
+--------------------------------------------------+-----------------------------+
| ``GOTO n`` / ``GOSUB n`` / ``THEN n`` ...        | Re-pointed at ``L<n>``      |
+--------------------------------------------------+-----------------------------+
| Reference to a number that no line carries       | Error, left unchanged       |
+--------------------------------------------------+-----------------------------+

Putting the label on its own line is what lets the GOSUB pass later turn
``L<n>:`` into a ``SUB`` boundary.  It is the one place this pass changes the
line count, and the transformation record says so.
"""
from __future__ import annotations

import logging
import re
from typing import List, Set, Tuple

from ..models import PortingReport
from .masking import code_only, sub_code

logger = logging.getLogger(__name__)

_NUMBERED_RE = re.compile(r"^(\s*)(\d+)[ \t]*(.*)$", re.DOTALL)
_REFERENCE_RE = re.compile(
    r"\b(GO[ \t]*TO|GO[ \t]*SUB|THEN|ELSE|RESTORE|RESUME|RUN)"
    r"([ \t]*)(\d+(?:[ \t]*,[ \t]*\d+)*)",
    re.IGNORECASE,
)
_NUMBER_RE = re.compile(r"\d+")


def label_for(number: str) -> str:
    return f"L{int(number)}"


class LineNumberLabelPass:
    """Turns referenced line numbers into labels and drops the rest."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        lines = text.split("\n")
        defined = self._defined_numbers(lines)
        if not defined:
            return text, report

        referenced: Set[int] = set()
        missing: Set[int] = set()
        for line in lines:
            for m in _REFERENCE_RE.finditer(code_only(line)):
                for number in _NUMBER_RE.findall(m.group(3)):
                    (referenced if int(number) in defined else missing).add(int(number))

        text, repointed = sub_code(
            _REFERENCE_RE,
            lambda m: self._repoint(m, defined),
            "\n".join(lines),
        )

        out: List[str] = []
        labelled = stripped = 0
        for line in text.split("\n"):
            m = _NUMBERED_RE.match(line)
            if not m:
                out.append(line)
                continue
            indent, number, rest = m.groups()
            if int(number) in referenced:
                out.append(f"{indent}{label_for(number)}:")
                if rest.strip():
                    out.append(indent + rest)
                labelled += 1
            else:
                out.append(indent + rest)
                stripped += 1

        if labelled:
            report = report.with_transformation(
                "LINE_NUMBER",
                f"Converted {labelled} referenced line number(s) to labels "
                f"(labels placed on their own line)",
            )
        if stripped:
            report = report.with_transformation(
                "LINE_NUMBER", f"Removed {stripped} unreferenced line number(s)"
            )
        if repointed:
            report = report.with_transformation(
                "LINE_NUMBER",
                f"Re-pointed {repointed} line-number reference(s) at labels",
            )
        for number in sorted(missing):
            report = report.with_error(
                f"Line number {number} is referenced but not defined - "
                f"reference left unchanged"
            )

        logger.debug(
            "Line numbers: %d labelled, %d stripped, %d missing",
            labelled, stripped, len(missing),
        )
        return "\n".join(out), report

    @staticmethod
    def _defined_numbers(lines: List[str]) -> Set[int]:
        numbers: Set[int] = set()
        for line in lines:
            m = _NUMBERED_RE.match(line)
            if m:
                numbers.add(int(m.group(2)))
        return numbers

    @staticmethod
    def _repoint(m: re.Match, defined: Set[int]) -> str:
        keyword, gap, targets = m.groups()
        numbers = _NUMBER_RE.findall(targets)
        if not all(int(n) in defined for n in numbers):
            return m.group(0)
        new_targets = _NUMBER_RE.sub(lambda t: label_for(t.group(0)), targets)
        if keyword.upper() in ("THEN", "ELSE"):
            return f"{keyword} GoTo {new_targets}"
        return f"{keyword}{gap or ' '}{new_targets}"
