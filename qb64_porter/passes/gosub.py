"""
GosubConversionPass
===================

Best-effort conversion of ``GOSUB label`` / ``RETURN`` subroutines into
QB64PE ``SUB`` procedures.

For every label that is the target of a plain ``GOSUB``:

* the label line ``Routine:`` becomes ``Sub Routine``,
* the routine's last bare ``RETURN`` line becomes ``End Sub`` and any
  earlier ``RETURN`` in the routine becomes ``Exit Sub``,
* every ``GOSUB Routine`` call site becomes a direct ``Routine`` call.

A routine runs from its label to the next GOSUB-target label, the next
SUB/FUNCTION header or the end of the program.

The conversion cannot prove that no code falls through into a label, so
every application carries a "requires manual verification" warning and the
transformation is tagged ``best_effort``. A label that is also a GOTO target
is still converted and is named in the warning.

Left unchanged, with an error:

+-----------------------------------------------+----------------------------------+
| Construct                                     | Why                              |
+===============================================+==================================+
| ``ON x GOSUB a, b`` / ``ON TIMER GOSUB t``    | Computed / event dispatch has no |
|                                               | direct-call equivalent           |
+-----------------------------------------------+----------------------------------+
| GOSUB to a label that does not exist          | Nothing to convert               |
+-----------------------------------------------+----------------------------------+
| GOSUB to a numeric line                       | A SUB needs a name               |
+-----------------------------------------------+----------------------------------+
| Routine without a bare RETURN line            | No procedure end to place        |
+-----------------------------------------------+----------------------------------+
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from ..models import PortingReport
from .masking import code_only, split_comment, sub_code

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r"^(\s*)([A-Za-z_][\w.]*):\s*$")
_GOSUB_RE = re.compile(r"\bGO\s*SUB\s+([A-Za-z_][\w.]*|\d+)", re.IGNORECASE)
_GOTO_RE = re.compile(r"\bGO\s*TO\s+([A-Za-z_][\w.]*)", re.IGNORECASE)
_ON_RE = re.compile(
    r"\bON\b[^:]*?\bGO\s*(SUB|TO)\s+([\w.]+(?:\s*,\s*[\w.]+)*)", re.IGNORECASE
)
_ON_CONTEXT_RE = re.compile(r"\bON\b", re.IGNORECASE)
_BARE_RETURN_RE = re.compile(r"^(\s*)RETURN\s*$", re.IGNORECASE)
_INLINE_RETURN_RE = re.compile(r"\bRETURN\b(?=\s*(?:$|:|ELSE\b))", re.IGNORECASE)
_PROCEDURE_RE = re.compile(r"^\s*(?:SUB|FUNCTION)\s+\w", re.IGNORECASE)


@dataclass
class Routine:
    """A GOSUB target label and the lines that belong to it."""

    name: str
    label_line: int
    end_line: int                        # exclusive
    return_lines: List[int] = field(default_factory=list)


class GosubConversionPass:
    """Converts GOSUB/RETURN subroutines to SUB procedures (heuristic)."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        lines = text.split("\n")
        codes = [code_only(line) for line in lines]

        labels: Dict[str, int] = {}
        for index, code in enumerate(codes):
            m = _LABEL_RE.match(code)
            if m:
                labels.setdefault(m.group(2).upper(), index)

        calls: Dict[str, str] = {}          # upper → spelling of first call
        computed: Set[str] = set()
        goto_targets: Set[str] = set()
        for number, code in enumerate(codes, start=1):
            for m in _ON_RE.finditer(code):
                targets = [t.strip().upper() for t in m.group(2).split(",")]
                if m.group(1).upper() == "SUB":
                    computed.update(targets)
                    report = report.with_error(
                        f"Computed ON ... GOSUB at line {number} cannot be "
                        f"converted to procedure calls - left unchanged"
                    )
                else:
                    goto_targets.update(targets)
            for m in _GOTO_RE.finditer(code):
                goto_targets.add(m.group(1).upper())
            for m in _GOSUB_RE.finditer(code):
                if self._in_on_statement(m):
                    continue
                key = m.group(1).upper()
                calls.setdefault(key, m.group(1))

        if not calls:
            return text, report

        routines: Dict[str, Routine] = {}
        target_lines = {labels[k] for k in calls if k in labels}
        for key, spelling in calls.items():
            if key in computed:
                continue
            problem = self._problem(key, spelling, labels)
            if problem:
                report = report.with_error(problem)
                continue
            routine = self._routine(lines, codes, key, labels[key], target_lines)
            if not routine.return_lines:
                report = report.with_error(
                    f"GOSUB target {spelling} has no RETURN line - left unchanged"
                )
                continue
            routines[key] = routine

        if not routines:
            return text, report

        lines = self._rewrite_routines(lines, codes, routines)
        text, converted_calls = sub_code(
            _GOSUB_RE,
            lambda m: self._direct_call(m, routines),
            "\n".join(lines),
        )

        names = ", ".join(routines[k].name for k in routines)
        report = report.with_transformation(
            "CONTROL_FLOW",
            f"Converted {converted_calls} GOSUB statement(s) to function calls",
            best_effort=True,
        )
        report = report.with_transformation(
            "CONTROL_FLOW",
            f"Converted {len(routines)} GOSUB label(s) to SUB procedures "
            f"(RETURN -> End Sub): {names}",
            best_effort=True,
        )
        warning = (
            f"GOSUB/RETURN conversion requires manual verification and "
            f"adjustment: check that no code falls through into {names} and "
            f"that the new SUBs only use SHARED variables"
        )
        jumped = [routines[k].name for k in routines if k in goto_targets]
        if jumped:
            warning += f"; {', '.join(jumped)} also reached by GOTO"
        report = report.with_warning(warning)
        logger.debug("GOSUB: converted %d routine(s), %d call(s)", len(routines), converted_calls)
        return text, report

    # ------------------------------------------------------------------
    # Analysis helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _in_on_statement(m: re.Match) -> bool:
        statement = m.string[: m.start()].rsplit(":", 1)[-1]
        return bool(_ON_CONTEXT_RE.search(statement))

    @staticmethod
    def _problem(
        key: str,
        spelling: str,
        labels: Dict[str, int],
    ) -> Optional[str]:
        if spelling.isdigit():
            return (
                f"GOSUB {spelling} targets a line number - convert line numbers "
                f"to labels first (gwbasic dialect); left unchanged"
            )
        if key not in labels:
            return f"GOSUB target {spelling} has no label - left unchanged"
        return None

    @staticmethod
    def _routine(
        lines: List[str],
        codes: List[str],
        key: str,
        label_line: int,
        target_lines: Set[int],
    ) -> Routine:
        end = len(lines)
        for j in range(label_line + 1, len(lines)):
            if j in target_lines or _PROCEDURE_RE.match(codes[j]):
                end = j
                break
        name = _LABEL_RE.match(codes[label_line]).group(2)
        returns = [
            j for j in range(label_line + 1, end) if _BARE_RETURN_RE.match(codes[j])
        ]
        return Routine(name=name, label_line=label_line, end_line=end, return_lines=returns)

    # ------------------------------------------------------------------
    # Rewriting
    # ------------------------------------------------------------------

    @staticmethod
    def _rewrite_routines(
        lines: List[str], codes: List[str], routines: Dict[str, Routine]
    ) -> List[str]:
        lines = list(lines)
        for routine in routines.values():
            indent = _LABEL_RE.match(codes[routine.label_line]).group(1)
            _, comment = split_comment(lines[routine.label_line])
            lines[routine.label_line] = (
                f"{indent}Sub {routine.name}" + (f" {comment}" if comment else "")
            )

            last = routine.return_lines[-1]
            for j in range(routine.label_line + 1, last):
                if j in routine.return_lines:
                    ret_indent = _BARE_RETURN_RE.match(codes[j]).group(1)
                    _, comment = split_comment(lines[j])
                    lines[j] = f"{ret_indent}Exit Sub" + (f" {comment}" if comment else "")
                else:
                    lines[j], _ = sub_code(_INLINE_RETURN_RE, "Exit Sub", lines[j])

            ret_indent = _BARE_RETURN_RE.match(codes[last]).group(1)
            _, comment = split_comment(lines[last])
            lines[last] = f"{ret_indent}End Sub" + (f" {comment}" if comment else "")
        return lines

    def _direct_call(self, m: re.Match, routines: Dict[str, Routine]) -> str:
        routine = routines.get(m.group(1).upper())
        if routine is None or self._in_on_statement(m):
            return m.group(0)
        return routine.name

