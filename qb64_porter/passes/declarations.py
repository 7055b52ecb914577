"""
Declaration restructuring passes
================================

:class:`ForwardDeclarationPass`
    QB64PE resolves SUB / FUNCTION names itself, so ``DECLARE SUB`` and
    ``DECLARE FUNCTION`` lines are dropped.  Each removed declaration is
    recorded by name.

:class:`MixedDeclarationPass`
    ``DIM x% AS INTEGER`` names the type twice.  The suffix is removed and
    the AS clause kept: ``Dim x As INTEGER``.  When the suffix and the AS
    clause disagree (``DIM n& AS INTEGER``) the AS clause still wins and a
    warning points at the variable, because references written as ``n&``
    now name a different variable.

The DEF FN extractor runs between the two (see
:mod:`~qb64_porter.pipeline.port_program`) because the functions it writes
carry declarations of their own.
"""
from __future__ import annotations

import logging
import re
from typing import List, Tuple

from ..models import PortingReport
from ..pipeline.rules import SIGIL_CHARS, SIGIL_TYPES
from .masking import code_only, sub_code

logger = logging.getLogger(__name__)

_DECLARE_RE = re.compile(
    r"^\s*DECLARE\s+(SUB|FUNCTION)\s+([A-Za-z_][\w.]*[%&!#@$]?)",
    re.IGNORECASE,
)
_DIM_STATEMENT_RE = re.compile(
    r"(?:^|:)\s*(?:DIM|REDIM|STATIC|COMMON)\b", re.IGNORECASE
)
_MIXED_CLAUSE_RE = re.compile(
    rf"\b([A-Za-z_][\w.]*)([{re.escape(SIGIL_CHARS)}])"
    r"(\s*\([^()]*\))?\s+AS\s+([A-Za-z_]\w*)",
    re.IGNORECASE,
)


class ForwardDeclarationPass:
    """Removes ``DECLARE SUB`` / ``DECLARE FUNCTION`` lines."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        kept: List[str] = []
        removed: List[str] = []
        for line in text.split("\n"):
            m = _DECLARE_RE.match(code_only(line))
            if m:
                removed.append(m.group(2))
                continue
            kept.append(line)

        if not removed:
            return text, report

        logger.debug("Removed forward declarations: %s", removed)
        report = report.with_transformation(
            "DECLARATION",
            f"Removed {len(removed)} forward declaration(s): {', '.join(removed)}",
        )
        return "\n".join(kept), report


class MixedDeclarationPass:
    """Collapses ``name<sigil> AS type`` to ``name As type`` in DIM statements."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        fixed_statements = 0
        mismatches: List[str] = []

        def _collapse(m: re.Match) -> str:
            name, sigil, dims, as_type = m.groups()
            if SIGIL_TYPES[sigil] != as_type.upper():
                mismatches.append(
                    f"{name}{sigil} (suffix {SIGIL_TYPES[sigil]}, AS {as_type.upper()})"
                )
            return f"{name}{dims or ''} As {as_type}"

        out: List[str] = []
        for line in text.split("\n"):
            if _DIM_STATEMENT_RE.search(code_only(line)):
                line, count = sub_code(_MIXED_CLAUSE_RE, _collapse, line)
                if count:
                    fixed_statements += 1
            out.append(line)

        if fixed_statements:
            report = report.with_transformation(
                "DECLARATION",
                f"Fixed {fixed_statements} DIM statement(s) mixing type suffixes "
                f"with AS clauses",
            )
        if mismatches:
            report = report.with_warning(
                f"{len(mismatches)} declaration(s) had a type suffix that "
                f"contradicts the AS clause: {', '.join(mismatches)} - the AS "
                f"type was kept; check references that still use the suffix"
            )
        return "\n".join(out), report
