"""
Core data models for the QB64 porter.

Every pass threads a :class:`PortingReport` through the pipeline; the report
is immutable, so each ``with_*`` helper returns a new instance and the
orchestrator folds the pass list over ``(text, report)`` pairs.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Tuple


# ---------------------------------------------------------------------------
# Transformation categories
# ---------------------------------------------------------------------------

TRANSFORMATION_CATEGORIES = {
    "METACOMMAND",       # $NOPREFIX removal, $Resize / _Title injection
    "LINE_NUMBER",       # GW-BASIC line numbers turned into labels
    "LEXICAL",           # Keyword casing, string-function names
    "DECLARATION",       # DECLARE removal, DIM sigil/AS clean-up
    "BLOCK_EXTRACTION",  # DEF FN → FUNCTION (may change line count)
    "CONTROL_FLOW",      # GOSUB/RETURN → SUB calls (best effort)
    "TYPE",              # TYPE ... END TYPE field casing
    "ARRAY",             # PUT/GET array-copy syntax
    "IDIOM",             # Pi, END → System 0, Rest → _Delay
    "GRAPHICS",          # _AllowFullScreen after SCREEN
}

SEVERITIES = {"warning", "error"}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(
        part.upper() if part == "io" else part.capitalize() for part in rest
    )


@dataclass(frozen=True)
class Transformation:
    """One entry of the audit trail."""

    category: str
    description: str
    best_effort: bool = False

    def __post_init__(self) -> None:
        if self.category not in TRANSFORMATION_CATEGORIES:
            raise ValueError(f"unknown transformation category: {self.category!r}")

    def __str__(self) -> str:
        return self.description

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "description": self.description,
            "bestEffort": self.best_effort,
        }


@dataclass(frozen=True)
class Diagnostic:
    """A warning (rewrite applied with residual risk) or an error (left as is)."""

    severity: str
    message: str

    def __post_init__(self) -> None:
        if self.severity not in SEVERITIES:
            raise ValueError(f"unknown severity: {self.severity!r}")

    def __str__(self) -> str:
        return f"{self.severity}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {"severity": self.severity, "message": self.message}


# ---------------------------------------------------------------------------
# Report accumulator
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PortingReport:
    """
    Append-only record of what the pipeline did.

    Order of ``transformations`` and ``diagnostics`` is application order.
    """

    transformations: Tuple[Transformation, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    def with_transformation(
        self,
        category: str,
        description: str,
        best_effort: bool = False,
    ) -> PortingReport:
        entry = Transformation(category, description, best_effort)
        return replace(self, transformations=self.transformations + (entry,))

    def with_warning(self, message: str) -> PortingReport:
        return replace(
            self, diagnostics=self.diagnostics + (Diagnostic("warning", message),)
        )

    def with_error(self, message: str) -> PortingReport:
        return replace(
            self, diagnostics=self.diagnostics + (Diagnostic("error", message),)
        )

    @property
    def warnings(self) -> Tuple[str, ...]:
        return tuple(d.message for d in self.diagnostics if d.severity == "warning")

    @property
    def errors(self) -> Tuple[str, ...]:
        return tuple(d.message for d in self.diagnostics if d.severity == "error")

    def __repr__(self) -> str:
        return (
            f"PortingReport(transformations={len(self.transformations)}, "
            f"warnings={len(self.warnings)}, errors={len(self.errors)})"
        )


# ---------------------------------------------------------------------------
# PortingResult – the final output unit
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PortingResult:
    """
    Outcome of one :func:`~qb64_porter.pipeline.port_program.transform` call.

    ``compatibility`` depends only on the number of warnings and errors.
    """

    original_code: str
    ported_code: str
    transformations: Tuple[Transformation, ...]
    warnings: Tuple[str, ...]
    errors: Tuple[str, ...]
    compatibility: str       # high | medium | low
    summary: str

    def __repr__(self) -> str:
        return (
            f"PortingResult(compatibility={self.compatibility!r}, "
            f"transformations={len(self.transformations)}, "
            f"warnings={len(self.warnings)}, errors={len(self.errors)})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "originalCode": self.original_code,
            "portedCode": self.ported_code,
            "transformations": [t.description for t in self.transformations],
            "transformationRecords": [t.to_dict() for t in self.transformations],
            "warnings": list(self.warnings),
            "errors": list(self.errors),
            "compatibility": self.compatibility,
            "summary": self.summary,
            "usage": {
                "originalLines": len(self.original_code.split("\n")),
                "portedLines": len(self.ported_code.split("\n")),
                "transformationsApplied": len(self.transformations),
                "compatibilityLevel": self.compatibility,
            },
        }


# ---------------------------------------------------------------------------
# Dry-run analysis
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompatibilityAnalysis:
    """
    Result of analysing a program without keeping the rewrite.

    ``features`` holds the detected program traits (graphics, sound, file
    I/O, DEF FN, GOSUB, ...); the remaining fields summarise a dry-run port.
    """

    source_dialect: str
    total_lines: int
    features: Dict[str, bool] = field(default_factory=dict)
    level: str = "high"
    transformations_needed: int = 0
    potential_problems: Tuple[str, ...] = ()
    critical_issues: Tuple[str, ...] = ()

    @property
    def issues_found(self) -> int:
        return len(self.potential_problems) + len(self.critical_issues)

    def to_dict(self) -> Dict[str, Any]:
        code_analysis: Dict[str, Any] = {"totalLines": self.total_lines}
        for name, present in self.features.items():
            code_analysis[_camel(name)] = present
        return {
            "sourceDialect": self.source_dialect,
            "codeAnalysis": code_analysis,
            "compatibility": {
                "level": self.level,
                "issuesFound": self.issues_found,
                "transformationsNeeded": self.transformations_needed,
                "potentialProblems": list(self.potential_problems),
                "criticalIssues": list(self.critical_issues),
            },
        }
