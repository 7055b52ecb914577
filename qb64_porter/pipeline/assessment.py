"""Compatibility rating and summary text."""
from __future__ import annotations

# More warnings than this downgrades an error-free port to "medium".
MAX_WARNINGS_FOR_HIGH = 3


def assess_compatibility(error_count: int, warning_count: int) -> str:
    """
    Rate a port from its error and warning counts alone.

    Any error gives ``"low"``; otherwise more than three warnings give
    ``"medium"``, anything else ``"high"``.
    """
    if error_count > 0:
        return "low"
    if warning_count > MAX_WARNINGS_FOR_HIGH:
        return "medium"
    return "high"


def summarize(transformation_count: int, warning_count: int, error_count: int) -> str:
    level = assess_compatibility(error_count, warning_count)
    return (
        f"Porting completed with {transformation_count} transformation(s), "
        f"{warning_count} warning(s), and {error_count} error(s). "
        f"Compatibility level: {level}."
    )
