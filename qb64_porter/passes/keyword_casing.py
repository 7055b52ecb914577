"""
KeywordCasingPass
=================

Table-driven lexical normalisation.

Two tables from :mod:`~qb64_porter.pipeline.rules` are applied in turn:

1.  :data:`KEYWORD_CASING` – QBasic ALL CAPS keywords → QB64PE Pascal Case.
2.  :data:`STRING_FUNCTIONS` – ``LEFT$``, ``MID$`` ... → ``Left$``, ``Mid$``.

Every ``(old, new)`` pair is a whole-word, case-insensitive replacement that
only touches code segments (see :mod:`~qb64_porter.passes.masking`).  One
transformation record is written *per table*, carrying the total number of
spellings that actually changed.
"""
from __future__ import annotations

import logging
import re
from typing import List, Sequence, Tuple

from ..models import PortingReport
from ..pipeline.rules import KEYWORD_CASING, STRING_FUNCTIONS
from .masking import sub_code, word_pattern

logger = logging.getLogger(__name__)

_CompiledTable = List[Tuple[re.Pattern, str]]


def _compile(table: Sequence[Tuple[str, str]]) -> _CompiledTable:
    return [(word_pattern(old), new) for old, new in table]


class KeywordCasingPass:
    """Applies the keyword-casing and string-function tables."""

    def __init__(self) -> None:
        self._keywords = _compile(KEYWORD_CASING)
        self._string_functions = _compile(STRING_FUNCTIONS)

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        text, keyword_count = self._apply(text, self._keywords)
        if keyword_count:
            report = report.with_transformation(
                "LEXICAL",
                f"Converted {keyword_count} keyword(s) from ALL CAPS to Pascal Case",
            )

        text, function_count = self._apply(text, self._string_functions)
        if function_count:
            report = report.with_transformation(
                "LEXICAL",
                f"Converted {function_count} string function(s) to proper casing",
            )

        logger.debug(
            "Keyword casing: %d keyword(s), %d string function(s)",
            keyword_count,
            function_count,
        )
        return text, report

    @staticmethod
    def _apply(text: str, table: _CompiledTable) -> Tuple[str, int]:
        total = 0
        for pattern, new in table:
            text, count = sub_code(pattern, new, text)
            total += count
        return text, total
