"""
PortProgramTask
===============

Orchestrates the porting pipeline and returns a
:class:`~qb64_porter.models.PortingResult`.

Pipeline stages (fixed order; bracketed stages depend on the options):

1.  :class:`~qb64_porter.passes.metacommands.DeprecatedMetacommandPass`
    – drop ``$NOPREFIX``.
2.  [line-numbered dialects]
    :class:`~qb64_porter.passes.line_numbers.LineNumberLabelPass`
    – line numbers → labels.
3.  :class:`~qb64_porter.passes.keyword_casing.KeywordCasingPass`
    – ALL CAPS keywords and ``$`` functions → Pascal Case.
4.  :class:`~qb64_porter.passes.declarations.ForwardDeclarationPass`
    – remove ``DECLARE`` lines.
5.  :class:`~qb64_porter.passes.def_fn.DefFnExtractPass`
    – ``DEF FN`` → ``FUNCTION``.
6.  :class:`~qb64_porter.passes.declarations.MixedDeclarationPass`
    – ``DIM x% AS INTEGER`` → ``Dim x As INTEGER``.
7.  :class:`~qb64_porter.passes.gosub.GosubConversionPass`
    – ``GOSUB``/``RETURN`` → ``SUB`` (best effort).
8.  [addModernFeatures] :class:`~qb64_porter.passes.idioms.TypeFieldCasingPass`
9.  [convertGraphics] :class:`~qb64_porter.passes.idioms.ArraySyntaxPass`
10. [addModernFeatures] :class:`~qb64_porter.passes.idioms.PiConstantPass`
11. [addModernFeatures] :class:`~qb64_porter.passes.idioms.ExitStatementPass`
12. [addModernFeatures] :class:`~qb64_porter.passes.idioms.TimingPass`
13. [convertGraphics] :class:`~qb64_porter.passes.metacommands.GraphicsEnhancementPass`
14. [addModernFeatures] :class:`~qb64_porter.passes.metacommands.WindowMetacommandPass`
15. :class:`~qb64_porter.pipeline.diagnostics.DiagnosticsPass`
    – read-only residual-risk scan.

Every stage has the signature ``run(text, report) -> (text, report)`` and
never raises for any input text.  This module only raises
:class:`~qb64_porter.errors.PortingError` subclasses, for malformed options
(:class:`~qb64_porter.errors.InvalidOptionsError`) or a non-string source.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Union

from ..errors import PortingError
from ..models import PortingReport, PortingResult
from ..options import PortingOptions
from ..passes.declarations import ForwardDeclarationPass, MixedDeclarationPass
from ..passes.def_fn import DefFnExtractPass
from ..passes.gosub import GosubConversionPass
from ..passes.idioms import (
    ArraySyntaxPass,
    ExitStatementPass,
    PiConstantPass,
    TimingPass,
    TypeFieldCasingPass,
)
from ..passes.keyword_casing import KeywordCasingPass
from ..passes.line_numbers import LineNumberLabelPass
from ..passes.metacommands import (
    DeprecatedMetacommandPass,
    GraphicsEnhancementPass,
    WindowMetacommandPass,
)
from .assessment import assess_compatibility, summarize
from .diagnostics import DiagnosticsPass
from .rules import LINE_NUMBERED_DIALECTS

logger = logging.getLogger(__name__)

OptionsLike = Union[PortingOptions, Mapping[str, Any], None]


class PortProgramTask:
    """
    High-level entry point for the porting pipeline.

    Parameters
    ----------
    options:
        A :class:`~qb64_porter.options.PortingOptions`, a mapping of
        (partial) options in snake_case or camelCase, or ``None`` for the
        defaults.

    Raises
    ------
    InvalidOptionsError
        When *options* cannot be validated.
    """

    def __init__(self, options: OptionsLike = None) -> None:
        self.options = PortingOptions.coerce(options)

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def passes(self) -> List[Any]:
        """The ordered stage list for the configured options."""
        opts = self.options
        stages: List[Any] = [DeprecatedMetacommandPass()]
        if opts.source_dialect in LINE_NUMBERED_DIALECTS:
            stages.append(LineNumberLabelPass())
        stages += [
            KeywordCasingPass(),
            ForwardDeclarationPass(),
            DefFnExtractPass(),
            MixedDeclarationPass(),
            GosubConversionPass(),
        ]
        if opts.add_modern_features:
            stages.append(TypeFieldCasingPass())
        if opts.convert_graphics:
            stages.append(ArraySyntaxPass())
        if opts.add_modern_features:
            stages += [PiConstantPass(), ExitStatementPass(), TimingPass()]
        if opts.convert_graphics:
            stages.append(GraphicsEnhancementPass())
        if opts.add_modern_features:
            stages.append(WindowMetacommandPass())
        stages.append(DiagnosticsPass(performance_advisories=opts.optimize_performance))
        return stages

    def transform(self, source: str) -> PortingResult:
        """
        Port *source* to QB64PE.

        Parameters
        ----------
        source:
            Complete program text.  Line separators are kept as they are.

        Returns
        -------
        PortingResult
            Always a best-effort rewrite; problems are reported in
            ``warnings`` / ``errors``, never raised.
        """
        if not isinstance(source, str):
            raise PortingError(f"source must be a string, not {type(source).__name__}")

        logger.info(
            "Porting %d line(s) from %s",
            len(source.split("\n")),
            self.options.source_dialect,
        )

        text, report = source, PortingReport()
        for stage in self.passes():
            text, report = stage.run(text, report)

        for error in report.errors:
            logger.warning("%s", error)

        level = assess_compatibility(len(report.errors), len(report.warnings))
        logger.info(
            "Ported with %d transformation(s), %d warning(s), %d error(s): %s",
            len(report.transformations),
            len(report.warnings),
            len(report.errors),
            level,
        )
        return PortingResult(
            original_code=source,
            ported_code=text,
            transformations=report.transformations,
            warnings=report.warnings,
            errors=report.errors,
            compatibility=level,
            summary=summarize(
                len(report.transformations), len(report.warnings), len(report.errors)
            ),
        )


def transform(source: str, options: OptionsLike = None) -> PortingResult:
    """Port *source* with *options*; see :class:`PortProgramTask`."""
    return PortProgramTask(options).transform(source)
