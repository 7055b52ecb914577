"""
Porting options.

Validated with pydantic so that a bad dialect name or a non-boolean flag is
reported once, up front, instead of surfacing half-way through the pipeline.
Both snake_case names and the camelCase names of the original tool interface
(``sourceDialect``, ``addModernFeatures`` ...) are accepted.
"""
from __future__ import annotations

from typing import Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidOptionsError

Dialect = Literal[
    "qbasic",
    "gwbasic",
    "quickbasic",
    "vb-dos",
    "applesoft",
    "commodore",
    "amiga",
    "atari",
    "vb6",
    "vbnet",
    "vbscript",
    "freebasic",
]


class PortingOptions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    source_dialect: Dialect = Field("qbasic", alias="sourceDialect")
    add_modern_features: bool = Field(True, alias="addModernFeatures")
    # Advisory: comments are never rewritten whatever this is set to.
    preserve_comments: bool = Field(True, alias="preserveComments")
    convert_graphics: bool = Field(True, alias="convertGraphics")
    optimize_performance: bool = Field(True, alias="optimizePerformance")

    @classmethod
    def coerce(
        cls,
        options: Union[PortingOptions, Mapping[str, Any], None] = None,
    ) -> PortingOptions:
        """
        Build options from an instance, a mapping of (partial) settings or
        ``None`` for the defaults.

        Raises
        ------
        InvalidOptionsError
            When a key is unknown or a value has the wrong type.
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if not isinstance(options, Mapping):
            raise InvalidOptionsError(
                f"options must be a mapping or PortingOptions, not {type(options).__name__}"
            )
        try:
            return cls.model_validate(dict(options))
        except ValidationError as exc:
            raise InvalidOptionsError(str(exc)) from exc

    def dry_run(self) -> PortingOptions:
        """Options used for analysis-only runs: no optional rewrites."""
        return self.model_copy(
            update={
                "add_modern_features": False,
                "convert_graphics": False,
                "optimize_performance": False,
            }
        )
