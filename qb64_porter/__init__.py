"""
QB64 Porter
===========

Source-to-source porting of legacy BASIC programs (QBasic, GW-BASIC,
QuickBASIC and related dialects) to QB64 Phoenix Edition.

The port is a fixed sequence of text passes.  Every change is recorded as a
transformation; risky rewrites add a warning and unsafe constructs are left
alone with an error, so the result can be reviewed before it is compiled.

Quick start
-----------
>>> from qb64_porter import transform
>>> result = transform('DEF FNSquare#(x#) = x# * x#\\nPRINT FNSquare#(3)')
>>> print(result.ported_code)
Function Square (x As DOUBLE) As DOUBLE
    Square = x * x
End Function
Print Square(3)
>>> result.compatibility
'high'
"""

from .errors import InvalidOptionsError, PortingError
from .models import (
    CompatibilityAnalysis,
    Diagnostic,
    PortingReport,
    PortingResult,
    Transformation,
)
from .options import PortingOptions
from .pipeline.compatibility_analysis import analyze, run_diagnostics
from .pipeline.port_program import PortProgramTask, transform
from .pipeline.rules import get_dialect_rules, get_supported_dialects

__version__ = "0.1.0"
__all__ = [
    "CompatibilityAnalysis",
    "Diagnostic",
    "InvalidOptionsError",
    "PortingError",
    "PortingOptions",
    "PortingReport",
    "PortingResult",
    "PortProgramTask",
    "Transformation",
    "analyze",
    "get_dialect_rules",
    "get_supported_dialects",
    "run_diagnostics",
    "transform",
]
