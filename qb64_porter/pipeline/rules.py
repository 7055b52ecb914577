"""
Rule catalog: the static tables the porting passes are driven by.

Used by :class:`~qb64_porter.passes.keyword_casing.KeywordCasingPass`,
:class:`~qb64_porter.passes.def_fn.DefFnExtractPass` and the diagnostics /
analysis layer.  Pure data; nothing here is mutated at run time.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

# ── Keyword casing: QBasic ALL CAPS → QB64PE Pascal Case ─────────────────
# Multi-word forms come first so that "END IF" is not split into "End" + "IF".
KEYWORD_CASING: Tuple[Tuple[str, str], ...] = (
    ("END TYPE", "End Type"),
    ("END FUNCTION", "End Function"),
    ("END SUB", "End Sub"),
    ("END IF", "End If"),
    ("END SELECT", "End Select"),
    ("LINE INPUT", "Line Input"),
    ("DEF SEG", "Def Seg"),
    ("DEFINT", "DefInt"),
    ("DEFLNG", "DefLng"),
    ("DEFSNG", "DefSng"),
    ("DEFDBL", "DefDbl"),
    ("DEFSTR", "DefStr"),
    ("DECLARE", "Declare"),
    ("CONST", "Const"),
    ("TYPE", "Type"),
    ("DIM", "Dim"),
    ("SHARED", "Shared"),
    ("REDIM", "ReDim"),
    ("FUNCTION", "Function"),
    ("SUB", "Sub"),
    ("FOR", "For"),
    ("NEXT", "Next"),
    ("WHILE", "While"),
    ("WEND", "Wend"),
    ("DO", "Do"),
    ("LOOP", "Loop"),
    ("IF", "If"),
    ("THEN", "Then"),
    ("ELSE", "Else"),
    ("ELSEIF", "ElseIf"),
    ("SELECT", "Select"),
    ("CASE", "Case"),
    ("SCREEN", "Screen"),
    ("LOCATE", "Locate"),
    ("PRINT", "Print"),
    ("INPUT", "Input"),
    ("OPEN", "Open"),
    ("CLOSE", "Close"),
    ("READ", "Read"),
    ("DATA", "Data"),
    ("RESTORE", "Restore"),
    ("CIRCLE", "Circle"),
    ("LINE", "Line"),
    ("PSET", "PSet"),
    ("POINT", "Point"),
    ("PUT", "Put"),
    ("GET", "Get"),
    ("PAINT", "Paint"),
    ("PALETTE", "Palette"),
    ("COLOR", "Color"),
    ("WIDTH", "Width"),
    ("VIEW", "View"),
    ("WINDOW", "Window"),
    ("PLAY", "Play"),
    ("BEEP", "Beep"),
    ("SOUND", "Sound"),
    ("TIMER", "Timer"),
    ("RANDOMIZE", "Randomize"),
    ("RND", "Rnd"),
    ("INT", "Int"),
    ("ABS", "Abs"),
    ("SQR", "Sqr"),
    ("SIN", "Sin"),
    ("COS", "Cos"),
    ("TAN", "Tan"),
    ("ATN", "Atn"),
    ("LOG", "Log"),
    ("EXP", "Exp"),
    ("LEN", "Len"),
    ("INSTR", "InStr"),
    ("VAL", "Val"),
    ("ASC", "Asc"),
    ("TAB", "Tab"),
    ("SPC", "Spc"),
    ("POS", "Pos"),
    ("CSRLIN", "CsrLin"),
    ("EOF", "Eof"),
    ("LOF", "Lof"),
    ("SEEK", "Seek"),
    ("CLS", "Cls"),
    ("SYSTEM", "System"),
    ("SHELL", "Shell"),
    ("SLEEP", "Sleep"),
    ("PEEK", "Peek"),
    ("POKE", "Poke"),
)

# ── String functions: the "$" spellings ──────────────────────────────────
STRING_FUNCTIONS: Tuple[Tuple[str, str], ...] = (
    ("LTRIM$", "LTrim$"),
    ("RTRIM$", "RTrim$"),
    ("TRIM$", "Trim$"),
    ("LEFT$", "Left$"),
    ("RIGHT$", "Right$"),
    ("MID$", "Mid$"),
    ("UCASE$", "UCase$"),
    ("LCASE$", "LCase$"),
    ("STR$", "Str$"),
    ("CHR$", "Chr$"),
    ("SPACE$", "Space$"),
    ("STRING$", "String$"),
    ("INKEY$", "InKey$"),
    ("DATE$", "Date$"),
    ("TIME$", "Time$"),
)

# ── Type sigils ───────────────────────────────────────────────────────────
# QB64PE has no CURRENCY type; "@" maps to its widest float.
SIGIL_TYPES: Dict[str, str] = {
    "%": "INTEGER",
    "&": "LONG",
    "!": "SINGLE",
    "#": "DOUBLE",
    "@": "_FLOAT",
    "$": "STRING",
}

SIGIL_CHARS = "".join(SIGIL_TYPES)

# Types a TYPE ... END TYPE field or a DIM ... AS clause may name.
PLAIN_TYPES = ("INTEGER", "LONG", "SINGLE", "DOUBLE", "STRING")

# ── Program traits ────────────────────────────────────────────────────────
GRAPHICS_KEYWORDS = (
    "SCREEN", "CIRCLE", "LINE", "PSET", "POINT", "PAINT",
    "PUT", "GET", "PALETTE", "VIEW", "WINDOW",
)
SOUND_KEYWORDS = ("PLAY", "BEEP", "SOUND")

DEFAULT_TITLE = "Ported QB64PE Program"

# ── Dialects ──────────────────────────────────────────────────────────────
SUPPORTED_DIALECTS: Tuple[str, ...] = (
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
)

# Dialects whose programs are written with line numbers.
LINE_NUMBERED_DIALECTS = frozenset({"gwbasic", "applesoft", "commodore", "atari"})

_QBASIC_RULES = [
    "Convert ALL CAPS keywords to Pascal Case",
    "Remove DECLARE statements",
    "Convert DEF FN to proper functions",
    "Convert GOSUB/RETURN to function calls",
    "Add QB64PE metacommands",
    "Update array syntax",
    "Convert timing functions",
]

DIALECT_RULES: Dict[str, List[str]] = {
    "qbasic": _QBASIC_RULES,
    "gwbasic": [
        "All QBasic rules apply",
        "Convert line numbers to labels",
        "Re-point GOTO/GOSUB line references at labels",
    ],
    "quickbasic": [
        "Most QBasic rules apply",
        "Remove DECLARE statements",
        "Fix DIM statements mixing type suffixes with AS clauses",
    ],
    "vb-dos": [
        "Most QBasic rules apply",
        "Map the @ (CURRENCY) suffix to _FLOAT",
    ],
    "applesoft": ["All QBasic rules apply", "Convert line numbers to labels"],
    "commodore": ["All QBasic rules apply", "Convert line numbers to labels"],
    "atari": ["All QBasic rules apply", "Convert line numbers to labels"],
}

GENERIC_RULES = ["Basic BASIC to QB64PE conversion rules"]


def get_supported_dialects() -> List[str]:
    return list(SUPPORTED_DIALECTS)


def get_dialect_rules(dialect: str) -> List[str]:
    """Human-readable rule list for *dialect* (generic list when unknown)."""
    return list(DIALECT_RULES.get(dialect, GENERIC_RULES))
