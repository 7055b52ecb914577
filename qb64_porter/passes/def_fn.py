"""
DefFnExtractPass
================

Rewrites legacy ``DEF FN`` inline functions as QB64PE ``FUNCTION`` procedures.

Two shapes are recognised, in this order:

1.  **Block form** – a ``DEF FNname(params)`` header with no ``=``, a body
    of one or more lines and a closing ``END DEF``::

        DEF FNFACTORIAL#(n#)            Function FACTORIAL (n As DOUBLE) As DOUBLE
          result# = 1                       result# = 1
          FOR i = 1 TO n#          →        FOR i = 1 TO n
            result# = result# * i           result# = result# * i
          NEXT i                            NEXT i
          FNFACTORIAL# = result#            FACTORIAL = result#
        END DEF                         End Function

    The header is matched to the *first* following ``END DEF``.  A header
    that reaches another ``DEF FN`` header or the end of the program first is
    reported as an error and left untouched.

2.  **Single-line form** – ``DEF FNname(params) = expression`` becomes a
    three-line FUNCTION whose body assigns the expression to the name.

For both shapes:

* the ``FN`` prefix is dropped from the name,
* a type sigil on the name becomes an ``As <type>`` return annotation,
* a sigil on a parameter becomes ``param As <type>`` and is stripped from
  the parameter's uses inside the body,
* ``EXIT DEF`` becomes ``Exit Function``.

Finally every remaining ``FNname`` reference in the whole program (call
sites, and the result assignment inside the body) loses its ``FN`` prefix.
Call sites are found independently of the definitions, by name.

Both shapes change the line count; their transformation records say so.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..models import PortingReport
from ..pipeline.rules import SIGIL_CHARS, SIGIL_TYPES
from .masking import code_only, split_comment, sub_code

logger = logging.getLogger(__name__)

BODY_INDENT = "    "

_SIGIL_CLASS = f"[{re.escape(SIGIL_CHARS)}]"

_HEADER_RE = re.compile(
    rf"^(?P<indent>\s*)DEF\s*FN\s*(?P<name>[A-Za-z_][\w.]*)(?P<sigil>{_SIGIL_CLASS})?"
    r"\s*(?:\((?P<params>[^)]*)\))?"
    r"\s*(?:=\s*(?P<expr>.*?))?\s*$",
    re.IGNORECASE | re.DOTALL,
)
_END_DEF_RE = re.compile(r"^\s*END\s+DEF\s*$", re.IGNORECASE)
_EXIT_DEF_RE = re.compile(r"\bEXIT\s+DEF\b", re.IGNORECASE)
_PARAM_RE = re.compile(
    rf"^(?P<name>[A-Za-z_][\w.]*)(?P<sigil>{_SIGIL_CLASS})?(?P<rest>\s+AS\s+\w+)?$",
    re.IGNORECASE,
)


@dataclass
class DefFnHeader:
    """A parsed ``DEF FN`` header line."""

    indent: str
    name: str
    sigil: Optional[str]
    params: Optional[str]
    expr: Optional[str]
    comment: str

    @property
    def legacy_name(self) -> str:
        return f"FN{self.name}{self.sigil or ''}"


def parse_header(line: str) -> Optional[DefFnHeader]:
    """Parse a ``DEF FN`` header, or return ``None`` for any other line."""
    statement, comment = split_comment(line)
    m = _HEADER_RE.match(statement)
    if not m:
        return None
    return DefFnHeader(
        indent=m.group("indent"),
        name=m.group("name"),
        sigil=m.group("sigil"),
        params=m.group("params"),
        expr=m.group("expr"),
        comment=comment,
    )


def _word_re(word: str) -> re.Pattern:
    return re.compile(
        rf"(?<![\w.]){re.escape(word)}(?![\w$%&!#@])", re.IGNORECASE
    )


class DefFnExtractPass:
    """Converts block and single-line ``DEF FN`` definitions to FUNCTIONs."""

    def run(self, text: str, report: PortingReport) -> Tuple[str, PortingReport]:
        names: List[str] = []

        text, block_names, report = self._convert_blocks(text, report)
        if block_names:
            names.extend(block_names)
            report = report.with_transformation(
                "BLOCK_EXTRACTION",
                f"Converted {len(block_names)} multi-line DEF FN block(s) to "
                f"FUNCTION procedures: {', '.join(block_names)} "
                f"(END DEF replaced by End Function)",
            )

        text, single_names, report = self._convert_single_lines(text, report)
        if single_names:
            names.extend(single_names)
            report = report.with_transformation(
                "BLOCK_EXTRACTION",
                f"Converted {len(single_names)} DEF FN statement(s) to proper "
                f"functions: {', '.join(single_names)} (each expanded to a "
                f"three-line FUNCTION)",
            )

        if names:
            text, calls = self._strip_call_prefixes(text, names)
            if calls:
                report = report.with_transformation(
                    "BLOCK_EXTRACTION",
                    f"Removed FN prefix from {calls} reference(s) to converted "
                    f"functions",
                )
            logger.debug("DEF FN: converted %s, %d reference(s)", names, calls)
        return text, report

    # ------------------------------------------------------------------
    # Block form
    # ------------------------------------------------------------------

    def _convert_blocks(
        self, text: str, report: PortingReport
    ) -> Tuple[str, List[str], PortingReport]:
        lines = text.split("\n")
        out: List[str] = []
        names: List[str] = []
        i = 0
        while i < len(lines):
            header = parse_header(lines[i])
            if header is None or header.expr is not None:
                out.append(lines[i])
                i += 1
                continue

            end = self._find_end(lines, i + 1)
            if end is None:
                report = report.with_error(
                    f"DEF {header.legacy_name} at line {i + 1} has no matching "
                    f"END DEF - block left unchanged"
                )
                out.append(lines[i])
                i += 1
                continue

            out.extend(self._function(header, lines[i + 1:end]))
            names.append(header.name)
            i = end + 1
        return "\n".join(out), names, report

    @staticmethod
    def _find_end(lines: List[str], start: int) -> Optional[int]:
        """Index of the first END DEF after *start*; None if a header intervenes."""
        for j in range(start, len(lines)):
            code = code_only(lines[j])
            if _END_DEF_RE.match(code):
                return j
            if parse_header(lines[j]) is not None:
                return None
        return None

    # ------------------------------------------------------------------
    # Single-line form
    # ------------------------------------------------------------------

    def _convert_single_lines(
        self, text: str, report: PortingReport
    ) -> Tuple[str, List[str], PortingReport]:
        out: List[str] = []
        names: List[str] = []
        for number, line in enumerate(text.split("\n"), start=1):
            header = parse_header(line)
            if header is None or header.expr is None:
                out.append(line)
                continue
            if ":" in code_only(header.expr) or not header.expr.strip():
                report = report.with_error(
                    f"DEF {header.legacy_name} at line {number} is not a single "
                    f"expression - left unchanged"
                )
                out.append(line)
                continue
            body = [f"{header.name} = {header.expr}"]
            out.extend(self._function(header, body))
            names.append(header.name)
        return "\n".join(out), names, report

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _function(self, header: DefFnHeader, body: List[str]) -> List[str]:
        params, typed = self._parameters(header.params)
        signature = f"{header.indent}Function {header.name}"
        if params:
            signature += f" ({params})"
        if header.sigil:
            signature += f" As {SIGIL_TYPES[header.sigil]}"
        if header.comment:
            signature += " " + header.comment

        body_text = "\n".join(line.strip() for line in body)
        for legacy, plain in typed:
            body_text, _ = sub_code(_word_re(legacy), plain, body_text)
        body_text, _ = sub_code(_EXIT_DEF_RE, "Exit Function", body_text)

        result = [signature]
        for line in body_text.split("\n"):
            result.append(f"{header.indent}{BODY_INDENT}{line}" if line else "")
        result.append(f"{header.indent}End Function")
        return result

    @staticmethod
    def _parameters(raw: Optional[str]) -> Tuple[str, List[Tuple[str, str]]]:
        """
        Rewrite a DEF FN parameter list.

        Returns the new list and the ``(legacy, plain)`` spellings of every
        parameter whose sigil was turned into an AS clause.
        """
        if raw is None or not raw.strip():
            return "", []
        parts: List[str] = []
        typed: List[Tuple[str, str]] = []
        for param in raw.split(","):
            param = param.strip()
            m = _PARAM_RE.match(param)
            if m and m.group("sigil") and not m.group("rest"):
                name, sigil = m.group("name"), m.group("sigil")
                parts.append(f"{name} As {SIGIL_TYPES[sigil]}")
                typed.append((name + sigil, name))
            else:
                parts.append(param)
        return ", ".join(parts), typed

    @staticmethod
    def _strip_call_prefixes(text: str, names: List[str]) -> Tuple[str, int]:
        total = 0
        for name in names:
            pattern = re.compile(
                rf"(?<![\w.])FN\s*{re.escape(name)}{_SIGIL_CLASS}?(?![\w.$%&!#@])",
                re.IGNORECASE,
            )
            text, count = sub_code(pattern, name, text)
            total += count
        return text, total
