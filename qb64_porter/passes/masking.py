"""
Literal / comment masking
=========================

Splits BASIC source lines into *code* and *non-code* segments so that the
regex-driven passes never rewrite text inside:

  * string literals ``"..."`` (an unterminated literal runs to end of line),
  * ``'`` comments,
  * ``REM`` comments that start a statement (also after ``THEN`` / ``ELSE``),
  * the operand list of a ``DATA`` statement.

Segments concatenate back to the original line exactly, so masking never
changes text on its own.
"""
from __future__ import annotations

import re
from typing import Callable, List, Tuple, Union

CODE = "code"
STRING = "string"
COMMENT = "comment"
DATA = "data"

Segment = Tuple[str, str]          # (kind, text)
Replacement = Union[str, Callable[[re.Match[str]], str]]

_IDENT_CHARS = "_$%&!#@."


def _keyword_at(line: str, i: int, word: str) -> bool:
    """True when *word* (case-insensitive) starts at *i* as a whole word."""
    end = i + len(word)
    if line[i:end].upper() != word:
        return False
    return end >= len(line) or not (line[end].isalnum() or line[end] in _IDENT_CHARS)


def split_segments(line: str) -> List[Segment]:
    """Return the ``(kind, text)`` segments of a single source line."""
    segments: List[Segment] = []
    buf: List[str] = []
    n = len(line)
    i = 0
    statement_start = True
    first_token = True

    def flush() -> None:
        if buf:
            segments.append((CODE, "".join(buf)))
            buf.clear()

    while i < n:
        c = line[i]

        if c == '"':
            flush()
            end = line.find('"', i + 1)
            end = n if end == -1 else end + 1
            segments.append((STRING, line[i:end]))
            i = end
            statement_start = False
            first_token = False
            continue

        if c == "'":
            flush()
            segments.append((COMMENT, line[i:]))
            break

        if statement_start and _keyword_at(line, i, "REM"):
            flush()
            segments.append((COMMENT, line[i:]))
            break

        if statement_start and _keyword_at(line, i, "DATA"):
            buf.append(line[i:i + 4])
            flush()
            j = i + 4
            quoted = False
            while j < n and (quoted or line[j] != ":"):
                if line[j] == '"':
                    quoted = not quoted
                j += 1
            if j > i + 4:
                segments.append((DATA, line[i + 4:j]))
            i = j
            statement_start = False
            first_token = False
            continue

        if c == ":":
            buf.append(c)
            i += 1
            statement_start = True
            first_token = False
            continue

        if c.isspace():
            buf.append(c)
            i += 1
            continue

        if first_token and c.isdigit():
            # Leading line number: the statement starts after it.
            j = i
            while j < n and line[j].isdigit():
                j += 1
            buf.append(line[i:j])
            i = j
            first_token = False
            continue

        # Ordinary code token: consume the whole word at once.
        j = i + 1
        if c.isalnum() or c == "_":
            while j < n and (line[j].isalnum() or line[j] in _IDENT_CHARS):
                j += 1
        token = line[i:j]
        buf.append(token)
        i = j
        # THEN / ELSE open a new statement within a single-line IF.
        statement_start = token.upper() in ("THEN", "ELSE")
        first_token = False

    flush()
    return segments


def code_only(line: str) -> str:
    """
    The code of *line* with string literals collapsed to ``""`` and comments /
    DATA operands dropped.  Useful for shape checks (colons, keywords).
    """
    parts: List[str] = []
    for kind, text in split_segments(line):
        if kind == CODE:
            parts.append(text)
        elif kind == STRING:
            parts.append('""')
    return "".join(parts)


def split_comment(line: str) -> Tuple[str, str]:
    """``(statement text, trailing comment)`` – string literals stay in the first part."""
    head: List[str] = []
    for kind, text in split_segments(line):
        if kind == COMMENT:
            return "".join(head), text
        head.append(text)
    return "".join(head), ""


def is_blank_or_comment(line: str) -> bool:
    return not code_only(line).strip()


def sub_code(
    pattern: re.Pattern[str],
    repl: Replacement,
    text: str,
) -> Tuple[str, int]:
    """
    ``re.subn`` restricted to the code segments of *text*.

    Only replacements that actually change the matched text are counted, so
    rewriting ``Print`` to ``Print`` reports zero substitutions.
    """
    changed = 0

    def _replace(m: re.Match[str]) -> str:
        nonlocal changed
        new = repl(m) if callable(repl) else m.expand(repl)
        if new != m.group(0):
            changed += 1
        return new

    out_lines: List[str] = []
    for line in text.split("\n"):
        pieces = [
            pattern.sub(_replace, seg) if kind == CODE else seg
            for kind, seg in split_segments(line)
        ]
        out_lines.append("".join(pieces))
    return "\n".join(out_lines), changed


def uses_keyword(text: str, keywords) -> bool:
    """True when any of *keywords* appears as a word in the code of *text*."""
    patterns = [word_pattern(k) for k in keywords]
    for line in text.split("\n"):
        code = code_only(line)
        if any(p.search(code) for p in patterns):
            return True
    return False


def word_pattern(word: str) -> re.Pattern[str]:
    """
    Case-insensitive whole-word regex for a BASIC keyword.

    Spaces inside *word* match any run of blanks; ``$`` is treated as part of
    the word so ``INPUT`` never matches the ``INPUT$`` function.
    """
    body = r"[ \t]+".join(re.escape(part) for part in word.split())
    return re.compile(rf"(?<![\w$]){body}(?![\w$])", re.IGNORECASE)
