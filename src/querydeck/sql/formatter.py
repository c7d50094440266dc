"""Best-effort SQL beautifier.

Normalizes keyword casing and line layout with regular expressions. This is a
lexical pass, not a parser: string literals, quoted identifiers and comments are
not recognized, so keywords inside them are upper-cased too (known limitation).
"""

from __future__ import annotations

import re
from typing import Final

from querydeck.config.settings import FormattingSettings

RESERVED_WORDS: Final[tuple[str, ...]] = (
    "SELECT",
    "FROM",
    "WHERE",
    "AND",
    "OR",
    "ORDER BY",
    "GROUP BY",
    "HAVING",
    "LIMIT",
    "JOIN",
    "LEFT JOIN",
    "RIGHT JOIN",
    "INNER JOIN",
    "OUTER JOIN",
    "ON",
    "AS",
    "INSERT",
    "UPDATE",
    "DELETE",
    "CREATE",
    "ALTER",
    "DROP",
    "TABLE",
    "INDEX",
    "VIEW",
)

# Keywords that start a new line in multiline layout
MAJOR_CLAUSE_WORDS: Final[tuple[str, ...]] = (
    "SELECT",
    "FROM",
    "WHERE",
    "AND",
    "OR",
    "ORDER BY",
    "GROUP BY",
    "HAVING",
    "LIMIT",
)


def _keyword_alternation(words: tuple[str, ...]) -> str:
    # Longest first so "LEFT JOIN" wins over "JOIN"; inner spaces match any whitespace run.
    ordered = sorted(words, key=len, reverse=True)
    return "|".join(r"\s+".join(re.escape(part) for part in word.split()) for word in ordered)


_RESERVED_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(" + _keyword_alternation(RESERVED_WORDS) + r")\b",
    re.IGNORECASE,
)

# Case-sensitive on purpose: runs after keywords were upper-cased and whitespace collapsed.
_MAJOR_CLAUSE_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"\b(" + "|".join(sorted(MAJOR_CLAUSE_WORDS, key=len, reverse=True)) + r")\b"
)

_WHITESPACE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\s+")
_PUNCTUATION_PATTERN: Final[re.Pattern[str]] = re.compile(r"\s*([(),])\s*")
_SPACE_BEFORE_CLOSE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\s+([),])")


def _canonical_keyword(match: re.Match[str]) -> str:
    return " ".join(match.group(0).split()).upper()


def uppercase_keywords(text: str) -> str:
    """Upper-case every whole-word reserved keyword, case-insensitively."""
    return _RESERVED_PATTERN.sub(_canonical_keyword, text)


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_PATTERN.sub(" ", text).strip()


def _layout_multiline(text: str) -> str:
    spaced = _PUNCTUATION_PATTERN.sub(r"\1 ", text)
    spaced = _SPACE_BEFORE_CLOSE_PATTERN.sub(r"\1", spaced)
    parts = _MAJOR_CLAUSE_PATTERN.split(spaced)

    # re.split with one capture group alternates: [lead, kw, fragment, kw, fragment, ...]
    lines: list[str] = []
    lead = parts[0].strip()
    if lead:
        lines.append(lead)
    for keyword, fragment in zip(parts[1::2], parts[2::2], strict=True):
        fragment = fragment.strip()
        lines.append(f"{keyword} {fragment}" if fragment else keyword)
    return "\n".join(lines).strip()


def format_sql(text: str, settings: FormattingSettings) -> str:
    """Format SQL text.

    Args:
        text: Query text to format. May be empty.
        settings: Layout options. Keyword casing is applied in every mode.

    Returns:
        The formatted text. Formatting it again with the same settings returns it unchanged.
    """
    formatted = collapse_whitespace(uppercase_keywords(text))
    if not settings.multiline_layout:
        return formatted
    return _layout_multiline(formatted)
