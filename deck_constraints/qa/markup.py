"""Slide markup tokenizer — classifies body lines once, for every counter.

Slide bodies are semi-structured Markdown-like text. Every density count
(bullets, words, table rows, nesting) reads the same token stream, so the
counts can never disagree about what a line is.

Usage::

    from deck_constraints.qa.markup import LineKind, tokenize

    bullets = [t for t in tokenize(body) if t.kind is LineKind.BULLET]
"""

import re
from dataclasses import dataclass
from enum import Enum


BULLET_PATTERN = re.compile(r"^(\s*)(?:([-*])|(\d+)[.)])\s")
TABLE_SEPARATOR_PATTERN = re.compile(r"^\|[\s\-|:]+\|$")
SOURCE_PATTERN = re.compile(r"^Sources?:", re.IGNORECASE)
WORD_PATTERN = re.compile(r"\w+")
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")
SPLIT_SUFFIX_PATTERN = re.compile(r"\s*\(\d+/\d+\)$")

TAB_WIDTH = 2       # A tab counts as two spaces of indent
INDENT_PER_LEVEL = 2


class LineKind(Enum):
    BULLET = "bullet"
    TABLE_ROW = "table_row"
    TABLE_SEPARATOR = "table_separator"
    BLOCKQUOTE = "blockquote"
    HEADING = "heading"
    SOURCE = "source"
    BLANK = "blank"
    TEXT = "text"


@dataclass(frozen=True)
class Token:
    """One classified body line."""
    kind: LineKind
    line: str             # The original line, untouched
    text: str             # Content with any list/quote/heading marker removed
    indent: int = 0       # Leading whitespace width (bullets only)
    numbered: bool = False

    @property
    def depth(self) -> int:
        """Nesting level of a bullet: every two columns of indent is one level."""
        return self.indent // INDENT_PER_LEVEL

    @property
    def counts_words(self) -> bool:
        """Separator rows and source citations are metadata, not content."""
        return self.kind not in (LineKind.TABLE_SEPARATOR, LineKind.SOURCE)


def classify_line(line: str) -> Token:
    """Classify a single line of slide body text."""
    stripped = line.strip()
    if not stripped:
        return Token(LineKind.BLANK, line, "")

    bullet = BULLET_PATTERN.match(line)
    if bullet:
        indent = len(bullet.group(1).replace("\t", " " * TAB_WIDTH))
        return Token(
            LineKind.BULLET, line, line[bullet.end():].strip(),
            indent=indent, numbered=bullet.group(3) is not None,
        )

    if TABLE_SEPARATOR_PATTERN.match(stripped):
        return Token(LineKind.TABLE_SEPARATOR, line, "")
    if stripped.startswith("|") and stripped.endswith("|"):
        cells = [c.strip() for c in stripped.strip("|").split("|")]
        return Token(LineKind.TABLE_ROW, line, " ".join(c for c in cells if c))
    if SOURCE_PATTERN.match(stripped):
        return Token(LineKind.SOURCE, line, stripped)
    if stripped.startswith(">"):
        return Token(LineKind.BLOCKQUOTE, line, stripped.lstrip(">").strip())
    if stripped.startswith("#"):
        return Token(LineKind.HEADING, line, stripped.lstrip("#").strip())
    return Token(LineKind.TEXT, line, stripped)


def tokenize(text: str) -> list[Token]:
    """Classify every line of ``text``."""
    return [classify_line(line) for line in text.split("\n")]


# ---------------------------------------------------------------------------
# Counters
# ---------------------------------------------------------------------------

def count_words(text: str) -> int:
    """Count content words, ignoring Markdown markup.

    Bold/italic/heading/quote markers, table pipes and other punctuation are
    not words; table separator rows and ``Sources:`` lines are skipped.
    """
    return sum(
        len(WORD_PATTERN.findall(token.text))
        for token in tokenize(text)
        if token.counts_words
    )


def count_plain_words(text: str) -> int:
    """Count word runs in ``text`` with no line-level markup handling."""
    return len(WORD_PATTERN.findall(text))


def bullet_tokens(text: str) -> list[Token]:
    return [t for t in tokenize(text) if t.kind is LineKind.BULLET]


def count_bullets(text: str) -> int:
    return len(bullet_tokens(text))


def max_nesting_depth(text: str) -> int:
    """Deepest bullet nesting level in ``text`` (0 for flat or no lists)."""
    return max((t.depth for t in bullet_tokens(text)), default=0)


def count_table_lines(text: str) -> int:
    """Pipe-delimited lines that are not separator rows, header included."""
    return sum(1 for t in tokenize(text) if t.kind is LineKind.TABLE_ROW)


def split_sentences(text: str) -> list[str]:
    """Split on ``.``/``!``/``?`` followed by whitespace, dropping empties."""
    return [s for s in SENTENCE_BOUNDARY.split(text) if s.strip()]


def strip_split_suffix(title: str) -> str:
    """Remove a trailing `` (i/n)`` added when a slide was split."""
    return SPLIT_SUFFIX_PATTERN.sub("", title)
