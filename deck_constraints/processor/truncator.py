"""Density truncator — trims generated slide bodies to hard limits.

Bullets and table data rows beyond the limits are moved out of the body into
an overflow string, which callers append to the speaker notes so nothing is
lost. Table header and separator rows are always kept. Prose is never cut
mid-sentence; an over-long body is only flagged.
"""

import dataclasses
from dataclasses import dataclass

import structlog

from deck_constraints.qa.markup import LineKind, count_words, tokenize
from deck_constraints.schema.models import SlideDefinition

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TruncationLimits:
    max_bullets: int = 4
    max_words: int = 50
    max_table_rows: int = 4


@dataclass
class TruncationResult:
    body: str
    overflow: str
    was_truncated: bool


def _walk(body: str, limits: TruncationLimits):
    """Yield ``(token, kept)`` for every line of ``body``."""
    bullets = 0
    table_rows = 0
    in_table = False
    for token in tokenize(body):
        if token.kind is LineKind.TABLE_SEPARATOR:
            in_table = True
            yield token, True
        elif token.kind is LineKind.TABLE_ROW:
            if not in_table:
                # First row of a table is its header
                in_table = True
                yield token, True
                continue
            table_rows += 1
            yield token, table_rows <= limits.max_table_rows
        elif token.kind is LineKind.BULLET:
            in_table = False
            bullets += 1
            yield token, bullets <= limits.max_bullets
        else:
            in_table = False
            yield token, True


def truncate_to_limits(body: str,
                       limits: TruncationLimits | None = None) -> TruncationResult:
    """Split ``body`` into the part that fits ``limits`` and the overflow."""
    limits = limits or TruncationLimits()
    kept: list[str] = []
    overflow: list[str] = []
    for token, keep in _walk(body, limits):
        if keep:
            kept.append(token.line)
        else:
            overflow.append(token.text if token.kind is LineKind.BULLET
                            else token.line.strip())

    result_body = "\n".join(kept)
    was_truncated = bool(overflow) or count_words(result_body) > limits.max_words
    return TruncationResult(
        body=result_body,
        overflow="Additional details: " + "; ".join(overflow) if overflow else "",
        was_truncated=was_truncated,
    )


def passes_density_check(body: str, limits: TruncationLimits | None = None) -> bool:
    """True when ``body`` needs no truncation at all."""
    limits = limits or TruncationLimits()
    if any(not keep for _, keep in _walk(body, limits)):
        return False
    return count_words(body) <= limits.max_words


def truncate_slides(slides: list[SlideDefinition],
                    limits: TruncationLimits | None = None) -> list[SlideDefinition]:
    """Truncate every slide body, moving overflow into its speaker notes.

    Returns new slides; the input slides are not modified.
    """
    limits = limits or TruncationLimits()
    result = []
    for slide in slides:
        truncated = truncate_to_limits(slide.body, limits)
        if not truncated.overflow:
            result.append(slide)
            continue
        notes = "\n\n".join(n for n in (slide.speaker_notes, truncated.overflow) if n)
        result.append(dataclasses.replace(slide, body=truncated.body, speaker_notes=notes))
        logger.debug("slide_truncated", slide_number=slide.slide_number,
                     overflow=truncated.overflow)
    return result
