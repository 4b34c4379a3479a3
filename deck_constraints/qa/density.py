"""Content density validation — bullets, words, table rows, and nesting.

Checks a slide's text against an explicit DensityLimits budget and explains
every breach with a paired, actionable suggestion. ``suggest_split`` turns an
overcrowded slide into several slides that fit the same budget.

Usage::

    from deck_constraints.qa.density import validate_slide_content
    from deck_constraints.schema.policy import DENSITY_LIMITS

    result = validate_slide_content(content, DENSITY_LIMITS)
    for violation, suggestion in zip(result.violations, result.suggestions):
        ...
"""

import math
from dataclasses import dataclass, field

import structlog

from deck_constraints.schema.models import DensityLimits, SlideContent
from deck_constraints.schema.policy import MAX_WORDS_PER_BULLET

from .markup import (
    LineKind,
    bullet_tokens,
    count_table_lines,
    count_words,
    max_nesting_depth,
    split_sentences,
    tokenize,
)

logger = structlog.get_logger(__name__)

BULLET_PREVIEW_CHARS = 40


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class DensityValidationResult:
    """Violations and suggestions, paired by position."""
    valid: bool
    violations: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


@dataclass
class SplitResult:
    should_split: bool
    new_slides: list[SlideContent] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Counters
# ---------------------------------------------------------------------------

def count_slide_words(content: SlideContent) -> int:
    """Slide-level word count: title and body together."""
    return count_words(content.title) + count_words(content.body)


def count_table_rows(content: SlideContent) -> tuple[bool, int]:
    """Return ``(has_table, data_rows)`` for a slide.

    Explicit ``has_table``/``table_rows`` win over detection. Detected rows
    exclude one header row.
    """
    detected = count_table_lines(content.body)
    rows = content.table_rows
    if rows is None:
        rows = detected - 1 if detected > 0 else 0
    has_table = content.has_table
    if has_table is None:
        has_table = detected > 0
    return has_table, rows


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_slide_content(content: SlideContent,
                           limits: DensityLimits) -> DensityValidationResult:
    """Validate slide content against a density budget.

    Breaches are reported in a fixed order: bullet count, each over-long
    bullet, total words, table rows, nesting depth.
    """
    violations: list[str] = []
    suggestions: list[str] = []

    def flag(violation: str, suggestion: str) -> None:
        violations.append(violation)
        suggestions.append(suggestion)

    bullets = bullet_tokens(content.body)
    max_bullets = limits.max_bullets_per_slide
    if len(bullets) > max_bullets:
        flag(
            f"Slide has {len(bullets)} bullets (max {max_bullets}).",
            f"Split into {math.ceil(len(bullets) / max_bullets)} slides with "
            f"{max_bullets} bullets each, or consolidate related points.",
        )

    for bullet in bullets:
        words = count_words(bullet.text)
        if words > MAX_WORDS_PER_BULLET:
            flag(
                f"Bullet has {words} words (max {MAX_WORDS_PER_BULLET}): "
                f"\"{bullet.text[:BULLET_PREVIEW_CHARS]}...\"",
                "Shorten bullet to a concise phrase.",
            )

    total_words = count_slide_words(content)
    if total_words > limits.max_words_per_slide:
        flag(
            f"Slide has {total_words} words (max {limits.max_words_per_slide}).",
            "Reduce text to key phrases. Move detailed content to speaker "
            "notes or a handout.",
        )

    has_table, table_rows = count_table_rows(content)
    if has_table and table_rows > limits.max_table_rows:
        flag(
            f"Table has {table_rows} rows (max {limits.max_table_rows}).",
            f"Split the table across multiple slides, or show only the top "
            f"{limits.max_table_rows} rows with a \"full data in appendix\" note.",
        )

    depth = max_nesting_depth(content.body)
    if depth > limits.max_nested_list_depth:
        flag(
            f"List nesting depth is {depth} (max {limits.max_nested_list_depth}).",
            "Flatten nested lists. Promote sub-items to their own top-level "
            "bullets or move them to a separate slide.",
        )

    return DensityValidationResult(
        valid=not violations,
        violations=violations,
        suggestions=suggestions,
    )


# ---------------------------------------------------------------------------
# Splitting
# ---------------------------------------------------------------------------

def chunk(items: list, size: int) -> list[list]:
    return [items[i:i + size] for i in range(0, len(items), size)]


def suggest_split(content: SlideContent, limits: DensityLimits) -> SplitResult:
    """Split an overcrowded slide into slides that fit ``limits``.

    Bullet slides are chunked ``max_bullets_per_slide`` at a time, with any
    non-bullet lines kept as a preamble on the first chunk. Prose is cut in
    half at a sentence boundary. A single sentence cannot be split, so it is
    returned as-is even when it is over the word limit. The same holds for a
    bullet slide whose bullets already fit in one chunk.
    """
    unsplit = SplitResult(should_split=False, new_slides=[content])

    tokens = tokenize(content.body)
    bullet_lines = [t.line for t in tokens if t.kind is LineKind.BULLET]
    other_lines = [t.line for t in tokens
                   if t.kind not in (LineKind.BULLET, LineKind.BLANK)]

    too_many_bullets = len(bullet_lines) > limits.max_bullets_per_slide
    too_many_words = count_slide_words(content) > limits.max_words_per_slide
    if not too_many_bullets and not too_many_words:
        return unsplit

    if bullet_lines:
        chunks = chunk(bullet_lines, limits.max_bullets_per_slide)
        if len(chunks) == 1:
            # Bullets already fit; the word overflow lives in the prose lines.
            logger.debug("slide_split_impossible", title=content.title,
                         words=count_slide_words(content))
            return unsplit
        preamble = "\n".join(other_lines) + "\n" if other_lines else ""
        new_slides = []
        for index, lines in enumerate(chunks):
            suffix = f" ({index + 1}/{len(chunks)})"
            body = (preamble if index == 0 else "") + "\n".join(lines)
            new_slides.append(SlideContent(title=f"{content.title}{suffix}", body=body))
        logger.debug("slide_split", title=content.title, mode="bullets",
                     slides=len(new_slides))
        return SplitResult(should_split=True, new_slides=new_slides)

    sentences = split_sentences(content.body)
    if len(sentences) <= 1:
        logger.debug("slide_split_impossible", title=content.title,
                     words=count_slide_words(content))
        return unsplit

    mid = math.ceil(len(sentences) / 2)
    logger.debug("slide_split", title=content.title, mode="sentences", slides=2)
    return SplitResult(
        should_split=True,
        new_slides=[
            SlideContent(title=f"{content.title} (1/2)", body=" ".join(sentences[:mid])),
            SlideContent(title=f"{content.title} (2/2)", body=" ".join(sentences[mid:])),
        ],
    )
