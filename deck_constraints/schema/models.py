"""Constraint engine models - the contract between validators, structurer, and callers.

Defines the typed values flowing through the engine: slide content handed in
by the content pipeline, the palette and fonts handed in by the theme, the
density limits that make up a style budget, and the slide definitions the
structurer hands back to persistence/export.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


HEX_COLOR_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6})$")


class MalformedColor(ValueError):
    """Raised when a color string is not a 6-digit hex value."""

    def __init__(self, value: Any, role: str | None = None) -> None:
        self.value = value
        self.role = role
        where = f" for role '{role}'" if role else ""
        super().__init__(f"Invalid hex color{where}: {value!r}")


def normalize_hex(value: Any, role: str | None = None) -> str:
    """Return ``value`` as ``#RRGGBB`` digits or raise MalformedColor."""
    if not isinstance(value, str):
        raise MalformedColor(value, role)
    match = HEX_COLOR_PATTERN.match(value.strip())
    if not match:
        raise MalformedColor(value, role)
    return f"#{match.group(1)}"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SlideType(Enum):
    """Categorises a slide's role in the deck."""
    TITLE = "TITLE"
    PROBLEM = "PROBLEM"
    SOLUTION = "SOLUTION"
    ARCHITECTURE = "ARCHITECTURE"
    PROCESS = "PROCESS"
    COMPARISON = "COMPARISON"
    DATA_METRICS = "DATA_METRICS"
    CTA = "CTA"                          # Closing call to action
    CONTENT = "CONTENT"
    QUOTE = "QUOTE"
    VISUAL_HUMOR = "VISUAL_HUMOR"        # Image-forward, never split
    OUTLINE = "OUTLINE"
    TEAM = "TEAM"
    TIMELINE = "TIMELINE"
    SECTION_DIVIDER = "SECTION_DIVIDER"
    METRICS_HIGHLIGHT = "METRICS_HIGHLIGHT"
    FEATURE_GRID = "FEATURE_GRID"
    PRODUCT_SHOWCASE = "PRODUCT_SHOWCASE"
    LOGO_WALL = "LOGO_WALL"
    MARKET_SIZING = "MARKET_SIZING"


class SectionType(Enum):
    """Classification of a parsed content section."""
    INTRODUCTION = "introduction"
    PROBLEM = "problem"
    SOLUTION = "solution"
    DATA = "data"
    QUOTE = "quote"
    PROCESS = "process"
    COMPARISON = "comparison"
    CONCLUSION = "conclusion"
    VISUAL_HUMOR = "visual_humor"

    @property
    def slide_type(self) -> SlideType:
        return _SECTION_SLIDE_TYPES[self]

    @property
    def image_hint(self) -> str:
        return _SECTION_IMAGE_HINTS[self]


_SECTION_SLIDE_TYPES: dict[SectionType, SlideType] = {
    SectionType.INTRODUCTION: SlideType.CONTENT,
    SectionType.PROBLEM: SlideType.PROBLEM,
    SectionType.SOLUTION: SlideType.SOLUTION,
    SectionType.DATA: SlideType.DATA_METRICS,
    SectionType.QUOTE: SlideType.QUOTE,
    SectionType.PROCESS: SlideType.PROCESS,
    SectionType.COMPARISON: SlideType.COMPARISON,
    SectionType.CONCLUSION: SlideType.CTA,
    SectionType.VISUAL_HUMOR: SlideType.VISUAL_HUMOR,
}

_SECTION_IMAGE_HINTS: dict[SectionType, str] = {
    SectionType.INTRODUCTION: "Professional opening visual, abstract shapes, clean design",
    SectionType.PROBLEM: "Visual metaphor for challenge or obstacle, dramatic lighting",
    SectionType.SOLUTION: "Innovation and technology visual, bright and optimistic",
    SectionType.DATA: "Data visualization, charts, graphs, dashboard aesthetic",
    SectionType.QUOTE: "Inspirational quote background, subtle texture, elegant typography space",
    SectionType.PROCESS: "Workflow diagram, connected steps, process flow visualization",
    SectionType.COMPARISON: "Side-by-side comparison visual, split design, versus layout",
    SectionType.CONCLUSION: "Closing visual, forward-looking, achievement or celebration",
    SectionType.VISUAL_HUMOR: "Full-bleed humorous image, light-hearted, minimal text",
}


class PresentationType(Enum):
    """Slide archetype; each carries its target slide-count range."""
    STANDARD = "STANDARD"
    VC_PITCH = "VC_PITCH"
    TECHNICAL = "TECHNICAL"
    EXECUTIVE = "EXECUTIVE"

    @property
    def slide_range(self) -> tuple[int, int]:
        return _SLIDE_RANGES[self]

    @classmethod
    def parse(cls, value: "str | PresentationType") -> "PresentationType":
        """Coerce a tag to a PresentationType; unknown tags mean STANDARD."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.STANDARD


_SLIDE_RANGES: dict[PresentationType, tuple[int, int]] = {
    PresentationType.STANDARD: (8, 16),
    PresentationType.VC_PITCH: (10, 14),
    PresentationType.TECHNICAL: (12, 18),
    PresentationType.EXECUTIVE: (8, 12),
}


# ---------------------------------------------------------------------------
# Content values
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SlideContent:
    """Text of a single slide as produced by the content pipeline.

    ``has_table`` and ``table_rows`` override table auto-detection when
    supplied.
    """
    title: str
    body: str
    has_table: bool | None = None
    table_rows: int | None = None

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"title": self.title, "body": self.body}
        if self.has_table is not None:
            d["has_table"] = self.has_table
        if self.table_rows is not None:
            d["table_rows"] = self.table_rows
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "SlideContent":
        return cls(
            title=d.get("title", ""),
            body=d.get("body", ""),
            has_table=d.get("has_table"),
            table_rows=d.get("table_rows"),
        )


@dataclass(frozen=True)
class DensityLimits:
    """Per-slide style budget. All five limits must be positive integers."""
    max_bullets_per_slide: int
    max_table_rows: int
    max_words_per_slide: int
    max_concepts_per_slide: int
    max_nested_list_depth: int

    def __post_init__(self) -> None:
        for name in self.__dataclass_fields__:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(
                    f"DensityLimits.{name} must be a positive integer, got {value!r}"
                )

    def to_dict(self) -> dict:
        return {
            "max_bullets_per_slide": self.max_bullets_per_slide,
            "max_table_rows": self.max_table_rows,
            "max_words_per_slide": self.max_words_per_slide,
            "max_concepts_per_slide": self.max_concepts_per_slide,
            "max_nested_list_depth": self.max_nested_list_depth,
        }

    @classmethod
    def from_dict(cls, d: dict, defaults: "DensityLimits | None" = None) -> "DensityLimits":
        base = defaults.to_dict() if defaults else {}
        merged = {**base, **d}
        return cls(
            max_bullets_per_slide=merged["max_bullets_per_slide"],
            max_table_rows=merged["max_table_rows"],
            max_words_per_slide=merged["max_words_per_slide"],
            max_concepts_per_slide=merged["max_concepts_per_slide"],
            max_nested_list_depth=merged["max_nested_list_depth"],
        )


# ---------------------------------------------------------------------------
# Theme values
# ---------------------------------------------------------------------------

PALETTE_ROLES = ("primary", "secondary", "accent", "background", "text")


@dataclass(frozen=True)
class SlidePalette:
    """Five named color roles, each a ``#RRGGBB`` string.

    Construction fails with MalformedColor if any role is not valid hex.
    """
    primary: str
    secondary: str
    accent: str
    background: str
    text: str

    def __post_init__(self) -> None:
        for role in PALETTE_ROLES:
            object.__setattr__(self, role, normalize_hex(getattr(self, role), role))

    def roles(self) -> Iterator[tuple[str, str]]:
        for role in PALETTE_ROLES:
            yield role, getattr(self, role)

    def to_dict(self) -> dict:
        return dict(self.roles())

    @classmethod
    def from_dict(cls, d: dict) -> "SlidePalette":
        missing = [r for r in PALETTE_ROLES if r not in d]
        if missing:
            raise MalformedColor(None, missing[0])
        return cls(**{r: d[r] for r in PALETTE_ROLES})


@dataclass(frozen=True)
class FontSizes:
    """Point sizes per typographic role; absent roles are not checked."""
    heading: float | None = None
    subheading: float | None = None
    body: float | None = None
    caption: float | None = None

    def items(self) -> Iterator[tuple[str, float]]:
        for role in ("heading", "subheading", "body", "caption"):
            size = getattr(self, role)
            if size is not None:
                yield role, size


@dataclass(frozen=True)
class LayoutConfig:
    """Layout facts about a rendered slide, all optional."""
    columns: int | None = None
    font_sizes: tuple[float, ...] | None = None
    distinct_colors: tuple[str, ...] | None = None
    has_full_bleed_image: bool = False
    overlay_opacity: float | None = None


@dataclass(frozen=True)
class SlideTheme:
    """Palette and font role assignment supplied by the theme collaborator."""
    palette: SlidePalette
    heading_font: str
    body_font: str
    sizes: FontSizes | None = None
    layout: LayoutConfig | None = None


# ---------------------------------------------------------------------------
# Structuring values
# ---------------------------------------------------------------------------

@dataclass
class ParsedSection:
    """One section of parsed source content."""
    heading: str
    body: str
    type: SectionType = SectionType.INTRODUCTION
    bullet_points: list[str] = field(default_factory=list)
    statistics: list[str] = field(default_factory=list)
    quotes: list[str] = field(default_factory=list)


@dataclass
class ContentMetadata:
    word_count: int = 0
    section_count: int = 0
    has_statistics: bool = False
    has_quotes: bool = False


@dataclass
class ParsedContent:
    """A titled, ordered list of sections ready for structuring."""
    title: str
    sections: list[ParsedSection] = field(default_factory=list)
    metadata: ContentMetadata = field(default_factory=ContentMetadata)


@dataclass
class SlideDefinition:
    """A structured slide handed to persistence and export."""
    slide_number: int                    # 1-based, contiguous within a deck
    title: str
    body: str
    speaker_notes: str
    slide_type: SlideType
    image_prompt_hint: str

    def to_dict(self) -> dict:
        return {
            "slide_number": self.slide_number,
            "title": self.title,
            "body": self.body,
            "speaker_notes": self.speaker_notes,
            "slide_type": self.slide_type.value,
            "image_prompt_hint": self.image_prompt_hint,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "SlideDefinition":
        return cls(
            slide_number=d["slide_number"],
            title=d["title"],
            body=d.get("body", ""),
            speaker_notes=d.get("speaker_notes", ""),
            slide_type=SlideType(d.get("slide_type", "CONTENT")),
            image_prompt_hint=d.get("image_prompt_hint", ""),
        )
