"""Constraint policies - the style budget applied by every validator.

Each policy is an immutable value passed explicitly into the validators, so
callers with different budgets (presentation archetypes, user "lenses") can
validate side by side in one process:

- DensityLimits / DENSITY_LIMITS: per-slide caps on bullets, words, rows
- TypographyPolicy: font whitelist/blacklist, size minimums, deck font cap
- ContrastPolicy: WCAG AA contrast requirements
- LayoutPolicy: column, font-size, color and overlay caps
- ConstraintPolicy: all of the above plus named density lenses
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .models import DensityLimits


# ---------------------------------------------------------------------------
# Density
# ---------------------------------------------------------------------------

DENSITY_LIMITS = DensityLimits(
    max_bullets_per_slide=5,
    max_table_rows=5,
    max_words_per_slide=80,
    max_concepts_per_slide=1,
    max_nested_list_depth=1,
)

# Per-bullet cap is fixed, not part of DensityLimits.
MAX_WORDS_PER_BULLET = 15

# Structurer split thresholds, independent of any caller's DensityLimits.
STRUCTURER_MAX_WORDS = 80
STRUCTURER_MAX_BULLETS = 5


# ---------------------------------------------------------------------------
# Typography
# ---------------------------------------------------------------------------

ALLOWED_FONTS = (
    "Inter",
    "Roboto",
    "Open Sans",
    "Montserrat",
    "Poppins",
    "Lato",
    "Source Sans Pro",
    "Nunito Sans",
    "Work Sans",
    "DM Sans",
    "Georgia",
    "Arial",
    "Source Serif Pro",
    "Playfair Display",
    "Raleway",
    "Helvetica",
    "Garamond",
    "Libre Baskerville",
)

BANNED_FONTS = (
    "Comic Sans MS",
    "Comic Sans",
    "Papyrus",
    "Bradley Hand",
    "Curlz MT",
    "Jokerman",
    "Impact",
    "Bleeding Cowboys",
    "Courier New",
)

FONT_SIZE_MINIMUMS = MappingProxyType({
    "heading": 28,
    "subheading": 22,
    "body": 24,
    "caption": 14,
})


@dataclass(frozen=True)
class TypographyPolicy:
    allowed_fonts: tuple[str, ...] = ALLOWED_FONTS
    banned_fonts: tuple[str, ...] = BANNED_FONTS
    size_minimums: Mapping[str, float] = field(default_factory=lambda: FONT_SIZE_MINIMUMS)
    max_fonts_per_deck: int = 2
    fallback_font: str = "Inter"

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_fonts", tuple(self.allowed_fonts))
        object.__setattr__(self, "banned_fonts", tuple(self.banned_fonts))
        object.__setattr__(self, "size_minimums", MappingProxyType(dict(self.size_minimums)))

    def to_dict(self) -> dict:
        return {
            "allowed_fonts": list(self.allowed_fonts),
            "banned_fonts": list(self.banned_fonts),
            "size_minimums": dict(self.size_minimums),
            "max_fonts_per_deck": self.max_fonts_per_deck,
            "fallback_font": self.fallback_font,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "TypographyPolicy":
        return cls(
            allowed_fonts=tuple(d.get("allowed_fonts", ALLOWED_FONTS)),
            banned_fonts=tuple(d.get("banned_fonts", BANNED_FONTS)),
            size_minimums=d.get("size_minimums", FONT_SIZE_MINIMUMS),
            max_fonts_per_deck=d.get("max_fonts_per_deck", 2),
            fallback_font=d.get("fallback_font", "Inter"),
        )


# ---------------------------------------------------------------------------
# Color
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ContrastPolicy:
    """WCAG AA: 4.5:1 for body text, 3:1 for large text."""
    normal_text_ratio: float = 4.5
    large_text_ratio: float = 3.0
    large_text_min_pt: float = 18.0
    large_bold_text_min_pt: float = 14.0
    dark_background_luminance: float = 0.18

    def required_ratio(self, large_text: bool) -> float:
        return self.large_text_ratio if large_text else self.normal_text_ratio

    def to_dict(self) -> dict:
        return {
            "normal_text_ratio": self.normal_text_ratio,
            "large_text_ratio": self.large_text_ratio,
            "large_text_min_pt": self.large_text_min_pt,
            "large_bold_text_min_pt": self.large_bold_text_min_pt,
            "dark_background_luminance": self.dark_background_luminance,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "ContrastPolicy":
        return cls(
            normal_text_ratio=d.get("normal_text_ratio", 4.5),
            large_text_ratio=d.get("large_text_ratio", 3.0),
            large_text_min_pt=d.get("large_text_min_pt", 18.0),
            large_bold_text_min_pt=d.get("large_bold_text_min_pt", 14.0),
            dark_background_luminance=d.get("dark_background_luminance", 0.18),
        )


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LayoutPolicy:
    max_columns: int = 2
    max_font_sizes: int = 3
    max_distinct_colors: int = 3
    min_overlay_opacity: float = 0.3
    neutral_channel_spread: int = 30    # Neutral if all RGB channels within this

    def to_dict(self) -> dict:
        return {
            "max_columns": self.max_columns,
            "max_font_sizes": self.max_font_sizes,
            "max_distinct_colors": self.max_distinct_colors,
            "min_overlay_opacity": self.min_overlay_opacity,
            "neutral_channel_spread": self.neutral_channel_spread,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "LayoutPolicy":
        return cls(
            max_columns=d.get("max_columns", 2),
            max_font_sizes=d.get("max_font_sizes", 3),
            max_distinct_colors=d.get("max_distinct_colors", 3),
            min_overlay_opacity=d.get("min_overlay_opacity", 0.3),
            neutral_channel_spread=d.get("neutral_channel_spread", 30),
        )


TYPOGRAPHY_POLICY = TypographyPolicy()
CONTRAST_POLICY = ContrastPolicy()
LAYOUT_POLICY = LayoutPolicy()


# ---------------------------------------------------------------------------
# ConstraintPolicy — top-level container
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConstraintPolicy:
    """Complete style budget for one caller.

    ``lenses`` are named density budgets (e.g. "pitch", "workshop") that a
    caller can select per deck without touching the default ``density``.
    """
    density: DensityLimits = DENSITY_LIMITS
    lenses: Mapping[str, DensityLimits] = field(default_factory=dict)
    typography: TypographyPolicy = TYPOGRAPHY_POLICY
    contrast: ContrastPolicy = CONTRAST_POLICY
    layout: LayoutPolicy = LAYOUT_POLICY

    def __post_init__(self) -> None:
        object.__setattr__(self, "lenses", MappingProxyType(dict(self.lenses)))

    def limits_for(self, lens: str | None = None) -> DensityLimits:
        """Density limits for a named lens, or the default budget."""
        if lens is None:
            return self.density
        if lens not in self.lenses:
            raise KeyError(f"Unknown density lens '{lens}'")
        return self.lenses[lens]

    def to_dict(self) -> dict:
        d: dict[str, Any] = {"density": self.density.to_dict()}
        if self.lenses:
            d["lenses"] = {name: limits.to_dict() for name, limits in self.lenses.items()}
        d["typography"] = self.typography.to_dict()
        d["contrast"] = self.contrast.to_dict()
        d["layout"] = self.layout.to_dict()
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "ConstraintPolicy":
        density = DensityLimits.from_dict(d.get("density") or {}, DENSITY_LIMITS)
        return cls(
            density=density,
            # Lenses inherit any limit they do not set from the default budget
            lenses={
                name: DensityLimits.from_dict(limits or {}, density)
                for name, limits in (d.get("lenses") or {}).items()
            },
            typography=TypographyPolicy.from_dict(d.get("typography") or {}),
            contrast=ContrastPolicy.from_dict(d.get("contrast") or {}),
            layout=LayoutPolicy.from_dict(d.get("layout") or {}),
        )


DEFAULT_POLICY = ConstraintPolicy()
