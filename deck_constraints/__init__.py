"""Deck Constraints — design rule validation and auto-remediation for slide decks.

Validates slide content and themes against color, typography, density and
layout rules, repairs what can be repaired safely, and structures parsed
content into archetype-shaped decks.

Usage::

    from deck_constraints import SlideContent, DENSITY_LIMITS, validate

    result = validate(SlideContent("Key Findings", body), DENSITY_LIMITS)
    if not result.valid:
        print(result.violations)
"""

from .processor import (
    enforce_slide_range,
    parse_content,
    structure_slides,
)
from .qa import (
    auto_fix,
    ensure_contrast,
    suggest_split,
    validate,
    validate_deck_fonts,
    validate_font_choice,
    validate_font_pairing,
    validate_font_sizes,
    validate_palette,
    validate_slide_content,
)
from .schema import (
    DEFAULT_POLICY,
    DENSITY_LIMITS,
    ConstraintPolicy,
    DensityLimits,
    FontSizes,
    LayoutConfig,
    MalformedColor,
    ParsedContent,
    ParsedSection,
    PresentationType,
    SectionType,
    SlideContent,
    SlideDefinition,
    SlidePalette,
    SlideTheme,
    SlideType,
    load_policy,
    save_policy,
)

__version__ = "0.1.0"

__all__ = [
    # Validation
    "validate",
    "validate_palette",
    "validate_font_pairing",
    "validate_font_sizes",
    "validate_font_choice",
    "validate_deck_fonts",
    "validate_slide_content",
    # Repair
    "auto_fix",
    "ensure_contrast",
    "suggest_split",
    # Structuring
    "enforce_slide_range",
    "parse_content",
    "structure_slides",
    # Models
    "ConstraintPolicy",
    "DensityLimits",
    "FontSizes",
    "LayoutConfig",
    "MalformedColor",
    "ParsedContent",
    "ParsedSection",
    "PresentationType",
    "SectionType",
    "SlideContent",
    "SlideDefinition",
    "SlidePalette",
    "SlideTheme",
    "SlideType",
    # Policy
    "DEFAULT_POLICY",
    "DENSITY_LIMITS",
    "load_policy",
    "save_policy",
]
