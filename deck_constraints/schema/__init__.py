"""Schema package — typed models and policies shared by every validator.

- models.py: Core dataclasses and enums (SlideContent, SlidePalette, SlideDefinition, etc.)
- policy.py: Density limits, font whitelist, contrast and layout policies
- loader.py: YAML serialization/deserialization of a ConstraintPolicy
"""

from .loader import load_policy, save_policy
from .models import (
    ContentMetadata,
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
    normalize_hex,
)
from .policy import (
    ALLOWED_FONTS,
    BANNED_FONTS,
    DEFAULT_POLICY,
    DENSITY_LIMITS,
    FONT_SIZE_MINIMUMS,
    ConstraintPolicy,
    ContrastPolicy,
    LayoutPolicy,
    TypographyPolicy,
)

__all__ = [
    # Models
    "ContentMetadata",
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
    "normalize_hex",
    # Policy
    "ALLOWED_FONTS",
    "BANNED_FONTS",
    "DEFAULT_POLICY",
    "DENSITY_LIMITS",
    "FONT_SIZE_MINIMUMS",
    "ConstraintPolicy",
    "ContrastPolicy",
    "LayoutPolicy",
    "TypographyPolicy",
    # Loader
    "load_policy",
    "save_policy",
]
