"""Design constraint validators.

Checks slide content and themes against color, contrast, typography,
density and layout rules, and applies the safe automatic repairs.
"""

from .color import (
    contrast_ratio,
    delta_e,
    ensure_contrast,
    repair_contrast,
    validate_palette,
)
from .density import suggest_split, validate_slide_content
from .layout import validate_layout
from .typography import (
    validate_deck_fonts,
    validate_font_choice,
    validate_font_pairing,
    validate_font_sizes,
)
from .validator import (
    ConstraintsValidator,
    DesignReport,
    Issue,
    auto_fix,
    validate,
    validate_slide_design,
    validate_theme,
)

__all__ = [
    "ConstraintsValidator",
    "DesignReport",
    "Issue",
    "auto_fix",
    "contrast_ratio",
    "delta_e",
    "ensure_contrast",
    "repair_contrast",
    "suggest_split",
    "validate",
    "validate_deck_fonts",
    "validate_font_choice",
    "validate_font_pairing",
    "validate_font_sizes",
    "validate_layout",
    "validate_palette",
    "validate_slide_content",
    "validate_slide_design",
    "validate_theme",
]
