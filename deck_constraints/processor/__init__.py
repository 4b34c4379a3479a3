"""Content processing — parsing, slide structuring and density truncation."""

from .parser import parse_content
from .structurer import (
    SlideRangeResult,
    SlideStructurer,
    enforce_slide_range,
    fit_slide_range,
    structure_slides,
)
from .truncator import (
    TruncationLimits,
    TruncationResult,
    passes_density_check,
    truncate_slides,
    truncate_to_limits,
)

__all__ = [
    "SlideRangeResult",
    "SlideStructurer",
    "TruncationLimits",
    "TruncationResult",
    "enforce_slide_range",
    "fit_slide_range",
    "parse_content",
    "passes_density_check",
    "structure_slides",
    "truncate_slides",
    "truncate_to_limits",
]
