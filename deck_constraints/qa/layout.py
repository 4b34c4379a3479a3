"""Layout validation — columns, font-size variety, color variety, overlays."""

from dataclasses import dataclass, field

from deck_constraints.schema.models import LayoutConfig
from deck_constraints.schema.policy import LAYOUT_POLICY, LayoutPolicy

from .color import hex_to_rgb


@dataclass
class LayoutValidationResult:
    valid: bool
    violations: list[str] = field(default_factory=list)


def is_neutral(color: str, policy: LayoutPolicy = LAYOUT_POLICY) -> bool:
    """Grays, whites and blacks: every channel within the spread of the others."""
    r, g, b = hex_to_rgb(color)
    return max(abs(r - g), abs(g - b), abs(r - b)) <= policy.neutral_channel_spread


def validate_layout(layout: LayoutConfig,
                    policy: LayoutPolicy = LAYOUT_POLICY) -> LayoutValidationResult:
    violations: list[str] = []

    if layout.columns is not None and layout.columns > policy.max_columns:
        violations.append(
            f"Slide has {layout.columns} columns (max {policy.max_columns})."
        )

    if layout.font_sizes:
        unique_sizes = set(layout.font_sizes)
        if len(unique_sizes) > policy.max_font_sizes:
            violations.append(
                f"Slide uses {len(unique_sizes)} font sizes (max {policy.max_font_sizes})."
            )

    if layout.distinct_colors:
        colored = [c for c in dict.fromkeys(layout.distinct_colors)
                   if not is_neutral(c, policy)]
        if len(colored) > policy.max_distinct_colors:
            violations.append(
                f"Slide uses {len(colored)} distinct colors (max "
                f"{policy.max_distinct_colors}, excluding neutrals)."
            )

    if layout.has_full_bleed_image:
        opacity = layout.overlay_opacity
        if opacity is None or opacity < policy.min_overlay_opacity:
            current = f"{round(opacity * 100)}%" if opacity is not None else "none"
            violations.append(
                f"Full-bleed image with text requires at least "
                f"{round(policy.min_overlay_opacity * 100)}% overlay (current: {current})."
            )

    return LayoutValidationResult(valid=not violations, violations=violations)
