"""Color validation — color spaces, perceptual distance, WCAG contrast.

Implements the palette rules for generated decks:
- Conversions: hex <-> RGB <-> HSL, RGB -> CIE Lab (D65)
- Delta-E (CIE76): Euclidean distance in Lab
- WCAG 2.x relative luminance and contrast ratio (1:1 to 21:1)
- Forbidden pairs: hue/saturation/lightness rules for clashing colors
- Contrast repair: step a foreground color toward white or black until it
  reads against its background, within a fixed step budget

Malformed hex input raises MalformedColor; every other outcome is a value.
"""

import math
from dataclasses import dataclass, field
from typing import Iterator, Sequence

import structlog
from pptx.dml.color import RGBColor

from deck_constraints.schema.models import SlidePalette, normalize_hex
from deck_constraints.schema.policy import CONTRAST_POLICY, ContrastPolicy

logger = structlog.get_logger(__name__)

BLACK = "#000000"
WHITE = "#FFFFFF"

# Contrast repair moves 5% of the remaining distance per step, 20 steps max.
REPAIR_STEP = 0.05
REPAIR_MAX_STEPS = 20

# D65 reference white for XYZ -> Lab
_WHITE_X, _WHITE_Y, _WHITE_Z = 0.95047, 1.00000, 1.08883
_LAB_EPSILON = 0.008856
_LAB_KAPPA = 903.3


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HslColor:
    h: float    # 0-360
    s: float    # 0-100
    l: float    # 0-100


@dataclass(frozen=True)
class LabColor:
    l: float
    a: float
    b: float


@dataclass
class ColorValidationResult:
    valid: bool
    violations: list[str] = field(default_factory=list)


@dataclass
class ContrastResult:
    valid: bool
    ratio: float        # Rounded to two decimals
    required: float


@dataclass
class ContrastRepair:
    """Outcome of a best-effort contrast repair.

    ``succeeded`` is False when the step budget ran out before the target
    ratio was reached. ``color`` is then the original foreground and
    ``last_candidate`` the strongest adjustment that was tried.
    """
    color: str
    ratio: float
    steps: int
    succeeded: bool
    last_candidate: str | None = None


def _round_half_up(value: float, digits: int = 0) -> float:
    scale = 10 ** digits
    return math.floor(value * scale + 0.5) / scale


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------

def hex_to_rgb(color: str) -> RGBColor:
    """Parse ``#RRGGBB`` (``#`` optional) into an RGBColor ``(r, g, b)``."""
    return RGBColor.from_string(normalize_hex(color)[1:])


def _as_rgb(color: "str | Sequence[int]") -> tuple[int, int, int]:
    if isinstance(color, str):
        r, g, b = hex_to_rgb(color)
    else:
        r, g, b = color
    return r, g, b


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """Format channels as lowercase ``#rrggbb``, rounding and clamping to 0-255."""
    def clamp(v: float) -> int:
        return max(0, min(255, int(_round_half_up(v))))
    return f"#{clamp(r):02x}{clamp(g):02x}{clamp(b):02x}"


def hex_to_hsl(color: str) -> HslColor:
    """Convert hex to HSL, hue in degrees, saturation/lightness in percent."""
    r, g, b = (c / 255 for c in hex_to_rgb(color))
    hi = max(r, g, b)
    lo = min(r, g, b)
    delta = hi - lo

    h = 0.0
    s = 0.0
    l = (hi + lo) / 2

    if delta != 0:
        s = delta / (2 - hi - lo) if l > 0.5 else delta / (hi + lo)
        if hi == r:
            h = ((g - b) / delta + (6 if g < b else 0)) * 60
        elif hi == g:
            h = ((b - r) / delta + 2) * 60
        else:
            h = ((r - g) / delta + 4) * 60

    return HslColor(
        h=_round_half_up(h, 1),
        s=_round_half_up(s * 100, 1),
        l=_round_half_up(l * 100, 1),
    )


def hsl_to_hex(hsl: HslColor) -> str:
    h = hsl.h % 360
    s = hsl.s / 100
    l = hsl.l / 100

    c = (1 - abs(2 * l - 1)) * s
    x = c * (1 - abs((h / 60) % 2 - 1))
    m = l - c / 2

    if h < 60:
        r1, g1, b1 = c, x, 0.0
    elif h < 120:
        r1, g1, b1 = x, c, 0.0
    elif h < 180:
        r1, g1, b1 = 0.0, c, x
    elif h < 240:
        r1, g1, b1 = 0.0, x, c
    elif h < 300:
        r1, g1, b1 = x, 0.0, c
    else:
        r1, g1, b1 = c, 0.0, x

    return rgb_to_hex((r1 + m) * 255, (g1 + m) * 255, (b1 + m) * 255)


def _srgb_to_linear(channel: int, threshold: float) -> float:
    v = channel / 255
    return v / 12.92 if v <= threshold else ((v + 0.055) / 1.055) ** 2.4


def rgb_to_lab(color: "str | Sequence[int]") -> LabColor:
    """Convert a hex string or RGB triple to CIE Lab (D65, 2 degree observer)."""
    r, g, b = (_srgb_to_linear(c, 0.04045) for c in _as_rgb(color))

    x = (r * 0.4124564 + g * 0.3575761 + b * 0.1804375) / _WHITE_X
    y = (r * 0.2126729 + g * 0.7151522 + b * 0.0721750) / _WHITE_Y
    z = (r * 0.0193339 + g * 0.1191920 + b * 0.9503041) / _WHITE_Z

    def f(t: float) -> float:
        return t ** (1 / 3) if t > _LAB_EPSILON else (_LAB_KAPPA * t + 16) / 116

    fx, fy, fz = f(x), f(y), f(z)
    return LabColor(l=116 * fy - 16, a=500 * (fx - fy), b=200 * (fy - fz))


# ---------------------------------------------------------------------------
# Distance & contrast
# ---------------------------------------------------------------------------

def delta_e(color1: str, color2: str) -> float:
    """CIE76 Delta-E between two hex colors."""
    lab1 = rgb_to_lab(color1)
    lab2 = rgb_to_lab(color2)
    return math.sqrt(
        (lab1.l - lab2.l) ** 2
        + (lab1.a - lab2.a) ** 2
        + (lab1.b - lab2.b) ** 2
    )


def luminance(color: str) -> float:
    """WCAG relative luminance (0-1)."""
    r, g, b = (_srgb_to_linear(c, 0.03928) for c in hex_to_rgb(color))
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(color1: str, color2: str) -> float:
    """WCAG contrast ratio, symmetric, 1.0-21.0."""
    l1 = luminance(color1)
    l2 = luminance(color2)
    return (max(l1, l2) + 0.05) / (min(l1, l2) + 0.05)


def is_large_text(size_pt: float, bold: bool = False,
                  policy: ContrastPolicy = CONTRAST_POLICY) -> bool:
    """WCAG large text: 18pt and up, or 14pt and up when bold."""
    if size_pt >= policy.large_text_min_pt:
        return True
    return bold and size_pt >= policy.large_bold_text_min_pt


def validate_text_contrast(text_color: str, background: str,
                           large_text: bool = False,
                           policy: ContrastPolicy = CONTRAST_POLICY) -> ContrastResult:
    """WCAG AA text contrast check."""
    ratio = contrast_ratio(text_color, background)
    required = policy.required_ratio(large_text)
    return ContrastResult(
        valid=ratio >= required,
        ratio=_round_half_up(ratio, 2),
        required=required,
    )


# ---------------------------------------------------------------------------
# Forbidden pairs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HslRange:
    """A predicate over HSL colors. Bounds are inclusive; None is unbounded."""
    hue_ranges: tuple[tuple[float, float], ...]
    min_saturation: float | None = None
    max_saturation: float | None = None
    min_lightness: float | None = None
    max_lightness: float | None = None

    def matches(self, hsl: HslColor) -> bool:
        if not any(low <= hsl.h <= high for low, high in self.hue_ranges):
            return False
        if self.min_saturation is not None and hsl.s < self.min_saturation:
            return False
        if self.max_saturation is not None and hsl.s > self.max_saturation:
            return False
        if self.min_lightness is not None and hsl.l < self.min_lightness:
            return False
        if self.max_lightness is not None and hsl.l > self.max_lightness:
            return False
        return True


@dataclass(frozen=True)
class ForbiddenPair:
    first: HslRange
    second: HslRange
    reason: str

    def matches(self, hsl1: HslColor, hsl2: HslColor) -> bool:
        """True if the colors match the rule in either order."""
        return (
            (self.first.matches(hsl1) and self.second.matches(hsl2))
            or (self.first.matches(hsl2) and self.second.matches(hsl1))
        )


_NEON = HslRange(((0, 360),), min_saturation=90, min_lightness=40, max_lightness=70)

FORBIDDEN_PAIRS: tuple[ForbiddenPair, ...] = (
    ForbiddenPair(
        HslRange(((0, 30), (330, 360))),
        HslRange(((90, 150),)),
        "Color-blind inaccessible",
    ),
    ForbiddenPair(
        HslRange(((0, 30),), min_saturation=70),
        HslRange(((210, 270),), min_saturation=70),
        "Vibration effect, low projected contrast",
    ),
    ForbiddenPair(
        HslRange(((15, 45),), min_saturation=80),
        HslRange(((210, 270),), min_saturation=80),
        "Eye fatigue from complementary high-saturation",
    ),
    ForbiddenPair(_NEON, _NEON, "Unprofessional, hurts readability"),
)


def validate_color_pair(color1: str, color2: str) -> ColorValidationResult:
    """Check one pair of colors against every forbidden-pair rule."""
    hsl1 = hex_to_hsl(color1)
    hsl2 = hex_to_hsl(color2)
    violations = [
        f"Forbidden pair ({color1}, {color2}): {rule.reason}"
        for rule in FORBIDDEN_PAIRS
        if rule.matches(hsl1, hsl2)
    ]
    return ColorValidationResult(valid=not violations, violations=violations)


def validate_palette(palette: SlidePalette) -> ColorValidationResult:
    """Check every unordered pair of palette roles (10 pairs)."""
    roles = list(palette.roles())
    violations: list[str] = []
    for i, (name1, color1) in enumerate(roles):
        for name2, color2 in roles[i + 1:]:
            result = validate_color_pair(color1, color2)
            violations.extend(f"[{name1}/{name2}] {v}" for v in result.violations)
    return ColorValidationResult(valid=not violations, violations=violations)


# ---------------------------------------------------------------------------
# Repair
# ---------------------------------------------------------------------------

def lighten(color: str, amount: float) -> str:
    """Move ``amount`` (0-1) of the way toward white."""
    r, g, b = hex_to_rgb(color)
    return rgb_to_hex(r + (255 - r) * amount, g + (255 - g) * amount,
                      b + (255 - b) * amount)


def darken(color: str, amount: float) -> str:
    """Move ``amount`` (0-1) of the way toward black."""
    r, g, b = hex_to_rgb(color)
    return rgb_to_hex(r * (1 - amount), g * (1 - amount), b * (1 - amount))


def is_dark_background(background: str,
                       policy: ContrastPolicy = CONTRAST_POLICY) -> bool:
    return luminance(background) < policy.dark_background_luminance


def iter_contrast_steps(foreground: str, background: str,
                        policy: ContrastPolicy = CONTRAST_POLICY) -> Iterator[str]:
    """Yield at most REPAIR_MAX_STEPS progressively adjusted foregrounds.

    Lightens on dark backgrounds, darkens on light ones.
    """
    adjust = lighten if is_dark_background(background, policy) else darken
    for step in range(1, REPAIR_MAX_STEPS + 1):
        yield adjust(foreground, step * REPAIR_STEP)


def repair_contrast(foreground: str, background: str, min_ratio: float,
                    policy: ContrastPolicy = CONTRAST_POLICY) -> ContrastRepair:
    """Adjust ``foreground`` until it reaches ``min_ratio`` against ``background``."""
    original_ratio = contrast_ratio(foreground, background)
    if original_ratio >= min_ratio:
        return ContrastRepair(color=foreground, ratio=original_ratio, steps=0, succeeded=True)

    candidate = foreground
    steps = 0
    for candidate in iter_contrast_steps(foreground, background, policy):
        steps += 1
        ratio = contrast_ratio(candidate, background)
        if ratio >= min_ratio:
            logger.debug("contrast_repaired", foreground=foreground,
                         background=background, color=candidate,
                         ratio=round(ratio, 2), steps=steps)
            return ContrastRepair(color=candidate, ratio=ratio, steps=steps,
                                  succeeded=True, last_candidate=candidate)

    logger.warning("contrast_repair_exhausted", foreground=foreground,
                   background=background, last_candidate=candidate,
                   required=min_ratio, steps=steps)
    return ContrastRepair(color=foreground, ratio=original_ratio, steps=steps,
                          succeeded=False, last_candidate=candidate)


def ensure_contrast(foreground: str, background: str, min_ratio: float,
                    policy: ContrastPolicy = CONTRAST_POLICY) -> str:
    """Best-effort contrast fix.

    Returns ``foreground`` unchanged when it already passes or when no step
    within the budget reaches ``min_ratio``.
    """
    return repair_contrast(foreground, background, min_ratio, policy).color


def best_text_color(background: str) -> str:
    """Black or white, whichever contrasts more with ``background``."""
    if contrast_ratio(BLACK, background) >= contrast_ratio(WHITE, background):
        return BLACK
    return WHITE
