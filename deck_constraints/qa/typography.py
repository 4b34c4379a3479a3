"""Typography validation — font whitelist, sizes, pairing, and deck font cap.

Fonts outside the whitelist get a fuzzy "did you mean" suggestion based on
case-insensitive Levenshtein distance. Pairing rules use a small font
taxonomy: two fonts from the same sans-serif family look too alike to give a
heading/body hierarchy.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping

from deck_constraints.schema.models import FontSizes
from deck_constraints.schema.policy import TYPOGRAPHY_POLICY, TypographyPolicy


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class FontValidationResult:
    valid: bool
    suggestion: str | None = None


@dataclass
class FontSizeValidationResult:
    valid: bool
    violations: list[str] = field(default_factory=list)


@dataclass
class FontPairingResult:
    valid: bool
    reason: str | None = None


@dataclass
class DeckFontsResult:
    valid: bool
    violations: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Taxonomy
# ---------------------------------------------------------------------------

class FontCategory(Enum):
    GEOMETRIC_SANS = "geometric_sans"
    HUMANIST_SANS = "humanist_sans"
    SERIF = "serif"
    SYSTEM_SANS = "system_sans"
    DISPLAY_SANS = "display_sans"
    UNCATEGORIZED = "uncategorized"


FONT_CATEGORIES: dict[str, FontCategory] = {
    "Montserrat": FontCategory.GEOMETRIC_SANS,
    "Poppins": FontCategory.GEOMETRIC_SANS,
    "Nunito Sans": FontCategory.GEOMETRIC_SANS,
    "DM Sans": FontCategory.GEOMETRIC_SANS,
    "Inter": FontCategory.HUMANIST_SANS,
    "Roboto": FontCategory.HUMANIST_SANS,
    "Open Sans": FontCategory.HUMANIST_SANS,
    "Lato": FontCategory.HUMANIST_SANS,
    "Source Sans Pro": FontCategory.HUMANIST_SANS,
    "Work Sans": FontCategory.HUMANIST_SANS,
    "Georgia": FontCategory.SERIF,
    "Source Serif Pro": FontCategory.SERIF,
    "Playfair Display": FontCategory.SERIF,
    "Garamond": FontCategory.SERIF,
    "Libre Baskerville": FontCategory.SERIF,
    "Arial": FontCategory.SYSTEM_SANS,
    "Helvetica": FontCategory.SYSTEM_SANS,
    "Raleway": FontCategory.DISPLAY_SANS,
}

# Either side in one of these categories always gives enough contrast.
_CONTRASTING = frozenset({
    FontCategory.SERIF,
    FontCategory.DISPLAY_SANS,
    FontCategory.SYSTEM_SANS,
})

# Two fonts both in one of these categories look too similar.
_MONOTONOUS = frozenset({
    FontCategory.GEOMETRIC_SANS,
    FontCategory.HUMANIST_SANS,
})


def font_category(font: str) -> FontCategory:
    return FONT_CATEGORIES.get(font, FontCategory.UNCATEGORIZED)


def _same_category(font1: str, font2: str) -> bool:
    cat1 = font_category(font1)
    cat2 = font_category(font2)
    if cat1 in _CONTRASTING or cat2 in _CONTRASTING:
        return False
    return cat1 == cat2 and cat1 in _MONOTONOUS


# ---------------------------------------------------------------------------
# Fuzzy matching
# ---------------------------------------------------------------------------

def levenshtein(a: str, b: str) -> int:
    """Case-insensitive edit distance."""
    a = a.lower()
    b = b.lower()
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + cost,
            ))
        previous = current
    return previous[-1]


def find_closest_font(font: str,
                      policy: TypographyPolicy = TYPOGRAPHY_POLICY) -> str | None:
    """Closest whitelisted font, if within half the name's length."""
    best_match = None
    best_distance = math.inf
    for allowed in policy.allowed_fonts:
        distance = levenshtein(font, allowed)
        if distance < best_distance:
            best_distance = distance
            best_match = allowed
    if best_match is not None and best_distance <= math.ceil(len(font) / 2):
        return best_match
    return None


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------

def is_banned(font: str, policy: TypographyPolicy = TYPOGRAPHY_POLICY) -> bool:
    lowered = font.lower()
    return any(lowered == banned.lower() for banned in policy.banned_fonts)


def validate_font_choice(font: str,
                         policy: TypographyPolicy = TYPOGRAPHY_POLICY) -> FontValidationResult:
    """Check a font against the whitelist; suggest a close match if not allowed.

    Banned fonts are always rejected in favour of the policy's fallback font.
    """
    if is_banned(font, policy):
        return FontValidationResult(valid=False, suggestion=policy.fallback_font)
    if font in policy.allowed_fonts:
        return FontValidationResult(valid=True)
    return FontValidationResult(valid=False, suggestion=find_closest_font(font, policy))


def validate_font_sizes(sizes: "FontSizes | Mapping[str, float]",
                        policy: TypographyPolicy = TYPOGRAPHY_POLICY) -> FontSizeValidationResult:
    """Check each supplied role's size against its minimum."""
    items = sizes.items()
    violations = []
    for role, size in items:
        if size is None:
            continue
        minimum = policy.size_minimums.get(role)
        if minimum is not None and size < minimum:
            violations.append(
                f"{role} font size {size:g}pt is below minimum {minimum:g}pt"
            )
    return FontSizeValidationResult(valid=not violations, violations=violations)


def validate_font_pairing(heading_font: str, body_font: str) -> FontPairingResult:
    """Check that heading and body fonts contrast enough for a hierarchy."""
    if heading_font == body_font:
        return FontPairingResult(
            valid=False,
            reason=(
                f"Heading and body use the same font \"{heading_font}\". "
                "Use different fonts for visual hierarchy."
            ),
        )
    if _same_category(heading_font, body_font):
        return FontPairingResult(
            valid=False,
            reason=(
                f"\"{heading_font}\" and \"{body_font}\" are both in the same "
                "typographic category and look too similar. Pair a geometric "
                "sans with a humanist sans for better contrast."
            ),
        )
    return FontPairingResult(valid=True)


def validate_deck_fonts(fonts: Iterable[str],
                        policy: TypographyPolicy = TYPOGRAPHY_POLICY) -> DeckFontsResult:
    """Enforce the per-deck font cap and the whitelist for every font used."""
    unique = list(dict.fromkeys(fonts))
    violations = []

    if len(unique) > policy.max_fonts_per_deck:
        violations.append(
            f"Deck uses {len(unique)} fonts ({', '.join(unique)}). "
            f"Maximum allowed is {policy.max_fonts_per_deck}."
        )

    for font in unique:
        result = validate_font_choice(font, policy)
        if result.valid:
            continue
        if result.suggestion:
            violations.append(
                f"Font \"{font}\" is not in the allowed list. "
                f"Suggested: \"{result.suggestion}\"."
            )
        else:
            violations.append(f"Font \"{font}\" is not in the allowed list.")

    return DeckFontsResult(valid=not violations, violations=violations)
