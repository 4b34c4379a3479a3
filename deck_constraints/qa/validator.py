"""Constraints orchestrator — runs every validator over a slide and its theme.

Aggregates color, contrast, typography, density and layout checks into one
report, and applies the safe automatic repairs: splitting dense slides,
swapping unreadable text colors, and replacing non-whitelisted fonts.
Forbidden color pairs are reported for a human to fix, never auto-fixed.

Usage::

    from deck_constraints.qa.validator import ConstraintsValidator

    validator = ConstraintsValidator(policy)
    report = validator.validate_slide(content, theme)
    assert report.valid, report.report()
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Iterable

import structlog

from deck_constraints.schema.models import (
    DensityLimits,
    FontSizes,
    LayoutConfig,
    SlideContent,
    SlidePalette,
    SlideTheme,
)
from deck_constraints.schema.policy import DEFAULT_POLICY, ConstraintPolicy

from .color import (
    ColorValidationResult,
    ContrastResult,
    best_text_color,
    contrast_ratio,
    validate_palette as _validate_palette,
    validate_text_contrast,
)
from .density import (
    DensityValidationResult,
    suggest_split,
    validate_slide_content,
)
from .layout import LayoutValidationResult, validate_layout as _validate_layout
from .typography import (
    DeckFontsResult,
    FontPairingResult,
    FontSizeValidationResult,
    FontValidationResult,
    validate_deck_fonts,
    validate_font_choice,
    validate_font_pairing,
    validate_font_sizes,
)

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class Issue:
    """A single constraint violation."""
    category: str       # "color", "contrast", "font", "pairing", "font_size",
                        # "deck_fonts", "density", "layout"
    message: str
    suggestion: str = ""
    slide_index: int = -1   # -1 for theme-level issues

    def __str__(self) -> str:
        loc = f"slide {self.slide_index}" if self.slide_index >= 0 else "theme"
        text = f"[{self.category.upper()}] {loc}: {self.message}"
        if self.suggestion:
            text += f" -> {self.suggestion}"
        return text


@dataclass
class DesignReport:
    """Aggregated result of every validator."""
    issues: list[Issue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues

    @property
    def violations(self) -> list[str]:
        return [i.message for i in self.issues]

    @property
    def suggestions(self) -> list[str]:
        return [i.suggestion for i in self.issues if i.suggestion]

    def by_category(self, category: str) -> list[Issue]:
        return [i for i in self.issues if i.category == category]

    def extend(self, category: str, violations: Iterable[str],
               suggestions: Iterable[str] = (), slide_index: int = -1) -> None:
        paired = list(suggestions)
        for n, message in enumerate(violations):
            self.issues.append(Issue(
                category=category,
                message=message,
                suggestion=paired[n] if n < len(paired) else "",
                slide_index=slide_index,
            ))

    def summary(self) -> str:
        """One-line summary string."""
        status = "PASS" if self.valid else "FAIL"
        return f"Design {status}: {len(self.issues)} violation(s)"

    def report(self) -> str:
        """Multi-line report of all issues."""
        lines = [self.summary()]
        for issue in self.issues:
            lines.append(f"  {issue}")
        return "\n".join(lines)


@dataclass
class PaletteValidationResult:
    valid: bool
    violations: list[str]
    text_contrast: ContrastResult


@dataclass
class TypographyReport:
    heading_font: FontValidationResult
    body_font: FontValidationResult
    pairing: FontPairingResult
    sizes: FontSizeValidationResult
    deck_fonts: DeckFontsResult | None
    valid: bool
    violations: list[str]


@dataclass
class AutoFixResult:
    """Repairs applied by ``auto_fix``.

    ``fixed`` is True when anything was changed or flagged; ``changes``
    describes each step, with ``[Manual fix needed]`` for flagged issues.
    """
    fixed: bool
    changes: list[str]
    slides: list[SlideContent]
    palette: SlidePalette | None = None
    theme: SlideTheme | None = None


def _font_message(role: str, font: str, result: FontValidationResult) -> str:
    message = f"{role} font \"{font}\" not allowed"
    if result.suggestion:
        message += f". Suggested: \"{result.suggestion}\""
    return message


def _contrast_message(result: ContrastResult) -> str:
    return (
        f"Text/background contrast ratio {result.ratio:g}:1 is below WCAG AA "
        f"minimum {result.required:g}:1"
    )


# ---------------------------------------------------------------------------
# ConstraintsValidator
# ---------------------------------------------------------------------------

class ConstraintsValidator:
    """Runs the constraint validators under one policy.

    Parameters
    ----------
    policy : ConstraintPolicy
        Style budget: density limits, typography, contrast and layout rules.
    """

    def __init__(self, policy: ConstraintPolicy = DEFAULT_POLICY) -> None:
        self.policy = policy

    def _limits(self, limits: DensityLimits | None) -> DensityLimits:
        return limits if limits is not None else self.policy.density

    # ------------------------------------------------------------------
    # Individual domains
    # ------------------------------------------------------------------

    def validate_density(self, content: SlideContent,
                         limits: DensityLimits | None = None) -> DensityValidationResult:
        return validate_slide_content(content, self._limits(limits))

    def validate_palette(self, palette: SlidePalette) -> PaletteValidationResult:
        """Forbidden pairs across the palette plus text/background contrast."""
        pairs = _validate_palette(palette)
        text_contrast = validate_text_contrast(
            palette.text, palette.background, policy=self.policy.contrast,
        )
        violations = list(pairs.violations)
        if not text_contrast.valid:
            violations.append(_contrast_message(text_contrast))
        return PaletteValidationResult(
            valid=not violations,
            violations=violations,
            text_contrast=text_contrast,
        )

    def validate_typography(self, heading_font: str, body_font: str,
                            all_fonts: list[str] | None = None,
                            sizes: FontSizes | None = None) -> TypographyReport:
        policy = self.policy.typography
        heading = validate_font_choice(heading_font, policy)
        body = validate_font_choice(body_font, policy)
        pairing = validate_font_pairing(heading_font, body_font)
        size_result = validate_font_sizes(sizes or FontSizes(), policy)
        deck_fonts = validate_deck_fonts(all_fonts, policy) if all_fonts else None

        violations = []
        if not heading.valid:
            violations.append(_font_message("Heading", heading_font, heading))
        if not body.valid:
            violations.append(_font_message("Body", body_font, body))
        if not pairing.valid and pairing.reason:
            violations.append(pairing.reason)
        violations.extend(size_result.violations)
        if deck_fonts and not deck_fonts.valid:
            violations.extend(deck_fonts.violations)

        return TypographyReport(
            heading_font=heading,
            body_font=body,
            pairing=pairing,
            sizes=size_result,
            deck_fonts=deck_fonts,
            valid=not violations,
            violations=violations,
        )

    def validate_layout(self, layout: LayoutConfig) -> LayoutValidationResult:
        return _validate_layout(layout, self.policy.layout)

    # ------------------------------------------------------------------
    # Whole slide / theme / deck
    # ------------------------------------------------------------------

    def _theme_issues(self, theme: SlideTheme, report: DesignReport,
                      slide_index: int = -1) -> None:
        pairs = _validate_palette(theme.palette)
        report.extend("color", pairs.violations, slide_index=slide_index)
        text_contrast = validate_text_contrast(
            theme.palette.text, theme.palette.background, policy=self.policy.contrast,
        )
        if not text_contrast.valid:
            report.extend(
                "contrast", [_contrast_message(text_contrast)],
                [f"Use {best_text_color(theme.palette.background)} text on this background."],
                slide_index=slide_index,
            )

        policy = self.policy.typography
        for role, font in (("Heading", theme.heading_font), ("Body", theme.body_font)):
            result = validate_font_choice(font, policy)
            if not result.valid:
                suggestion = f"Use \"{result.suggestion}\"." if result.suggestion else ""
                report.extend("font", [_font_message(role, font, result)],
                              [suggestion], slide_index=slide_index)

        pairing = validate_font_pairing(theme.heading_font, theme.body_font)
        if not pairing.valid:
            report.extend("pairing", [pairing.reason or "Font pairing issue"],
                          slide_index=slide_index)

        sizes = validate_font_sizes(theme.sizes or FontSizes(), policy)
        report.extend("font_size", sizes.violations, slide_index=slide_index)

        if theme.layout is not None:
            layout = self.validate_layout(theme.layout)
            report.extend("layout", layout.violations, slide_index=slide_index)

    def validate_slide(self, content: SlideContent, theme: SlideTheme,
                       limits: DensityLimits | None = None,
                       slide_index: int = -1) -> DesignReport:
        """Run every validator against one slide and its theme."""
        report = DesignReport()
        self._theme_issues(theme, report, slide_index)
        density = self.validate_density(content, limits)
        report.extend("density", density.violations, density.suggestions,
                      slide_index=slide_index)
        return report

    def validate_deck(self, slides: list[SlideContent], theme: SlideTheme,
                      extra_fonts: list[str] | None = None,
                      limits: DensityLimits | None = None) -> DesignReport:
        """Theme checks once, density per slide, plus the deck font rules.

        ``extra_fonts`` are fonts used in the deck beyond the theme's heading
        and body fonts (e.g. in charts or callouts).
        """
        report = DesignReport()
        self._theme_issues(theme, report)
        if extra_fonts:
            deck_fonts = validate_deck_fonts(
                [theme.heading_font, theme.body_font, *extra_fonts],
                self.policy.typography,
            )
            report.extend("deck_fonts", deck_fonts.violations)
        for index, content in enumerate(slides):
            density = self.validate_density(content, limits)
            report.extend("density", density.violations, density.suggestions,
                          slide_index=index)
        logger.debug("deck_validated", slides=len(slides), issues=len(report.issues))
        return report

    def validate_theme(self, theme: SlideTheme) -> ColorValidationResult:
        """Fonts, pairing, contrast and palette of a theme definition."""
        report = DesignReport()
        self._theme_issues(theme, report)
        return ColorValidationResult(valid=report.valid, violations=report.violations)

    # ------------------------------------------------------------------
    # Repair
    # ------------------------------------------------------------------

    def _fix_font(self, role: str, font: str, changes: list[str]) -> str:
        policy = self.policy.typography
        result = validate_font_choice(font, policy)
        if result.valid:
            return font
        replacement = result.suggestion or policy.fallback_font
        changes.append(f"Changed {role} font from \"{font}\" to \"{replacement}\"")
        return replacement

    def auto_fix(self, content: SlideContent, theme: SlideTheme,
                 limits: DensityLimits | None = None) -> AutoFixResult:
        """Apply safe repairs to a slide and its theme.

        - Dense slides are split with ``suggest_split``
        - Unreadable text color becomes black or white, whichever contrasts more
        - Non-whitelisted fonts become the suggested or fallback font
        - Forbidden palette pairs are only flagged
        """
        changes: list[str] = []
        slides = [content]
        limits = self._limits(limits)

        if not validate_slide_content(content, limits).valid:
            split = suggest_split(content, limits)
            if split.should_split:
                slides = split.new_slides
                changes.append(f"Split overcrowded slide into {len(slides)} slides")

        palette = theme.palette
        fixed_palette = None
        contrast = validate_text_contrast(palette.text, palette.background,
                                          policy=self.policy.contrast)
        if not contrast.valid:
            text = best_text_color(palette.background)
            ratio = contrast_ratio(text, palette.background)
            fixed_palette = dataclasses.replace(palette, text=text)
            changes.append(
                f"Changed text color from {palette.text} to {text} "
                f"(contrast {round(ratio, 2):g}:1)"
            )

        heading_font = self._fix_font("heading", theme.heading_font, changes)
        body_font = self._fix_font("body", theme.body_font, changes)

        for violation in _validate_palette(fixed_palette or palette).violations:
            changes.append(f"[Manual fix needed] {violation}")

        fixed_theme = None
        if fixed_palette is not None or heading_font != theme.heading_font \
                or body_font != theme.body_font:
            fixed_theme = dataclasses.replace(
                theme,
                palette=fixed_palette or palette,
                heading_font=heading_font,
                body_font=body_font,
            )

        if changes:
            logger.debug("auto_fix_applied", title=content.title, changes=len(changes))
        return AutoFixResult(
            fixed=bool(changes),
            changes=changes,
            slides=slides,
            palette=fixed_palette,
            theme=fixed_theme,
        )


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------

_DEFAULT_VALIDATOR = ConstraintsValidator()


def validate(content: SlideContent,
             limits: DensityLimits | None = None) -> DensityValidationResult:
    """Density validation under the default policy."""
    return _DEFAULT_VALIDATOR.validate_density(content, limits)


def validate_slide_design(content: SlideContent, theme: SlideTheme,
                          limits: DensityLimits | None = None) -> DesignReport:
    return _DEFAULT_VALIDATOR.validate_slide(content, theme, limits)


def validate_theme(theme: SlideTheme) -> ColorValidationResult:
    return _DEFAULT_VALIDATOR.validate_theme(theme)


def auto_fix(content: SlideContent, theme: SlideTheme,
             limits: DensityLimits | None = None) -> AutoFixResult:
    return _DEFAULT_VALIDATOR.auto_fix(content, theme, limits)
