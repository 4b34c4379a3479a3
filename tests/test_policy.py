"""Tests for models, constraint policies and the YAML policy loader."""

import dataclasses

import pytest
import yaml

from deck_constraints.schema.loader import load_policy, save_policy
from deck_constraints.schema.models import (
    DensityLimits,
    MalformedColor,
    PresentationType,
    SectionType,
    SlideContent,
    SlideDefinition,
    SlidePalette,
    SlideType,
)
from deck_constraints.schema.policy import (
    DEFAULT_POLICY,
    DENSITY_LIMITS,
    FONT_SIZE_MINIMUMS,
    ConstraintPolicy,
    ContrastPolicy,
    TypographyPolicy,
)


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class TestSlidePalette:
    def test_normalizes_missing_hash(self):
        palette = SlidePalette("1E3A5F", "#4A6FA5", "#5B8C85", "#FFFFFF", "#222222")
        assert palette.primary == "#1E3A5F"

    def test_malformed_names_role(self):
        with pytest.raises(MalformedColor) as exc_info:
            SlidePalette("#1E3A5F", "#4A6FA5", "teal", "#FFFFFF", "#222222")
        assert exc_info.value.role == "accent"
        assert "accent" in str(exc_info.value)

    def test_roles_order(self):
        palette = SlidePalette("#111111", "#222222", "#333333", "#444444", "#555555")
        assert [name for name, _ in palette.roles()] == [
            "primary", "secondary", "accent", "background", "text",
        ]

    def test_from_dict_missing_role(self):
        with pytest.raises(MalformedColor):
            SlidePalette.from_dict({"primary": "#111111"})


class TestEnums:
    def test_every_section_type_has_slide_type_and_hint(self):
        for section_type in SectionType:
            assert isinstance(section_type.slide_type, SlideType)
            assert section_type.image_hint

    def test_section_mapping(self):
        assert SectionType.CONCLUSION.slide_type is SlideType.CTA
        assert SectionType.DATA.slide_type is SlideType.DATA_METRICS
        assert SectionType.INTRODUCTION.slide_type is SlideType.CONTENT

    def test_slide_type_count(self):
        assert len(SlideType) == 20

    def test_presentation_ranges(self):
        assert PresentationType.STANDARD.slide_range == (8, 16)
        assert PresentationType.VC_PITCH.slide_range == (10, 14)
        assert PresentationType.TECHNICAL.slide_range == (12, 18)
        assert PresentationType.EXECUTIVE.slide_range == (8, 12)

    def test_parse(self):
        assert PresentationType.parse("technical") is PresentationType.TECHNICAL
        assert PresentationType.parse("keynote") is PresentationType.STANDARD
        assert PresentationType.parse(PresentationType.EXECUTIVE) is PresentationType.EXECUTIVE


class TestSerialization:
    def test_slide_definition_dict(self):
        slide = SlideDefinition(3, "Growth", "- Up", "Notes", SlideType.DATA_METRICS, "Chart")
        d = slide.to_dict()
        assert d["slide_type"] == "DATA_METRICS"
        assert SlideDefinition.from_dict(d) == slide

    def test_slide_content_dict_omits_unset(self):
        assert SlideContent("T", "B").to_dict() == {"title": "T", "body": "B"}


# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------

class TestPolicies:
    def test_default_density_shared(self):
        assert DEFAULT_POLICY.density is DENSITY_LIMITS
        assert DEFAULT_POLICY.limits_for() is DENSITY_LIMITS

    def test_unknown_lens(self):
        with pytest.raises(KeyError):
            DEFAULT_POLICY.limits_for("missing")

    def test_font_minimums_immutable(self):
        with pytest.raises(TypeError):
            FONT_SIZE_MINIMUMS["body"] = 10

    def test_lenses_immutable(self):
        policy = ConstraintPolicy(lenses={"pitch": DENSITY_LIMITS})
        with pytest.raises(TypeError):
            policy.lenses["other"] = DENSITY_LIMITS

    def test_contrast_required_ratio(self):
        policy = ContrastPolicy()
        assert policy.required_ratio(large_text=False) == 4.5
        assert policy.required_ratio(large_text=True) == 3.0

    def test_typography_default_construction(self):
        first = TypographyPolicy()
        second = TypographyPolicy()
        assert dict(first.size_minimums) == dict(FONT_SIZE_MINIMUMS)
        assert first == second
        with pytest.raises(TypeError):
            first.size_minimums["body"] = 10

    def test_typography_from_dict_defaults(self):
        policy = TypographyPolicy.from_dict({"max_fonts_per_deck": 3})
        assert policy.max_fonts_per_deck == 3
        assert "Inter" in policy.allowed_fonts
        assert policy.size_minimums["body"] == 24

    def test_from_dict_lens_inherits_density(self):
        policy = ConstraintPolicy.from_dict({
            "density": {"max_bullets_per_slide": 4},
            "lenses": {"workshop": {"max_words_per_slide": 120}},
        })
        assert policy.density.max_bullets_per_slide == 4
        assert policy.density.max_words_per_slide == 80
        workshop = policy.limits_for("workshop")
        assert workshop.max_words_per_slide == 120
        assert workshop.max_bullets_per_slide == 4


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

class TestLoader:
    def test_round_trip(self, tmp_path):
        policy = ConstraintPolicy(
            density=dataclasses.replace(DENSITY_LIMITS, max_bullets_per_slide=4),
            lenses={"pitch": DensityLimits(3, 3, 40, 1, 1)},
            typography=TypographyPolicy(fallback_font="Lato"),
        )
        path = tmp_path / "policies" / "brand.yaml"
        save_policy(policy, path)
        loaded = load_policy(path)
        assert loaded.density == policy.density
        assert loaded.limits_for("pitch") == DensityLimits(3, 3, 40, 1, 1)
        assert loaded.typography.fallback_font == "Lato"
        assert loaded.contrast == policy.contrast
        assert loaded.layout == policy.layout

    def test_saved_yaml_is_readable(self, tmp_path):
        path = tmp_path / "policy.yaml"
        save_policy(DEFAULT_POLICY, path)
        data = yaml.safe_load(path.read_text())
        assert list(data)[0] == "density"
        assert data["density"]["max_words_per_slide"] == 80

    def test_partial_file(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("density:\n  max_bullets_per_slide: 4\n")
        policy = load_policy(path)
        assert policy.density.max_bullets_per_slide == 4
        assert policy.density.max_table_rows == 5
        assert policy.typography == DEFAULT_POLICY.typography

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("")
        policy = load_policy(path)
        assert policy.density == DENSITY_LIMITS
        assert len(policy.lenses) == 0

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("- one\n- two\n")
        with pytest.raises(ValueError):
            load_policy(path)

    def test_invalid_limit_rejected(self, tmp_path):
        path = tmp_path / "policy.yaml"
        path.write_text("density:\n  max_words_per_slide: 0\n")
        with pytest.raises(ValueError):
            load_policy(path)
