"""Tests for the density truncator."""

from deck_constraints.processor.truncator import (
    TruncationLimits,
    passes_density_check,
    truncate_slides,
    truncate_to_limits,
)
from deck_constraints.schema.models import SlideDefinition, SlideType


def bullets(n: int) -> str:
    return "\n".join(f"- Item {i}" for i in range(1, n + 1))


def table(data_rows: int) -> str:
    lines = ["| Region | Sales |", "|---|---|"]
    lines += [f"| r{i} | {i} |" for i in range(1, data_rows + 1)]
    return "\n".join(lines)


class TestTruncateToLimits:
    def test_within_limits(self):
        result = truncate_to_limits(bullets(3))
        assert result.body == bullets(3)
        assert result.overflow == ""
        assert not result.was_truncated

    def test_extra_bullets_overflow(self):
        result = truncate_to_limits(bullets(6))
        assert result.body == bullets(4)
        assert result.overflow == "Additional details: Item 5; Item 6"
        assert result.was_truncated

    def test_numbered_bullets(self):
        body = "\n".join(f"{i}. Step {i}" for i in range(1, 6))
        result = truncate_to_limits(body)
        assert result.overflow == "Additional details: Step 5"

    def test_table_keeps_header_and_separator(self):
        result = truncate_to_limits(table(6))
        lines = result.body.split("\n")
        assert lines[:2] == ["| Region | Sales |", "|---|---|"]
        assert len(lines) == 6
        assert result.overflow == "Additional details: | r5 | 5 |; | r6 | 6 |"

    def test_long_prose_only_flagged(self):
        body = " ".join(["word"] * 60)
        result = truncate_to_limits(body)
        assert result.body == body
        assert result.overflow == ""
        assert result.was_truncated

    def test_custom_limits(self):
        result = truncate_to_limits(bullets(3), TruncationLimits(max_bullets=1))
        assert result.body == "- Item 1"


class TestPassesDensityCheck:
    def test_passes(self):
        assert passes_density_check(bullets(4))

    def test_too_many_bullets(self):
        assert not passes_density_check(bullets(5))

    def test_too_many_words(self):
        assert not passes_density_check(" ".join(["word"] * 51))

    def test_too_many_table_rows(self):
        assert passes_density_check(table(4))
        assert not passes_density_check(table(5))


class TestTruncateSlides:
    def test_returns_new_slides(self):
        original = SlideDefinition(
            slide_number=1, title="Crowded", body=bullets(6),
            speaker_notes="", slide_type=SlideType.CONTENT, image_prompt_hint="",
        )
        (result,) = truncate_slides([original])
        assert result.body == bullets(4)
        assert result.speaker_notes == "Additional details: Item 5; Item 6"
        assert original.body == bullets(6)

    def test_untruncated_slide_passed_through(self):
        original = SlideDefinition(
            slide_number=1, title="Fine", body=bullets(2),
            speaker_notes="Notes", slide_type=SlideType.CONTENT, image_prompt_hint="",
        )
        assert truncate_slides([original]) == [original]
