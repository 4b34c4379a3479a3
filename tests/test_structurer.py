"""Tests for the slide structurer: archetype templates, splitting, slide range."""

import pytest

from deck_constraints.processor.structurer import (
    SlideStructurer,
    enforce_slide_range,
    fit_slide_range,
    structure_slides,
    truncate_to_sentence,
)
from deck_constraints.processor.truncator import TruncationLimits
from deck_constraints.schema.models import (
    ParsedContent,
    ParsedSection,
    PresentationType,
    SectionType,
    SlideDefinition,
    SlideType,
)


def slide(title: str, body: str = "Short body.",
          slide_type: SlideType = SlideType.CONTENT) -> SlideDefinition:
    return SlideDefinition(
        slide_number=0,
        title=title,
        body=body,
        speaker_notes=f"Notes for {title}",
        slide_type=slide_type,
        image_prompt_hint="hint",
    )


def deck(content_slides: int, body: str = "Short body.") -> list[SlideDefinition]:
    slides = [slide("Title", "", SlideType.TITLE)]
    slides += [slide(f"Slide {i}", body) for i in range(content_slides)]
    slides.append(slide("Thanks", "Questions?", SlideType.CTA))
    for number, s in enumerate(slides, start=1):
        s.slide_number = number
    return slides


def long_sentence(n: int = 30) -> str:
    return " ".join(["filler"] * (n - 1)) + " end."


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def structurer():
    return SlideStructurer()


@pytest.fixture
def standard_content():
    return ParsedContent(
        title="Quarterly Review",
        sections=[
            ParsedSection("Introduction", "Where we are.", SectionType.INTRODUCTION),
            ParsedSection("The Problem", "Churn is up.", SectionType.PROBLEM),
            ParsedSection("Our Solution", "Better onboarding.", SectionType.SOLUTION),
            ParsedSection("Wrap Up", "Thanks all.", SectionType.CONCLUSION),
        ],
    )


def assert_contiguous(slides):
    assert [s.slide_number for s in slides] == list(range(1, len(slides) + 1))


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

class TestTruncateToSentence:
    def test_short_text_unchanged(self):
        assert truncate_to_sentence("Short text.", 10) == "Short text."

    def test_cuts_at_late_period(self):
        assert truncate_to_sentence("One two three. Four five six seven", 5) == "One two three."

    def test_ellipsis_without_period(self):
        assert truncate_to_sentence("a b c d e f g", 3) == "a b c..."


# ---------------------------------------------------------------------------
# Section slides
# ---------------------------------------------------------------------------

class TestBuildSectionSlides:
    def test_bullets_rendered(self, structurer):
        section = ParsedSection("Plan", "ignored", SectionType.PROCESS,
                                bullet_points=["Design", "Build"])
        (result,) = structurer.build_section_slides(section, 3)
        assert result.body == "- Design\n- Build"
        assert result.slide_type is SlideType.PROCESS
        assert result.slide_number == 3

    def test_bullet_chunks(self, structurer):
        section = ParsedSection("Plan", "", SectionType.PROCESS,
                                bullet_points=[f"Step {i}" for i in range(12)])
        result = structurer.build_section_slides(section, 2)
        assert [s.title for s in result] == ["Plan (1/3)", "Plan (2/3)", "Plan (3/3)"]
        assert [s.slide_number for s in result] == [2, 3, 4]
        assert result[2].body == "- Step 10\n- Step 11"

    def test_visual_humor_never_split(self, structurer):
        section = ParsedSection("Meme", "", SectionType.VISUAL_HUMOR,
                                bullet_points=[f"Joke {i}" for i in range(12)])
        result = structurer.build_section_slides(section, 1)
        assert len(result) == 1
        assert result[0].slide_type is SlideType.VISUAL_HUMOR

    def test_long_prose_split_in_half(self, structurer):
        section = ParsedSection("Essay", " ".join([long_sentence()] * 3))
        first, second = structurer.build_section_slides(section, 5)
        assert first.title == "Essay (1/2)"
        assert second.title == "Essay (2/2)"
        assert second.speaker_notes == "Continue from previous slide."
        assert first.body.count("end.") == 2

    def test_single_long_sentence_not_split(self, structurer):
        section = ParsedSection("Essay", " ".join(["word"] * 100))
        assert len(structurer.build_section_slides(section, 1)) == 1

    def test_speaker_notes(self, structurer):
        section = ParsedSection("Growth", "Revenue grew fast.", SectionType.DATA,
                                statistics=["42%", "$1.2M"],
                                quotes=["Best quarter we have had"])
        notes = structurer.build_speaker_notes(section)
        assert notes == (
            "Key topic: Growth. Key statistics: 42%, $1.2M. "
            "Notable quote: \"Best quarter we have had\". Details: Revenue grew fast."
        )

    def test_image_hint(self, structurer):
        section = ParsedSection("Growth", "x", SectionType.DATA)
        assert structurer.build_image_prompt_hint(section) == (
            f"{SectionType.DATA.image_hint}. Topic: Growth"
        )


# ---------------------------------------------------------------------------
# Slide range
# ---------------------------------------------------------------------------

class TestSlideRange:
    def test_merges_down_to_max(self):
        slides = deck(16)
        assert len(slides) == 18
        result = fit_slide_range(slides, 8, 14)
        assert len(result.slides) == 14
        assert result.within_range
        assert result.merges == 4
        assert_contiguous(result.slides)
        assert result.slides[0].slide_type is SlideType.TITLE
        assert result.slides[-1].slide_type is SlideType.CTA

    def test_pads_up_to_min_before_final_slide(self):
        slides = deck(3)
        result = enforce_slide_range(slides, 8, 16)
        assert len(result) == 8
        assert_contiguous(result)
        assert result[-1].slide_type is SlideType.CTA
        assert [s.title for s in result[4:7]] == ["Key Takeaway"] * 3
        assert result[3].title == "Slide 2"

    def test_within_range_untouched(self):
        slides = deck(8)
        result = fit_slide_range(slides, 8, 16)
        assert result.merges == 0
        assert result.insertions == 0
        assert [s.title for s in result.slides] == [s.title for s in slides]

    def test_stops_when_nothing_mergeable(self):
        slides = deck(4, body=" ".join(["word"] * 50))
        result = fit_slide_range(slides, 1, 3)
        assert not result.within_range
        assert result.merges == 0
        assert len(result.slides) == 6
        assert_contiguous(result.slides)

    def test_title_and_cta_never_merged(self):
        result = fit_slide_range(deck(1), 1, 1)
        assert [s.slide_type for s in result.slides] == [
            SlideType.TITLE, SlideType.CONTENT, SlideType.CTA,
        ]

    def test_merge_strips_split_suffix(self):
        slides = [
            slide("Title", "", SlideType.TITLE),
            slide("Data (1/2)", "first"),
            slide("Data (2/2)", "second"),
            slide("End", "bye", SlideType.CTA),
        ]
        result = enforce_slide_range(slides, 1, 3)
        assert result[1].title == "Data"
        assert result[1].body == "first\n\nsecond"
        assert result[1].speaker_notes == "Notes for Data (1/2)\n\nNotes for Data (2/2)"

    def test_ties_merge_earliest_pair(self):
        slides = [
            slide("Title", "", SlideType.TITLE),
            slide("A", "x y"),
            slide("B", "x y"),
            slide("C", "x y"),
            slide("End", "bye", SlideType.CTA),
        ]
        result = enforce_slide_range(slides, 1, 4)
        assert [s.title for s in result] == ["Title", "A", "C", "End"]

    def test_input_not_mutated(self):
        slides = deck(16)
        before = [(s.slide_number, s.title, s.body) for s in slides]
        enforce_slide_range(slides, 8, 14)
        enforce_slide_range(deck(3), 8, 16)
        assert [(s.slide_number, s.title, s.body) for s in slides] == before

    def test_empty_deck_padded(self):
        result = enforce_slide_range([], 2, 4)
        assert [s.title for s in result] == ["Key Takeaway", "Key Takeaway"]
        assert_contiguous(result)

    def test_lone_title_padded_after_title(self):
        result = enforce_slide_range([slide("Title", "", SlideType.TITLE)], 3, 8)
        assert [s.title for s in result] == ["Title", "Key Takeaway", "Key Takeaway"]
        assert result[0].slide_type is SlideType.TITLE
        assert_contiguous(result)


# ---------------------------------------------------------------------------
# Archetype templates
# ---------------------------------------------------------------------------

class TestStandard:
    def test_structure(self, standard_content):
        slides = structure_slides(standard_content, PresentationType.STANDARD)
        assert len(slides) == 8
        assert_contiguous(slides)
        assert slides[0].slide_type is SlideType.TITLE
        assert slides[0].body == "Overview"
        assert slides[1].title == "Agenda"
        assert slides[1].body == "- Introduction\n- The Problem\n- Our Solution"
        assert [s.title for s in slides[2:5]] == ["Introduction", "The Problem", "Our Solution"]
        assert slides[-1].slide_type is SlideType.CTA
        assert slides[-1].title == "Wrap Up"

    def test_no_agenda_for_two_sections(self):
        content = ParsedContent("Short", [
            ParsedSection("One", "a."), ParsedSection("Two", "b."),
        ])
        slides = structure_slides(content)
        assert "Agenda" not in [s.title for s in slides]

    def test_cta_fallback(self):
        slides = structure_slides(ParsedContent("Short", [ParsedSection("One", "a.")]))
        assert slides[-1].title == "Next Steps"
        assert slides[-1].body == "Thank you for your time.\n\nQuestions?"

    def test_unknown_type_falls_back_to_standard(self, standard_content):
        slides = structure_slides(standard_content, "WEBINAR")
        assert slides[0].body == "Overview"

    def test_section_list_input(self, standard_content):
        slides = structure_slides(standard_content.sections, title="From Sections")
        assert slides[0].title == "From Sections"


class TestVcPitch:
    def test_fallback_sections(self):
        content = ParsedContent("Startup", [
            ParsedSection("About Us", "We are a team.", SectionType.INTRODUCTION),
        ])
        slides = structure_slides(content, PresentationType.VC_PITCH)
        titles = [s.title for s in slides]
        assert len(slides) == 10
        assert titles[:5] == ["Startup", "The Problem", "Our Solution",
                              "Market Opportunity", "About Us"]
        assert slides[1].slide_type is SlideType.PROBLEM
        assert slides[3].slide_type is SlideType.DATA_METRICS
        assert titles[-1] == "The Ask"
        assert slides[0].body == "Investor Pitch"

    def test_conclusion_keeps_its_title(self):
        content = ParsedContent("Startup", [
            ParsedSection("Pain", "It hurts.", SectionType.PROBLEM),
            ParsedSection("Join Us", "Invest now.", SectionType.CONCLUSION),
        ])
        slides = structure_slides(content, "vc_pitch")
        assert slides[1].title == "Pain"
        assert slides[-1].title == "Join Us"


class TestTechnical:
    def test_structure(self):
        content = ParsedContent("Engine", [
            ParsedSection("Background", "Why we built it.", SectionType.INTRODUCTION),
            ParsedSection("System Design", "Services and queues.", SectionType.SOLUTION),
            ParsedSection("Benchmarks", "Fast.", SectionType.DATA),
        ])
        slides = structure_slides(content, PresentationType.TECHNICAL)
        assert len(slides) == 12
        assert_contiguous(slides)
        titles = [s.title for s in slides]
        assert titles[:5] == ["Engine", "Background", "System Design", "Benchmarks", "Demo"]
        assert slides[2].slide_type is SlideType.ARCHITECTURE
        assert slides[-1].title == "Q&A"
        assert slides[-1].body == "Questions and Discussion"

    def test_fallbacks(self):
        slides = structure_slides(ParsedContent("Engine", []), PresentationType.TECHNICAL)
        titles = [s.title for s in slides]
        assert titles[1:4] == ["Context", "Architecture", "Demo"]
        assert slides[2].slide_type is SlideType.ARCHITECTURE


class TestExecutive:
    def test_structure(self):
        content = ParsedContent("Board Update", [
            ParsedSection("Revenue Results", "Revenue grew.", SectionType.DATA),
            ParsedSection("Expand Sales", "Hire reps.", SectionType.SOLUTION),
        ])
        slides = structure_slides(content, PresentationType.EXECUTIVE)
        assert len(slides) == 8
        titles = [s.title for s in slides]
        assert titles[:4] == ["Board Update", "Executive Summary", "Revenue Results",
                              "Recommendation: Expand Sales"]
        assert slides[1].body == (
            "**Revenue Results:** Revenue grew.\n\n**Expand Sales:** Hire reps."
        )
        assert titles[-1] == "Next Steps"

    def test_fallbacks(self):
        slides = structure_slides(ParsedContent("Board", []), PresentationType.EXECUTIVE)
        titles = [s.title for s in slides]
        assert titles[1:4] == ["Executive Summary", "Key Findings", "Recommendations"]
        assert slides[1].body == "Key findings and recommendations at a glance."
        assert slides[2].slide_type is SlideType.DATA_METRICS


# ---------------------------------------------------------------------------
# Truncation
# ---------------------------------------------------------------------------

class TestApplyTruncation:
    def test_overflow_moves_to_notes(self, structurer):
        body = "\n".join(f"- Item {c}" for c in "abcdef")
        result = structurer.apply_truncation([slide("Crowded", body)])
        assert result[0].body.count("\n") == 3
        assert result[0].speaker_notes.endswith("Additional details: Item e; Item f")

    def test_custom_limits(self, structurer):
        body = "- a\n- b\n- c"
        (result,) = structurer.apply_truncation([slide("T", body)],
                                                TruncationLimits(max_bullets=2))
        assert result.body == "- a\n- b"
