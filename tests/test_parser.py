"""Tests for the content parser."""

import pytest

from deck_constraints.processor.parser import (
    classify_section,
    extract_bullet_points,
    extract_quotes,
    extract_statistics,
    parse_content,
)
from deck_constraints.schema.models import SectionType


MARKDOWN = """# My Deck

Intro paragraph.

## The Problem
Customers face a real challenge.
- Slow onboarding
- High churn

## Market Size
Revenue grew 42% to $1.2M, a 3x increase.

## Next Steps
Thank you!
"""


@pytest.fixture
def parsed():
    return parse_content(MARKDOWN)


class TestParseMarkdown:
    def test_title(self, parsed):
        assert parsed.title == "My Deck"

    def test_sections(self, parsed):
        assert [s.heading for s in parsed.sections] == [
            "Overview", "The Problem", "Market Size", "Next Steps",
        ]
        assert parsed.sections[0].body == "Intro paragraph."

    def test_classification(self, parsed):
        assert [s.type for s in parsed.sections] == [
            SectionType.INTRODUCTION,
            SectionType.PROBLEM,
            SectionType.DATA,
            SectionType.CONCLUSION,
        ]

    def test_bullets(self, parsed):
        assert parsed.sections[1].bullet_points == ["Slow onboarding", "High churn"]

    def test_statistics(self, parsed):
        stats = parsed.sections[2].statistics
        assert "42%" in stats
        assert "$1.2M" in stats
        assert "3x" in stats

    def test_metadata(self, parsed):
        assert parsed.metadata.section_count == 4
        assert parsed.metadata.has_statistics
        assert not parsed.metadata.has_quotes
        assert parsed.metadata.word_count > 0


class TestParsePlainText:
    def test_empty(self):
        parsed = parse_content("   \n")
        assert parsed.title == "Untitled Presentation"
        assert parsed.sections == []
        assert parsed.metadata.word_count == 0

    def test_paragraph_sections(self):
        parsed = parse_content(
            "Deck Title\n\nFirst idea is great. More text.\n\nSecond idea here"
        )
        assert parsed.title == "Deck Title"
        assert [s.heading for s in parsed.sections] == [
            "First idea is great", "Second idea here",
        ]

    def test_single_paragraph(self):
        parsed = parse_content("Title\n\nJust one paragraph here.")
        assert [s.heading for s in parsed.sections] == ["Content"]

    def test_long_paragraph_heading_truncated(self):
        parsed = parse_content("T\n\none two three four five six seven\n\nOther.")
        assert parsed.sections[0].heading == "one two three four five six..."


class TestExtraction:
    def test_classify_default(self):
        assert classify_section("Zebra", "Plain words") is SectionType.INTRODUCTION

    def test_heading_outweighs_body(self):
        assert classify_section("Roadmap", "solution approach") is SectionType.PROCESS

    def test_bullet_markers(self):
        assert extract_bullet_points("- a\n* b\n+ c\nnot") == ["a", "b", "c"]

    def test_quotes(self):
        text = 'She said "this changed everything for us" and "hi".\n> Best product we ever used'
        assert extract_quotes(text) == [
            "this changed everything for us", "Best product we ever used",
        ]

    def test_statistics_deduplicated(self):
        assert extract_statistics("12,000 users and 12,000 more") == ["12,000"]
