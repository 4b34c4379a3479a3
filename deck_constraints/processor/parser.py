"""Content parser — splits raw Markdown or plain text into typed sections.

Sections come from ``##``/``###`` headings when present, otherwise from
blank-line separated paragraphs. Each section is classified by keyword
scoring and has its bullets, statistics and quotes extracted, ready for
the slide structurer.

Usage::

    from deck_constraints.processor.parser import parse_content

    parsed = parse_content(Path("notes.md").read_text())
    for section in parsed.sections:
        print(section.type.value, section.heading)
"""

import re

import structlog

from deck_constraints.qa.markup import count_plain_words
from deck_constraints.schema.models import (
    ContentMetadata,
    ParsedContent,
    ParsedSection,
    SectionType,
)

logger = structlog.get_logger(__name__)

UNTITLED = "Untitled Presentation"

TITLE_HEADING_PATTERN = re.compile(r"^#[ \t]+(.+)$", re.MULTILINE)
SECTION_HEADING_PATTERN = re.compile(r"^(#{2,3})[ \t]+(.+)$", re.MULTILINE)
PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
FIRST_SENTENCE = re.compile(r"^[^.!?]+[.!?]")
BULLET_ITEM = re.compile(r"^\s*[-*+]\s+(.+)")
DOUBLE_QUOTED = re.compile(r"\"([^\"]{10,})\"")
BLOCKQUOTE_LINE = re.compile(r"^>\s*(.+)$", re.MULTILINE)

STATISTIC_PATTERNS = (
    re.compile(r"[+-]?\d+(?:\.\d+)?%"),                # 42%, +3.5%
    re.compile(r"\$[\d,]+(?:\.\d+)?[KMBTkmbt]?"),      # $1.2M, $1,000
    re.compile(r"\b\d+(?:\.\d+)?[KMBTkmbt]\b"),         # 500K, 2B
    re.compile(r"\b\d{1,3}(?:,\d{3})+\b"),              # 12,000
    re.compile(r"\b\d+(?:\.\d+)?x\b", re.IGNORECASE),   # 10x
)

# Visual humor is never inferred from text; it is assigned explicitly.
SECTION_TYPE_KEYWORDS: dict[SectionType, tuple[str, ...]] = {
    SectionType.INTRODUCTION: (
        "introduction", "intro", "overview", "about", "background",
        "welcome", "agenda", "outline",
    ),
    SectionType.PROBLEM: (
        "problem", "challenge", "issue", "pain", "gap", "obstacle",
        "difficulty", "limitation", "risk", "threat",
    ),
    SectionType.SOLUTION: (
        "solution", "approach", "proposal", "strategy", "method",
        "how we", "our approach", "implementation", "product", "platform",
    ),
    SectionType.DATA: (
        "data", "metrics", "numbers", "statistics", "results",
        "performance", "analytics", "kpi", "growth", "revenue",
        "market", "market size", "tam", "sam", "som", "traction",
    ),
    SectionType.QUOTE: (
        "quote", "testimonial", "what they say", "feedback",
        "customer voice", "endorsement",
    ),
    SectionType.PROCESS: (
        "process", "workflow", "steps", "how it works", "pipeline",
        "roadmap", "timeline", "phases", "milestones",
    ),
    SectionType.COMPARISON: (
        "comparison", "versus", "vs", "compare", "alternatives",
        "competitive", "benchmark", "landscape", "pros and cons",
    ),
    SectionType.CONCLUSION: (
        "conclusion", "summary", "recap", "next steps", "takeaway",
        "action items", "closing", "thank", "q&a", "questions",
        "call to action", "ask", "team",
    ),
}

HEADING_HIT_SCORE = 3
BODY_HIT_SCORE = 1


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def classify_section(heading: str, body: str) -> SectionType:
    """Best keyword match for a section; heading hits outweigh body hits.

    Ties keep the earlier type, and no hits at all means introduction.
    """
    heading_lower = heading.lower()
    combined = f"{heading} {body}".lower()
    best_type = SectionType.INTRODUCTION
    best_score = 0
    for section_type, keywords in SECTION_TYPE_KEYWORDS.items():
        score = 0
        for keyword in keywords:
            if keyword in heading_lower:
                score += HEADING_HIT_SCORE
            elif keyword in combined:
                score += BODY_HIT_SCORE
        if score > best_score:
            best_score = score
            best_type = section_type
    return best_type


def extract_bullet_points(body: str) -> list[str]:
    bullets = []
    for line in body.split("\n"):
        m = BULLET_ITEM.match(line)
        if m:
            bullets.append(m.group(1).strip())
    return bullets


def extract_statistics(text: str) -> list[str]:
    """Percentages, money, suffixed and comma-grouped numbers, multipliers."""
    found: dict[str, None] = {}
    for pattern in STATISTIC_PATTERNS:
        for m in pattern.finditer(text):
            found[m.group(0)] = None
    return list(found)


def extract_quotes(text: str) -> list[str]:
    """Double-quoted passages and blockquote lines of 10+ characters."""
    quotes = [m.group(1) for m in DOUBLE_QUOTED.finditer(text)]
    for m in BLOCKQUOTE_LINE.finditer(text):
        content = m.group(1).strip()
        if len(content) >= 10:
            quotes.append(content)
    return quotes


# ---------------------------------------------------------------------------
# Sectioning
# ---------------------------------------------------------------------------

def extract_title(text: str) -> str:
    m = TITLE_HEADING_PATTERN.search(text)
    if m:
        return m.group(1).strip()
    for line in text.split("\n"):
        stripped = line.strip()
        if stripped and not stripped.startswith("##"):
            return stripped
    return UNTITLED


def remove_title(text: str) -> str:
    m = TITLE_HEADING_PATTERN.search(text)
    if m:
        return text.replace(m.group(0), "", 1).strip()

    lines = text.split("\n")
    for i, line in enumerate(lines):
        if line.strip():
            return "\n".join(lines[:i] + lines[i + 1:]).strip()
    return text.strip()


def _truncate_words(text: str, max_words: int) -> str:
    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + "..."


def split_by_headings(text: str, matches: list[re.Match]) -> list[tuple[str, str]]:
    sections = []
    preamble = text[:matches[0].start()].strip()
    if preamble:
        sections.append(("Overview", preamble))
    for i, m in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        sections.append((m.group(2).strip(), text[m.end():end].strip()))
    return sections


def split_by_paragraphs(text: str) -> list[tuple[str, str]]:
    paragraphs = [p.strip() for p in PARAGRAPH_BREAK.split(text) if p.strip()]
    if len(paragraphs) == 1:
        return [("Content", paragraphs[0])]

    sections = []
    for i, paragraph in enumerate(paragraphs):
        first = FIRST_SENTENCE.match(paragraph)
        if first:
            heading = first.group(0)[:-1].strip()
        else:
            heading = _truncate_words(paragraph, 6)
        sections.append((heading or f"Section {i + 1}", paragraph))
    return sections


def extract_sections(text: str) -> list[tuple[str, str]]:
    """``(heading, body)`` pairs from headings, or paragraphs as a fallback."""
    text = text.strip()
    if not text:
        return []
    matches = list(SECTION_HEADING_PATTERN.finditer(text))
    if matches:
        return split_by_headings(text, matches)
    return split_by_paragraphs(text)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def parse_content(raw: str) -> ParsedContent:
    """Parse raw text or Markdown into a titled list of classified sections."""
    text = raw.strip()
    if not text:
        return ParsedContent(title=UNTITLED)

    title = extract_title(text)
    raw_sections = extract_sections(remove_title(text))

    sections = [
        ParsedSection(
            heading=heading,
            body=body,
            type=classify_section(heading, body),
            bullet_points=extract_bullet_points(body),
            statistics=extract_statistics(body),
            quotes=extract_quotes(body),
        )
        for heading, body in raw_sections
    ]

    all_text = " ".join(f"{heading} {body}" for heading, body in raw_sections)
    metadata = ContentMetadata(
        word_count=count_plain_words(all_text),
        section_count=len(sections),
        has_statistics=any(s.statistics for s in sections),
        has_quotes=any(s.quotes for s in sections),
    )
    logger.debug("content_parsed", title=title, sections=len(sections),
                 words=metadata.word_count)
    return ParsedContent(title=title, sections=sections, metadata=metadata)
