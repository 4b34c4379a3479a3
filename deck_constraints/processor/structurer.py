"""Slide structurer — turns parsed content sections into a numbered deck.

Each presentation archetype has a fixed template: a title slide, the
archetype's required sections (synthesised when the content lacks them),
the remaining sections, and a closing call-to-action. Dense sections are
split on the way in; the finished deck is then merged or padded into the
archetype's slide-count range and renumbered 1..N.

Usage::

    from deck_constraints.processor.structurer import structure_slides

    slides = structure_slides(parsed, PresentationType.VC_PITCH)
"""

import dataclasses
import math
from dataclasses import dataclass
from typing import Callable

import structlog

from deck_constraints.qa.density import chunk
from deck_constraints.qa.markup import (
    count_plain_words,
    split_sentences,
    strip_split_suffix,
)
from deck_constraints.schema.models import (
    ParsedContent,
    ParsedSection,
    PresentationType,
    SectionType,
    SlideDefinition,
    SlideType,
)
from deck_constraints.schema.policy import STRUCTURER_MAX_BULLETS, STRUCTURER_MAX_WORDS

from .truncator import TruncationLimits, truncate_slides

logger = structlog.get_logger(__name__)

UNMERGEABLE = frozenset({SlideType.TITLE, SlideType.CTA})


@dataclass
class SlideRangeResult:
    """Outcome of fitting a deck into a slide-count range.

    ``within_range`` is False when merging stopped early because no
    adjacent pair could be merged without exceeding the word budget.
    """
    slides: list[SlideDefinition]
    within_range: bool
    merges: int = 0
    insertions: int = 0


@dataclass(frozen=True)
class _RequiredSection:
    type: SectionType
    fallback_title: str
    fallback_body: str


_VC_REQUIRED = (
    _RequiredSection(SectionType.PROBLEM, "The Problem",
                     "A significant market pain point that needs solving."),
    _RequiredSection(SectionType.SOLUTION, "Our Solution",
                     "Our unique approach to solving this problem."),
    _RequiredSection(SectionType.DATA, "Market Opportunity",
                     "Total addressable market and growth trajectory."),
)

_EXEC_FINDINGS = frozenset({SectionType.DATA, SectionType.PROBLEM, SectionType.COMPARISON})
_EXEC_RECOMMENDATIONS = frozenset({SectionType.SOLUTION, SectionType.PROCESS})


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def truncate_to_sentence(text: str, max_words: int) -> str:
    """First ``max_words`` words, cut back to a sentence end when one is near."""
    words = text.split()
    if len(words) <= max_words:
        return text
    truncated = " ".join(words[:max_words])
    last_period = truncated.rfind(".")
    if last_period > len(truncated) / 2:
        return truncated[:last_period + 1]
    return truncated + "..."


def bullet_body(bullets: list[str]) -> str:
    return "\n".join(f"- {b}" for b in bullets)


# ---------------------------------------------------------------------------
# SlideStructurer
# ---------------------------------------------------------------------------

class SlideStructurer:
    """Builds slide decks from parsed sections.

    Parameters
    ----------
    max_words : int
        Body word count above which a section is split in two.
    max_bullets : int
        Bullet count above which a section's bullets are chunked.
    """

    def __init__(self, max_words: int = STRUCTURER_MAX_WORDS,
                 max_bullets: int = STRUCTURER_MAX_BULLETS) -> None:
        self.max_words = max_words
        self.max_bullets = max_bullets
        self._templates: dict[PresentationType, Callable[[ParsedContent], list[SlideDefinition]]] = {
            PresentationType.STANDARD: self._structure_standard,
            PresentationType.VC_PITCH: self._structure_vc_pitch,
            PresentationType.TECHNICAL: self._structure_technical,
            PresentationType.EXECUTIVE: self._structure_executive,
        }

    def structure_slides(self, content: ParsedContent,
                         presentation_type: "PresentationType | str") -> list[SlideDefinition]:
        """Build the deck for ``content`` using the archetype's template."""
        archetype = PresentationType.parse(presentation_type)
        slides = self._templates[archetype](content)
        min_slides, max_slides = archetype.slide_range
        result = self.fit_slide_range(slides, min_slides, max_slides)
        logger.debug("slides_structured", archetype=archetype.value,
                     sections=len(content.sections), slides=len(result.slides),
                     merges=result.merges, insertions=result.insertions)
        return result.slides

    # ------------------------------------------------------------------
    # Slide builders
    # ------------------------------------------------------------------

    def build_title_slide(self, title: str, subtitle: str | None = None) -> SlideDefinition:
        return SlideDefinition(
            slide_number=1,
            title=title,
            body=subtitle or "",
            speaker_notes=f"Welcome to the presentation: {title}. {subtitle or ''}".strip(),
            slide_type=SlideType.TITLE,
            image_prompt_hint=f"Professional title slide background for a presentation about: {title}",
        )

    def build_content_slide(self, section: ParsedSection, slide_number: int) -> SlideDefinition:
        body = bullet_body(section.bullet_points) if section.bullet_points else section.body
        return SlideDefinition(
            slide_number=slide_number,
            title=section.heading,
            body=body,
            speaker_notes=self.build_speaker_notes(section),
            slide_type=section.type.slide_type,
            image_prompt_hint=self.build_image_prompt_hint(section),
        )

    def build_cta_slide(self, content: ParsedContent) -> SlideDefinition:
        """Closing slide from the first conclusion section, or a generic close."""
        conclusion = next(
            (s for s in content.sections if s.type is SectionType.CONCLUSION), None,
        )
        if conclusion is None:
            title = "Next Steps"
            body = "Thank you for your time.\n\nQuestions?"
        else:
            title = conclusion.heading
            body = (bullet_body(conclusion.bullet_points)
                    if conclusion.bullet_points else conclusion.body)
        return SlideDefinition(
            slide_number=0,
            title=title,
            body=body,
            speaker_notes="Wrap up the presentation. Open the floor for questions and discussion.",
            slide_type=SlideType.CTA,
            image_prompt_hint="Professional closing slide with call to action, clean and minimal design",
        )

    def build_fallback_slide(self, title: str, body: str, slide_type: SlideType,
                             speaker_notes: str, image_prompt_hint: str) -> SlideDefinition:
        return SlideDefinition(
            slide_number=0,
            title=title,
            body=body,
            speaker_notes=speaker_notes,
            slide_type=slide_type,
            image_prompt_hint=image_prompt_hint,
        )

    def build_speaker_notes(self, section: ParsedSection) -> str:
        parts = [f"Key topic: {section.heading}."]
        if section.statistics:
            parts.append(f"Key statistics: {', '.join(section.statistics)}.")
        if section.quotes:
            parts.append(f"Notable quote: \"{section.quotes[0]}\".")
        preview = truncate_to_sentence(section.body, 50)
        if preview:
            parts.append(f"Details: {preview}")
        return " ".join(parts)

    def build_image_prompt_hint(self, section: ParsedSection) -> str:
        return f"{section.type.image_hint}. Topic: {section.heading}"

    # ------------------------------------------------------------------
    # Splitting
    # ------------------------------------------------------------------

    def build_section_slides(self, section: ParsedSection,
                             start_number: int) -> list[SlideDefinition]:
        """One or more slides for a section, splitting dense content.

        VISUAL_HUMOR slides are image-forward and never split.
        """
        base = self.build_content_slide(section, start_number)
        if base.slide_type is SlideType.VISUAL_HUMOR:
            return [base]
        if len(section.bullet_points) > self.max_bullets:
            return self.split_by_bullets(section, start_number)
        if count_plain_words(base.body) > self.max_words:
            return self.split_by_sentences(section, start_number)
        return [base]

    def split_by_bullets(self, section: ParsedSection,
                         start_number: int) -> list[SlideDefinition]:
        chunks = chunk(section.bullet_points, self.max_bullets)
        notes = self.build_speaker_notes(section)
        hint = self.build_image_prompt_hint(section)
        slides = []
        for i, bullets in enumerate(chunks):
            suffix = f" ({i + 1}/{len(chunks)})" if len(chunks) > 1 else ""
            slides.append(SlideDefinition(
                slide_number=start_number + i,
                title=f"{section.heading}{suffix}",
                body=bullet_body(bullets),
                speaker_notes=notes,
                slide_type=section.type.slide_type,
                image_prompt_hint=hint,
            ))
        return slides

    def split_by_sentences(self, section: ParsedSection,
                           start_number: int) -> list[SlideDefinition]:
        """Halve a prose section at a sentence boundary.

        A single sentence cannot be split and yields one slide.
        """
        sentences = split_sentences(section.body)
        if len(sentences) <= 1:
            return [self.build_content_slide(section, start_number)]

        mid = math.ceil(len(sentences) / 2)
        hint = self.build_image_prompt_hint(section)
        slide_type = section.type.slide_type
        return [
            SlideDefinition(
                slide_number=start_number,
                title=f"{section.heading} (1/2)",
                body=" ".join(sentences[:mid]),
                speaker_notes=self.build_speaker_notes(section),
                slide_type=slide_type,
                image_prompt_hint=hint,
            ),
            SlideDefinition(
                slide_number=start_number + 1,
                title=f"{section.heading} (2/2)",
                body=" ".join(sentences[mid:]),
                speaker_notes="Continue from previous slide.",
                slide_type=slide_type,
                image_prompt_hint=hint,
            ),
        ]

    def _extend_sections(self, slides: list[SlideDefinition],
                         sections: list[ParsedSection]) -> None:
        for section in sections:
            slides.extend(self.build_section_slides(section, len(slides) + 1))

    # ------------------------------------------------------------------
    # Archetype templates
    # ------------------------------------------------------------------

    def _close(self, slides: list[SlideDefinition], cta: SlideDefinition) -> list[SlideDefinition]:
        cta.slide_number = len(slides) + 1
        slides.append(cta)
        return slides

    def _structure_standard(self, content: ParsedContent) -> list[SlideDefinition]:
        """Title, agenda, content sections, conclusion. Target 8-16."""
        slides = [self.build_title_slide(content.title, "Overview")]
        body_sections = [s for s in content.sections if s.type is not SectionType.CONCLUSION]

        if len(content.sections) > 2:
            slides.append(SlideDefinition(
                slide_number=2,
                title="Agenda",
                body=bullet_body([s.heading for s in body_sections]),
                speaker_notes="Walk through the agenda items for this presentation.",
                slide_type=SlideType.CONTENT,
                image_prompt_hint="Clean agenda or table of contents slide with numbered items",
            ))

        self._extend_sections(slides, body_sections)
        return self._close(slides, self.build_cta_slide(content))

    def _structure_vc_pitch(self, content: ParsedContent) -> list[SlideDefinition]:
        """Title, problem, solution, market, remaining sections, the ask. Target 10-14."""
        slides = [self.build_title_slide(content.title, "Investor Pitch")]

        for required in _VC_REQUIRED:
            found = next((s for s in content.sections if s.type is required.type), None)
            if found is not None:
                self._extend_sections(slides, [found])
                continue
            slides.append(self.build_fallback_slide(
                required.fallback_title,
                required.fallback_body,
                required.type.slide_type,
                f"Discuss: {required.fallback_title}",
                f"Business presentation slide about {required.fallback_title.lower()}",
            ))

        covered = {r.type for r in _VC_REQUIRED} | {SectionType.CONCLUSION}
        self._extend_sections(slides, [s for s in content.sections if s.type not in covered])

        cta = self.build_cta_slide(content)
        if cta.title == "Next Steps":
            cta.title = "The Ask"
        return self._close(slides, cta)

    def _structure_technical(self, content: ParsedContent) -> list[SlideDefinition]:
        """Title, context, architecture, deep dives, demo, Q&A. Target 12-18."""
        slides = [self.build_title_slide(content.title, "Technical Deep Dive")]

        intro = next(
            (s for s in content.sections if s.type is SectionType.INTRODUCTION), None,
        )
        if intro is not None:
            slides.append(self.build_content_slide(intro, len(slides) + 1))
        else:
            slides.append(self.build_fallback_slide(
                "Context",
                "Technical background and motivation for this work.",
                SlideType.CONTENT,
                "Set the technical context for the audience.",
                "Technical context diagram, system overview, clean blueprint style",
            ))

        arch = next(
            (s for s in content.sections
             if "architecture" in s.heading.lower()
             or "design" in s.heading.lower()
             or s.type is SectionType.PROCESS),
            None,
        )
        if arch is not None:
            arch_slide = self.build_content_slide(arch, len(slides) + 1)
            arch_slide.slide_type = SlideType.ARCHITECTURE
            slides.append(arch_slide)
        else:
            slides.append(self.build_fallback_slide(
                "Architecture",
                "System architecture and design decisions.",
                SlideType.ARCHITECTURE,
                "Walk through the high-level architecture.",
                "System architecture diagram, boxes and arrows, technical blueprint",
            ))

        covered = [s for s in (intro, arch) if s is not None]
        self._extend_sections(slides, [
            s for s in content.sections
            if not any(s is c for c in covered) and s.type is not SectionType.CONCLUSION
        ])

        slides.append(self.build_fallback_slide(
            "Demo",
            "Live demonstration of the system in action.",
            SlideType.CONTENT,
            "Run the prepared demo. Have fallback screenshots ready.",
            "Demo or live coding screenshot placeholder, terminal and code editor",
        ))

        cta = self.build_cta_slide(content)
        cta.title = "Q&A"
        cta.body = "Questions and Discussion"
        return self._close(slides, cta)

    def _structure_executive(self, content: ParsedContent) -> list[SlideDefinition]:
        """Title, summary, findings, recommendations, next steps. Target 8-12."""
        slides = [self.build_title_slide(content.title, "Executive Briefing")]

        summary = "\n\n".join(
            f"**{s.heading}:** {truncate_to_sentence(s.body, 30)}"
            for s in content.sections[:3]
        )
        slides.append(self.build_fallback_slide(
            "Executive Summary",
            summary or "Key findings and recommendations at a glance.",
            SlideType.CONTENT,
            "High-level overview of the key points. Details follow.",
            "Executive summary dashboard, clean KPI cards, professional design",
        ))

        findings = [s for s in content.sections if s.type in _EXEC_FINDINGS]
        if findings:
            self._extend_sections(slides, findings)
        else:
            slides.append(self.build_fallback_slide(
                "Key Findings",
                "Analysis results and critical observations.",
                SlideType.DATA_METRICS,
                "Present the core findings that drive the recommendations.",
                "Data visualization, charts and graphs, executive dashboard",
            ))

        recommendations = [s for s in content.sections if s.type in _EXEC_RECOMMENDATIONS]
        if recommendations:
            for section in recommendations:
                for slide in self.build_section_slides(section, len(slides) + 1):
                    if "Recommendation" not in slide.title:
                        slide.title = f"Recommendation: {slide.title}"
                    slides.append(slide)
        else:
            slides.append(self.build_fallback_slide(
                "Recommendations",
                "Proposed actions based on the findings.",
                SlideType.CONTENT,
                "Walk through each recommendation and its expected impact.",
                "Strategic recommendations, roadmap or action plan visual",
            ))

        covered = _EXEC_FINDINGS | _EXEC_RECOMMENDATIONS | {SectionType.CONCLUSION}
        self._extend_sections(slides, [s for s in content.sections if s.type not in covered])

        cta = self.build_cta_slide(content)
        cta.title = "Next Steps"
        return self._close(slides, cta)

    # ------------------------------------------------------------------
    # Slide-count range
    # ------------------------------------------------------------------

    def find_merge_candidate(self, slides: list[SlideDefinition]) -> int:
        """Index of the adjacent pair with the fewest combined words, or -1.

        Title and CTA slides are never merged, and a merge may not exceed
        the structurer's word budget. Ties go to the earliest pair.
        """
        best_index = -1
        best_words = math.inf
        for i in range(1, len(slides) - 1):
            current = slides[i]
            following = slides[i + 1]
            if current.slide_type in UNMERGEABLE or following.slide_type in UNMERGEABLE:
                continue
            combined = count_plain_words(current.body) + count_plain_words(following.body)
            if combined < best_words and combined <= self.max_words:
                best_words = combined
                best_index = i
        return best_index

    def merge_slides(self, first: SlideDefinition, second: SlideDefinition) -> SlideDefinition:
        return SlideDefinition(
            slide_number=first.slide_number,
            title=strip_split_suffix(first.title),
            body=f"{first.body}\n\n{second.body}",
            speaker_notes=f"{first.speaker_notes}\n\n{second.speaker_notes}",
            slide_type=first.slide_type,
            image_prompt_hint=first.image_prompt_hint,
        )

    def build_transition_slide(self) -> SlideDefinition:
        return SlideDefinition(
            slide_number=0,
            title="Key Takeaway",
            body="Summarizing the core insight from the preceding section.",
            speaker_notes="Pause for emphasis. Let the audience absorb the key point.",
            slide_type=SlideType.CONTENT,
            image_prompt_hint="Minimalist transition slide, key insight highlight, clean design",
        )

    def fit_slide_range(self, slides: list[SlideDefinition],
                        min_slides: int, max_slides: int) -> SlideRangeResult:
        """Merge or pad ``slides`` toward ``[min_slides, max_slides]``.

        Merging is best-effort: it stops when no eligible pair remains. Pad
        slides go immediately before the final (closing) slide, or after it
        when the deck is empty or ends on its title slide. The input
        list is left untouched; the result is renumbered 1..N.
        """
        result = list(slides)
        merges = 0
        # Every merge removes one slide, so this is bounded by len(slides).
        while len(result) > max_slides:
            index = self.find_merge_candidate(result)
            if index < 0:
                break
            merged = self.merge_slides(result[index], result[index + 1])
            result[index:index + 2] = [merged]
            merges += 1

        insertions = 0
        while len(result) < min_slides:
            if result and result[-1].slide_type is not SlideType.TITLE:
                position = len(result) - 1
            else:
                position = len(result)
            result.insert(position, self.build_transition_slide())
            insertions += 1

        within_range = len(result) <= max_slides
        if not within_range:
            logger.warning("slide_range_not_met", slides=len(result),
                           max_slides=max_slides, merges=merges)

        renumbered = [
            dataclasses.replace(slide, slide_number=number)
            for number, slide in enumerate(result, start=1)
        ]
        return SlideRangeResult(
            slides=renumbered,
            within_range=within_range,
            merges=merges,
            insertions=insertions,
        )

    def enforce_slide_range(self, slides: list[SlideDefinition],
                            min_slides: int, max_slides: int) -> list[SlideDefinition]:
        return self.fit_slide_range(slides, min_slides, max_slides).slides

    def apply_truncation(self, slides: list[SlideDefinition],
                         limits: TruncationLimits | None = None) -> list[SlideDefinition]:
        """Trim slide bodies to ``limits``, moving overflow into speaker notes."""
        return truncate_slides(slides, limits or TruncationLimits())


# ---------------------------------------------------------------------------
# Convenience functions
# ---------------------------------------------------------------------------

_DEFAULT_STRUCTURER = SlideStructurer()


def structure_slides(content: "ParsedContent | list[ParsedSection]",
                     presentation_type: "PresentationType | str" = PresentationType.STANDARD,
                     title: str = "Untitled Presentation") -> list[SlideDefinition]:
    """Structure parsed content (or a bare list of sections) into slides."""
    if not isinstance(content, ParsedContent):
        content = ParsedContent(title=title, sections=list(content))
    return _DEFAULT_STRUCTURER.structure_slides(content, presentation_type)


def enforce_slide_range(slides: list[SlideDefinition], min_slides: int,
                        max_slides: int) -> list[SlideDefinition]:
    return _DEFAULT_STRUCTURER.enforce_slide_range(slides, min_slides, max_slides)


def fit_slide_range(slides: list[SlideDefinition], min_slides: int,
                    max_slides: int) -> SlideRangeResult:
    return _DEFAULT_STRUCTURER.fit_slide_range(slides, min_slides, max_slides)
