"""Article content generation and section elaboration."""

from __future__ import annotations

import json
from typing import Literal

from pydantic import Field

from blogflow.errors import SectionNotFoundError
from blogflow.generation.base import ChatModel, complete_json
from blogflow.llm.client import ChatMessage
from blogflow.logging import get_logger
from blogflow.models.content import BlogContent, ElaboratedSection
from blogflow.models.outline import Outline, OutlineSection, WireModel
from blogflow.outline.tree import find_section
from blogflow.validation import Invalid, Valid, ValidationResult, validate_model

logger = get_logger(__name__)

STYLE_GUIDES = {
    "formal": "Use formal language, avoid contractions, maintain professional distance.",
    "conversational": "Write in a friendly, engaging tone, use contractions, address the reader directly.",
    "technical": "Include technical details, use industry terminology, provide in-depth explanations.",
    "storytelling": "Use narrative techniques, include examples, create an engaging flow.",
}

TONE_GUIDES = {
    "professional": "Maintain expertise and authority while being accessible.",
    "friendly": "Create a warm, approachable atmosphere while maintaining credibility.",
    "authoritative": "Project expertise and deep knowledge of the subject matter.",
    "educational": "Focus on clear explanations and step-by-step guidance.",
}

READABILITY_GUIDES = {
    "beginner": "Use simple language, short sentences and clear explanations.",
    "intermediate": "Balance accessibility with some technical terms, vary sentence structure.",
    "advanced": "Use industry terminology, complex concepts and detailed analysis.",
}


class ContentRequest(WireModel):
    """Parameters of a content generation request."""

    outline: Outline
    # Write only this section (and its subtree) instead of the whole outline.
    section: str | None = None
    style: Literal["formal", "conversational", "technical", "storytelling"] = "conversational"
    tone: Literal["professional", "friendly", "authoritative", "educational"] = "professional"
    readability_level: Literal["beginner", "intermediate", "advanced"] = "intermediate"


class ElaborateRequest(WireModel):
    """Parameters of a section elaboration request."""

    content: str = Field(min_length=1)
    section_id: str | None = None
    title: str = ""
    key_points: list[str] = Field(default_factory=list)
    target_word_count: int | None = Field(default=None, ge=1)
    instructions: str | None = None


_CONTENT_SYSTEM = (
    "You are an expert content writer and SEO specialist. Reply with a single JSON object "
    "and no other text. Write engaging markdown that follows the outline structure exactly "
    "and implements the SEO guidance naturally."
)

_CONTENT_SHAPE = {
    "sections": [
        {
            "id": "outline section id",
            "title": "string",
            "content": "markdown",
            "wordCount": 0,
            "keywordDensity": {"keyword": 0.0},
            "readabilityScore": 0,
        }
    ],
    "metadata": {
        "totalWordCount": 0,
        "averageReadabilityScore": 0,
        "keywordDensityOverall": {"keyword": 0.0},
        "seoScore": 0,
        "contentQualityMetrics": {"comprehensiveness": 0, "engagement": 0, "clarity": 0, "expertise": 0},
    },
    "seoAnalysis": {
        "keywordImplementation": {"keyword": {"actual": 0, "recommended": 0, "placement": ["section id"]}},
        "contentGapsCovered": ["string"],
        "missingTopics": ["string"],
        "suggestions": ["string"],
    },
}

_ELABORATE_SYSTEM = (
    "You are an expert blog content writer. Expand the given section while keeping its style, "
    "tone and key points. Add valuable details, examples and explanations. Reply with a JSON "
    'object {"content": "<markdown>"} and no other text.'
)


def build_messages(request: ContentRequest, target: OutlineSection | None = None) -> list[ChatMessage]:
    outline = request.outline
    guidance = outline.seo_guidance
    brief = {
        "scope": "single section" if target else "full outline",
        "structure": target.to_wire() if target else [s.to_wire() for s in outline.sections],
        "style": STYLE_GUIDES[request.style],
        "tone": TONE_GUIDES[request.tone],
        "readability": READABILITY_GUIDES[request.readability_level],
        "keywordPlacements": {
            keyword: {"recommended": placement.recommended, "sections": placement.sections}
            for keyword, placement in guidance.keyword_placements.items()
        },
        "contentGaps": guidance.content_gaps,
        "competitorInsights": guidance.competitor_insights.to_wire(),
    }
    return [
        ChatMessage(role="system", content=_CONTENT_SYSTEM),
        ChatMessage(
            role="user",
            content=(
                "Write the blog content for this brief:\n"
                + json.dumps(brief, ensure_ascii=False)
                + "\nReply with JSON shaped like:\n"
                + json.dumps(_CONTENT_SHAPE)
            ),
        ),
    ]


def build_elaborate_messages(request: ElaborateRequest) -> list[ChatMessage]:
    lines = []
    if request.title:
        lines.append(f"Section title: {request.title}")
    if request.key_points:
        lines.append("Key points: " + "; ".join(request.key_points))
    if request.target_word_count:
        lines.append(f"Target length: about {request.target_word_count} words")
    if request.instructions:
        lines.append(f"Instructions: {request.instructions}")
    lines.append("Current content:\n" + request.content)
    return [
        ChatMessage(role="system", content=_ELABORATE_SYSTEM),
        ChatMessage(role="user", content="\n".join(lines)),
    ]


def word_count(text: str) -> int:
    return len(text.split())


class ContentGenerator:
    """Write article content from an outline, and expand single sections."""

    def __init__(self, llm: ChatModel, *, temperature: float = 0.7) -> None:
        self._llm = llm
        self._temperature = temperature

    def generate(self, request: ContentRequest) -> ValidationResult[BlogContent]:
        """Generate content for the whole outline or for `request.section`.

        Raises:
            SectionNotFoundError: `request.section` is not in the outline.
            GenerationError: The LLM could not be reached.
        """

        target = None
        if request.section is not None:
            target = find_section(request.outline, request.section)
            if target is None:
                raise SectionNotFoundError(request.section)

        reply = complete_json(self._llm, build_messages(request, target), temperature=self._temperature)
        result = validate_model(BlogContent, reply)
        if isinstance(result, Invalid):
            logger.warning("Generated content failed validation", extra={"error_count": len(result.errors)})
        return result

    def elaborate(self, request: ElaborateRequest) -> ValidationResult[ElaboratedSection]:
        """Expand one section's body.

        The word count is measured on the returned text, not taken from the LLM.

        Raises:
            GenerationError: The LLM could not be reached.
        """

        reply = complete_json(self._llm, build_elaborate_messages(request), temperature=self._temperature)
        result = validate_model(ElaboratedSection, reply)
        if isinstance(result, Invalid):
            logger.warning("Elaborated section failed validation", extra={"error_count": len(result.errors)})
            return result
        content = result.value.content
        return Valid(
            ElaboratedSection(section_id=request.section_id, content=content, word_count=word_count(content))
        )
