"""Outline generation collaborator."""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import Field

from blogflow.generation.base import ChatModel, complete_json
from blogflow.llm.client import ChatMessage
from blogflow.logging import get_logger
from blogflow.models.outline import Outline, WireModel
from blogflow.validation import Invalid, ValidationResult, validate_outline

logger = get_logger(__name__)


class OutlineRequest(WireModel):
    """Parameters of an outline generation request."""

    topic: dict[str, Any]
    style: Literal["academic", "conversational", "tutorial", "listicle"] = "conversational"
    depth: int = Field(default=2, ge=1, le=4)
    include_intro_conclusion: bool = True
    include_faq: bool = False
    keyword_strategy: Literal["aggressive", "balanced", "conservative"] = "balanced"


_SYSTEM = (
    "You are an SEO content strategist. Reply with a single JSON object and no other text. "
    "The object has keys sections, metadata and seoGuidance. Every section has id, title, "
    "type (h1-h4), content, keyPoints, recommendedWordCount, keywords {primary, secondary, "
    "semantic} and children. metadata has totalWordCount, keywordDensity, readabilityScore "
    "and seoScore. seoGuidance has keywordPlacements, contentGaps and competitorInsights."
)


def build_messages(request: OutlineRequest) -> list[ChatMessage]:
    brief = {
        "topic": request.topic,
        "style": request.style,
        "maxHeadingDepth": request.depth,
        "includeIntroConclusion": request.include_intro_conclusion,
        "includeFAQ": request.include_faq,
        "keywordStrategy": request.keyword_strategy,
    }
    return [
        ChatMessage(role="system", content=_SYSTEM),
        ChatMessage(role="user", content="Create a blog outline for this brief:\n" + json.dumps(brief, ensure_ascii=False)),
    ]


class OutlineGenerator:
    """Ask the LLM for an outline and validate the reply."""

    def __init__(self, llm: ChatModel, *, temperature: float = 0.7) -> None:
        self._llm = llm
        self._temperature = temperature

    def generate(self, request: OutlineRequest) -> ValidationResult[Outline]:
        """Generate an outline.

        Returns:
            `Valid(outline)`, or `Invalid(errors)` when the reply does not match the schema.

        Raises:
            GenerationError: The LLM could not be reached.
        """

        reply = complete_json(self._llm, build_messages(request), temperature=self._temperature)
        result = validate_outline(reply)
        if isinstance(result, Invalid):
            logger.warning("Generated outline failed validation", extra={"error_count": len(result.errors)})
        return result
