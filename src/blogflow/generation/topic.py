"""Topic idea generation collaborator.

The LLM proposes angles on a main topic. Ideas that drift off the topic are
dropped, and a reply with too few relevant ideas counts as invalid so the
caller can retry.
"""

from __future__ import annotations

import json
from typing import Literal

from pydantic import Field

from blogflow.errors import CollaboratorError
from blogflow.generation.base import ChatModel, complete_json
from blogflow.llm.client import ChatMessage
from blogflow.logging import get_logger
from blogflow.models.outline import WireModel
from blogflow.models.topic import Difficulty, TopicIdea, TopicList
from blogflow.search.service import CachedSearchService
from blogflow.validation import Invalid, Valid, ValidationResult, validate_model

logger = get_logger(__name__)

WORD_COUNT_RANGES = {
    "short": "800-1200",
    "medium": "1500-2500",
    "long": "3000-4000",
}


class TopicRequest(WireModel):
    """Parameters of a topic generation request."""

    main_topic: str = Field(min_length=1)
    niche: str | None = None
    target_audience: str | None = None
    content_length: Literal["short", "medium", "long"] = "medium"
    difficulty: Difficulty = "intermediate"
    include_serp_data: bool = False
    count: int = Field(default=5, ge=1, le=10)


_SYSTEM = (
    "You are an expert content strategist and SEO specialist. Reply with a single JSON "
    "object and no other text. Every topic must directly relate to the main topic, and "
    "the main topic must appear in each title, description and keyword list."
)


def topic_keywords(main_topic: str) -> list[str]:
    return main_topic.lower().split()


def is_relevant(topic: TopicIdea, main_topic: str) -> bool:
    """True when the title, the description and some keyword all mention a word of the main topic."""

    words = topic_keywords(main_topic)
    if not words:
        return False
    title = topic.title.lower()
    description = topic.description.lower()
    return (
        any(word in title for word in words)
        and any(word in description for word in words)
        and any(word in keyword.lower() for keyword in topic.target_keywords for word in words)
    )


def build_messages(request: TopicRequest) -> list[ChatMessage]:
    brief = {
        "mainTopic": request.main_topic,
        "niche": request.niche,
        "targetAudience": request.target_audience,
        "difficulty": request.difficulty,
        "targetWordCount": WORD_COUNT_RANGES[request.content_length],
        "focusKeywords": [word for word in topic_keywords(request.main_topic) if len(word) > 2],
        "ideas": request.count,
    }
    shape = {
        "topics": [
            {
                "title": "string",
                "description": "string",
                "targetKeywords": ["string"],
                "difficulty": request.difficulty,
                "estimatedWordCount": 0,
                "competitorInsights": {"averageWordCount": 0, "commonSubtopics": ["string"], "keywordGaps": ["string"]},
            }
        ]
    }
    return [
        ChatMessage(role="system", content=_SYSTEM),
        ChatMessage(
            role="user",
            content=(
                f"Suggest {request.count} distinct blog post ideas for this brief:\n"
                + json.dumps(brief, ensure_ascii=False)
                + "\nReply with JSON shaped like:\n"
                + json.dumps(shape)
            ),
        ),
    ]


class TopicGenerator:
    """Ask the LLM for topic ideas, keep the relevant ones, optionally attach search data."""

    def __init__(
        self,
        llm: ChatModel,
        *,
        temperature: float = 0.7,
        search: CachedSearchService | None = None,
    ) -> None:
        self._llm = llm
        self._temperature = temperature
        self._search = search

    def generate(self, request: TopicRequest) -> ValidationResult[list[TopicIdea]]:
        """Generate topic ideas.

        Returns:
            `Valid(ideas)` holding only ideas relevant to `request.main_topic`,
            or `Invalid(errors)` when the reply is malformed or fewer than
            `request.count` ideas are relevant.

        Raises:
            GenerationError: The LLM could not be reached.
        """

        reply = complete_json(self._llm, build_messages(request), temperature=self._temperature)
        result = validate_model(TopicList, reply)
        if isinstance(result, Invalid):
            logger.warning("Generated topics failed validation", extra={"error_count": len(result.errors)})
            return result

        proposed = result.value.topics
        relevant = [topic for topic in proposed if is_relevant(topic, request.main_topic)]
        logger.info("Generated topics", extra={"proposed": len(proposed), "relevant": len(relevant)})
        if len(relevant) < request.count:
            return Invalid(
                errors=[
                    f"only {len(relevant)} of {len(proposed)} generated topics relate to "
                    f"{request.main_topic!r}, {request.count} needed"
                ]
            )

        if request.include_serp_data:
            relevant = self._with_search_data(relevant, request.main_topic)
        return Valid(relevant)

    def _with_search_data(self, topics: list[TopicIdea], main_topic: str) -> list[TopicIdea]:
        if self._search is None:
            logger.warning("Search data requested but no search service is configured")
            return topics
        try:
            serp = self._search.search(main_topic)
        except CollaboratorError:
            logger.warning("Could not attach search data to topics", exc_info=True)
            return topics

        enriched = []
        for topic in topics:
            insights = topic.competitor_insights.model_copy(
                update={
                    "top_results": serp.organic_results[:5],
                    "featured_snippets": serp.featured_snippets,
                    "related_searches": serp.related_searches,
                }
            )
            enriched.append(topic.model_copy(update={"competitor_insights": insights}))
        return enriched
