"""Topic idea models."""

from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import Field

from blogflow.models.outline import WireModel
from blogflow.models.search import SerpResult
from blogflow.utils.ids import new_topic_id

Difficulty = Literal["beginner", "intermediate", "advanced"]


class TopicCompetitorInsights(WireModel):
    """What ranking articles on the topic cover, plus optional live search data."""

    generated_required: ClassVar[tuple[str, ...]] = ("averageWordCount", "commonSubtopics", "keywordGaps")

    average_word_count: int = Field(default=0, ge=0)
    common_subtopics: list[str] = Field(default_factory=list)
    keyword_gaps: list[str] = Field(default_factory=list)
    top_results: list[SerpResult] = Field(default_factory=list)
    featured_snippets: list[str] = Field(default_factory=list)
    related_searches: list[str] = Field(default_factory=list)


class TopicIdea(WireModel):
    """A candidate blog post angle on a main topic."""

    generated_required: ClassVar[tuple[str, ...]] = (
        "title",
        "description",
        "targetKeywords",
        "difficulty",
        "estimatedWordCount",
        "competitorInsights",
    )
    generated_non_blank: ClassVar[tuple[str, ...]] = ("title", "description")

    id: str = Field(default_factory=new_topic_id, min_length=1)
    title: str = ""
    description: str = ""
    target_keywords: list[str] = Field(default_factory=list)
    difficulty: Difficulty = "intermediate"
    estimated_word_count: int = Field(default=0, ge=0)
    competitor_insights: TopicCompetitorInsights = Field(default_factory=TopicCompetitorInsights)


class TopicList(WireModel):
    """The reply shape of a topic generation request."""

    generated_required: ClassVar[tuple[str, ...]] = ("topics",)

    topics: list[TopicIdea] = Field(default_factory=list)
