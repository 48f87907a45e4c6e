"""Pydantic models used across the project."""

from __future__ import annotations

from blogflow.models.content import (
    BlogContent,
    ContentMetadata,
    ContentQualityMetrics,
    ContentSection,
    ElaboratedSection,
    KeywordImplementation,
    SeoAnalysis,
)
from blogflow.models.flow import FlowState, FlowStep
from blogflow.models.outline import (
    KeywordPlacement,
    Outline,
    OutlineCompetitorInsights,
    OutlineCustomization,
    OutlineMetadata,
    OutlineSection,
    ReorderDestination,
    SectionKeywords,
    SeoGuidance,
)
from blogflow.models.search import SerpData, SerpResult
from blogflow.models.topic import TopicCompetitorInsights, TopicIdea, TopicList

__all__ = [
    "BlogContent",
    "ContentMetadata",
    "ContentQualityMetrics",
    "ContentSection",
    "ElaboratedSection",
    "FlowState",
    "FlowStep",
    "KeywordImplementation",
    "KeywordPlacement",
    "Outline",
    "OutlineCompetitorInsights",
    "OutlineCustomization",
    "OutlineMetadata",
    "OutlineSection",
    "ReorderDestination",
    "SectionKeywords",
    "SeoAnalysis",
    "SeoGuidance",
    "SerpData",
    "SerpResult",
    "TopicCompetitorInsights",
    "TopicIdea",
    "TopicList",
]
