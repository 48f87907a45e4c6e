"""Generated article content models.

These mirror the outline models: lenient by default, strict when validated
with ``context={"generated": True}``.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from blogflow.models.outline import WireModel


class ContentSection(WireModel):
    """Markdown body written for one outline section."""

    generated_required: ClassVar[tuple[str, ...]] = (
        "id",
        "content",
        "wordCount",
        "keywordDensity",
        "readabilityScore",
    )
    generated_non_blank: ClassVar[tuple[str, ...]] = ("id", "content")

    id: str = Field(min_length=1)
    title: str = ""
    content: str = ""
    word_count: int = Field(default=0, ge=0)
    keyword_density: dict[str, float] = Field(default_factory=dict)
    readability_score: float = 0.0


class ContentQualityMetrics(WireModel):
    comprehensiveness: float = 0.0
    engagement: float = 0.0
    clarity: float = 0.0
    expertise: float = 0.0


class ContentMetadata(WireModel):
    generated_required: ClassVar[tuple[str, ...]] = (
        "totalWordCount",
        "averageReadabilityScore",
        "keywordDensityOverall",
        "seoScore",
        "contentQualityMetrics",
    )

    total_word_count: int = Field(default=0, ge=0)
    average_readability_score: float = 0.0
    keyword_density_overall: dict[str, float] = Field(default_factory=dict)
    seo_score: float = 0.0
    content_quality_metrics: ContentQualityMetrics = Field(default_factory=ContentQualityMetrics)


class KeywordImplementation(WireModel):
    actual: int = Field(default=0, ge=0)
    recommended: int = Field(default=0, ge=0)
    placement: list[str] = Field(default_factory=list)


class SeoAnalysis(WireModel):
    """How the written content measures up against the outline's SEO guidance."""

    generated_required: ClassVar[tuple[str, ...]] = (
        "keywordImplementation",
        "contentGapsCovered",
        "missingTopics",
        "suggestions",
    )

    keyword_implementation: dict[str, KeywordImplementation] = Field(default_factory=dict)
    content_gaps_covered: list[str] = Field(default_factory=list)
    missing_topics: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class BlogContent(WireModel):
    """Article content written from an outline."""

    generated_required: ClassVar[tuple[str, ...]] = ("sections", "metadata", "seoAnalysis")

    sections: list[ContentSection] = Field(default_factory=list)
    metadata: ContentMetadata = Field(default_factory=ContentMetadata)
    seo_analysis: SeoAnalysis = Field(default_factory=SeoAnalysis)


class ElaboratedSection(WireModel):
    """An expanded rewrite of one section's body."""

    generated_required: ClassVar[tuple[str, ...]] = ("content",)
    generated_non_blank: ClassVar[tuple[str, ...]] = ("content",)

    section_id: str | None = None
    content: str = ""
    word_count: int = Field(default=0, ge=0)
