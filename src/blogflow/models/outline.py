"""Outline models.

Field names are snake_case in Python and camelCase on the wire (`keyPoints`,
`recommendedWordCount`, ...). Both spellings are accepted on input.

Models are lenient by default so the editor can build sections from a couple
of fields. Replies from the generation collaborator are validated with
``context={"generated": True}``, which makes every field the generator is
asked to produce mandatory.
"""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_validator
from pydantic.alias_generators import to_camel

SectionType = Literal["h1", "h2", "h3", "h4"]


class WireModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Wire names that must be present when validating generated output.
    generated_required: ClassVar[tuple[str, ...]] = ()
    # Wire names that must also be non-blank strings in generated output.
    generated_non_blank: ClassVar[tuple[str, ...]] = ()

    @model_validator(mode="before")
    @classmethod
    def _require_generated_fields(cls, data: Any, info: ValidationInfo) -> Any:
        if not (info.context and info.context.get("generated")):
            return data
        if not isinstance(data, dict) or not cls.generated_required:
            return data
        missing = []
        for wire_name in cls.generated_required:
            field_name = _field_name_for(cls, wire_name)
            if wire_name not in data and field_name not in data:
                missing.append(wire_name)
        if missing:
            raise ValueError(f"missing required fields: {', '.join(missing)}")
        blank = []
        for wire_name in cls.generated_non_blank:
            value = data.get(wire_name, data.get(_field_name_for(cls, wire_name)))
            if isinstance(value, str) and not value.strip():
                blank.append(wire_name)
        if blank:
            raise ValueError(f"blank fields: {', '.join(blank)}")
        return data

    def to_wire(self) -> dict[str, Any]:
        """Dump with camelCase keys, the shape clients send and receive."""

        return self.model_dump(mode="json", by_alias=True)


def _field_name_for(model: type[BaseModel], wire_name: str) -> str:
    for name, field in model.model_fields.items():
        if field.alias == wire_name:
            return name
    return wire_name


class SectionKeywords(WireModel):
    """Keyword sets attached to a section. Duplicates are allowed."""

    generated_required: ClassVar[tuple[str, ...]] = ("primary",)

    primary: list[str] = Field(default_factory=list)
    secondary: list[str] = Field(default_factory=list)
    semantic: list[str] = Field(default_factory=list)


class OutlineSection(WireModel):
    """A node of the outline tree."""

    generated_required: ClassVar[tuple[str, ...]] = (
        "id",
        "title",
        "type",
        "content",
        "keyPoints",
        "recommendedWordCount",
        "keywords",
    )
    generated_non_blank: ClassVar[tuple[str, ...]] = ("title",)

    id: str = Field(min_length=1)
    title: str = ""
    type: SectionType = "h2"
    content: str = ""
    key_points: list[str] = Field(default_factory=list)
    recommended_word_count: int = Field(default=0, ge=0)
    keywords: SectionKeywords = Field(default_factory=SectionKeywords)
    children: list[OutlineSection] = Field(default_factory=list)


class OutlineMetadata(WireModel):
    """Aggregate figures reported by the generator."""

    generated_required: ClassVar[tuple[str, ...]] = (
        "totalWordCount",
        "keywordDensity",
        "readabilityScore",
        "seoScore",
    )

    total_word_count: int = Field(default=0, ge=0)
    keyword_density: dict[str, float] = Field(default_factory=dict)
    readability_score: float = 0.0
    seo_score: float = 0.0


class KeywordPlacement(WireModel):
    recommended: int = Field(default=0, ge=0)
    sections: list[str] = Field(default_factory=list)


class OutlineCompetitorInsights(WireModel):
    average_section_count: float = 0.0
    common_headings: list[str] = Field(default_factory=list)
    missing_topics: list[str] = Field(default_factory=list)


class SeoGuidance(WireModel):
    """Keyword placement and gap guidance that accompanies an outline."""

    generated_required: ClassVar[tuple[str, ...]] = (
        "keywordPlacements",
        "contentGaps",
        "competitorInsights",
    )

    keyword_placements: dict[str, KeywordPlacement] = Field(default_factory=dict)
    content_gaps: list[str] = Field(default_factory=list)
    competitor_insights: OutlineCompetitorInsights = Field(default_factory=OutlineCompetitorInsights)


class Outline(WireModel):
    """An article outline: an ordered list of top-level sections.

    There is no root node; `sections` is the top level.
    """

    generated_required: ClassVar[tuple[str, ...]] = ("sections", "metadata", "seoGuidance")

    sections: list[OutlineSection] = Field(default_factory=list)
    metadata: OutlineMetadata = Field(default_factory=OutlineMetadata)
    seo_guidance: SeoGuidance = Field(default_factory=SeoGuidance)


CustomizationAction = Literal["add", "remove", "modify", "reorder"]

# Where a reordered section lands: back among its own siblings, or in the
# top-level list wherever it was nested.
ReorderDestination = Literal["siblings", "top"]


class OutlineCustomization(WireModel):
    """A single user edit to apply to an outline."""

    action: CustomizationAction
    section_id: str | None = None
    parent_id: str | None = None
    section: dict[str, Any] | None = None
    new_index: int | None = None
    destination: ReorderDestination = "siblings"
