"""Search-related models."""

from __future__ import annotations

from pydantic import Field

from blogflow.models.outline import WireModel


class SerpResult(WireModel):
    """A single organic search result."""

    title: str = ""
    link: str = ""
    snippet: str = ""
    position: int = Field(ge=1)


class SerpData(WireModel):
    """Search engine results page data for one query."""

    organic_results: list[SerpResult] = Field(default_factory=list)
    featured_snippets: list[str] = Field(default_factory=list)
    related_searches: list[str] = Field(default_factory=list)
    total_results: int = Field(default=0, ge=0)
