"""Shared fixtures."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest

from blogflow.models.outline import Outline, OutlineSection


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start.timestamp() * 1000

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    # Midday, so small advances never cross a day boundary.
    return FakeClock(datetime(2024, 3, 13, 12, 0, 0))


def make_section(section_id: str, *children: OutlineSection, **fields: Any) -> OutlineSection:
    fields.setdefault("title", section_id.upper())
    return OutlineSection(id=section_id, children=list(children), **fields)


@pytest.fixture
def outline() -> Outline:
    """Three top-level sections; `a` has a two-level subtree."""

    return Outline(
        sections=[
            make_section("a", make_section("a1"), make_section("a2", make_section("a2x"))),
            make_section("b", content="body of b", key_points=["k1", "k2"]),
            make_section("c"),
        ]
    )


def generated_section(section_id: str, **overrides: Any) -> dict[str, Any]:
    """A section dict with every field the generator must produce."""

    section = {
        "id": section_id,
        "title": f"Section {section_id}",
        "type": "h2",
        "content": "What this section covers.",
        "keyPoints": ["first point"],
        "recommendedWordCount": 300,
        "keywords": {"primary": ["golang"], "secondary": [], "semantic": ["go tutorial"]},
        "children": [],
    }
    section.update(overrides)
    return section


@pytest.fixture
def generated_outline() -> dict[str, Any]:
    return {
        "sections": [
            generated_section("intro", type="h1"),
            generated_section("basics", children=[generated_section("basics-1", type="h3")]),
        ],
        "metadata": {
            "totalWordCount": 900,
            "keywordDensity": {"golang": 0.02},
            "readabilityScore": 0.8,
            "seoScore": 75,
        },
        "seoGuidance": {
            "keywordPlacements": {"golang": {"recommended": 4, "sections": ["intro"]}},
            "contentGaps": ["error handling"],
            "competitorInsights": {"averageSectionCount": 6, "commonHeadings": [], "missingTopics": []},
        },
    }


def generated_topic(title: str, **overrides: Any) -> dict[str, Any]:
    """A topic idea dict with every field the generator must produce."""

    topic = {
        "title": title,
        "description": f"Why {title.lower()} matters for Go developers.",
        "targetKeywords": ["golang concurrency", "goroutines"],
        "difficulty": "intermediate",
        "estimatedWordCount": 1800,
        "competitorInsights": {
            "averageWordCount": 1500,
            "commonSubtopics": ["channels"],
            "keywordGaps": ["select statement"],
        },
    }
    topic.update(overrides)
    return topic


@pytest.fixture
def generated_topics() -> dict[str, Any]:
    return {
        "topics": [
            generated_topic("Golang Concurrency Patterns"),
            generated_topic("Testing Golang Services"),
            generated_topic("Baking Sourdough", description="Bread at home.", targetKeywords=["bread"]),
        ]
    }


@pytest.fixture
def generated_content() -> dict[str, Any]:
    return {
        "sections": [
            {
                "id": "intro",
                "title": "Introduction",
                "content": "## Introduction\n\nGo makes concurrency approachable.",
                "wordCount": 6,
                "keywordDensity": {"golang": 0.02},
                "readabilityScore": 71,
            }
        ],
        "metadata": {
            "totalWordCount": 6,
            "averageReadabilityScore": 71,
            "keywordDensityOverall": {"golang": 0.02},
            "seoScore": 80,
            "contentQualityMetrics": {"comprehensiveness": 7, "engagement": 8, "clarity": 9, "expertise": 7},
        },
        "seoAnalysis": {
            "keywordImplementation": {"golang": {"actual": 3, "recommended": 4, "placement": ["intro"]}},
            "contentGapsCovered": ["error handling"],
            "missingTopics": [],
            "suggestions": ["Add a code sample"],
        },
    }
