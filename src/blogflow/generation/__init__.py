"""Generation collaborators."""

from __future__ import annotations

from blogflow.generation.content import ContentGenerator, ContentRequest, ElaborateRequest
from blogflow.generation.outline import OutlineGenerator, OutlineRequest
from blogflow.generation.topic import TopicGenerator, TopicRequest

__all__ = [
    "ContentGenerator",
    "ContentRequest",
    "ElaborateRequest",
    "OutlineGenerator",
    "OutlineRequest",
    "TopicGenerator",
    "TopicRequest",
]
