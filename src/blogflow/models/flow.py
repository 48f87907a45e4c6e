"""Wizard flow state."""

from __future__ import annotations

from typing import Any, Literal

from blogflow.models.outline import WireModel

FlowStep = Literal["topic", "outline", "content"]


class FlowState(WireModel):
    """Where the user is in the topic -> outline -> content wizard."""

    current_step: FlowStep = "topic"
    selected_topic: dict[str, Any] | None = None
