"""ID utilities."""

from __future__ import annotations

import uuid


def new_section_id(prefix: str = "section_") -> str:
    """Return a fresh outline section id.

    Ids are never reused, so a removed section's id cannot collide with a new one.
    """

    return f"{prefix}{uuid.uuid4().hex[:12]}"


def new_flow_id() -> str:
    """Return an id for a request or wizard flow, used to correlate log lines."""

    return f"flow_{uuid.uuid4().hex[:12]}"


def new_topic_id() -> str:
    return f"topic_{uuid.uuid4().hex[:12]}"
