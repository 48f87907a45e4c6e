"""Persisted wizard state.

The flow state, the current outline and the generated content are stored as
JSON snapshots under well-known keys of an injected `KeyValueStore`. Every
save overwrites the previous snapshot.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import ValidationError

from blogflow.cache.stores import KeyValueStore
from blogflow.logging import get_logger
from blogflow.models.flow import FlowState
from blogflow.models.outline import Outline

logger = get_logger(__name__)

FLOW_STATE_KEY = "blogFlowState"
OUTLINE_KEY = "blogFlowOutline"
CONTENT_KEY = "blogFlowContent"


class FlowStateStore:
    """Typed load/save over a key/value medium."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def load_flow(self) -> FlowState:
        raw = self._store.get_item(FLOW_STATE_KEY)
        if raw is None:
            return FlowState()
        try:
            return FlowState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding corrupt flow state snapshot: %s", e.error_count())
            return FlowState()

    def save_flow(self, state: FlowState) -> None:
        self._store.set_item(FLOW_STATE_KEY, state.model_dump_json(by_alias=True))

    def load_outline(self) -> Outline | None:
        raw = self._store.get_item(OUTLINE_KEY)
        if raw is None:
            return None
        try:
            return Outline.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("Discarding corrupt outline snapshot: %s", e.error_count())
            return None

    def save_outline(self, outline: Outline) -> None:
        self._store.set_item(OUTLINE_KEY, outline.model_dump_json(by_alias=True))

    def load_content(self) -> dict[str, Any] | None:
        raw = self._store.get_item(CONTENT_KEY)
        if raw is None:
            return None
        try:
            content = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt content snapshot")
            return None
        return content if isinstance(content, dict) else None

    def save_content(self, content: dict[str, Any]) -> None:
        self._store.set_item(CONTENT_KEY, json.dumps(content, ensure_ascii=False))

    def reset(self) -> None:
        """Forget the whole flow, as when the user starts over."""

        for key in (FLOW_STATE_KEY, OUTLINE_KEY, CONTENT_KEY):
            self._store.remove_item(key)
