from __future__ import annotations

from pathlib import Path

from blogflow.cache.stores import FileStore, MemoryStore
from blogflow.models.flow import FlowState
from blogflow.models.outline import Outline
from blogflow.state import CONTENT_KEY, FLOW_STATE_KEY, OUTLINE_KEY, FlowStateStore


def test_defaults_when_nothing_saved() -> None:
    state = FlowStateStore(MemoryStore())

    assert state.load_flow() == FlowState()
    assert state.load_outline() is None
    assert state.load_content() is None


def test_snapshots_survive_a_new_store(tmp_path: Path, outline: Outline) -> None:
    path = tmp_path / "store.json"
    first = FlowStateStore(FileStore(path))
    first.save_flow(FlowState(current_step="outline", selected_topic={"title": "Go basics"}))
    first.save_outline(outline)
    first.save_content({"sections": {"a": "text"}})

    second = FlowStateStore(FileStore(path))

    assert second.load_flow().current_step == "outline"
    assert second.load_flow().selected_topic == {"title": "Go basics"}
    assert second.load_outline() == outline
    assert second.load_content() == {"sections": {"a": "text"}}


def test_snapshots_use_wire_names() -> None:
    store = MemoryStore()
    FlowStateStore(store).save_flow(FlowState(current_step="content"))

    assert '"currentStep":"content"' in store.get_item(FLOW_STATE_KEY)


def test_corrupt_snapshots_load_as_defaults() -> None:
    store = MemoryStore()
    store.set_item(FLOW_STATE_KEY, '{"currentStep": "publishing"}')
    store.set_item(OUTLINE_KEY, "not json")
    store.set_item(CONTENT_KEY, "[1, 2]")
    state = FlowStateStore(store)

    assert state.load_flow() == FlowState()
    assert state.load_outline() is None
    assert state.load_content() is None


def test_reset_forgets_everything(outline: Outline) -> None:
    store = MemoryStore()
    state = FlowStateStore(store)
    state.save_flow(FlowState(current_step="outline"))
    state.save_outline(outline)
    state.save_content({"x": 1})
    store.set_item("unrelated", "kept")

    state.reset()

    assert store.keys() == ["unrelated"]
