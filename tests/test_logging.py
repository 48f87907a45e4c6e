from __future__ import annotations

import logging

import pytest
from rich.logging import RichHandler

from blogflow.logging import _ContextFilter, configure_logging, flow_context, set_step, step_for_path


def _record() -> logging.LogRecord:
    return logging.LogRecord("blogflow.test", logging.INFO, __file__, 1, "msg", None, None)


def test_flow_context_is_stamped_and_restored() -> None:
    context_filter = _ContextFilter()

    with flow_context(flow_id="flow_1", step="outline"):
        inside = _record()
        context_filter.filter(inside)
        set_step("content")
        changed = _record()
        context_filter.filter(changed)
    outside = _record()
    context_filter.filter(outside)

    assert (inside.flow_id, inside.step) == ("flow_1", "outline")  # type: ignore[attr-defined]
    assert changed.step == "content"  # type: ignore[attr-defined]
    assert (outside.flow_id, outside.step) == ("-", "-")  # type: ignore[attr-defined]


def test_configure_logging_is_idempotent() -> None:
    configure_logging("warning")
    configure_logging("WARNING")

    handlers = [h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]
    assert len(handlers) == 1
    assert sum(isinstance(f, _ContextFilter) for f in handlers[0].filters) == 1
    assert logging.getLogger().level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_unknown_steps_are_rejected() -> None:
    with pytest.raises(ValueError, match="unknown flow step 'publish'"):
        set_step("publish")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        with flow_context(flow_id="flow_1", step="draft"):  # type: ignore[arg-type]
            pass

    context_filter = _ContextFilter()
    record = _record()
    context_filter.filter(record)
    assert record.step == "-"  # type: ignore[attr-defined]


@pytest.mark.parametrize(
    ("path", "step"),
    [
        ("/topic/generate", "topic"),
        ("/outline/customize", "outline"),
        ("/content/elaborate", "content"),
        ("/flow/outline", None),
        ("/search", None),
        ("/", None),
    ],
)
def test_step_for_path(path: str, step: str | None) -> None:
    assert step_for_path(path) == step
