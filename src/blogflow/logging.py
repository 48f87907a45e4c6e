"""Logging utilities."""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any, get_args

from rich.logging import RichHandler

from blogflow.models.flow import FlowStep


_flow_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("blogflow_flow_id", default="-")
_step_var: contextvars.ContextVar[str] = contextvars.ContextVar("blogflow_step", default="-")

_NOISY_LOGGERS = ("httpx", "httpcore", "openai")

FLOW_STEPS: tuple[str, ...] = get_args(FlowStep)


class _ContextFilter(logging.Filter):
    """Inject flow context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.flow_id = _flow_id_var.get()  # type: ignore[attr-defined]
        record.step = _step_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def flow_context(*, flow_id: str, step: FlowStep | None = None) -> Any:
    """Temporarily bind flow context for structured logging.

    Args:
        flow_id: Identifier of the wizard flow or API request.
        step: Wizard step the work belongs to. Inherits the current step when None.

    Raises:
        ValueError: `step` is not a wizard step.
    """

    if step is not None:
        _check_step(step)
    token_flow = _flow_id_var.set(flow_id)
    token_step = _step_var.set(step or _step_var.get())
    try:
        yield
    finally:
        _flow_id_var.reset(token_flow)
        _step_var.reset(token_step)


def _check_step(step: str) -> None:
    if step not in FLOW_STEPS:
        raise ValueError(f"unknown flow step {step!r}, expected one of {', '.join(FLOW_STEPS)}")


def set_step(step: FlowStep) -> None:
    """Update current step in context."""

    _check_step(step)
    _step_var.set(step)


def step_for_path(path: str) -> FlowStep | None:
    """Map an API route such as ``/outline/generate`` to the wizard step it serves."""

    head = path.strip("/").split("/", 1)[0]
    if head in FLOW_STEPS:
        return head  # type: ignore[return-value]
    return None


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging.

    HTTP client library loggers are held at WARNING unless `level` is DEBUG.

    Args:
        level: Logging level name, case-insensitive.
    """

    level = level.upper()
    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s flow=%(flow_id)s step=%(step)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root = logging.getLogger()
    root.setLevel(level)
    handlers = [h for h in root.handlers if isinstance(h, RichHandler)]
    if not handlers:
        handler = RichHandler(rich_tracebacks=True, show_time=True, show_level=True)
        root.addHandler(handler)
        handlers = [handler]
    for h in handlers:
        if not any(isinstance(f, _ContextFilter) for f in h.filters):
            h.addFilter(_ContextFilter())
        h.setFormatter(formatter)

    library_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)

