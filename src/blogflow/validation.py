"""Schema validation of generation collaborator replies.

Replies are validated against the declared models and come back as a tagged
result: `Valid(value)` or `Invalid(errors)`. Nothing here raises for a
malformed reply.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from blogflow.models.outline import Outline, OutlineSection

T = TypeVar("T")

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

_SECTIONS_ADAPTER = TypeAdapter(list[OutlineSection])


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Invalid:
    errors: list[str]
    ok: bool = field(default=False, init=False)


ValidationResult = Union[Valid[T], Invalid]


def extract_json(text: str) -> str:
    """Strip code fences and surrounding prose from an LLM reply.

    Returns the outermost ``{...}`` span, or the stripped text if there is none.
    """

    text = _FENCE_RE.sub("", text)
    match = _OBJECT_RE.search(text)
    return match.group(0) if match else text.strip()


def format_errors(error: ValidationError) -> list[str]:
    """Flatten a pydantic error into ``location: message`` strings."""

    messages = []
    for item in error.errors():
        loc = ".".join(str(part) for part in item["loc"])
        messages.append(f"{loc}: {item['msg']}" if loc else item["msg"])
    return messages


def _load(payload: str | Mapping[str, Any] | Sequence[Any]) -> Any | Invalid:
    if not isinstance(payload, str):
        return payload
    try:
        return json.loads(extract_json(payload))
    except json.JSONDecodeError as e:
        return Invalid(errors=[f"reply is not valid JSON: {e.msg} at position {e.pos}"])


def validate_model(model: type[BaseModel], payload: str | Mapping[str, Any]) -> ValidationResult[Any]:
    data = _load(payload)
    if isinstance(data, Invalid):
        return data
    try:
        return Valid(model.model_validate(data, context={"generated": True}))
    except ValidationError as e:
        return Invalid(errors=format_errors(e))


def validate_outline(payload: str | Mapping[str, Any]) -> ValidationResult[Outline]:
    """Validate a generated outline (raw reply text or decoded JSON)."""

    return validate_model(Outline, payload)


def validate_sections(payload: str | Sequence[Any]) -> ValidationResult[list[OutlineSection]]:
    """Validate a bare list of generated sections."""

    if isinstance(payload, str):
        try:
            data = json.loads(_FENCE_RE.sub("", payload))
        except json.JSONDecodeError as e:
            return Invalid(errors=[f"reply is not valid JSON: {e.msg} at position {e.pos}"])
    else:
        data = payload
    try:
        return Valid(_SECTIONS_ADAPTER.validate_python(data, context={"generated": True}))
    except ValidationError as e:
        return Invalid(errors=format_errors(e))
