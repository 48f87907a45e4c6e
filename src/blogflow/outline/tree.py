"""Copy-on-write edits over an outline tree.

Every operation returns a new `Outline`; the input is never mutated. Nodes
outside the edited path are shared between the old and the new tree.

Edits that reference an unknown id are no-ops. `add_section` and
`reorder_section` accept ``strict=True`` to raise `SectionNotFoundError`
instead, for callers that want to detect a stale parent or section id.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from blogflow.errors import SectionNotFoundError
from blogflow.logging import get_logger
from blogflow.models.outline import Outline, OutlineCustomization, OutlineSection, ReorderDestination
from blogflow.utils.ids import new_section_id

logger = get_logger(__name__)


def _with_children(section: OutlineSection, children: list[OutlineSection]) -> OutlineSection:
    if len(children) == len(section.children) and all(
        a is b for a, b in zip(children, section.children)
    ):
        return section
    return section.model_copy(update={"children": children})


def _normalize_updates(updates: Mapping[str, Any]) -> dict[str, Any]:
    by_alias = {field.alias: name for name, field in OutlineSection.model_fields.items()}
    normalized: dict[str, Any] = {}
    for key, value in updates.items():
        if key in OutlineSection.model_fields:
            normalized[key] = value
        elif key in by_alias:
            normalized[by_alias[key]] = value
        else:
            raise ValueError(f"unknown section field: {key!r}")
    return normalized


def _merge(section: OutlineSection, fields: dict[str, Any]) -> OutlineSection:
    data = {name: getattr(section, name) for name in OutlineSection.model_fields}
    data.update(fields)
    return OutlineSection.model_validate(data)


def _update(sections: Sequence[OutlineSection], section_id: str, fields: dict[str, Any]) -> list[OutlineSection]:
    out: list[OutlineSection] = []
    for section in sections:
        if section.id == section_id:
            out.append(_merge(section, fields))
        else:
            out.append(_with_children(section, _update(section.children, section_id, fields)))
    return out


def update_section(outline: Outline, section_id: str, updates: Mapping[str, Any]) -> Outline:
    """Shallow-merge `updates` into the section with `section_id`.

    Args:
        outline: Current outline.
        section_id: Id of the section to change.
        updates: Field values keyed by field name or wire name.

    Returns:
        A new outline. Unchanged in content when the id is absent.

    Raises:
        ValueError: `updates` names an unknown field or holds an invalid value.
    """

    fields = _normalize_updates(updates)
    return outline.model_copy(update={"sections": _update(outline.sections, section_id, fields)})


def _add(
    sections: Sequence[OutlineSection], parent_id: str, new: OutlineSection, found: list[bool]
) -> list[OutlineSection]:
    out: list[OutlineSection] = []
    for section in sections:
        if section.id == parent_id:
            found.append(True)
            out.append(section.model_copy(update={"children": [*section.children, new]}))
        else:
            out.append(_with_children(section, _add(section.children, parent_id, new, found)))
    return out


def add_section(
    outline: Outline,
    parent_id: str | None,
    section: OutlineSection,
    *,
    strict: bool = False,
) -> Outline:
    """Append `section` to the top level, or to the children of `parent_id`.

    Args:
        outline: Current outline.
        parent_id: Parent section id, or None for the top level.
        section: Section to append. Its id must not already be in the tree.
        strict: Raise when `parent_id` is not found instead of returning the
            outline unchanged.
    """

    if parent_id is None:
        return outline.model_copy(update={"sections": [*outline.sections, section]})

    found: list[bool] = []
    sections = _add(outline.sections, parent_id, section, found)
    if not found:
        logger.debug("add_section: parent not found", extra={"parent_id": parent_id})
        if strict:
            raise SectionNotFoundError(parent_id)
        return outline
    return outline.model_copy(update={"sections": sections})


def _remove(sections: Sequence[OutlineSection], section_id: str) -> list[OutlineSection]:
    return [
        _with_children(section, _remove(section.children, section_id))
        for section in sections
        if section.id != section_id
    ]


def remove_section(outline: Outline, section_id: str) -> Outline:
    """Remove the section with `section_id` and its whole subtree. Idempotent."""

    return outline.model_copy(update={"sections": _remove(outline.sections, section_id)})


def _reorder(
    sections: Sequence[OutlineSection], section_id: str, new_index: int
) -> list[OutlineSection] | None:
    for i, section in enumerate(sections):
        if section.id == section_id:
            rest = [*sections[:i], *sections[i + 1 :]]
            rest.insert(min(max(new_index, 0), len(rest)), section)
            return rest
        children = _reorder(section.children, section_id, new_index)
        if children is not None:
            out = list(sections)
            out[i] = _with_children(section, children)
            return out
    return None


def _detach(
    sections: Sequence[OutlineSection], section_id: str
) -> tuple[list[OutlineSection], OutlineSection] | None:
    for i, section in enumerate(sections):
        if section.id == section_id:
            return [*sections[:i], *sections[i + 1 :]], section
        detached = _detach(section.children, section_id)
        if detached is not None:
            children, moved = detached
            out = list(sections)
            out[i] = _with_children(section, children)
            return out, moved
    return None


def _move_to_top(
    sections: Sequence[OutlineSection], section_id: str, new_index: int
) -> list[OutlineSection] | None:
    detached = _detach(sections, section_id)
    if detached is None:
        return None
    rest, moved = detached
    rest.insert(min(max(new_index, 0), len(rest)), moved)
    return rest


def reorder_section(
    outline: Outline,
    section_id: str,
    new_index: int,
    *,
    destination: ReorderDestination = "siblings",
    strict: bool = False,
) -> Outline:
    """Move a section to `new_index`.

    With ``destination="siblings"`` the section stays in its own sibling list.
    With ``destination="top"`` it is detached from wherever it is nested, with
    its subtree, and inserted into the top-level list. Either way the index
    is clamped to the bounds of the destination list without the moved
    section.
    """

    if destination == "top":
        sections = _move_to_top(outline.sections, section_id, new_index)
    else:
        sections = _reorder(outline.sections, section_id, new_index)
    if sections is None:
        logger.debug("reorder_section: section not found", extra={"section_id": section_id})
        if strict:
            raise SectionNotFoundError(section_id)
        return outline
    return outline.model_copy(update={"sections": sections})


def iter_sections(outline: Outline) -> Iterator[tuple[int, OutlineSection]]:
    """Yield ``(depth, section)`` pairs in pre-order. Top level is depth 0."""

    stack: list[tuple[int, OutlineSection]] = [(0, s) for s in reversed(outline.sections)]
    while stack:
        depth, section = stack.pop()
        yield depth, section
        stack.extend((depth + 1, child) for child in reversed(section.children))


def find_section(outline: Outline, section_id: str) -> OutlineSection | None:
    """Return the first pre-order section with `section_id`."""

    for _, section in iter_sections(outline):
        if section.id == section_id:
            return section
    return None


def section_ids(outline: Outline) -> list[str]:
    return [section.id for _, section in iter_sections(outline)]


def apply_customization(
    outline: Outline,
    customization: OutlineCustomization,
    *,
    strict: bool = False,
) -> Outline:
    """Apply one add/remove/modify/reorder edit.

    Raises:
        ValueError: The customization lacks an argument its action needs.
        SectionNotFoundError: `strict` is set and an add/reorder target is missing.
    """

    action = customization.action
    if action == "add":
        if customization.section is None:
            raise ValueError("add requires 'section'")
        data = dict(customization.section)
        data.setdefault("id", new_section_id())
        return add_section(
            outline,
            customization.parent_id,
            OutlineSection.model_validate(data),
            strict=strict,
        )

    if customization.section_id is None:
        raise ValueError(f"{action} requires 'sectionId'")

    if action == "remove":
        return remove_section(outline, customization.section_id)
    if action == "modify":
        if customization.section is None:
            raise ValueError("modify requires 'section'")
        return update_section(outline, customization.section_id, customization.section)
    if customization.new_index is None:
        raise ValueError("reorder requires 'newIndex'")
    return reorder_section(
        outline,
        customization.section_id,
        customization.new_index,
        destination=customization.destination,
        strict=strict,
    )
