"""Outline tree editing."""

from __future__ import annotations

from blogflow.outline.tree import (
    add_section,
    apply_customization,
    find_section,
    iter_sections,
    remove_section,
    reorder_section,
    section_ids,
    update_section,
)

__all__ = [
    "add_section",
    "apply_customization",
    "find_section",
    "iter_sections",
    "remove_section",
    "reorder_section",
    "section_ids",
    "update_section",
]
