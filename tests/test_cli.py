from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from blogflow.cli import app
from blogflow.models.outline import Outline

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BLOGFLOW_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.setenv("BLOGFLOW_LOG_LEVEL", "WARNING")
    for name in ("BLOGFLOW_ENV_FILE", "BLOGFLOW_GOOGLE_API_KEY", "BLOGFLOW_GOOGLE_SEARCH_ENGINE_ID"):
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, data: dict[str, Any]) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_outline_validate_prints_tree(tmp_path: Path, generated_outline: dict[str, Any]) -> None:
    path = _write(tmp_path / "outline.json", generated_outline)

    result = runner.invoke(app, ["outline", "validate", str(path)])

    assert result.exit_code == 0
    assert "- [intro] Section intro" in result.output
    assert "  - [basics-1] Section basics-1" in result.output


def test_outline_validate_reports_errors(tmp_path: Path, generated_outline: dict[str, Any]) -> None:
    del generated_outline["sections"][0]["keywords"]
    path = _write(tmp_path / "outline.json", generated_outline)

    result = runner.invoke(app, ["outline", "validate", str(path)])

    assert result.exit_code == 1
    assert "keywords" in result.output


def test_outline_edit_writes_output(tmp_path: Path, outline: Outline) -> None:
    source = _write(tmp_path / "outline.json", outline.to_wire())
    target = tmp_path / "out" / "edited.json"

    result = runner.invoke(
        app,
        ["outline", "edit", str(source), "--action", "modify", "--section-id", "a2x",
         "--section-json", '{"title": "Renamed"}', "-o", str(target)],
    )

    assert result.exit_code == 0, result.output
    edited = Outline.model_validate_json(target.read_text(encoding="utf-8"))
    assert edited.sections[0].children[1].children[0].title == "Renamed"
    # The source file is left alone when --output is given.
    assert Outline.model_validate_json(source.read_text(encoding="utf-8")) == outline


def test_outline_edit_strict_missing_section(tmp_path: Path, outline: Outline) -> None:
    source = _write(tmp_path / "outline.json", outline.to_wire())

    result = runner.invoke(
        app, ["outline", "edit", str(source), "--action", "reorder", "--section-id", "ghost", "--new-index", "0", "--strict"]
    )

    assert result.exit_code == 1
    assert "section not found: 'ghost'" in result.output


def test_outline_edit_reorder_to_top(tmp_path: Path, outline: Outline) -> None:
    source = _write(tmp_path / "outline.json", outline.to_wire())

    result = runner.invoke(
        app,
        ["outline", "edit", str(source), "--action", "reorder", "--section-id", "a2x",
         "--new-index", "0", "--destination", "top"],
    )

    assert result.exit_code == 0, result.output
    edited = Outline.model_validate_json(source.read_text(encoding="utf-8"))
    assert [s.id for s in edited.sections] == ["a2x", "a", "b", "c"]
    assert edited.sections[1].children[1].children == []


def test_outline_edit_rejects_unknown_action(tmp_path: Path, outline: Outline) -> None:
    source = _write(tmp_path / "outline.json", outline.to_wire())

    result = runner.invoke(app, ["outline", "edit", str(source), "--action", "rename", "--section-id", "a"])

    assert result.exit_code == 2


def test_cache_commands_on_empty_cache() -> None:
    stats = runner.invoke(app, ["cache", "stats"])
    cleared = runner.invoke(app, ["cache", "clear-expired"])

    assert stats.exit_code == 0
    assert "entries: 0" in stats.output
    assert "storage: persistent" in stats.output
    assert cleared.exit_code == 0
    assert "removed 0 expired entries" in cleared.output


def test_search_without_credentials_fails_cleanly() -> None:
    result = runner.invoke(app, ["search", "golang tutorials"])

    assert result.exit_code == 1
    assert "Search failed" in result.output
