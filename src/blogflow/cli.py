"""CLI entrypoints for blog flow."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from blogflow.cache.result_cache import ResultCache
from blogflow.cache.stores import build_stores
from blogflow.config import Settings, load_settings
from blogflow.errors import CollaboratorError, SectionNotFoundError
from blogflow.logging import configure_logging, get_logger
from blogflow.models.outline import Outline, OutlineCustomization
from blogflow.outline.tree import apply_customization, iter_sections
from blogflow.search.options import SearchOptions
from blogflow.search.service import build_search_service
from blogflow.validation import Invalid, validate_outline

app = typer.Typer(add_completion=False, help="Blog flow: cached search and outline editing")
cache_app = typer.Typer(add_completion=False, help="Inspect and maintain the search result cache")
outline_app = typer.Typer(add_completion=False, help="Validate and edit outline JSON files")
app.add_typer(cache_app, name="cache")
app.add_typer(outline_app, name="outline")

logger = get_logger(__name__)


def _settings() -> Settings:
    settings = load_settings()
    configure_logging(settings.log_level)
    return settings


def _cache(settings: Settings) -> ResultCache:
    return ResultCache(settings.cache_config(), stores=build_stores(settings))


@app.command()
def search(
    query: str = typer.Argument(..., help="Search query"),
    country: str = typer.Option("us", "--country", help="Two-letter country code"),
    language: str = typer.Option("en", "--language", help="Two-letter language code"),
    as_json: bool = typer.Option(False, "--json", help="Print the raw SERP data as JSON"),
) -> None:
    """Run a cached web search."""

    settings = _settings()
    try:
        service = build_search_service(settings, build_stores(settings))
        data = service.search(query, SearchOptions(country=country, language=language))
    except CollaboratorError as e:
        typer.echo(f"Search failed: {e}", err=True)
        raise typer.Exit(code=1) from e

    if as_json:
        typer.echo(json.dumps(data.to_wire(), ensure_ascii=False, indent=2))
        return
    for result in data.organic_results:
        typer.echo(f"{result.position}. {result.title}\n   {result.link}")
    if data.related_searches:
        typer.echo("Related: " + ", ".join(data.related_searches))


@cache_app.command("stats")
def cache_stats() -> None:
    """Show entry count and age range for the current partition."""

    stats = _cache(_settings()).get_stats()
    typer.echo(f"storage: {stats.storage_type}")
    typer.echo(f"entries: {stats.total_entries}")
    typer.echo(f"oldest:  {stats.oldest_entry if stats.oldest_entry is not None else '-'}")
    typer.echo(f"newest:  {stats.newest_entry if stats.newest_entry is not None else '-'}")


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove every entry in the current namespace and partition."""

    _cache(_settings()).clear()
    typer.echo("cache cleared")


@cache_app.command("clear-expired")
def cache_clear_expired() -> None:
    """Remove expired entries."""

    removed = _cache(_settings()).clear_expired()
    typer.echo(f"removed {removed} expired entries")


def _read_json(path: Path) -> dict:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"{path} is not valid JSON: {e.msg}") from e


@outline_app.command("validate")
def outline_validate(file: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Validate a generated outline against the outline schema."""

    _settings()
    result = validate_outline(file.read_text(encoding="utf-8"))
    if isinstance(result, Invalid):
        for error in result.errors:
            typer.echo(error, err=True)
        raise typer.Exit(code=1)
    for depth, section in iter_sections(result.value):
        typer.echo(f"{'  ' * depth}- [{section.id}] {section.title}")


@outline_app.command("edit")
def outline_edit(
    file: Path = typer.Argument(..., exists=True, dir_okay=False),
    action: str = typer.Option(..., "--action", help="add, remove, modify or reorder"),
    section_id: Optional[str] = typer.Option(None, "--section-id"),
    parent_id: Optional[str] = typer.Option(None, "--parent-id"),
    section_json: Optional[str] = typer.Option(None, "--section-json", help="Section fields as a JSON object"),
    new_index: Optional[int] = typer.Option(None, "--new-index"),
    destination: str = typer.Option(
        "siblings", "--destination", help="Where a reordered section lands: siblings or top"
    ),
    strict: bool = typer.Option(False, "--strict", help="Fail when the parent or section id is not found"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write here instead of in place"),
) -> None:
    """Apply one edit to an outline JSON file."""

    _settings()
    try:
        outline = Outline.model_validate(_read_json(file))
    except ValidationError as e:
        raise typer.BadParameter(f"{file} is not an outline: {e.error_count()} errors") from e
    try:
        section = json.loads(section_json) if section_json else None
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--section-json is not valid JSON: {e.msg}") from e

    try:
        customization = OutlineCustomization(
            action=action,
            section_id=section_id,
            parent_id=parent_id,
            section=section,
            new_index=new_index,
            destination=destination,
        )
        updated = apply_customization(outline, customization, strict=strict)
    except SectionNotFoundError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e

    target = output or file
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(updated.to_wire(), ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Outline edited", extra={"action": action, "path": str(target)})
    typer.echo(str(target))


if __name__ == "__main__":
    app()
