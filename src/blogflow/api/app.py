"""FastAPI app exposing generation, outline editing, cached search and flow state."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request, Response
from pydantic import BaseModel, ValidationError

from blogflow.cache.result_cache import ResultCache
from blogflow.cache.stores import CacheStores, build_stores
from blogflow.config import Settings, load_settings
from blogflow.errors import (
    CollaboratorError,
    ConfigurationError,
    RateLimitExceededError,
    SectionNotFoundError,
)
from blogflow.generation.content import ContentGenerator, ContentRequest, ElaborateRequest
from blogflow.generation.outline import OutlineGenerator, OutlineRequest
from blogflow.generation.topic import TopicGenerator, TopicRequest
from blogflow.llm.client import LLMClient
from blogflow.logging import configure_logging, flow_context, get_logger, set_step, step_for_path
from blogflow.models.flow import FlowState
from blogflow.models.outline import Outline, OutlineCustomization
from blogflow.outline.tree import apply_customization
from blogflow.search.options import SearchOptions
from blogflow.search.service import CachedSearchService, build_search_service
from blogflow.state import FlowStateStore
from blogflow.utils.ids import new_flow_id
from blogflow.validation import Invalid, format_errors, validate_outline


class CustomizeRequest(BaseModel):
    """Outline edit request."""

    outline: dict[str, Any]
    customization: OutlineCustomization
    strict: bool = False


def _collaborator_http_error(e: CollaboratorError) -> HTTPException:
    if isinstance(e, RateLimitExceededError):
        return HTTPException(status_code=429, detail=str(e))
    if isinstance(e, ConfigurationError):
        return HTTPException(status_code=503, detail=str(e))
    return HTTPException(status_code=502, detail=f"{e}. Please try again.")


def create_app(
    settings: Settings | None = None,
    *,
    stores: CacheStores | None = None,
    search_service: CachedSearchService | None = None,
    outline_generator: OutlineGenerator | None = None,
    topic_generator: TopicGenerator | None = None,
    content_generator: ContentGenerator | None = None,
) -> FastAPI:
    """Create FastAPI app.

    Collaborators that are not injected are built from settings on first use,
    so the app starts even when search or LLM credentials are missing.
    """

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    logger = get_logger(__name__)

    stores = stores or build_stores(settings)
    cache = search_service.cache if search_service else ResultCache(settings.cache_config(), stores=stores)
    flow_store = FlowStateStore(stores.persistent)
    services: dict[str, Any] = {
        "search": search_service,
        "outline": outline_generator,
        "topic": topic_generator,
        "content": content_generator,
    }

    def get_search_service() -> CachedSearchService:
        if services["search"] is None:
            services["search"] = build_search_service(settings, stores, cache=cache)
        return services["search"]

    def get_llm() -> LLMClient:
        if services.get("llm") is None:
            services["llm"] = LLMClient(settings)
        return services["llm"]

    def get_outline_generator() -> OutlineGenerator:
        if services["outline"] is None:
            services["outline"] = OutlineGenerator(get_llm())
        return services["outline"]

    def get_topic_generator() -> TopicGenerator:
        if services["topic"] is None:
            try:
                search = get_search_service()
            except ConfigurationError:
                logger.info("Topic generation will run without search data")
                search = None
            services["topic"] = TopicGenerator(get_llm(), search=search)
        return services["topic"]

    def get_content_generator() -> ContentGenerator:
        if services["content"] is None:
            services["content"] = ContentGenerator(get_llm())
        return services["content"]

    def malformed(what: str, errors: list[str]) -> HTTPException:
        return HTTPException(
            status_code=422,
            detail={"message": f"Generated {what} was malformed. Please try again.", "errors": errors},
        )

    app = FastAPI(title="Blog Flow", version="0.1.0")

    @app.middleware("http")
    async def bind_flow_context(request: Request, call_next: Any) -> Response:
        flow_id = request.headers.get("x-flow-id") or new_flow_id()
        with flow_context(flow_id=flow_id, step=step_for_path(request.url.path)):
            response = await call_next(request)
        response.headers["X-Flow-Id"] = flow_id
        return response

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/outline/validate")
    def outline_validate(payload: dict[str, Any]) -> dict[str, Any]:
        result = validate_outline(payload)
        if isinstance(result, Invalid):
            return {"valid": False, "errors": result.errors}
        return {"valid": True, "errors": [], "outline": result.value.to_wire()}

    @app.post("/outline/customize")
    def outline_customize(req: CustomizeRequest) -> dict[str, Any]:
        try:
            outline = Outline.model_validate(req.outline)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=format_errors(e)) from e
        try:
            updated = apply_customization(outline, req.customization, strict=req.strict)
        except SectionNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e)) from e
        logger.info("Outline customized", extra={"action": req.customization.action})
        return updated.to_wire()

    @app.post("/outline/generate")
    def outline_generate(req: OutlineRequest) -> dict[str, Any]:
        logger.info("Outline generation requested", extra={"style": req.style, "depth": req.depth})
        try:
            result = get_outline_generator().generate(req)
        except CollaboratorError as e:
            raise _collaborator_http_error(e) from e
        if isinstance(result, Invalid):
            raise malformed("outline", result.errors)
        return result.value.to_wire()

    @app.post("/topic/generate")
    def topic_generate(req: TopicRequest) -> dict[str, Any]:
        logger.info("Topic generation requested", extra={"serp_data": req.include_serp_data})
        try:
            result = get_topic_generator().generate(req)
        except CollaboratorError as e:
            raise _collaborator_http_error(e) from e
        if isinstance(result, Invalid):
            raise malformed("topic list", result.errors)
        return {"topics": [topic.to_wire() for topic in result.value]}

    @app.post("/content/generate")
    def content_generate(req: ContentRequest) -> dict[str, Any]:
        logger.info("Content generation requested", extra={"style": req.style, "section": req.section})
        try:
            result = get_content_generator().generate(req)
        except SectionNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e)) from e
        except CollaboratorError as e:
            raise _collaborator_http_error(e) from e
        if isinstance(result, Invalid):
            raise malformed("content", result.errors)
        return result.value.to_wire()

    @app.post("/content/elaborate")
    def content_elaborate(req: ElaborateRequest) -> dict[str, Any]:
        try:
            result = get_content_generator().elaborate(req)
        except CollaboratorError as e:
            raise _collaborator_http_error(e) from e
        if isinstance(result, Invalid):
            raise malformed("section", result.errors)
        return result.value.to_wire()

    @app.get("/search")
    def search(
        q: str = Query(..., min_length=1),
        country: str = "us",
        language: str = "en",
        safe_search: str = "medium",
        date_restrict: str | None = None,
        start: int | None = None,
    ) -> dict[str, Any]:
        options = SearchOptions(
            country=country,
            language=language,
            safe_search=safe_search,
            date_restrict=date_restrict,
            start=start,
        )
        try:
            data = get_search_service().search(q, options)
        except CollaboratorError as e:
            raise _collaborator_http_error(e) from e
        return data.to_wire()

    @app.get("/cache/stats")
    def cache_stats() -> dict[str, Any]:
        stats = cache.get_stats()
        return {
            "totalEntries": stats.total_entries,
            "oldestEntry": stats.oldest_entry,
            "newestEntry": stats.newest_entry,
            "storageType": stats.storage_type,
        }

    @app.post("/cache/clear-expired")
    def cache_clear_expired() -> dict[str, int]:
        return {"removed": cache.clear_expired()}

    @app.post("/cache/clear")
    def cache_clear() -> dict[str, str]:
        cache.clear()
        return {"status": "ok"}

    @app.get("/flow")
    def flow_get() -> dict[str, Any]:
        return flow_store.load_flow().to_wire()

    @app.put("/flow")
    def flow_put(state: FlowState) -> dict[str, Any]:
        set_step(state.current_step)
        flow_store.save_flow(state)
        logger.info("Flow state saved")
        return state.to_wire()

    @app.delete("/flow")
    def flow_reset() -> dict[str, str]:
        flow_store.reset()
        return {"status": "ok"}

    @app.get("/flow/outline")
    def flow_outline_get() -> dict[str, Any]:
        outline = flow_store.load_outline()
        if outline is None:
            raise HTTPException(status_code=404, detail="no outline saved")
        return outline.to_wire()

    @app.put("/flow/outline")
    def flow_outline_put(outline: Outline) -> dict[str, Any]:
        flow_store.save_outline(outline)
        return outline.to_wire()

    return app
