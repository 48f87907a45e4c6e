"""Search engine providers.

Each provider turns a query into `SerpData` or raises a `SearchError`.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from blogflow.config import Settings
from blogflow.errors import ConfigurationError, SearchError
from blogflow.logging import get_logger
from blogflow.models.search import SerpData, SerpResult
from blogflow.search.options import SearchOptions
from blogflow.search.rate_limit import RateLimiter

logger = get_logger(__name__)


class SearchProvider(Protocol):
    """Search provider interface."""

    source_name: str

    def search(self, query: str, options: SearchOptions) -> SerpData:
        """Search the web."""


def _to_int(value: Any) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return 0


def _get_json(
    url: str,
    params: dict[str, str],
    *,
    timeout_s: float,
    transport: httpx.BaseTransport | None,
    source_name: str,
) -> tuple[int, Any]:
    started = time.monotonic()
    try:
        with httpx.Client(
            timeout=httpx.Timeout(timeout_s),
            follow_redirects=True,
            transport=transport,
        ) as client:
            resp = client.get(url, params=params)
    except httpx.HTTPError as e:
        logger.error(
            "Search request failed",
            extra={"provider": source_name, "error_type": type(e).__name__, "error": str(e)},
        )
        raise SearchError(f"{source_name} request failed: {e}", code="NETWORK_ERROR") from e

    try:
        data = resp.json()
    except ValueError:
        data = None

    logger.info(
        "Search response",
        extra={
            "provider": source_name,
            "status_code": resp.status_code,
            "latency_ms": int((time.monotonic() - started) * 1000),
        },
    )
    return resp.status_code, data


@dataclass(frozen=True)
class GoogleSearchProvider:
    """Google Custom Search JSON API provider.

    Notes:
        - Credentials come from settings (`BLOGFLOW_GOOGLE_API_KEY`,
          `BLOGFLOW_GOOGLE_SEARCH_ENGINE_ID`).
        - The optional rate limiter is only consulted when a request is about
          to be sent, so cache hits upstream never use quota.
    """

    api_key: str | None
    engine_id: str | None
    base_url: str = "https://www.googleapis.com/customsearch/v1"
    num_results: int = 10
    timeout_s: float = 30.0
    rate_limiter: RateLimiter | None = None
    transport: httpx.BaseTransport | None = None
    source_name: str = "google"

    def build_params(self, query: str, options: SearchOptions) -> dict[str, str]:
        params = {
            "key": self.api_key or "",
            "cx": self.engine_id or "",
            "q": query,
            "num": str(self.num_results),
            "gl": options.country,
            "hl": options.language,
            # The API only knows "active" and "off".
            "safe": "off" if options.safe_search == "off" else "active",
        }
        if options.sort == "date":
            params["sort"] = "date"
        optional = {
            "dateRestrict": options.date_restrict,
            "siteSearch": options.site_search,
            "exactTerms": options.exact_terms,
            "excludeTerms": options.exclude_terms,
            "fileType": options.file_type,
            "start": str(options.start) if options.start is not None else None,
            "rights": options.rights,
            "searchType": options.search_type,
            "lowRange": options.low_range,
            "highRange": options.high_range,
            "filter": options.filter,
        }
        params.update({k: v for k, v in optional.items() if v})
        return params

    def search(self, query: str, options: SearchOptions) -> SerpData:
        if not self.api_key or not self.engine_id:
            raise ConfigurationError("Google Search API configuration not found")
        if not self.api_key.startswith("AIza"):
            raise SearchError("Invalid API key format", code="INVALID_API_KEY_FORMAT")

        if self.rate_limiter is not None:
            self.rate_limiter.acquire()

        status, data = _get_json(
            self.base_url,
            self.build_params(query, options),
            timeout_s=self.timeout_s,
            transport=self.transport,
            source_name=self.source_name,
        )
        if status >= 400:
            error = data.get("error") if isinstance(data, dict) else None
            message = (error or {}).get("message") or "Google Search API error"
            raise SearchError(message, code=(error or {}).get("status"), status=status)
        if not isinstance(data, dict) or ("items" not in data and "searchInformation" not in data):
            raise SearchError("Invalid API response format", code="INVALID_RESPONSE", status=status)

        return self._parse(data)

    @staticmethod
    def _parse(data: dict[str, Any]) -> SerpData:
        items = [item for item in data.get("items") or [] if isinstance(item, dict)]
        organic = [
            SerpResult(
                title=item.get("title") or "",
                link=item.get("link") or "",
                snippet=item.get("snippet") or "",
                position=i,
            )
            for i, item in enumerate(items, start=1)
        ]

        featured: list[str] = []
        for item in items:
            metatags = (item.get("pagemap") or {}).get("metatags") or [{}]
            description = metatags[0].get("og:description") or metatags[0].get("description")
            if description:
                featured.append(description)

        related = [
            r["title"]
            for r in (data.get("queries") or {}).get("relatedSearches") or []
            if isinstance(r, dict) and r.get("title")
        ]
        total = _to_int((data.get("searchInformation") or {}).get("totalResults"))
        return SerpData(
            organic_results=organic,
            featured_snippets=featured,
            related_searches=related,
            total_results=total,
        )


@dataclass(frozen=True)
class SerpApiProvider:
    """SerpApi (serpapi.com) Google engine provider."""

    api_key: str
    base_url: str = "https://serpapi.com/search.json"
    num_results: int = 10
    timeout_s: float = 30.0
    transport: httpx.BaseTransport | None = None
    source_name: str = "serpapi"

    def search(self, query: str, options: SearchOptions) -> SerpData:
        params = {
            "api_key": self.api_key,
            "q": query,
            "engine": "google",
            "num": str(self.num_results),
            "gl": options.country,
            "hl": options.language,
        }
        status, data = _get_json(
            self.base_url,
            params,
            timeout_s=self.timeout_s,
            transport=self.transport,
            source_name=self.source_name,
        )
        if status >= 400 or not isinstance(data, dict):
            message = data.get("error") if isinstance(data, dict) else None
            raise SearchError(message or "SerpApi error", code="SERPAPI_ERROR", status=status)

        organic = [
            SerpResult(
                title=r.get("title") or "",
                link=r.get("link") or "",
                snippet=r.get("snippet") or "",
                position=_to_int(r.get("position")) or i,
            )
            for i, r in enumerate(data.get("organic_results") or [], start=1)
            if isinstance(r, dict)
        ]
        answer_box = data.get("answer_box") or {}
        featured = [answer_box["snippet"]] if answer_box.get("snippet") else []
        related = [
            r["query"] for r in data.get("related_searches") or [] if isinstance(r, dict) and r.get("query")
        ]
        return SerpData(
            organic_results=organic,
            featured_snippets=featured,
            related_searches=related,
            total_results=_to_int((data.get("search_information") or {}).get("total_results")),
        )


@dataclass(frozen=True)
class FallbackSearchProvider:
    """Try `primary`; on a search failure, answer from `fallback`."""

    primary: SearchProvider
    fallback: SearchProvider

    @property
    def source_name(self) -> str:
        return f"{self.primary.source_name}+{self.fallback.source_name}"

    def search(self, query: str, options: SearchOptions) -> SerpData:
        try:
            return self.primary.search(query, options)
        except SearchError as e:
            logger.warning(
                "Primary search provider failed, falling back",
                extra={
                    "primary": self.primary.source_name,
                    "fallback": self.fallback.source_name,
                    "code": e.code,
                    "status": e.status,
                },
            )
            return self.fallback.search(query, options)


def get_search_provider(settings: Settings, rate_limiter: RateLimiter | None = None) -> SearchProvider:
    """Factory to create a search provider based on settings."""

    google: SearchProvider | None = None
    if settings.google_api_key and settings.google_search_engine_id:
        google = GoogleSearchProvider(
            api_key=settings.google_api_key,
            engine_id=settings.google_search_engine_id,
            base_url=settings.google_api_base_url,
            num_results=settings.search_results_per_query,
            timeout_s=settings.search_timeout_s,
            rate_limiter=rate_limiter,
        )

    if settings.search_provider == "serpapi":
        if not settings.serpapi_key:
            raise ConfigurationError(
                "Missing BLOGFLOW_SERPAPI_KEY while search_provider=serpapi. "
                "Set it in environment variables or .env."
            )
        serpapi = SerpApiProvider(
            api_key=settings.serpapi_key,
            base_url=settings.serpapi_base_url,
            num_results=settings.search_results_per_query,
            timeout_s=settings.search_timeout_s,
        )
        return FallbackSearchProvider(primary=serpapi, fallback=google) if google else serpapi

    if google is None:
        raise ConfigurationError(
            "Missing BLOGFLOW_GOOGLE_API_KEY or BLOGFLOW_GOOGLE_SEARCH_ENGINE_ID while "
            "search_provider=google. Set them in environment variables or .env."
        )
    return google
