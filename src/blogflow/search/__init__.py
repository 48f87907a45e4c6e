"""Search collaborator: providers, quota guard and the cached service."""

from __future__ import annotations

from blogflow.search.options import SearchOptions
from blogflow.search.providers import (
    FallbackSearchProvider,
    GoogleSearchProvider,
    SearchProvider,
    SerpApiProvider,
    get_search_provider,
)
from blogflow.search.rate_limit import RateLimiter
from blogflow.search.service import CachedSearchService, build_search_service

__all__ = [
    "CachedSearchService",
    "FallbackSearchProvider",
    "GoogleSearchProvider",
    "RateLimiter",
    "SearchOptions",
    "SearchProvider",
    "SerpApiProvider",
    "build_search_service",
    "get_search_provider",
]
