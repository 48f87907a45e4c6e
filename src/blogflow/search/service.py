"""Cached search: the result cache placed in front of a search provider."""

from __future__ import annotations

from pydantic import ValidationError

from blogflow.cache.result_cache import ResultCache
from blogflow.cache.stores import CacheStores
from blogflow.config import Settings
from blogflow.logging import get_logger
from blogflow.models.search import SerpData
from blogflow.search.options import SearchOptions
from blogflow.search.providers import SearchProvider, get_search_provider
from blogflow.search.rate_limit import RateLimiter

logger = get_logger(__name__)


class CachedSearchService:
    """Answer repeated queries from the cache.

    Provider failures propagate as `CollaboratorError`; cache failures never do.
    """

    def __init__(self, provider: SearchProvider, cache: ResultCache) -> None:
        self.provider = provider
        self.cache = cache

    @staticmethod
    def cache_query(query: str, options: SearchOptions) -> str:
        if options.is_default():
            return query
        return f"{query} [{options.cache_suffix()}]"

    def search(self, query: str, options: SearchOptions | None = None) -> SerpData:
        options = (options or SearchOptions()).sanitized()
        key = self.cache_query(query, options)

        cached = self.cache.get(key)
        if cached is not None:
            try:
                data = SerpData.model_validate(cached)
            except ValidationError:
                logger.warning("Ignoring malformed cached search result", extra={"query_len": len(query)})
            else:
                logger.info("Returning cached search results", extra={"query_len": len(query)})
                return data

        data = self.provider.search(query, options)
        self.cache.set(key, data.to_wire())
        return data


def build_search_service(
    settings: Settings,
    stores: CacheStores,
    cache: ResultCache | None = None,
) -> CachedSearchService:
    """Wire provider, rate limiter and cache from settings.

    The rate limit counter is kept in the persistent store next to the cache.
    """

    limiter = RateLimiter(
        stores.persistent,
        max_requests=settings.search_daily_quota,
        request_delay_s=settings.search_request_delay_s,
    )
    provider = get_search_provider(settings, rate_limiter=limiter)
    if cache is None:
        cache = ResultCache(settings.cache_config(), stores=stores)
    return CachedSearchService(provider, cache)
