"""Daily quota guard for the search API.

The counter lives in an injected key/value store so the quota is shared by
every process pointed at the same persistent medium.
"""

from __future__ import annotations

import time
from collections.abc import Callable

from pydantic import BaseModel, ValidationError

from blogflow.cache.result_cache import DAY_MS, now_ms
from blogflow.cache.stores import KeyValueStore
from blogflow.errors import RateLimitExceededError
from blogflow.logging import get_logger

logger = get_logger(__name__)

RATE_LIMIT_KEY = "google_search_rate_limit"


class RateLimitInfo(BaseModel):
    timestamp: float
    count: int = 0


class RateLimiter:
    """Fixed-window request counter with a minimum delay between requests."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_requests: int = 100,
        window_ms: int = DAY_MS,
        request_delay_s: float = 1.0,
        key: str = RATE_LIMIT_KEY,
        clock: Callable[[], float] = now_ms,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._store = store
        self.max_requests = max_requests
        self.window_ms = window_ms
        self.request_delay_s = request_delay_s
        self._key = key
        self._clock = clock
        self._sleep = sleep

    def _load(self, now: float) -> RateLimitInfo:
        try:
            raw = self._store.get_item(self._key)
        except Exception:
            logger.warning("Error reading rate limit counter", exc_info=True)
            return RateLimitInfo(timestamp=now)
        if raw is None:
            return RateLimitInfo(timestamp=now)
        try:
            return RateLimitInfo.model_validate_json(raw)
        except ValidationError:
            logger.warning("Resetting unreadable rate limit counter")
            return RateLimitInfo(timestamp=now)

    def _save(self, info: RateLimitInfo) -> None:
        try:
            self._store.set_item(self._key, info.model_dump_json())
        except Exception:
            logger.warning("Error updating rate limit counter", exc_info=True)

    def remaining(self) -> int:
        now = self._clock()
        info = self._load(now)
        if now - info.timestamp > self.window_ms:
            return self.max_requests
        return max(self.max_requests - info.count, 0)

    def acquire(self) -> None:
        """Count one request, waiting `request_delay_s` first.

        Raises:
            RateLimitExceededError: The quota for the current window is used up.
        """

        now = self._clock()
        info = self._load(now)
        if now - info.timestamp > self.window_ms:
            info = RateLimitInfo(timestamp=now)

        if info.count >= self.max_requests:
            logger.warning(
                "Search quota exhausted",
                extra={"max_requests": self.max_requests, "window_started_ms": info.timestamp},
            )
            raise RateLimitExceededError()

        self._save(RateLimitInfo(timestamp=info.timestamp, count=info.count + 1))
        if self.request_delay_s > 0:
            self._sleep(self.request_delay_s)
