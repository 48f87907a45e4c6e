"""Search request options.

Options arrive from UI forms and API query strings. `sanitized()` keeps the
values that are well formed and silently reverts the rest to defaults, so a
bad filter narrows nothing instead of failing the search.
"""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel

SafeSearch = Literal["off", "medium", "high"]

_SAFE_SEARCH = {"off", "medium", "high"}
_SORT = {"date", "relevance"}
_RIGHTS = {"cc_publicdomain", "cc_attribute", "cc_sharealike", "cc_noncommercial", "cc_nonderived"}
_SEARCH_TYPES = {"image", "news", "video"}
_FILTER = {"0", "1"}

_COUNTRY_RE = re.compile(r"^[A-Za-z]{2}$")
_LANGUAGE_RE = re.compile(r"^[A-Za-z]{2}$")
_DATE_RESTRICT_RE = re.compile(r"^[dwmy]\d+$")


def _int_or_none(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


class SearchOptions(BaseModel):
    """Locale, filtering and paging options for one search."""

    country: str = "us"
    language: str = "en"
    safe_search: str = "medium"
    sort: str = "relevance"
    date_restrict: str | None = None
    site_search: str | None = None
    exact_terms: str | None = None
    exclude_terms: str | None = None
    file_type: str | None = None
    start: int | None = None
    rights: str | None = None
    search_type: str | None = None
    low_range: str | None = None
    high_range: str | None = None
    filter: str | None = None  # noqa: A003

    def sanitized(self) -> SearchOptions:
        """Return a copy holding only well-formed values."""

        clean = SearchOptions()
        if _COUNTRY_RE.match(self.country or ""):
            clean.country = self.country.lower()
        if _LANGUAGE_RE.match(self.language or ""):
            clean.language = self.language.lower()
        if self.safe_search in _SAFE_SEARCH:
            clean.safe_search = self.safe_search
        if self.sort in _SORT:
            clean.sort = self.sort
        if self.date_restrict and _DATE_RESTRICT_RE.match(self.date_restrict):
            clean.date_restrict = self.date_restrict
        if self.low_range and self.high_range:
            low, high = _int_or_none(self.low_range), _int_or_none(self.high_range)
            if low is not None and high is not None and low < high:
                clean.low_range = self.low_range
                clean.high_range = self.high_range
        if self.rights in _RIGHTS:
            clean.rights = self.rights
        if self.search_type in _SEARCH_TYPES:
            clean.search_type = self.search_type
        if self.filter in _FILTER:
            clean.filter = self.filter
        if self.start is not None and 1 <= self.start <= 100:
            clean.start = self.start
        clean.site_search = self.site_search or None
        clean.exact_terms = self.exact_terms or None
        clean.exclude_terms = self.exclude_terms or None
        clean.file_type = self.file_type or None
        return clean

    def is_default(self) -> bool:
        return self == SearchOptions()

    def cache_suffix(self) -> str:
        """Stable text form of the non-default options, for cache keys."""

        changed = self.model_dump(exclude_defaults=True)
        return ";".join(f"{k}={changed[k]}" for k in sorted(changed))
