"""Exception hierarchy.

Validation problems in LLM replies are not exceptions: they come back as
`blogflow.validation.Invalid`. Storage problems never leave the result cache.
"""

from __future__ import annotations


class BlogFlowError(Exception):
    """Base class for all blog flow errors."""


class SectionNotFoundError(BlogFlowError, KeyError):
    """A strict outline edit referenced an id that is not in the tree."""

    def __init__(self, section_id: str) -> None:
        super().__init__(section_id)
        self.section_id = section_id

    def __str__(self) -> str:
        return f"section not found: {self.section_id!r}"


class CollaboratorError(BlogFlowError):
    """An external collaborator (LLM, search engine) failed or was unreachable."""


class ConfigurationError(CollaboratorError):
    """A collaborator cannot be used because its credentials are missing."""


class SearchError(CollaboratorError):
    """Search API failure.

    Attributes:
        code: Machine-readable error code, e.g. ``INVALID_RESPONSE``.
        status: HTTP status code when the API answered.
    """

    def __init__(self, message: str, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.status = status


class RateLimitExceededError(SearchError):
    """The daily search quota is used up."""

    def __init__(self, message: str = "Daily API quota exceeded") -> None:
        super().__init__(message, code="RATE_LIMIT_EXCEEDED", status=429)


class GenerationError(CollaboratorError):
    """The LLM call itself failed (as opposed to returning an invalid reply)."""
