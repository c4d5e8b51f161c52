"""Exception types shared across the site RAG server."""
from typing import Optional


class SiteRAGError(Exception):
    """Base class for all site RAG errors."""


class ConfigurationError(SiteRAGError):
    """Required settings are missing or invalid."""


class PageRenderError(SiteRAGError):
    """A page could not be loaded in the browser."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to render {url}: {reason}")


class EmbeddingError(SiteRAGError):
    """Base class for embedding service failures."""


class RateLimitError(EmbeddingError):
    """The embedding service rejected the call for quota reasons (retryable)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class EmbeddingServiceError(EmbeddingError):
    """Any non-retryable embedding failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class MaxRetriesError(EmbeddingError):
    """Every attempt was rate limited."""

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Max retries reached for embedding ({attempts} attempts)")
