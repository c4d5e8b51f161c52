"""Embedding server client."""
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional
import httpx

from .errors import EmbeddingServiceError, MaxRetriesError, RateLimitError

logger = logging.getLogger(__name__)

# Marker hosted services use in quota errors (e.g. RESOURCE_EXHAUSTED)
QUOTA_EXHAUSTED_MARKER = "exhausted"


class EmbeddingClient:
    """Client for an OpenAI-compatible embedding endpoint."""

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8001",
        model: str = "nomic-embed-text-v1.5",
        api_key: Optional[str] = None,
        dimensions: Optional[int] = None,
        max_retries: int = 5,
        initial_delay: float = 2.0,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize embedding client.

        Args:
            base_url: Base URL of embedding server (or full /v1/embeddings URL)
            model: Model name
            api_key: Bearer token, if the service needs one
            dimensions: Expected vector length; mismatches are rejected
            max_retries: Attempts per text while the service rate limits
            initial_delay: First backoff delay in seconds, doubled per retry
            timeout: Per-request timeout in seconds
            client: Preconfigured HTTP client (tests inject a mock transport)
            sleep: Delay function used between retries
        """
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self.base_url = base_url.rstrip("/")
        self.model = model
        self.dimensions = dimensions
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self._sleep = sleep

        headers = {}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self.client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    @property
    def endpoint(self) -> str:
        # Handle both base URL and full endpoint URL
        if self.base_url.endswith("/v1/embeddings"):
            return self.base_url
        return f"{self.base_url}/v1/embeddings"

    async def close(self):
        """Close HTTP client."""
        await self.client.aclose()

    async def embed(self, text: str) -> List[float]:
        """
        Get embedding for a single text.

        Rate-limited attempts are retried with exponential backoff
        (initial_delay, 2x, 4x, ...). Other failures are raised at once.

        Args:
            text: Text to embed

        Returns:
            Embedding vector

        Raises:
            MaxRetriesError: every attempt was rate limited
            EmbeddingServiceError: any other failure
        """
        delay = self.initial_delay
        for attempt in range(1, self.max_retries + 1):
            try:
                return await self._request(text)
            except RateLimitError as e:
                if attempt == self.max_retries:
                    break
                logger.warning(
                    f"Embedding quota hit ({e}), retrying in {delay:.1f}s "
                    f"(attempt {attempt}/{self.max_retries})"
                )
                await self._sleep(delay)
                delay *= 2

        raise MaxRetriesError(self.max_retries)

    async def _request(self, text: str) -> List[float]:
        """Perform one embedding call, mapping failures to the error taxonomy."""
        payload = {
            "input": text,
            "model": self.model,
        }

        try:
            response = await self.client.post(self.endpoint, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise self._classify(e.response) from e
        except httpx.TimeoutException as e:
            raise EmbeddingServiceError(f"Embedding request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise EmbeddingServiceError(f"Embedding server error: {e}") from e

        # Format: {"data": [{"embedding": [...]}, ...]}
        try:
            embedding = response.json()["data"][0]["embedding"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise EmbeddingServiceError(f"Malformed embedding response: {e}") from e

        if self.dimensions is not None and len(embedding) != self.dimensions:
            raise EmbeddingServiceError(
                f"Expected {self.dimensions}-dimensional embedding, got {len(embedding)}"
            )
        return [float(x) for x in embedding]

    @staticmethod
    def _classify(response: httpx.Response):
        """Map an error response to RateLimitError or EmbeddingServiceError."""
        status = response.status_code
        try:
            body = response.text
        except (httpx.ResponseNotRead, UnicodeDecodeError):
            body = ""

        if status == 429 or QUOTA_EXHAUSTED_MARKER in body.lower():
            return RateLimitError(f"HTTP {status}: rate limited", status_code=status)
        return EmbeddingServiceError(f"HTTP {status}: {body[:200]}", status_code=status)

    async def health_check(self) -> bool:
        """Check if embedding server is healthy."""
        try:
            # Strip /v1/embeddings from base_url to get root health endpoint
            health_url = self.base_url.replace("/v1/embeddings", "")
            response = await self.client.get(f"{health_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False
