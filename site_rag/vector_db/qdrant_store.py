"""Qdrant implementation of the index store."""
import logging
import uuid
from typing import List, Optional
from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    VectorParams,
    PointStruct,
    Filter,
    FieldCondition,
    MatchValue,
    PayloadSchemaType,
)

from .interface import IndexStore
from ..models import SearchResult

logger = logging.getLogger(__name__)

MEMORY_LOCATION = ":memory:"


def passage_id(url: str, chunk_index: int) -> str:
    """Deterministic point ID for a passage (Qdrant only accepts UUIDs or integers)."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{url}#chunk-{chunk_index}"))


class QdrantIndexStore(IndexStore):
    """Passage store backed by a Qdrant collection."""

    def __init__(
        self,
        url: str = "http://localhost:6333",
        collection_name: str = "documents",
        vector_size: int = 768,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
    ):
        """
        Initialize Qdrant store.

        Args:
            url: Qdrant server URL, or ':memory:' for the embedded local mode
            collection_name: Collection holding the passages
            vector_size: Embedding dimensionality
            api_key: API key for Qdrant Cloud (optional)
            timeout: Request timeout in seconds
        """
        self.url = url
        self.collection_name = collection_name
        self.vector_size = vector_size
        self.api_key = api_key
        self.timeout = timeout
        self.client: Optional[AsyncQdrantClient] = None

    async def connect(self) -> None:
        """Connect to Qdrant server."""
        try:
            if self.url == MEMORY_LOCATION:
                self.client = AsyncQdrantClient(location=MEMORY_LOCATION)
            else:
                self.client = AsyncQdrantClient(
                    url=self.url,
                    api_key=self.api_key,
                    timeout=int(self.timeout),
                )
            # Test connection
            await self.client.get_collections()
        except Exception as e:
            raise ConnectionError(f"Failed to connect to Qdrant at {self.url}: {e}") from e

    async def disconnect(self) -> None:
        """Disconnect from Qdrant."""
        if self.client:
            await self.client.close()
            self.client = None

    def _require_client(self) -> AsyncQdrantClient:
        if not self.client:
            raise RuntimeError("Client not connected. Call connect() first.")
        return self.client

    async def ensure_collection(self) -> None:
        """Create the collection and its url index when missing."""
        client = self._require_client()

        if await client.collection_exists(self.collection_name):
            return

        await client.create_collection(
            collection_name=self.collection_name,
            vectors_config=VectorParams(
                size=self.vector_size,
                distance=Distance.COSINE,
            ),
        )
        if self.url != MEMORY_LOCATION:
            # Payload indexes have no effect in the local mode
            await client.create_payload_index(
                collection_name=self.collection_name,
                field_name="url",
                field_schema=PayloadSchemaType.KEYWORD,
            )
        logger.info(f"Created collection '{self.collection_name}' ({self.vector_size} dims)")

    async def is_indexed(self, url: str) -> bool:
        """Check whether any passage of the URL is stored."""
        client = self._require_client()

        result = await client.count(
            collection_name=self.collection_name,
            count_filter=Filter(
                must=[FieldCondition(key="url", match=MatchValue(value=url))]
            ),
            exact=True,
        )
        return result.count > 0

    async def persist(
        self,
        url: str,
        chunk_index: int,
        text: str,
        vector: List[float],
    ) -> None:
        """Store one passage as a Qdrant point."""
        client = self._require_client()

        await client.upsert(
            collection_name=self.collection_name,
            points=[
                PointStruct(
                    id=passage_id(url, chunk_index),
                    vector=vector,
                    payload={
                        "url": url,
                        "chunk_index": chunk_index,
                        "text": text,
                    },
                )
            ],
        )

    async def search(
        self,
        query_vector: List[float],
        limit: int = 5,
    ) -> List[SearchResult]:
        """Search for the passages nearest to the query vector."""
        client = self._require_client()

        response = await client.query_points(
            collection_name=self.collection_name,
            query=query_vector,
            limit=limit,
            with_payload=True,
        )

        # Format results
        results = []
        for hit in response.points:
            payload = hit.payload or {}
            results.append(SearchResult(
                id=str(hit.id),
                text=payload.get("text", ""),
                url=payload.get("url", ""),
                chunk_index=payload.get("chunk_index", 0),
                score=float(hit.score),
            ))
        return results

    async def count_passages(self) -> int:
        """Total number of stored passages."""
        client = self._require_client()
        result = await client.count(collection_name=self.collection_name, exact=True)
        return result.count
