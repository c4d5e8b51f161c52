"""Query-time retrieval of indexed site passages."""
import logging
from typing import List, Optional

from .models import SearchResult

logger = logging.getLogger(__name__)

PASSAGE_SEPARATOR = "\n\n"


class Retriever:
    """Embeds queries and asks the index store for the nearest passages."""

    def __init__(self, embedding_client, store, top_k: int = 5):
        """
        Initialize retriever.

        Args:
            embedding_client: EmbeddingClient used for queries
            store: IndexStore to search
            top_k: Default number of passages
        """
        self.embedding_client = embedding_client
        self.store = store
        self.top_k = top_k

    async def search(self, query: str, top_k: Optional[int] = None) -> List[SearchResult]:
        """
        Rank stored passages against a query.

        Errors from the embedding service or the store propagate.

        Args:
            query: Query text
            top_k: Number of results (default: instance top_k)

        Returns:
            Results in store rank order
        """
        query_vector = await self.embedding_client.embed(query)
        return await self.store.search(query_vector, limit=top_k if top_k is not None else self.top_k)

    async def retrieve(self, query: str, top_k: Optional[int] = None) -> str:
        """
        Retrieve context text for a query.

        Never raises: any failure is logged and yields an empty string so
        that generation can go ahead without context.

        Args:
            query: Query text
            top_k: Number of passages (default: instance top_k)

        Returns:
            Passage texts joined by blank lines, or ""
        """
        if not query or not query.strip():
            return ""

        try:
            results = await self.search(query, top_k)
        except Exception as e:
            logger.warning(f"Vector search error: {e}")
            return ""

        return PASSAGE_SEPARATOR.join(r.text for r in results)
