"""Index store interface."""
from abc import ABC, abstractmethod
from typing import List

from ..models import SearchResult


class IndexStore(ABC):
    """Abstract base class for stores holding indexed page passages."""

    @abstractmethod
    async def connect(self) -> None:
        """Connect to the store."""
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Disconnect from the store."""
        pass

    @abstractmethod
    async def ensure_collection(self) -> None:
        """Create the passage collection if it does not exist yet."""
        pass

    @abstractmethod
    async def is_indexed(self, url: str) -> bool:
        """
        Check whether any passage of a URL is stored.

        Only existence is checked, not that every chunk of the page is present.

        Args:
            url: Exact page URL

        Returns:
            True if at least one passage for the URL exists
        """
        pass

    @abstractmethod
    async def persist(
        self,
        url: str,
        chunk_index: int,
        text: str,
        vector: List[float],
    ) -> None:
        """
        Store one passage.

        Args:
            url: Page URL
            chunk_index: Position of the chunk within the page
            text: Chunk text
            vector: Embedding of the text
        """
        pass

    @abstractmethod
    async def search(
        self,
        query_vector: List[float],
        limit: int = 5,
    ) -> List[SearchResult]:
        """
        Return the passages nearest to a query vector.

        Args:
            query_vector: Query embedding
            limit: Maximum number of results

        Returns:
            Results ranked by the store's similarity function
        """
        pass

    @abstractmethod
    async def count_passages(self) -> int:
        """Total number of stored passages."""
        pass
