"""Text chunking strategies."""
from typing import List

from .indexing.models import TextChunk


class SlidingWindowChunker:
    """Fixed-size character windows with overlap."""

    def __init__(
        self,
        chunk_size: int = 800,
        chunk_overlap: int = 200,
        min_chunk_length: int = 50,
    ):
        """
        Initialize chunker.

        Args:
            chunk_size: Window size in characters
            chunk_overlap: Characters shared by consecutive windows
            min_chunk_length: Windows whose trimmed length is not above this are dropped
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError("chunk_overlap must be >= 0 and smaller than chunk_size")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.min_chunk_length = min_chunk_length

    @property
    def step(self) -> int:
        return self.chunk_size - self.chunk_overlap

    def chunk(self, text: str) -> List[str]:
        """
        Split text into overlapping windows.

        Windows start at 0, step, 2*step, ... while the offset is inside the
        text. Each window is trimmed; short fragments are dropped rather than
        merged into their neighbour.

        Args:
            text: Text to chunk

        Returns:
            List of text chunks in window order
        """
        chunks = []
        for start in range(0, len(text), self.step):
            piece = text[start:start + self.chunk_size].strip()
            if len(piece) > self.min_chunk_length:
                chunks.append(piece)
        return chunks

    def chunk_page(self, url: str, text: str) -> List[TextChunk]:
        """
        Chunk one page's text and number the chunks from 0.

        Args:
            url: Source URL of the text
            text: Extracted page text

        Returns:
            List of TextChunk ordered by index
        """
        return [
            TextChunk(source_url=url, index=idx, text=piece)
            for idx, piece in enumerate(self.chunk(text))
        ]
