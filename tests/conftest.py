"""Shared fakes for the site RAG tests."""
import hashlib
from typing import Dict, Iterable, List, Optional

import pytest

from site_rag.errors import PageRenderError
from site_rag.indexing.models import RenderedPage
from site_rag.models import SearchResult
from site_rag.vector_db import IndexStore


def page(*links: str, body: str = "") -> str:
    """Build a small HTML page with the given links."""
    anchors = "".join(f'<a href="{link}">{link}</a>' for link in links)
    return f"<html><head><title>t</title></head><body><p>{body}</p>{anchors}</body></html>"


class FakeRenderer:
    """Serves canned HTML; URLs in `failing` raise PageRenderError."""

    def __init__(self, pages: Dict[str, str], failing: Iterable[str] = ()):
        self.pages = pages
        self.failing = set(failing)
        self.rendered: List[str] = []
        self.entered = 0
        self.exited = 0

    async def __aenter__(self):
        self.entered += 1
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        self.exited += 1

    async def render(self, url: str) -> RenderedPage:
        self.rendered.append(url)
        if url in self.failing or url not in self.pages:
            raise PageRenderError(url, "net::ERR_NAME_NOT_RESOLVED")
        return RenderedPage(url=url, final_url=url, html=self.pages[url])


class FakeEmbedder:
    """Deterministic 4-dimensional vectors; texts in `failing` raise."""

    def __init__(self, failing: Iterable[str] = (), error: Optional[Exception] = None):
        self.failing = set(failing)
        self.error = error or RuntimeError("embedding failed")
        self.calls: List[str] = []

    async def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if text in self.failing:
            raise self.error
        digest = hashlib.sha256(text.encode()).digest()
        return [b / 255.0 + 0.01 for b in digest[:4]]


class FakeStore(IndexStore):
    """In-memory rows of (url, chunk_index, text, vector)."""

    def __init__(self, search_error: Optional[Exception] = None):
        self.rows: List[dict] = []
        self.search_error = search_error
        self.searches: List[int] = []

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def ensure_collection(self) -> None:
        pass

    async def is_indexed(self, url: str) -> bool:
        return any(row["url"] == url for row in self.rows)

    async def persist(self, url, chunk_index, text, vector) -> None:
        self.rows.append({"url": url, "chunk_index": chunk_index, "text": text, "vector": vector})

    async def count_passages(self) -> int:
        return len(self.rows)

    async def search(self, query_vector, limit=5) -> List[SearchResult]:
        self.searches.append(limit)
        if self.search_error:
            raise self.search_error
        return [
            SearchResult(id=str(i), text=row["text"], url=row["url"],
                         chunk_index=row["chunk_index"], score=1.0 - i * 0.1)
            for i, row in enumerate(self.rows[:limit])
        ]


@pytest.fixture
def long_text():
    """Text long enough to span several chunks with the default chunker."""
    return " ".join(f"word{i}" for i in range(180))
