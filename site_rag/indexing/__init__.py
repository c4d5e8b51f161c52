"""
Site RAG Indexing Package.

Crawls one website in a headless browser and indexes its visible text
into the vector store.

Features:
- Depth-bounded, same-origin crawling with Playwright
- Visible-text extraction with BeautifulSoup
- Single-flight indexing runs that skip already indexed pages
- CLI interface for crawling, indexing and searching
"""
from .models import (
    IndexingState,
    IndexingResult,
    RenderedPage,
    TextChunk,
)
from .crawler import SiteCrawler, VisitedSet
from .extractor import ContentExtractor, extract_links, extract_text
from .orchestrator import IndexingOrchestrator

__all__ = [
    "IndexingState",
    "IndexingResult",
    "RenderedPage",
    "TextChunk",
    "SiteCrawler",
    "VisitedSet",
    "ContentExtractor",
    "extract_links",
    "extract_text",
    "IndexingOrchestrator",
]
