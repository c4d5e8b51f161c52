"""Site RAG Server Package."""

__version__ = "1.0.0"
__author__ = "artqcid"

from .config import RAGConfig
from .models import (
    ChatRequest,
    SearchRequest,
    ChatResponse,
    SearchResponse,
    SearchResult,
)

__all__ = [
    "RAGConfig",
    "ChatRequest",
    "SearchRequest",
    "ChatResponse",
    "SearchResponse",
    "SearchResult",
]
