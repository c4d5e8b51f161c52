"""Vector database package."""
from .interface import IndexStore
from .qdrant_store import QdrantIndexStore

__all__ = ["IndexStore", "QdrantIndexStore"]
