"""Pydantic models for the indexing package."""
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IndexingState(str, Enum):
    """Lifecycle of the indexing run owned by an orchestrator."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"


class RenderedPage(BaseModel):
    """HTML of a page after the browser has rendered it."""

    url: str = Field(
        ...,
        description="URL that was requested"
    )
    final_url: str = Field(
        ...,
        description="URL after redirects"
    )
    html: str = Field(
        default="",
        description="Serialized DOM"
    )


class TextChunk(BaseModel):
    """A window of a page's extracted text."""

    model_config = ConfigDict(frozen=True)

    source_url: str = Field(
        ...,
        description="Page the text came from"
    )
    index: int = Field(
        ...,
        ge=0,
        description="Position of the chunk within the page (0-based)"
    )
    text: str = Field(
        ...,
        description="Chunk text, trimmed"
    )


class IndexingResult(BaseModel):
    """Result of an indexing run."""

    seed_url: str
    total_urls: int = 0
    pages_indexed: int = 0
    pages_skipped: int = 0
    pages_failed: int = 0
    chunks_created: int = 0
    errors: List[str] = Field(default_factory=list)
    duration_seconds: float = 0.0
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None

    def summary(self) -> str:
        """Generate a summary string."""
        return (
            f"Indexed {self.seed_url}: "
            f"{self.pages_indexed}/{self.total_urls} pages indexed, "
            f"{self.pages_skipped} already present, {self.pages_failed} failed, "
            f"{self.chunks_created} chunks in {self.duration_seconds:.1f}s"
        )
