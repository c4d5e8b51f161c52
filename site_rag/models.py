"""Pydantic models for the site RAG server API."""
from typing import List, Dict, Any, Optional, Literal
from pydantic import BaseModel, Field

from .indexing.models import IndexingResult, IndexingState


class SearchResult(BaseModel):
    """Single retrieved passage."""

    id: str = Field(
        ...,
        description="Passage ID"
    )
    text: str = Field(
        ...,
        description="Passage text"
    )
    url: str = Field(
        ...,
        description="Page the passage came from"
    )
    chunk_index: int = Field(
        default=0,
        description="Position of the passage within its page"
    )
    score: float = Field(
        ...,
        description="Similarity score"
    )


class ChatMessage(BaseModel):
    """One turn of a conversation."""

    role: Literal["user", "assistant", "system"] = Field(
        ...,
        description="Author of the message"
    )
    content: str = Field(
        default="",
        description="Message text"
    )


class ChatRequest(BaseModel):
    """Request for a grounded chat answer."""

    messages: List[ChatMessage] = Field(
        default_factory=list,
        description="Conversation so far"
    )
    query: Optional[str] = Field(
        default=None,
        description="Explicit query (defaults to the last user message)"
    )

    def user_query(self) -> str:
        """Query text used for retrieval."""
        if self.query:
            return self.query
        for message in reversed(self.messages):
            if message.role == "user":
                return message.content
        return ""


class ChatResponse(BaseModel):
    """Answer generated from retrieved site content."""

    answer: str = Field(
        ...,
        description="Generated answer from LLM"
    )
    context: str = Field(
        default="",
        description="Retrieved passages sent to the LLM"
    )
    indexing_state: IndexingState = Field(
        ...,
        description="State of the site indexing run when the answer was produced"
    )


class SearchRequest(BaseModel):
    """Request for vector search only (no LLM)."""

    query: str = Field(
        ...,
        description="Search query"
    )
    limit: int = Field(
        default=5,
        gt=0,
        description="Number of results"
    )


class SearchResponse(BaseModel):
    """Response from search operation."""

    results: List[SearchResult] = Field(
        ...,
        description="Search results"
    )
    query: str = Field(
        ...,
        description="Original query"
    )


class IndexTriggerResponse(BaseModel):
    """Response from an explicit indexing trigger."""

    started: bool = Field(
        ...,
        description="Whether this call started the indexing run"
    )
    state: IndexingState = Field(
        ...,
        description="Indexing state after the call"
    )


class IndexStatusResponse(BaseModel):
    """Indexing progress."""

    state: IndexingState = Field(
        ...,
        description="Indexing state"
    )
    site_url: str = Field(
        ...,
        description="Seed URL of the indexed site"
    )
    result: Optional[IndexingResult] = Field(
        default=None,
        description="Statistics of the run, once it has finished"
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(
        ...,
        description="Overall status"
    )
    qdrant: Dict[str, Any] = Field(
        ...,
        description="Qdrant connection status"
    )
    embedding: Dict[str, Any] = Field(
        ...,
        description="Embedding server status"
    )
    llm: Dict[str, Any] = Field(
        ...,
        description="LLM server status"
    )
    indexing_state: IndexingState = Field(
        ...,
        description="Indexing state"
    )
