"""Configuration for the site RAG server."""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, ValidationError, model_validator
import os

from .errors import ConfigurationError


class RAGConfig(BaseSettings):
    """Site RAG server configuration."""

    # Crawl target
    site_url: str = Field(
        ...,
        description="Seed URL of the site to crawl and index"
    )
    crawl_max_depth: int = Field(
        default=2,
        ge=0,
        description="Maximum link depth followed from the seed"
    )
    page_timeout: float = Field(
        default=30.0,
        description="Per-page navigation timeout in seconds"
    )
    browser_headless: bool = Field(
        default=True,
        description="Run Chromium without a window"
    )

    # Qdrant Configuration
    qdrant_url: str = Field(
        default="http://localhost:6333",
        description="Qdrant server URL (':memory:' for the embedded local mode)"
    )
    qdrant_collection: str = Field(
        default="documents",
        description="Collection holding indexed passages"
    )
    qdrant_api_key: Optional[str] = Field(
        default=None,
        description="Qdrant Cloud API key (optional)"
    )

    # Embedding Server Integration
    embedding_url: str = Field(
        default="http://127.0.0.1:8001/v1/embeddings",
        description="Embedding server endpoint"
    )
    embedding_model: str = Field(
        default="nomic-embed-text-v1.5",
        description="Embedding model name"
    )
    embedding_api_key: Optional[str] = Field(
        default=None,
        description="Bearer token for hosted embedding services"
    )
    embedding_dimensions: int = Field(
        default=768,
        description="Embedding vector dimensions"
    )
    embedding_timeout: float = Field(
        default=30.0,
        description="Per-request embedding timeout in seconds"
    )
    embedding_max_retries: int = Field(
        default=5,
        ge=1,
        description="Attempts per text when the service rate limits"
    )
    embedding_retry_delay: float = Field(
        default=2.0,
        description="First backoff delay in seconds, doubled after each retry"
    )

    # LLM Server Integration
    llm_url: str = Field(
        default="http://127.0.0.1:8080/v1/chat/completions",
        description="LLM server endpoint"
    )
    llm_model: str = Field(
        default="qwen2.5-coder-7b",
        description="LLM model name"
    )
    llm_api_key: Optional[str] = Field(
        default=None,
        description="Bearer token for hosted LLM services"
    )
    llm_max_tokens: int = Field(
        default=1024,
        description="Max tokens for LLM response"
    )
    llm_temperature: float = Field(
        default=0.3,
        description="LLM temperature"
    )

    # RAG Parameters
    chunk_size: int = Field(
        default=800,
        gt=0,
        description="Text chunk size in characters"
    )
    chunk_overlap: int = Field(
        default=200,
        ge=0,
        description="Overlap between consecutive chunks"
    )
    min_chunk_length: int = Field(
        default=50,
        ge=0,
        description="Chunks this short or shorter are dropped"
    )
    retrieval_limit: int = Field(
        default=5,
        gt=0,
        description="Number of passages to retrieve"
    )

    # Server Configuration
    host: str = Field(
        default="127.0.0.1",
        description="Server host"
    )
    port: int = Field(
        default=8002,
        description="Server port"
    )
    verbose: bool = Field(
        default=False,
        description="Enable verbose logging"
    )

    @model_validator(mode="after")
    def _check_chunking(self) -> "RAGConfig":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")
        return self

    @classmethod
    def from_env(cls, site_url: Optional[str] = None) -> "RAGConfig":
        """Load config from environment variables.

        Args:
            site_url: Overrides RAG_SITE_URL

        Raises:
            ConfigurationError: RAG_SITE_URL is unset or a value is invalid
        """
        site_url = site_url or os.getenv("RAG_SITE_URL")
        if not site_url:
            raise ConfigurationError("Missing required environment variable: RAG_SITE_URL")

        try:
            return cls(
                # Crawl
                site_url=site_url,
                crawl_max_depth=int(os.getenv("RAG_CRAWL_MAX_DEPTH", "2")),
                page_timeout=float(os.getenv("RAG_PAGE_TIMEOUT", "30")),
                browser_headless=os.getenv("RAG_BROWSER_HEADLESS", "true").lower() == "true",

                # Qdrant
                qdrant_url=os.getenv("RAG_QDRANT_URL", "http://localhost:6333"),
                qdrant_collection=os.getenv("RAG_QDRANT_COLLECTION", "documents"),
                qdrant_api_key=os.getenv("RAG_QDRANT_API_KEY"),

                # Embedding
                embedding_url=os.getenv(
                    "RAG_EMBEDDING_URL",
                    "http://127.0.0.1:8001/v1/embeddings"
                ),
                embedding_model=os.getenv("RAG_EMBEDDING_MODEL", "nomic-embed-text-v1.5"),
                embedding_api_key=os.getenv("RAG_EMBEDDING_API_KEY"),
                embedding_dimensions=int(os.getenv("RAG_EMBEDDING_DIM", "768")),
                embedding_timeout=float(os.getenv("RAG_EMBEDDING_TIMEOUT", "30")),
                embedding_max_retries=int(os.getenv("RAG_EMBEDDING_MAX_RETRIES", "5")),
                embedding_retry_delay=float(os.getenv("RAG_EMBEDDING_RETRY_DELAY", "2.0")),

                # LLM
                llm_url=os.getenv(
                    "RAG_LLM_URL",
                    "http://127.0.0.1:8080/v1/chat/completions"
                ),
                llm_model=os.getenv("RAG_LLM_MODEL", "qwen2.5-coder-7b"),
                llm_api_key=os.getenv("RAG_LLM_API_KEY"),
                llm_max_tokens=int(os.getenv("RAG_LLM_MAX_TOKENS", "1024")),
                llm_temperature=float(os.getenv("RAG_LLM_TEMPERATURE", "0.3")),

                # RAG Parameters
                chunk_size=int(os.getenv("RAG_CHUNK_SIZE", "800")),
                chunk_overlap=int(os.getenv("RAG_CHUNK_OVERLAP", "200")),
                min_chunk_length=int(os.getenv("RAG_MIN_CHUNK_LENGTH", "50")),
                retrieval_limit=int(os.getenv("RAG_RETRIEVAL_LIMIT", "5")),

                # Server
                host=os.getenv("RAG_HOST", "127.0.0.1"),
                port=int(os.getenv("RAG_PORT", "8002")),
                verbose=os.getenv("RAG_VERBOSE", "").lower() == "true",
            )
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    class Config:
        env_prefix = "RAG_"
        case_sensitive = False
