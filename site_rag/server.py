"""FastAPI server for the site RAG system."""
import logging
from typing import Callable, Optional
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from . import __version__
from .chunking import SlidingWindowChunker
from .config import RAGConfig
from .embeddings import EmbeddingClient
from .indexing.browser import PlaywrightRenderer
from .indexing.extractor import normalize_url
from .indexing.orchestrator import IndexingOrchestrator
from .llm_client import LLMClient
from .models import (
    ChatRequest,
    ChatResponse,
    SearchRequest,
    SearchResponse,
    IndexTriggerResponse,
    IndexStatusResponse,
    HealthResponse,
)
from .retriever import Retriever
from .vector_db import IndexStore, QdrantIndexStore

logger = logging.getLogger(__name__)


class RAGServer:
    """Long-lived components shared by all requests.

    Components passed to the constructor are used as-is; the rest are built
    from the config at startup.
    """

    def __init__(
        self,
        config: RAGConfig,
        store: Optional[IndexStore] = None,
        embedding_client: Optional[EmbeddingClient] = None,
        llm_client: Optional[LLMClient] = None,
        renderer_factory: Optional[Callable] = None,
    ):
        """Initialize RAG server."""
        self.config = config
        self.store = store
        self.embedding_client = embedding_client
        self.llm_client = llm_client
        self.renderer_factory = renderer_factory
        self.retriever: Optional[Retriever] = None
        self.orchestrator: Optional[IndexingOrchestrator] = None

    def _default_renderer(self) -> PlaywrightRenderer:
        return PlaywrightRenderer(
            timeout=self.config.page_timeout,
            headless=self.config.browser_headless,
        )

    async def startup(self):
        """Initialize connections on startup."""
        logger.info("Starting site RAG server...")

        if self.store is None:
            self.store = QdrantIndexStore(
                url=self.config.qdrant_url,
                collection_name=self.config.qdrant_collection,
                vector_size=self.config.embedding_dimensions,
                api_key=self.config.qdrant_api_key,
            )
        await self.store.connect()
        await self.store.ensure_collection()
        logger.info(f"Connected to Qdrant at {self.config.qdrant_url}, "
                    f"collection '{self.config.qdrant_collection}' ready")

        if self.embedding_client is None:
            self.embedding_client = EmbeddingClient(
                base_url=self.config.embedding_url,
                model=self.config.embedding_model,
                api_key=self.config.embedding_api_key,
                dimensions=self.config.embedding_dimensions,
                max_retries=self.config.embedding_max_retries,
                initial_delay=self.config.embedding_retry_delay,
                timeout=self.config.embedding_timeout,
            )
        logger.info(f"Embedding server at {self.config.embedding_url}")

        if self.llm_client is None:
            self.llm_client = LLMClient(
                base_url=self.config.llm_url,
                model=self.config.llm_model,
                max_tokens=self.config.llm_max_tokens,
                temperature=self.config.llm_temperature,
                api_key=self.config.llm_api_key,
            )
        logger.info(f"LLM server at {self.config.llm_url}")

        self.retriever = Retriever(
            embedding_client=self.embedding_client,
            store=self.store,
            top_k=self.config.retrieval_limit,
        )
        self.orchestrator = IndexingOrchestrator(
            store=self.store,
            embedding_client=self.embedding_client,
            chunker=SlidingWindowChunker(
                chunk_size=self.config.chunk_size,
                chunk_overlap=self.config.chunk_overlap,
                min_chunk_length=self.config.min_chunk_length,
            ),
            renderer_factory=self.renderer_factory or self._default_renderer,
            max_depth=self.config.crawl_max_depth,
        )
        logger.info(f"Site {self.config.site_url} will be indexed on first request")

    def ensure_indexing(self) -> bool:
        """Start indexing the configured site if no run has started yet."""
        return self.orchestrator.trigger(self.config.site_url) is not None

    async def shutdown(self):
        """Clean up connections on shutdown."""
        logger.info("Shutting down site RAG server...")

        if self.orchestrator:
            await self.orchestrator.close()
        if self.store:
            await self.store.disconnect()
        if self.embedding_client:
            await self.embedding_client.close()
        if self.llm_client:
            await self.llm_client.close()

        logger.info("Shutdown complete")


def create_app(
    config: Optional[RAGConfig] = None,
    server: Optional[RAGServer] = None,
) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        config: RAG configuration (loaded from the environment if not provided)
        server: Prebuilt server (defaults to one built from config)

    Returns:
        FastAPI application
    """
    if server is None:
        if config is None:
            config = RAGConfig.from_env()
        server = RAGServer(config)
    config = server.config

    # Lifespan context manager
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await server.startup()
        yield
        await server.shutdown()

    app = FastAPI(
        title="Site RAG Server",
        description="Retrieval-augmented answers over a crawled website",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.rag_server = server

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def require_ready():
        if not server.retriever or not server.orchestrator:
            raise HTTPException(500, "Server not initialized")

    # Routes
    @app.post("/v1/chat", response_model=ChatResponse)
    async def chat(request: ChatRequest):
        """Answer from the site's content, indexing it lazily on first use."""
        require_ready()
        server.ensure_indexing()

        query = request.user_query()
        context = await server.retriever.retrieve(query) if query else ""

        messages = [m.model_dump() for m in request.messages]
        if not messages and query:
            messages = [{"role": "user", "content": query}]

        try:
            answer = await server.llm_client.generate_with_context(messages, context)
        except Exception as e:
            logger.error(f"Generation failed: {e}", exc_info=True)
            raise HTTPException(502, f"Generation failed: {e}")

        return ChatResponse(
            answer=answer,
            context=context,
            indexing_state=server.orchestrator.state,
        )

    @app.post("/v1/search", response_model=SearchResponse)
    async def search(request: SearchRequest):
        """Search indexed passages (retrieval only)."""
        require_ready()
        server.ensure_indexing()

        try:
            results = await server.retriever.search(request.query, request.limit)
        except Exception as e:
            raise HTTPException(500, f"Search failed: {e}")

        return SearchResponse(results=results, query=request.query)

    @app.post("/v1/index", response_model=IndexTriggerResponse)
    async def trigger_index():
        """Start indexing the configured site now."""
        require_ready()
        started = server.ensure_indexing()
        return IndexTriggerResponse(started=started, state=server.orchestrator.state)

    @app.get("/v1/index/status", response_model=IndexStatusResponse)
    async def index_status():
        """Indexing state and statistics."""
        require_ready()
        return IndexStatusResponse(
            state=server.orchestrator.state,
            site_url=config.site_url,
            result=server.orchestrator.result,
        )

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        """Health check endpoint."""
        require_ready()

        try:
            indexed = await server.store.is_indexed(normalize_url(config.site_url))
            qdrant_status = {
                "connected": True,
                "url": config.qdrant_url,
                "seed_indexed": indexed,
                "passages": await server.store.count_passages(),
            }
        except Exception as e:
            qdrant_status = {
                "connected": False,
                "error": str(e),
            }

        embedding_status = {
            "connected": await server.embedding_client.health_check(),
            "url": config.embedding_url,
        }
        llm_status = {
            "connected": await server.llm_client.health_check(),
            "url": config.llm_url,
        }

        all_healthy = (
            qdrant_status["connected"] and
            embedding_status["connected"] and
            llm_status["connected"]
        )

        return HealthResponse(
            status="healthy" if all_healthy else "degraded",
            qdrant=qdrant_status,
            embedding=embedding_status,
            llm=llm_status,
            indexing_state=server.orchestrator.state,
        )

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "name": "Site RAG Server",
            "version": __version__,
            "status": "running",
            "site": config.site_url,
            "endpoints": {
                "chat": "/v1/chat",
                "search": "/v1/search",
                "index": "/v1/index",
                "index_status": "/v1/index/status",
                "health": "/health",
            },
        }

    return app
