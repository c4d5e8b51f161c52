"""Site indexing orchestration."""
import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from .crawler import SiteCrawler
from .extractor import ContentExtractor
from .models import IndexingResult, IndexingState

logger = logging.getLogger(__name__)


class IndexingOrchestrator:
    """Crawls a site and indexes every page at most once per process.

    The instance owns the single-flight guard: trigger() moves the state
    from NOT_STARTED to RUNNING synchronously, before any await, so
    concurrent callers on the same event loop can never start two runs.
    Later triggers are no-ops, even for a different seed URL.
    """

    def __init__(
        self,
        store,
        embedding_client,
        chunker,
        renderer_factory: Callable,
        extractor: Optional[ContentExtractor] = None,
        max_depth: int = 2,
    ):
        """
        Initialize orchestrator.

        Args:
            store: IndexStore receiving the passages
            embedding_client: EmbeddingClient used for every chunk
            chunker: SlidingWindowChunker splitting page text
            renderer_factory: Returns an async context manager exposing
                render(url); one renderer is opened per run
            extractor: Text extractor (default ContentExtractor)
            max_depth: Crawl depth from the seed URL
        """
        self.store = store
        self.embedding_client = embedding_client
        self.chunker = chunker
        self.renderer_factory = renderer_factory
        self.extractor = extractor or ContentExtractor()
        self.max_depth = max_depth

        self._state = IndexingState.NOT_STARTED
        self._task: Optional[asyncio.Task] = None
        self._result: Optional[IndexingResult] = None

    @property
    def state(self) -> IndexingState:
        return self._state

    @property
    def result(self) -> Optional[IndexingResult]:
        """Statistics of the run, available once it has completed."""
        return self._result

    def trigger(self, seed_url: str) -> Optional[asyncio.Task]:
        """
        Start indexing in the background unless a run already started.

        Must be called from a running event loop. Does not wait for the run.

        Args:
            seed_url: Site to crawl

        Returns:
            The background task, or None if the guard refused

        Raises:
            RuntimeError: no event loop is running
        """
        if self._state is not IndexingState.NOT_STARTED:
            logger.debug(f"Indexing already {self._state.value}, ignoring trigger for {seed_url}")
            return None

        loop = asyncio.get_running_loop()
        self._state = IndexingState.RUNNING
        self._task = loop.create_task(self._run(seed_url))
        return self._task

    async def index_site(self, seed_url: str) -> Optional[IndexingResult]:
        """
        Run indexing in the foreground.

        Args:
            seed_url: Site to crawl

        Returns:
            IndexingResult, or None if a run was already started earlier
        """
        task = self.trigger(seed_url)
        if task is None:
            return None
        return await task

    async def wait(self) -> Optional[IndexingResult]:
        """Wait for a started run to finish."""
        if self._task is not None:
            await asyncio.shield(self._task)
        return self._result

    async def close(self) -> None:
        """Cancel a run still in progress (process shutdown)."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    async def _run(self, seed_url: str) -> IndexingResult:
        start_time = time.time()
        result = IndexingResult(seed_url=seed_url)
        logger.info(f"Starting indexing: {seed_url} (depth {self.max_depth})")

        try:
            async with self.renderer_factory() as renderer:
                crawler = SiteCrawler(renderer)
                urls = await crawler.crawl(seed_url, self.max_depth)
                result.total_urls = len(urls)
                logger.info(f"Found pages: {urls}")

                for url in urls:
                    try:
                        await self._index_page(renderer, url, result)
                    except Exception as e:
                        result.pages_failed += 1
                        result.errors.append(f"Error indexing {url}: {e}")
                        logger.error(f"Error indexing {url}: {e}", exc_info=True)
        except Exception as e:
            result.errors.append(f"Indexing run failed: {e}")
            logger.error(f"Indexing run for {seed_url} failed: {e}", exc_info=True)
        finally:
            result.duration_seconds = time.time() - start_time
            result.finished_at = datetime.now(timezone.utc)
            self._result = result
            self._state = IndexingState.COMPLETED

        logger.info(result.summary())
        return result

    async def _index_page(self, renderer, url: str, result: IndexingResult) -> None:
        """Index one page unless some of its passages are already stored.

        Chunks are embedded and persisted strictly in order; a failure part
        way leaves the earlier chunks stored.
        """
        if await self.store.is_indexed(url):
            result.pages_skipped += 1
            logger.debug(f"Skipping {url}: already indexed")
            return

        text = await self.extractor.load_text(renderer, url)
        chunks = self.chunker.chunk_page(url, text)
        if not chunks:
            logger.info(f"Nothing to index on {url}: no text long enough")
            return

        for chunk in chunks:
            vector = await self.embedding_client.embed(chunk.text)
            await self.store.persist(url, chunk.index, chunk.text, vector)
            result.chunks_created += 1

        result.pages_indexed += 1
        logger.info(f"Indexed: {url} ({len(chunks)} chunks)")
