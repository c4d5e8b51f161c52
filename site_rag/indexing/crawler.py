"""Same-origin site discovery."""
import logging
from typing import List, Set, Tuple
from urllib.parse import urlparse

from ..errors import PageRenderError
from .extractor import extract_links, normalize_url

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {"http": 80, "https": 443}


def url_origin(url: str) -> Tuple[str, str, int]:
    """Scheme, host and effective port of a URL."""
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    try:
        port = parsed.port or DEFAULT_PORTS.get(scheme, 0)
    except ValueError:
        # Malformed port in an href; never matches a real origin
        port = -1
    return scheme, (parsed.hostname or "").lower(), port


class VisitedSet:
    """URLs already scheduled during one crawl run."""

    def __init__(self):
        self._urls: Set[str] = set()

    def add(self, url: str) -> bool:
        """Mark a URL visited. Returns False if it already was."""
        if url in self._urls:
            return False
        self._urls.add(url)
        return True

    def __contains__(self, url: str) -> bool:
        return url in self._urls

    def __len__(self) -> int:
        return len(self._urls)


class SiteCrawler:
    """Depth-bounded, depth-first discovery of same-origin pages."""

    def __init__(self, renderer):
        """
        Initialize crawler.

        Args:
            renderer: Object with an async render(url) -> RenderedPage
        """
        self.renderer = renderer

    async def crawl(self, seed_url: str, max_depth: int = 2) -> List[str]:
        """
        Discover pages reachable from the seed.

        Args:
            seed_url: Absolute http(s) URL to start from
            max_depth: Link depth budget; 0 yields nothing, 1 only the seed

        Returns:
            Discovered URLs in depth-first pre-order, each at most once
        """
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        seed_url = normalize_url(seed_url)
        origin = url_origin(seed_url)
        if origin[0] not in DEFAULT_PORTS or not origin[1]:
            raise ValueError(f"Seed must be an absolute http(s) URL: {seed_url}")

        visited = VisitedSet()
        urls = await self._visit(seed_url, max_depth, origin, visited)
        logger.info(f"Crawl of {seed_url} found {len(urls)} pages ({len(visited)} visited)")
        return urls

    async def _visit(
        self,
        url: str,
        depth: int,
        origin: Tuple[str, str, int],
        visited: VisitedSet,
    ) -> List[str]:
        if depth <= 0 or not visited.add(url):
            return []

        try:
            page = await self.renderer.render(url)
        except PageRenderError as e:
            logger.warning(f"Error crawling {url}: {e.reason}")
            return []

        links = [
            link for link in extract_links(page.html, page.final_url)
            if url_origin(link) == origin
        ]

        found = [url]
        # dict.fromkeys keeps first-seen order
        for link in dict.fromkeys(links):
            found.extend(await self._visit(link, depth - 1, origin, visited))
        return found
