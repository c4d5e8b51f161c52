"""Headless browser rendering with Playwright."""
import logging
from typing import Optional

from playwright.async_api import Browser, Error as PlaywrightError, Playwright, async_playwright

from ..errors import PageRenderError
from .models import RenderedPage

logger = logging.getLogger(__name__)

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]


class PlaywrightRenderer:
    """Chromium instance owned by one indexing run.

    Each render() opens its own page and closes it before returning, so
    only the browser itself lives for the whole run.
    """

    def __init__(self, timeout: float = 30.0, headless: bool = True):
        """
        Initialize renderer.

        Args:
            timeout: Navigation timeout in seconds
            headless: Run Chromium without a window
        """
        self.timeout = timeout
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Launch the browser."""
        if self._browser is not None:
            return
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=LAUNCH_ARGS,
            )
        except PlaywrightError:
            await self._playwright.stop()
            self._playwright = None
            raise
        logger.debug("Chromium launched")

    async def close(self):
        """Close the browser and stop Playwright."""
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
            logger.debug("Chromium closed")

    async def render(self, url: str) -> RenderedPage:
        """
        Load a URL and return its rendered DOM.

        Args:
            url: Page to load

        Returns:
            RenderedPage with the serialized DOM

        Raises:
            PageRenderError: navigation failed or timed out
        """
        if self._browser is None:
            raise RuntimeError("Renderer not started. Use 'async with' or call start() first.")

        page = None
        try:
            page = await self._browser.new_page()
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self.timeout * 1000,
            )
            html = await page.content()
            return RenderedPage(url=url, final_url=page.url, html=html)
        except PlaywrightError as e:
            raise PageRenderError(url, str(e)) from e
        finally:
            if page is not None:
                await page.close()
