"""Tests for Playwright page rendering, with the browser replaced by fakes."""
import pytest
from playwright.async_api import Error as PlaywrightError

from site_rag.errors import PageRenderError
from site_rag.indexing import browser as browser_module
from site_rag.indexing.browser import PlaywrightRenderer

URL = "https://site.example/"


class FakePage:
    def __init__(self, html="<html><body>Hi</body></html>", final_url=URL, error=None):
        self.html = html
        self.url = final_url
        self.error = error
        self.goto_calls = []
        self.closed = False

    async def goto(self, url, wait_until=None, timeout=None):
        self.goto_calls.append((url, wait_until, timeout))
        if self.error:
            raise self.error

    async def content(self):
        return self.html

    async def close(self):
        self.closed = True


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.closed = False

    async def new_page(self):
        return self.page

    async def close(self):
        self.closed = True


def started(page, timeout=5.0):
    renderer = PlaywrightRenderer(timeout=timeout)
    renderer._browser = FakeBrowser(page)
    return renderer


@pytest.mark.asyncio
async def test_render_returns_dom_and_final_url():
    page = FakePage(final_url=URL + "home")
    renderer = started(page)

    rendered = await renderer.render(URL)

    assert rendered.url == URL
    assert rendered.final_url == URL + "home"
    assert rendered.html == page.html
    assert page.goto_calls == [(URL, "domcontentloaded", 5000.0)]
    assert page.closed is True


@pytest.mark.asyncio
async def test_navigation_error_is_wrapped_and_page_closed():
    page = FakePage(error=PlaywrightError("Timeout 5000ms exceeded"))
    renderer = started(page)

    with pytest.raises(PageRenderError) as exc_info:
        await renderer.render(URL)

    assert exc_info.value.url == URL
    assert "Timeout 5000ms exceeded" in exc_info.value.reason
    assert page.closed is True


@pytest.mark.asyncio
async def test_render_requires_started_browser():
    with pytest.raises(RuntimeError):
        await PlaywrightRenderer().render(URL)


@pytest.mark.asyncio
async def test_close_releases_browser():
    browser = FakeBrowser(FakePage())
    renderer = PlaywrightRenderer()
    renderer._browser = browser

    await renderer.close()

    assert browser.closed is True
    assert renderer._browser is None


class FailingChromium:
    async def launch(self, headless=True, args=None):
        raise PlaywrightError("Executable doesn't exist")


class FakePlaywright:
    def __init__(self):
        self.chromium = FailingChromium()
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakePlaywrightManager:
    def __init__(self, playwright):
        self.playwright = playwright

    async def start(self):
        return self.playwright


@pytest.mark.asyncio
async def test_failed_launch_stops_playwright(monkeypatch):
    playwright = FakePlaywright()
    monkeypatch.setattr(browser_module, "async_playwright", lambda: FakePlaywrightManager(playwright))

    with pytest.raises(PlaywrightError):
        async with PlaywrightRenderer():
            pass

    assert playwright.stopped is True
