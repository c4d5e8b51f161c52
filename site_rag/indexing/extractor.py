"""Visible-text and link extraction from rendered HTML."""
import re
from typing import List
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from .models import RenderedPage

# Elements that never carry user-visible prose
NON_CONTENT_TAGS = [
    "script", "style", "noscript", "template",
    "svg", "img", "picture", "canvas",
]

_WHITESPACE = re.compile(r"\s+")


def extract_text(html: str) -> str:
    """
    Extract readable text from HTML.

    Non-content elements are removed, then the text nodes of <body> are
    joined in document order with single spaces and whitespace runs are
    collapsed.

    Args:
        html: Raw or rendered HTML

    Returns:
        Cleaned text content (may be empty)
    """
    soup = BeautifulSoup(html, "lxml")

    # Remove unwanted elements
    for tag in soup.find_all(NON_CONTENT_TAGS):
        tag.decompose()

    root = soup.body or soup
    text = root.get_text(separator=" ", strip=True)
    return _WHITESPACE.sub(" ", text).strip()


def normalize_url(url: str) -> str:
    """Drop the fragment and give an empty path the root path '/'."""
    absolute, _ = urldefrag(url)
    parsed = urlparse(absolute)
    if not parsed.path:
        return parsed._replace(path="/").geturl()
    return absolute


def extract_links(html: str, base_url: str) -> List[str]:
    """
    Collect hyperlink targets in document order.

    Targets are resolved against base_url and normalized with normalize_url;
    only http(s) links are kept. Duplicates are not removed here.

    Args:
        html: Raw or rendered HTML
        base_url: URL the HTML was loaded from

    Returns:
        Absolute link URLs
    """
    soup = BeautifulSoup(html, "lxml")

    links = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href:
            continue
        absolute = normalize_url(urljoin(base_url, href))
        if urlparse(absolute).scheme in ("http", "https"):
            links.append(absolute)
    return links


class ContentExtractor:
    """Turns rendered pages into plain text."""

    def extract(self, page: RenderedPage) -> str:
        return extract_text(page.html)

    async def load_text(self, renderer, url: str) -> str:
        """
        Render a URL and extract its text.

        No retry: rendering errors propagate to the caller.

        Args:
            renderer: Object with an async render(url) -> RenderedPage
            url: Page to load

        Returns:
            Extracted text
        """
        page = await renderer.render(url)
        return self.extract(page)
