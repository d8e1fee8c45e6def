"""Page rendering and the queryable DOM snapshot it returns.

Extraction code only sees DomSnapshot/DomNode, so any DOM engine can sit
behind a renderer. The shipped snapshot wraps BeautifulSoup.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import async_playwright

from stagelog.config import settings
from stagelog.errors import NavigationError, RenderTimeout

logger = logging.getLogger(__name__)

HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
}

# Elements that start a new line in rendered text
_BLOCK_TAGS = frozenset({
    "address", "article", "aside", "blockquote", "dd", "div", "dl", "dt",
    "figcaption", "figure", "footer", "h1", "h2", "h3", "h4", "h5", "h6",
    "header", "hr", "li", "main", "nav", "ol", "p", "section", "table",
    "tbody", "td", "th", "thead", "tr", "ul",
})
_STRIP_TAGS = ("script", "style", "noscript", "template", "svg")

_INLINE_WS_RE = re.compile(r"[^\S\n]+")


def _normalise_text(text: str) -> str:
    """Collapse runs of spaces and drop blank lines, keeping line breaks."""
    lines = (_INLINE_WS_RE.sub(" ", line).strip() for line in text.split("\n"))
    return "\n".join(line for line in lines if line)


class DomNode(ABC):
    """A single element in a rendered page."""

    @property
    @abstractmethod
    def text(self) -> str:
        """Rendered text, one line per block-level element."""

    @abstractmethod
    def attr(self, name: str) -> str | None: ...

    @abstractmethod
    def select(self, selector: str) -> list[DomNode]: ...

    @abstractmethod
    def links(self) -> list[str]:
        """Absolute hrefs of every link inside this node, in document order."""

    @abstractmethod
    def contains(self, other: DomNode) -> bool:
        """True if other is a descendant of this node."""


class DomSnapshot(ABC):
    """Read-only view of a page after rendering."""

    url: str

    @abstractmethod
    def select(self, selector: str) -> list[DomNode]: ...


class SoupNode(DomNode):
    def __init__(self, tag: Tag, base_url: str):
        self._tag = tag
        self._base_url = base_url

    @property
    def text(self) -> str:
        return _normalise_text(self._tag.get_text())

    def attr(self, name: str) -> str | None:
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def select(self, selector: str) -> list[DomNode]:
        return [SoupNode(t, self._base_url) for t in self._tag.select(selector)]

    def links(self) -> list[str]:
        anchors = self._tag.select("a[href]")
        if self._tag.name == "a" and self._tag.get("href"):
            anchors.insert(0, self._tag)
        urls: list[str] = []
        for a in anchors:
            href = a.get("href", "").strip()
            if not href or href.startswith(("#", "javascript:", "mailto:", "tel:")):
                continue
            urls.append(urljoin(self._base_url, href))
        return urls

    def contains(self, other: DomNode) -> bool:
        if not isinstance(other, SoupNode) or other._tag is self._tag:
            return False
        return any(parent is self._tag for parent in other._tag.parents)


class SoupSnapshot(DomSnapshot):
    """BeautifulSoup-backed snapshot with browser-like text layout.

    Whitespace inside text nodes is collapsed and block elements are put
    on their own lines, approximating what a browser shows.
    """

    def __init__(self, html: str, url: str):
        self.url = url
        self._soup = BeautifulSoup(html, "html.parser")
        self._prepare()

    def _prepare(self) -> None:
        for tag in self._soup.find_all(list(_STRIP_TAGS)):
            tag.decompose()
        for comment in self._soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()

        for string in list(self._soup.find_all(string=True)):
            if string.find_parent("pre") is not None:
                continue
            collapsed = re.sub(r"\s+", " ", str(string))
            if collapsed != str(string):
                string.replace_with(NavigableString(collapsed))

        for br in self._soup.find_all("br"):
            br.replace_with(NavigableString("\n"))
        for tag in self._soup.find_all(sorted(_BLOCK_TAGS)):
            tag.insert(0, NavigableString("\n"))
            tag.append(NavigableString("\n"))

    def select(self, selector: str) -> list[DomNode]:
        return [SoupNode(t, self.url) for t in self._soup.select(selector)]


# -- Renderers ----------------------------------------------------------------

class PageRenderer(ABC):
    """Loads a URL and returns the DOM as it stands once content has settled."""

    @abstractmethod
    async def render(
        self, url: str, *, wait_until_idle: bool = True, timeout_ms: int | None = None
    ) -> DomSnapshot:
        """Raises RenderTimeout or NavigationError on failure."""
        ...


class PlaywrightRenderer(PageRenderer):
    """Headless Chromium renderer for pages populated client-side.

    Each call launches its own browser and closes it on every exit path.
    After navigation a fixed settle delay lets late XHR-driven content land.
    """

    def __init__(
        self,
        settle_delay_ms: int | None = None,
        headless: bool | None = None,
        timeout_ms: int | None = None,
    ):
        self.settle_delay_ms = settings.settle_delay_ms if settle_delay_ms is None else settle_delay_ms
        self.headless = settings.headless if headless is None else headless
        self.timeout_ms = timeout_ms or settings.render_timeout_ms

    async def render(
        self, url: str, *, wait_until_idle: bool = True, timeout_ms: int | None = None
    ) -> DomSnapshot:
        timeout = timeout_ms or self.timeout_ms
        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(headless=self.headless, timeout=timeout)
                try:
                    page = await browser.new_page()
                    await page.goto(
                        url,
                        wait_until="networkidle" if wait_until_idle else "load",
                        timeout=timeout,
                    )
                    if self.settle_delay_ms > 0:
                        await page.wait_for_timeout(self.settle_delay_ms)
                    html = await page.content()
                    final_url = page.url or url
                finally:
                    await browser.close()
        except PlaywrightTimeoutError as e:
            logger.warning("Render timed out for %s after %dms", url, timeout)
            raise RenderTimeout(url, f"network not idle within {timeout}ms") from e
        except PlaywrightError as e:
            logger.warning("Render failed for %s: %s", url, e)
            raise NavigationError(url, str(e)) from e

        logger.info("Rendered %s with Playwright (%d chars)", url, len(html))
        return SoupSnapshot(html, final_url)


class StaticRenderer(PageRenderer):
    """Plain HTTP fetch for sources that render server-side.

    wait_until_idle has no meaning without a browser and is ignored.
    """

    def __init__(self, timeout_seconds: float | None = None):
        self.timeout_seconds = timeout_seconds or settings.http_timeout_seconds

    async def render(
        self, url: str, *, wait_until_idle: bool = True, timeout_ms: int | None = None
    ) -> DomSnapshot:
        timeout = timeout_ms / 1000 if timeout_ms else self.timeout_seconds
        try:
            async with httpx.AsyncClient(
                follow_redirects=True, timeout=timeout, headers=HEADERS
            ) as client:
                resp = await client.get(url)
                resp.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning("httpx fetch timed out for %s: %s", url, e)
            raise RenderTimeout(url, f"no response within {timeout:.0f}s") from e
        except httpx.HTTPError as e:
            logger.warning("httpx fetch failed for %s: %s", url, e)
            raise NavigationError(url, str(e)) from e

        logger.info("Fetched %s with httpx (%d chars)", url, len(resp.text))
        return SoupSnapshot(resp.text, str(resp.url))
