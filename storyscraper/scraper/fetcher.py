"""Page renderers: headless Chromium, or httpx with a browser fallback for SPAs.

Both renderers are context managers holding one session for a whole crawl
run and opening a single page at a time.  Every load failure is raised as
:class:`~storyscraper.errors.FetchFailure`.
"""

from __future__ import annotations

import logging
import re
from types import TracebackType
from typing import Optional, Protocol, Type

import httpx

from storyscraper.config import settings
from storyscraper.errors import ConfigurationError, FetchFailure
from storyscraper.scraper.models import RawPage

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SPA / JS-rendered page detection heuristics
# ---------------------------------------------------------------------------
_SPA_PATTERNS = [
    re.compile(r'<div[^>]+id=["\'](?:root|app)["\']', re.IGNORECASE),
    re.compile(r"window\.__NEXT_DATA__", re.IGNORECASE),
    re.compile(r"ng-version=", re.IGNORECASE),
    re.compile(r"data-reactroot", re.IGNORECASE),
]

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (compatible; StoryScraper/1.0; +https://github.com/storyscraper)"
    )
}


def is_spa(html: str) -> bool:
    """Return ``True`` if *html* looks like a JavaScript SPA that needs rendering."""
    for pattern in _SPA_PATTERNS:
        if pattern.search(html):
            return True
    # Very little visible text relative to total HTML size.  Script and style
    # bodies are removed first so their source does not count as text.
    no_scripts = re.sub(r"<(script|style)[^>]*>.*?</(script|style)>", "", html, flags=re.IGNORECASE | re.DOTALL)
    stripped = re.sub(r"<[^>]+>", "", no_scripts).strip()
    return len(html) > 2000 and len(stripped) < 200


class Renderer(Protocol):
    def render(self, url: str) -> RawPage: ...

    def __enter__(self) -> "Renderer": ...

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None: ...


class BrowserRenderer:
    """Render pages with one headless Chromium instance.

    Playwright is imported lazily so code paths that never open a browser
    (and their tests) don't need a browser installed.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = settings.request_timeout if timeout is None else timeout
        self._playwright = None
        self._browser = None

    def __enter__(self) -> "BrowserRenderer":
        from playwright.sync_api import sync_playwright  # noqa: PLC0415

        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(headless=True)
        except Exception:
            self._playwright.stop()
            self._playwright = None
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._browser is not None:
                self._browser.close()
        finally:
            self._browser = None
            if self._playwright is not None:
                self._playwright.stop()
                self._playwright = None

    def render(self, url: str) -> RawPage:
        from playwright.sync_api import Error as PlaywrightError  # noqa: PLC0415

        if self._browser is None:
            raise RuntimeError("BrowserRenderer must be used as a context manager")

        page = self._browser.new_page()
        try:
            response = page.goto(
                url,
                timeout=int(self.timeout * 1000),
                wait_until="networkidle",
            )
            html = page.content()
        except PlaywrightError as exc:
            raise FetchFailure(url, str(exc)) from exc
        finally:
            page.close()

        status_code = response.status if response is not None else 200
        if status_code >= 400:
            raise FetchFailure(url, f"HTTP {status_code}")
        return RawPage(url=url, html=html, status_code=status_code)


class HttpRenderer:
    """Fetch pages with ``httpx``; hand SPA shells to a :class:`BrowserRenderer`."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = settings.request_timeout if timeout is None else timeout
        self._client: Optional[httpx.Client] = None
        self._browser: Optional[BrowserRenderer] = None

    def __enter__(self) -> "HttpRenderer":
        self._client = httpx.Client(
            headers=_DEFAULT_HEADERS,
            timeout=self.timeout,
            follow_redirects=True,
        )
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._browser is not None:
                self._browser.__exit__(exc_type, exc, tb)
        finally:
            self._browser = None
            if self._client is not None:
                self._client.close()
                self._client = None

    def _browser_fallback(self) -> BrowserRenderer:
        if self._browser is None:
            self._browser = BrowserRenderer(timeout=self.timeout).__enter__()
        return self._browser

    def render(self, url: str) -> RawPage:
        if self._client is None:
            raise RuntimeError("HttpRenderer must be used as a context manager")

        try:
            response = self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FetchFailure(url, str(exc)) from exc

        raw = RawPage(url=url, html=response.text, status_code=response.status_code)
        if is_spa(raw.html):
            logger.warning("%s looks like a JavaScript app, rendering it in a browser", url)
            raw = self._browser_fallback().render(url)
        return raw


def make_renderer(kind: Optional[str] = None, timeout: Optional[float] = None) -> Renderer:
    """Build the renderer named by *kind* (default: ``settings.renderer``)."""
    kind = (kind or settings.renderer).lower()
    if kind == "browser":
        return BrowserRenderer(timeout=timeout)
    if kind == "http":
        return HttpRenderer(timeout=timeout)
    raise ConfigurationError(f"Unknown renderer {kind!r}; use 'browser' or 'http'")
