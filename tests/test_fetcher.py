"""Tests for the page renderers.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made by :class:`HttpRenderer`.
- Playwright is *not* exercised in the test suite (requires a browser install);
  the SPA-fallback path is covered by patching ``HttpRenderer._browser_fallback``.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest
import respx

from storyscraper.errors import ConfigurationError, FetchFailure
from storyscraper.scraper.fetcher import BrowserRenderer, HttpRenderer, is_spa, make_renderer
from storyscraper.scraper.models import RawPage

_STORY_HTML = """\
<!DOCTYPE html>
<html>
<head><title>The Lighthouse Keeper</title></head>
<body>
  <article>
    <p>The keeper climbed the stairs every night for forty years.</p>
  </article>
</body>
</html>
"""

_SPA_HTML = """\
<!DOCTYPE html>
<html>
<head><title>React App</title></head>
<body>
  <div id="root"></div>
  <script src="/bundle.js"></script>
</body>
</html>
"""


class TestIsSpa:
    def test_detects_react_root_div(self) -> None:
        assert is_spa(_SPA_HTML) is True

    def test_detects_next_data(self) -> None:
        html = "<html><body><script>window.__NEXT_DATA__ = {}</script></body></html>"
        assert is_spa(html) is True

    def test_detects_angular(self) -> None:
        assert is_spa('<html ng-version="17.0.0"><body>content</body></html>') is True

    def test_normal_page_not_spa(self) -> None:
        assert is_spa(_STORY_HTML) is False

    def test_minimal_body_heuristic(self) -> None:
        big_script = "<script>" + "x" * 2500 + "</script>"
        assert is_spa(f"<html><body>{big_script}<p> </p></body></html>") is True


class TestHttpRenderer:
    def test_returns_raw_page(self) -> None:
        with respx.mock:
            respx.get("https://example.com/story/1").mock(
                return_value=httpx.Response(200, text=_STORY_HTML)
            )
            with HttpRenderer() as renderer:
                raw = renderer.render("https://example.com/story/1")

        assert isinstance(raw, RawPage)
        assert raw.status_code == 200
        assert "The Lighthouse Keeper" in raw.html

    def test_http_error_raises_fetch_failure(self) -> None:
        with respx.mock:
            respx.get("https://example.com/missing").mock(
                return_value=httpx.Response(404, text="Not Found")
            )
            with HttpRenderer() as renderer:
                with pytest.raises(FetchFailure) as info:
                    renderer.render("https://example.com/missing")

        assert info.value.url == "https://example.com/missing"

    def test_network_error_raises_fetch_failure(self) -> None:
        with respx.mock:
            respx.get("https://example.com/down").mock(
                side_effect=httpx.ConnectError("connection refused")
            )
            with HttpRenderer() as renderer:
                with pytest.raises(FetchFailure):
                    renderer.render("https://example.com/down")

    def test_spa_uses_browser_fallback(self) -> None:
        rendered = RawPage(url="https://spa.example.com/", html=_STORY_HTML, status_code=200)
        browser = MagicMock()
        browser.render.return_value = rendered

        with respx.mock:
            respx.get("https://spa.example.com/").mock(
                return_value=httpx.Response(200, text=_SPA_HTML)
            )
            with HttpRenderer() as renderer:
                with patch.object(renderer, "_browser_fallback", return_value=browser):
                    raw = renderer.render("https://spa.example.com/")

        browser.render.assert_called_once_with("https://spa.example.com/")
        assert raw.html == _STORY_HTML

    def test_render_outside_context_raises(self) -> None:
        with pytest.raises(RuntimeError):
            HttpRenderer().render("https://example.com/")


class TestMakeRenderer:
    def test_http(self) -> None:
        assert isinstance(make_renderer("http"), HttpRenderer)

    def test_browser(self) -> None:
        # Construction does not start a browser.
        assert isinstance(make_renderer("browser", timeout=5), BrowserRenderer)

    def test_unknown(self) -> None:
        with pytest.raises(ConfigurationError):
            make_renderer("telnet")
