import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from lunchmenus.core.config import settings
from lunchmenus.core.errors import FetchError
from lunchmenus.fetch import scraper

URL = "https://example.fi/menu"


def _status_error(code: int) -> httpx.HTTPStatusError:
    request = httpx.Request("GET", URL)
    response = httpx.Response(code, request=request)
    return httpx.HTTPStatusError(f"HTTP {code}", request=request, response=response)


def _response(text: str = "", json_data=None) -> MagicMock:
    response = MagicMock()
    response.text = text
    response.json.return_value = json_data
    return response


class TestFetchRetry:
    """Transient upstream failures are retried before a FetchError is raised"""

    @patch('lunchmenus.fetch.scraper._get', new_callable=AsyncMock)
    def test_retry_then_success(self, mock_get):
        mock_get.side_effect = [httpx.ConnectError("connection refused"), _response("<p>ok</p>")]

        html = asyncio.run(scraper.fetch_html(URL))

        assert html == "<p>ok</p>"
        assert mock_get.call_count == 2

    @patch('lunchmenus.fetch.scraper._get', new_callable=AsyncMock)
    def test_gives_up_after_configured_attempts(self, mock_get):
        mock_get.side_effect = _status_error(503)

        with pytest.raises(FetchError) as exc:
            asyncio.run(scraper.fetch_text(URL))

        assert mock_get.call_count == settings.FETCH_RETRIES
        assert "HTTP error 503" in str(exc.value)
        assert exc.value.url == URL

    @patch('lunchmenus.fetch.scraper.asyncio.sleep', new_callable=AsyncMock)
    @patch('lunchmenus.fetch.scraper._get', new_callable=AsyncMock)
    def test_linear_backoff(self, mock_get, mock_sleep):
        mock_get.side_effect = httpx.ReadTimeout("timed out")

        with patch.object(settings, "RETRY_BACKOFF_SECONDS", 1.0), patch.object(settings, "FETCH_RETRIES", 3):
            with pytest.raises(FetchError, match="timeout"):
                asyncio.run(scraper.fetch_text(URL))

        assert [c.args[0] for c in mock_sleep.await_args_list] == [1.0, 2.0]

    @patch('lunchmenus.fetch.scraper._get', new_callable=AsyncMock)
    def test_fetch_json(self, mock_get):
        mock_get.return_value = _response(json_data={"mealdates": []})

        assert asyncio.run(scraper.fetch_json(URL)) == {"mealdates": []}

    @patch('lunchmenus.fetch.scraper._get', new_callable=AsyncMock)
    def test_fetch_json_invalid_body(self, mock_get):
        response = _response("<html>")
        response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = response

        with pytest.raises(FetchError, match="invalid JSON"):
            asyncio.run(scraper.fetch_json(URL))

    @patch('lunchmenus.fetch.scraper._get', new_callable=AsyncMock)
    def test_accept_header_per_kind(self, mock_get):
        mock_get.return_value = _response("<rss/>")

        asyncio.run(scraper.fetch_text(URL, scraper.RSS_ACCEPT))

        mock_get.assert_awaited_once_with(URL, scraper.RSS_ACCEPT)


class TestJsFallback:
    """Headless rendering is only attempted for thin or client-rendered pages"""

    SHELL = '<html><body><div id="__next"></div></body></html>'
    RICH = "<html><body>" + "<p>Broileria ja riisiä (L, G)</p>" * 10 + "</body></html>"

    @patch('lunchmenus.fetch.scraper.fetch_html', new_callable=AsyncMock)
    def test_disabled_returns_static(self, mock_fetch):
        mock_fetch.return_value = self.SHELL

        assert asyncio.run(scraper.fetch_html_with_js_fallback(URL)) == self.SHELL

    @patch('lunchmenus.fetch.js_scraper.fetch_js_html', new_callable=AsyncMock)
    @patch('lunchmenus.fetch.scraper.fetch_html', new_callable=AsyncMock)
    def test_renders_spa_shell(self, mock_fetch, mock_render):
        mock_fetch.return_value = self.SHELL
        mock_render.return_value = "<p>Rendered</p>"

        with patch.object(settings, "USE_JS_RENDERING", True):
            html = asyncio.run(scraper.fetch_html_with_js_fallback(URL))

        assert html == "<p>Rendered</p>"
        mock_render.assert_awaited_once_with(URL)

    @patch('lunchmenus.fetch.js_scraper.fetch_js_html', new_callable=AsyncMock)
    @patch('lunchmenus.fetch.scraper.fetch_html', new_callable=AsyncMock)
    def test_rich_static_page_is_not_rendered(self, mock_fetch, mock_render):
        mock_fetch.return_value = self.RICH

        with patch.object(settings, "USE_JS_RENDERING", True):
            html = asyncio.run(scraper.fetch_html_with_js_fallback(URL))

        assert html == self.RICH
        mock_render.assert_not_awaited()

    @patch('lunchmenus.fetch.js_scraper.fetch_js_html', new_callable=AsyncMock)
    @patch('lunchmenus.fetch.scraper.fetch_html', new_callable=AsyncMock)
    def test_render_failure_keeps_static(self, mock_fetch, mock_render):
        mock_fetch.return_value = self.SHELL
        mock_render.side_effect = Exception("browser crashed")

        with patch.object(settings, "USE_JS_RENDERING", True):
            html = asyncio.run(scraper.fetch_html_with_js_fallback(URL))

        assert html == self.SHELL
