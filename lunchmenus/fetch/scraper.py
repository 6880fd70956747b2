import asyncio
import logging
from typing import Any

import httpx

from lunchmenus.core.config import settings
from lunchmenus.core.errors import FetchError
from lunchmenus.fetch.html_analyzer import has_spa_markers, visible_text

logger = logging.getLogger(__name__)

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
JSON_ACCEPT = "application/json"
RSS_ACCEPT = "application/rss+xml,application/xml;q=0.9,*/*;q=0.8"

# Below this much visible text a static page is assumed to be client-rendered
MIN_STATIC_TEXT_CHARS = 150


async def _get(url: str, accept: str) -> httpx.Response:
    """Single attempt, bounded by REQUEST_TIMEOUT."""
    headers = {
        "User-Agent": settings.USER_AGENT,
        "Accept": accept,
        "Accept-Language": "fi,en;q=0.8",
    }
    async with httpx.AsyncClient(
        timeout=settings.REQUEST_TIMEOUT,
        headers=headers,
        follow_redirects=True
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return response


async def _get_with_retry(url: str, accept: str) -> httpx.Response:
    """
    Retry transient failures with linear backoff (RETRY_BACKOFF_SECONDS x attempt).

    Raises FetchError once FETCH_RETRIES attempts have failed.
    """
    attempts = max(1, settings.FETCH_RETRIES)
    last_error = None
    for attempt in range(1, attempts + 1):
        try:
            return await _get(url, accept)
        except httpx.HTTPStatusError as e:
            last_error = f"HTTP error {e.response.status_code}"
        except httpx.TimeoutException:
            last_error = "timeout"
        except httpx.HTTPError as e:
            last_error = str(e) or e.__class__.__name__

        logger.warning("FETCH ATTEMPT %d/%d failed for %s: %s", attempt, attempts, url, last_error)
        if attempt < attempts:
            await asyncio.sleep(settings.RETRY_BACKOFF_SECONDS * attempt)

    raise FetchError(url, last_error)


async def fetch_text(url: str, accept: str = HTML_ACCEPT) -> str:
    """Fetch a response body as text with retries."""
    response = await _get_with_retry(url, accept)
    return response.text


async def fetch_html(url: str) -> str:
    return await fetch_text(url, HTML_ACCEPT)


async def fetch_json(url: str) -> Any:
    """Fetch and decode a JSON document. Malformed JSON raises FetchError."""
    response = await _get_with_retry(url, JSON_ACCEPT)
    try:
        return response.json()
    except ValueError as e:
        raise FetchError(url, f"invalid JSON: {e}")


async def fetch_html_with_js_fallback(url: str) -> str:
    """
    Fetch HTML, rendering it in a headless browser when the static response
    carries too little text or looks like a single-page app.

    Rendering is best effort: when it fails the static HTML is returned.
    """
    html = await fetch_html(url)

    if not settings.USE_JS_RENDERING:
        return html

    text_length = len(visible_text(html))
    spa = has_spa_markers(html)
    if text_length >= MIN_STATIC_TEXT_CHARS and not spa:
        return html

    reason = f"{text_length} chars" + (" + SPA markers" if spa else "")
    logger.info("Static content insufficient for %s (%s), trying JavaScript rendering", url, reason)
    try:
        from lunchmenus.fetch.js_scraper import fetch_js_html
        return await fetch_js_html(url)
    except Exception as e:
        logger.warning("JavaScript rendering failed for %s: %s, using static content", url, e)
        return html
