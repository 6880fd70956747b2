"""
HTML analysis utilities for menu extraction.

BeautifulSoup is used wherever a page has to be narrowed to a content region
before its text is parsed or sent to the model.
"""

from typing import Optional

from bs4 import BeautifulSoup

# Upper bound on markup sent to the model per request
MAX_AI_INPUT_CHARS = 20000

SPA_MARKERS = (
    'id="__next"',
    "__NEXT_DATA__",
    "data-reactroot",
    "window.__NUXT__",
    "ng-version",
)

POR_SCOPE_SELECTORS = [
    "main",
    "article",
    "div.entry-content",
    "div.post-content",
    "div.wp-block-post-content",
    "div.content-area",
    "div.wp-block-group",
]


def has_spa_markers(html: str) -> bool:
    """Heuristics for client-rendered pages whose static HTML is a shell."""
    return any(marker in (html or "") for marker in SPA_MARKERS)


def visible_text(html: str) -> str:
    """Text a reader would see, without script/style/noscript content."""
    soup = BeautifulSoup(html or "", "html.parser")
    for element in soup(["script", "style", "noscript", "head"]):
        element.decompose()
    return soup.get_text(" ", strip=True)


def strip_non_content(html: str) -> BeautifulSoup:
    """Parse and drop script, style and head, keeping the markup structure."""
    soup = BeautifulSoup(html or "", "html.parser")
    for element in soup(["script", "style", "head"]):
        element.decompose()
    return soup


def scope_content(html: str) -> Optional[str]:
    """
    Inner HTML of the first content-ish container (main, article, WordPress
    content divs), or None when the page has none of them.
    """
    soup = strip_non_content(html)
    for selector in POR_SCOPE_SELECTORS:
        element = soup.select_one(selector)
        if element is not None:
            return element.decode_contents()
    return None


def narrow_region(
    html: str,
    selector: str,
    min_chars: int,
    max_chars: int = MAX_AI_INPUT_CHARS
) -> str:
    """
    Cut a page down to the region matched by `selector` if that region holds
    at least `min_chars` of markup; otherwise widen to the whole body.

    The result is truncated to `max_chars` so model input stays bounded.
    """
    soup = strip_non_content(html)

    content = ""
    region = soup.select_one(selector)
    if region is not None:
        content = region.decode_contents()

    if len(content) < min_chars:
        body = soup.body
        content = body.decode_contents() if body is not None else str(soup)

    return content[:max_chars]
