import logging
import re
from typing import List, Optional

from lunchmenus.core.errors import FetchError
from lunchmenus.fetch import scraper as fetcher
from lunchmenus.fetch.html_analyzer import MAX_AI_INPUT_CHARS, scope_content
from lunchmenus.menu.day import FI_TO_EN, display_day
from lunchmenus.menu.text import clean_whitespace, decode_entities
from lunchmenus.scrapers import segment
from lunchmenus.scrapers.base import BaseScraper, ScrapeResult

logger = logging.getLogger(__name__)

REST_URL = "https://por.fi/wp-json/wp/v2/pages?slug=menu&_fields=title.rendered,content.rendered"
PAGE_URL = "https://por.fi/menu/"

# Day headings on the menu page look like "Tiistai 26.8." or "Tuesday 26.8."
DAY_HEADING_RE = re.compile(rf"^\s*({segment.DAY_ALTERNATION})\s+\d{{1,2}}\.\d{{1,2}}\.", re.IGNORECASE)

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_CLOSE_RE = re.compile(r"</(p|li|h2|h3|h4|div)\s*>", re.IGNORECASE)
_HEADING_OPEN_RE = re.compile(r"<(h2|h3|h4)\b[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")

MIN_DAY_MENU_CHARS = 20


class PorScraper(BaseScraper):
    """
    Pitäjänmäen Osuusruokala. The WordPress REST content field is tried
    first and the public menu page second; both go through the same
    heading-based day parser.

    A week that simply lacks the requested day is reported as a successful
    explanatory message rather than a failure.
    """

    restaurant_id = "por"
    restaurant_name = "Pitäjänmäen Osuusruokala (POR)"
    source = "html"

    async def _scrape(self, target_day: str, language: str, date_key: str) -> ScrapeResult:
        partial: Optional[ScrapeResult] = None

        html = await self._fetch_rest_content()
        if html:
            result = self.parse_menu_html(html, target_day, language)
            if result.success:
                return result
            partial = result

        try:
            page = await fetcher.fetch_html(PAGE_URL)
        except FetchError as e:
            if partial is not None:
                return partial
            return self.failure(str(e))

        result = self.parse_menu_html(page, target_day, language)
        if result.success or result.raw_menu or partial is None:
            return result
        return partial

    async def _fetch_rest_content(self) -> Optional[str]:
        try:
            pages = await fetcher.fetch_json(REST_URL)
        except FetchError as e:
            logger.info("POR REST fetch failed, falling back to HTML: %s", e)
            return None

        page = pages[0] if isinstance(pages, list) and pages else None
        content = page.get("content") if isinstance(page, dict) else None
        rendered = content.get("rendered") if isinstance(content, dict) else None
        if isinstance(rendered, str) and rendered.strip():
            return rendered
        logger.info("POR REST returned no menu page or an unexpected shape, falling back to HTML")
        return None

    def parse_menu_html(self, html: str, target_day: str, language: str) -> ScrapeResult:
        text = self._html_to_text(html)
        blocks = self._day_blocks(text)

        if not blocks:
            if text:
                return self.failure("Menu content found but no day headings", raw_menu=text[:MAX_AI_INPUT_CHARS])
            return self.failure("Menu content not found or too short")

        section = self._weekly_section(blocks, target_day, language)
        if not section:
            # Some weeks are published in one language only
            other = "en" if language == "fi" else "fi"
            fallback = self._weekly_section(blocks, target_day, other)
            if fallback:
                body = fallback.split("\n", 1)[1] if "\n" in fallback else ""
                section = segment.format_block(display_day(target_day, language), body)

        if section:
            section = clean_whitespace(section)
            if len(section) > MIN_DAY_MENU_CHARS:
                return self.success(section)
            return self.failure("Selected day had no items after cleaning")

        return self.success(self._day_missing_message(target_day, language, segment.available_days(blocks)))

    @staticmethod
    def _html_to_text(html: str) -> str:
        doc = _SCRIPT_STYLE_RE.sub("", html or "")
        scope = scope_content(doc)
        if scope is None:
            scope = doc

        scope = _BR_RE.sub("\n", scope)
        scope = _BLOCK_CLOSE_RE.sub("\n", scope)
        scope = _HEADING_OPEN_RE.sub("\n\n--- ", scope)
        scope = _TAG_RE.sub(" ", scope)
        return clean_whitespace(decode_entities(scope))

    @staticmethod
    def _day_blocks(text: str) -> List[segment.DayBlock]:
        """Line-by-line: a 'Day D.M.' heading opens a block that runs to the next one."""
        blocks = []
        current = None
        lines: List[str] = []

        def flush():
            if current is None:
                return
            body = segment.clean_block("\n".join(lines))
            if body:
                day_fi, lang = segment.canonical_day(current)
                blocks.append(segment.DayBlock(day_fi, lang, body))

        for raw_line in text.split("\n"):
            line = raw_line.strip().lstrip("- ").strip()
            heading = DAY_HEADING_RE.match(line)
            if heading:
                flush()
                current = heading.group(1)
                lines = []
            elif current is not None and line:
                lines.append(line)
        flush()
        return blocks

    @staticmethod
    def _weekly_section(blocks: List[segment.DayBlock], target_day: str, language: str) -> str:
        """Weekly '--- Day ---' text of one language, sliced to the target day."""
        seen = set()
        parts = []
        for block in blocks:
            if block.language != language or block.day_fi in seen:
                continue
            seen.add(block.day_fi)
            parts.append(segment.format_block(display_day(block.day_fi, language), block.body))
        return segment.extract_day_section("\n\n".join(parts), target_day, language)

    @staticmethod
    def _day_missing_message(target_day: str, language: str, days: List[str]) -> str:
        if language == "fi":
            return f"{target_day} ei ole saatavilla tällä viikolla. Saatavilla olevat päivät: {', '.join(days) or '-'}"
        listed = ", ".join(FI_TO_EN.get(d, d) for d in days) or "none found"
        return f"{FI_TO_EN[target_day]} is not available this week. Available days: {listed}"
