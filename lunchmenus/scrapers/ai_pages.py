"""
Marketing-site restaurants with no stable menu markup.

The page is fetched (rendered with a headless browser when the static HTML is
a shell), narrowed to a plausible menu region, and handed to the model with
the target day. Model output is never trusted as-is: noise lines are dropped
and a minimum item count is required.
"""

import re
from typing import List, Pattern

from lunchmenus.fetch import scraper as fetcher
from lunchmenus.fetch.html_analyzer import MAX_AI_INPUT_CHARS, narrow_region
from lunchmenus.llm import client as llm_client
from lunchmenus.menu.text import clean_whitespace
from lunchmenus.scrapers import segment
from lunchmenus.scrapers.base import BaseScraper, ScrapeResult

MIN_MENU_ITEMS = 3
MIN_MENU_CHARS = 50

FACTORY_NOISE_RE = re.compile(r"(prices|hinnat|opening hours|aukiolo|ilmainen pysäköinti)", re.IGNORECASE)
VALIMO_NOISE_RE = re.compile(
    r"(prices|hinnat|price|opening hours|aukiolo|ilmainen pysäköinti|pysäköinti|parking)", re.IGNORECASE
)


def filter_items(items: List[str], noise: Pattern) -> List[str]:
    """Collapse whitespace and drop empty and noise lines."""
    cleaned = (re.sub(r"\s+", " ", item or "").strip() for item in items)
    return [item for item in cleaned if item and not noise.search(item)]


class AiPageScraper(BaseScraper):
    source = "ai-html"
    finnish_only = True

    url: str = ""
    # Region used when it holds at least region_min_chars of markup
    region_selector: str = "body"
    region_min_chars: int = 0
    noise_re: Pattern = FACTORY_NOISE_RE

    async def _scrape(self, target_day: str, language: str, date_key: str) -> ScrapeResult:
        html = await fetcher.fetch_html_with_js_fallback(self.url)
        content = narrow_region(html, self.region_selector, self.region_min_chars, MAX_AI_INPUT_CHARS)

        extraction = await llm_client.extract_day_menu(content, self.restaurant_name, target_day, language)
        if not extraction.success or not extraction.target_day_menu:
            return self.failure(extraction.error or f"AI found no menu items for {target_day}")

        items = filter_items(extraction.target_day_menu, self.noise_re)
        if len(items) < MIN_MENU_ITEMS:
            return self.failure(f"Too few items after validation ({len(items)})")

        raw_menu = clean_whitespace(segment.format_block(target_day, "\n".join(items)))
        if len(raw_menu) <= MIN_MENU_CHARS:
            return self.failure(f"No {target_day} menu items found")
        return self.success(raw_menu)


class FactoryScraper(AiPageScraper):
    restaurant_id = "factory"
    restaurant_name = "Factory Pitäjänmäki"
    url = "https://ravintolafactory.com/lounasravintolat/ravintolat/helsinki-pitajanmaki/"
    region_selector = 'div[class*="lounaslista"]'
    region_min_chars = 3000
    noise_re = FACTORY_NOISE_RE


class RavintolaValimoScraper(AiPageScraper):
    restaurant_id = "ravintola-valimo"
    restaurant_name = "Ravintola Valimo"
    url = "https://www.ravintolavalimo.fi/"
    region_selector = "#Lounas"
    region_min_chars = 5000
    noise_re = VALIMO_NOISE_RE
