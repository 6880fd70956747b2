import logging

from lunchmenus.fetch import scraper as fetcher
from lunchmenus.menu.text import clean_whitespace, strip_markup
from lunchmenus.scrapers import segment
from lunchmenus.scrapers.base import BaseScraper, ScrapeResult

logger = logging.getLogger(__name__)

ARTICLES_URL = "https://api.flockler.com/v1/sites/8357/articles?count=12&sideloading=false"

SECTION_URL = "valimo-park"
SECTION_NAME = "Faundori"

MIN_DAY_MENU_CHARS = 40


class ValimoParkScraper(BaseScraper):
    """
    Faundori at Valimo Park, published through a Flockler social feed.

    The site shares its feed with other sections, so articles are filtered to
    the Valimo Park section before the weekly text is segmented by weekday.
    """

    restaurant_id = "valimo-park"
    restaurant_name = "Valimo Park"
    source = "api"
    finnish_only = True

    async def _scrape(self, target_day: str, language: str, date_key: str) -> ScrapeResult:
        payload = await fetcher.fetch_json(ARTICLES_URL)

        articles = payload.get("articles") if isinstance(payload, dict) else None
        if not isinstance(articles, list) or not articles:
            return self.failure("No Flockler articles returned")

        section_articles = [a for a in articles if self._in_section(a)]
        logger.info("Found %d Valimo Park articles out of %d total", len(section_articles), len(articles))
        if not section_articles:
            return self.failure("No Valimo Park articles found in Flockler feed")

        article = next(
            (a for a in section_articles if segment.DAY_MARKER_RE.search(self._article_text(a))),
            section_articles[0]
        )

        html = str(article.get("body") or article.get("title") or "")
        if not html:
            return self.failure("Flockler article has no body or title")

        text = strip_markup(html)
        blocks = segment.slice_day_blocks(text)

        if not blocks:
            return self.failure("No weekday markers in Flockler content", raw_menu=text)

        block = segment.select_block(blocks, target_day)
        if block is None:
            found = ", ".join(segment.available_days(blocks))
            return self.failure(f"Target day {target_day} not found in Flockler content (found: {found})")

        raw_menu = clean_whitespace(segment.format_block(target_day, block.body))
        if len(raw_menu) <= MIN_DAY_MENU_CHARS:
            return self.failure("Menu content too short", raw_menu=raw_menu)
        return self.success(raw_menu)

    @staticmethod
    def _in_section(article) -> bool:
        if not isinstance(article, dict):
            return False
        section = article.get("section") or {}
        return section.get("section_url") == SECTION_URL or section.get("name") == SECTION_NAME

    @staticmethod
    def _article_text(article: dict) -> str:
        return f"{article.get('title') or ''} {article.get('body') or ''}"
