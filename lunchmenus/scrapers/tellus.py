import re

from lunchmenus.fetch import scraper as fetcher
from lunchmenus.menu.day import EN_SHORT, FI_SHORT, FI_TO_EN
from lunchmenus.menu.text import non_empty_lines, strip_markup
from lunchmenus.scrapers.base import BaseScraper, ScrapeResult

FEED_URL = "https://www.compass-group.fi/menuapi/feed/rss/current-week?costNumber=3105&language={language}"

_ITEM_RE = re.compile(r"<item>(.*?)</item>", re.IGNORECASE | re.DOTALL)
_TITLE_RE = re.compile(r"<title>\s*(.*?)\s*</title>", re.IGNORECASE | re.DOTALL)
_CDATA_DESCRIPTION_RE = re.compile(r"<description><!\[CDATA\[(.*?)\]\]></description>", re.IGNORECASE | re.DOTALL)
_DESCRIPTION_RE = re.compile(r"<description>(.*?)</description>", re.IGNORECASE | re.DOTALL)
_EMPTY_PARENS_RE = re.compile(r"\(\s*\)")


class TellusScraper(BaseScraper):
    """Compass Group weekly RSS feed, one <item> per day, feed per language."""

    restaurant_id = "tellus"
    restaurant_name = "Tellus"
    source = "rss"

    async def _scrape(self, target_day: str, language: str, date_key: str) -> ScrapeResult:
        xml = await fetcher.fetch_text(FEED_URL.format(language=language), fetcher.RSS_ACCEPT)

        if language == "fi":
            label = target_day
            title_re = re.compile(rf"^({target_day}|{FI_SHORT[target_day]})\b", re.IGNORECASE)
        else:
            label = FI_TO_EN[target_day]
            title_re = re.compile(rf"^({label}|{EN_SHORT[label]})\b", re.IGNORECASE)

        titles = []
        for item in _ITEM_RE.findall(xml):
            title_match = _TITLE_RE.search(item)
            title = title_match.group(1) if title_match else ""
            titles.append(title)
            if not title_re.search(title):
                continue

            description = _CDATA_DESCRIPTION_RE.search(item) or _DESCRIPTION_RE.search(item)
            if not description:
                continue

            raw_menu = self._clean_description(description.group(1))
            if raw_menu:
                return self.success(raw_menu)

        found = ", ".join(t for t in titles if t) or "none"
        return self.failure(f"{label} menu not found in RSS feed (items found: {found})")

    @staticmethod
    def _clean_description(description: str) -> str:
        # Non-CDATA descriptions arrive with their markup escaped once more
        if "&lt;" in description:
            description = strip_markup(description)
        text = _EMPTY_PARENS_RE.sub("", strip_markup(description))
        return "\n".join(re.sub(r"\s{2,}", " ", line) for line in non_empty_lines(text))
