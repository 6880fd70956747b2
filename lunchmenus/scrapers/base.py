import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class ScrapeResult:
    restaurant_id: str
    restaurant_name: str
    raw_menu: str
    success: bool
    error: Optional[str] = None


class BaseScraper:
    """
    One upstream source. Subclasses implement `_scrape`; `scrape` guarantees
    that shape drift or network errors come back as a failed ScrapeResult
    instead of an exception.

    A failed result may still carry raw_menu: that means content was fetched
    but could not be segmented with confidence.
    """

    restaurant_id: str = ""
    restaurant_name: str = ""
    # "api", "html", "rss" or "ai-html"
    source: str = "html"
    # Upstream publishes Finnish only; English is produced by translation
    finnish_only: bool = False

    async def scrape(self, target_day: str, language: str, date_key: str) -> ScrapeResult:
        try:
            result = await self._scrape(target_day, language, date_key)
        except Exception as e:
            logger.warning("SCRAPE FAILED for %s: %s", self.restaurant_name, e)
            return self.failure(str(e) or e.__class__.__name__)

        logger.info(
            "SCRAPE %s for %s (%s, %s): %d chars%s",
            "OK" if result.success else "FAILED",
            self.restaurant_name, target_day, language, len(result.raw_menu),
            f" ({result.error})" if result.error else ""
        )
        return result

    async def _scrape(self, target_day: str, language: str, date_key: str) -> ScrapeResult:
        raise NotImplementedError

    def success(self, raw_menu: str) -> ScrapeResult:
        return ScrapeResult(self.restaurant_id, self.restaurant_name, raw_menu, True)

    def failure(self, error: str, raw_menu: str = "") -> ScrapeResult:
        return ScrapeResult(self.restaurant_id, self.restaurant_name, raw_menu, False, error)
