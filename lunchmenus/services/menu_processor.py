import asyncio
import logging
from typing import Dict, Optional, Tuple

from lunchmenus.cache import db as cache_db
from lunchmenus.llm import client as llm_client
from lunchmenus.menu.day import normalize_day, today_key
from lunchmenus.menu.text import clean_menu_for_display, detect_finnish
from lunchmenus.schemas import MenuResult
from lunchmenus.scrapers.base import BaseScraper, ScrapeResult
from lunchmenus.scrapers.registry import get_scraper

logger = logging.getLogger(__name__)


def unavailable_result(restaurant_name: str) -> MenuResult:
    return MenuResult(
        raw_menu=f"Could not fetch menu for {restaurant_name}. Please check their website.",
        parsed_menu=f"Menu not available for {restaurant_name}. Visit their website for current offerings.",
        from_cache=False,
    )


def _display_result(raw_menu: str, parsed_menu: str, from_cache: bool) -> MenuResult:
    raw = clean_menu_for_display(raw_menu)
    parsed = clean_menu_for_display(parsed_menu) or raw
    return MenuResult(raw_menu=raw, parsed_menu=parsed, from_cache=from_cache)


class MenuProcessor:
    """
    Cache-first menu lookup for one restaurant at a time.

    Per restaurant the steps are strictly ordered: cache check, scrape,
    AI fallback, cache write. Concurrent misses for the same restaurant,
    language, day and date share a single scrape.
    """

    def __init__(self):
        self._inflight: Dict[Tuple[str, str, str, str], "asyncio.Future[MenuResult]"] = {}

    async def get_menu(
        self,
        restaurant_id: str,
        restaurant_name: str,
        language: str,
        target_day: Optional[str] = None,
        date_key: Optional[str] = None,
        skip_cache: bool = False
    ) -> MenuResult:
        """
        Return {raw_menu, parsed_menu, from_cache} for one restaurant.

        Raises UnknownRestaurantError when no scraper is registered for the id.
        Every other failure resolves to a textual fallback message.
        """
        day = normalize_day(target_day)
        date_key = date_key or today_key()

        scraper = get_scraper(restaurant_id)

        if skip_cache:
            logger.info("CACHE BYPASS for %s (%s) on %s", restaurant_name, language, date_key)
        else:
            cached = cache_db.get_with_validation(restaurant_id, language, date_key)
            if cached:
                return _display_result(cached.raw_menu, cached.parsed_menu, from_cache=True)
            logger.info("CACHE MISS for %s (%s) on %s, scraping fresh", restaurant_name, language, date_key)

        key = (restaurant_id, language, day, date_key)
        pending = self._inflight.get(key)
        if pending is not None:
            logger.info("JOINING in-flight scrape for %s (%s) on %s", restaurant_name, language, date_key)
            return await asyncio.shield(pending)

        task = asyncio.ensure_future(
            self._scrape_and_store(scraper, restaurant_id, restaurant_name, language, day, date_key)
        )
        self._inflight[key] = task
        try:
            return await asyncio.shield(task)
        finally:
            if self._inflight.get(key) is task:
                del self._inflight[key]

    async def _scrape_and_store(
        self,
        scraper: BaseScraper,
        restaurant_id: str,
        restaurant_name: str,
        language: str,
        day: str,
        date_key: str
    ) -> MenuResult:
        try:
            result = await scraper.scrape(day, language, date_key)
        except Exception as e:
            logger.error("ERROR processing %s: %s", restaurant_name, e)
            return unavailable_result(restaurant_name)

        raw_menu = (result.raw_menu or "").strip()
        if not raw_menu:
            logger.info("NO CONTENT for %s (%s): %s", restaurant_name, language, result.error)
            return unavailable_result(restaurant_name)

        if result.success:
            if language == "en" and scraper.finnish_only and detect_finnish(raw_menu):
                translated = await self._translate_and_store(result, restaurant_id, restaurant_name, date_key)
                if translated is not None:
                    return translated

            cache_db.set(restaurant_id, restaurant_name, language, raw_menu, raw_menu, date_key)
            return _display_result(raw_menu, raw_menu, from_cache=False)

        logger.info("AI PARSE FALLBACK for %s (%s): %s", restaurant_name, language, result.error)
        parsed = await llm_client.parse_menu(raw_menu, restaurant_name)
        parsed_menu = (parsed.parsed_menu or "").strip() or raw_menu

        cache_db.set(restaurant_id, restaurant_name, language, raw_menu, parsed_menu, date_key)
        return _display_result(raw_menu, parsed_menu, from_cache=False)

    async def _translate_and_store(
        self,
        result: ScrapeResult,
        restaurant_id: str,
        restaurant_name: str,
        date_key: str
    ) -> Optional[MenuResult]:
        """
        Translate a Finnish-only menu to English. Both languages are cached on
        success; None means the caller should serve the Finnish text.
        """
        finnish_menu = result.raw_menu.strip()
        logger.info("TRANSLATING %s menu from Finnish to English", restaurant_name)

        translation = await llm_client.translate_menu(finnish_menu, restaurant_name)
        translated = (translation.translated_menu or "").strip()
        if not translation.success or not translated:
            logger.warning("Translation failed for %s, returning Finnish content: %s", restaurant_name, translation.error)
            return None

        cache_db.set(restaurant_id, restaurant_name, "fi", finnish_menu, finnish_menu, date_key)
        cache_db.set(restaurant_id, restaurant_name, "en", translated, translated, date_key)
        return _display_result(translated, translated, from_cache=False)
