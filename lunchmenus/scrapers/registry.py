from typing import Dict

from lunchmenus.core.errors import UnknownRestaurantError
from lunchmenus.scrapers.ai_pages import FactoryScraper, RavintolaValimoScraper
from lunchmenus.scrapers.base import BaseScraper
from lunchmenus.scrapers.por import PorScraper
from lunchmenus.scrapers.tellus import TellusScraper
from lunchmenus.scrapers.valaja import ValajaScraper
from lunchmenus.scrapers.valimo_park import ValimoParkScraper

SCRAPERS: Dict[str, BaseScraper] = {
    scraper.restaurant_id: scraper
    for scraper in (
        TellusScraper(),
        PorScraper(),
        ValimoParkScraper(),
        ValajaScraper(),
        FactoryScraper(),
        RavintolaValimoScraper(),
    )
}


def get_scraper(restaurant_id: str) -> BaseScraper:
    """Raises UnknownRestaurantError for ids with no registered scraper."""
    try:
        return SCRAPERS[restaurant_id]
    except KeyError:
        raise UnknownRestaurantError(restaurant_id) from None
