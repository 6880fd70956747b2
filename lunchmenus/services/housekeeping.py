import logging
from typing import Optional

from lunchmenus.cache import db as cache_db
from lunchmenus.menu.day import today_key

logger = logging.getLogger(__name__)


class DailyCacheCleanup:
    """
    Purges cache entries not dated today, at most once per Helsinki day.

    One instance lives on the application state; an external scheduler can
    call POST /cache/cleanup instead, which does not depend on this state.
    """

    def __init__(self):
        self.last_run: Optional[str] = None

    def run_if_due(self, today: Optional[str] = None) -> bool:
        today = today or today_key()
        if self.last_run == today:
            return False

        try:
            removed = cache_db.purge_other_dates(today)
        except Exception as e:
            logger.error("DAILY CLEANUP FAILED for %s: %s", today, e)
            return False

        self.last_run = today
        logger.info("DAILY CLEANUP for %s removed %d entries", today, removed)
        return True
