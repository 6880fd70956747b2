import logging
from lunchmenus.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure root logging once for the service process."""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )
    # httpx logs every request at INFO, which drowns out the scraper output
    logging.getLogger("httpx").setLevel(logging.WARNING)
