import os
from typing import Optional

class Settings:
    # Database
    DATABASE_PATH: str = os.getenv("DATABASE_PATH", "data/menu_cache.sqlite")
    CACHE_DAYS_TO_KEEP: int = int(os.getenv("CACHE_DAYS_TO_KEEP", "7"))

    # LLM
    GOOGLE_API_KEY: Optional[str] = os.getenv("GOOGLE_API_KEY")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

    # Development
    USE_MOCK: bool = os.getenv("USE_MOCK", "0").lower() in ("1", "true", "yes")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Scraping
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "15"))
    FETCH_RETRIES: int = int(os.getenv("FETCH_RETRIES", "3"))
    RETRY_BACKOFF_SECONDS: float = float(os.getenv("RETRY_BACKOFF_SECONDS", "1.0"))
    USER_AGENT: str = os.getenv(
        "USER_AGENT",
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )
    # Playwright / JS rendering
    USE_JS_RENDERING: bool = os.getenv("USE_JS_RENDERING", "1").lower() in ("1", "true", "yes")
    PLAYWRIGHT_HEADLESS: bool = os.getenv("PLAYWRIGHT_HEADLESS", "1").lower() in ("1", "true", "yes")
    JS_WAIT_TIMEOUT_MS: int = int(os.getenv("JS_WAIT_TIMEOUT_MS", "10000"))
    JS_EXTRA_WAIT_MS: int = int(os.getenv("JS_EXTRA_WAIT_MS", "1500"))

    # Calendar
    TIMEZONE: str = os.getenv("TIMEZONE", "Europe/Helsinki")
    # Day used when a request names no weekday and today is a weekend
    WEEKEND_DEFAULT_DAY: str = os.getenv("WEEKEND_DEFAULT_DAY", "Maanantai")

    # LLM timeouts and retries
    LLM_TIMEOUT_SECONDS: int = int(os.getenv("LLM_TIMEOUT_SECONDS", "50"))
    LLM_MAX_ATTEMPTS: int = int(os.getenv("LLM_MAX_ATTEMPTS", "3"))

settings = Settings()
