import logging

from playwright.async_api import async_playwright, TimeoutError as PlaywrightTimeout

from lunchmenus.core.config import settings

logger = logging.getLogger(__name__)

# Finnish restaurant sites mostly use these consent banner labels
COOKIE_SELECTORS = [
    'button:has-text("Hyväksy kaikki")',
    'button:has-text("Hyväksy")',
    'button:has-text("Salli kaikki")',
    'button:has-text("Accept all")',
    'button:has-text("Accept")',
    '[id*="cookie" i] button',
    '[class*="cookie" i] button',
]

CONTENT_SELECTORS = [
    '[class*="lounas" i], [id*="lounas" i]',
    '[class*="menu" i], [id*="menu" i]',
    'main',
    'article',
    'section',
]


async def fetch_js_html(url: str, wait_for_content: bool = True) -> str:
    """
    Fetch HTML from a URL using Playwright to handle JavaScript.

    Args:
        url: The URL to fetch
        wait_for_content: Whether to wait for dynamic content to load

    Returns:
        Raw HTML string after JavaScript execution
    """
    timeout_ms = settings.REQUEST_TIMEOUT * 1000
    try:
        async with async_playwright() as p:
            browser = await p.chromium.launch(
                headless=settings.PLAYWRIGHT_HEADLESS,
                args=[
                    '--no-sandbox',
                    '--disable-dev-shm-usage',
                    '--disable-gpu',
                ]
            )
            try:
                page = await browser.new_page()
                await page.set_extra_http_headers({"User-Agent": settings.USER_AGENT})

                await page.goto(url, timeout=timeout_ms, wait_until="domcontentloaded")
                try:
                    await page.wait_for_load_state("networkidle", timeout=timeout_ms)
                except PlaywrightTimeout:
                    pass

                for sel in COOKIE_SELECTORS:
                    try:
                        btn = page.locator(sel).first
                        if await btn.count() > 0:
                            await btn.click(timeout=1500)
                            break
                    except Exception:
                        continue

                if wait_for_content:
                    for sel in CONTENT_SELECTORS:
                        try:
                            await page.wait_for_selector(sel, timeout=min(4000, settings.JS_WAIT_TIMEOUT_MS))
                            break
                        except PlaywrightTimeout:
                            continue

                    # Let lazy sections hydrate
                    await page.wait_for_timeout(min(3000, settings.JS_EXTRA_WAIT_MS))

                html = await page.content()
                logger.info("Rendered %s with JavaScript (%d bytes)", url, len(html))
                return html
            finally:
                await browser.close()

    except PlaywrightTimeout:
        raise Exception(f"Timeout while rendering {url}")
    except Exception as e:
        raise Exception(f"Failed to fetch {url} with JavaScript: {str(e)}")
