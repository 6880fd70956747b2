import re
from typing import Optional

from lunchmenus.fetch import scraper as fetcher
from lunchmenus.menu.day import display_day, parse_vendor_date, weekday_from_date_string
from lunchmenus.menu.text import clean_whitespace
from lunchmenus.scrapers import segment
from lunchmenus.scrapers.base import BaseScraper, ScrapeResult

WEEKLY_URL = "https://www.sodexo.fi/ruokalistat/output/weekly_json/190"

MIN_DAY_MENU_CHARS = 20

_CODE_SPLIT_RE = re.compile(r"\s*,\s*")


def join_codes(*fields: Optional[str]) -> str:
    """
    Vendor diet codes from dietcodes and properties, comma separated and
    otherwise verbatim: ("L,G", None) -> "L, G".
    """
    tokens = []
    for field in fields:
        for token in _CODE_SPLIT_RE.split((field or "").strip()):
            token = re.sub(r"\s+", " ", token).strip()
            if token:
                tokens.append(token)
    return ", ".join(tokens)


def _course_order(key: str):
    try:
        return 0, int(key)
    except (TypeError, ValueError):
        return 1, str(key)


class ValajaScraper(BaseScraper):
    """Sodexo weekly JSON: mealdates[].courses{} with fi/en titles per course."""

    restaurant_id = "valaja"
    restaurant_name = "Valaja"
    source = "api"

    async def _scrape(self, target_day: str, language: str, date_key: str) -> ScrapeResult:
        payload = await fetcher.fetch_json(WEEKLY_URL)

        mealdates = payload.get("mealdates") if isinstance(payload, dict) else None
        if not isinstance(mealdates, list) or not mealdates:
            return self.failure("Invalid weekly_json payload (no mealdates)")

        mealdate = self._pick_mealdate(mealdates, target_day, date_key)
        if mealdate is None:
            found = ", ".join(str(md.get("date")) for md in mealdates if isinstance(md, dict))
            return self.failure(f"No {target_day} day found (mealdates: {found})")

        courses = mealdate.get("courses") or {}
        if isinstance(courses, list):
            courses = {str(i + 1): c for i, c in enumerate(courses)}

        lines = []
        for key in sorted(courses, key=_course_order):
            course = courses[key] or {}
            lines.append(self._course_line(course, language))

        if not lines:
            return self.failure(f"No courses listed for {target_day}")

        raw_menu = clean_whitespace(segment.format_block(display_day(target_day, language), "\n".join(lines)))
        if len(raw_menu) <= MIN_DAY_MENU_CHARS:
            return self.failure("No courses found after parsing", raw_menu=raw_menu)
        return self.success(raw_menu)

    @staticmethod
    def _pick_mealdate(mealdates: list, target_day: str, date_key: str) -> Optional[dict]:
        """Among entries on the target weekday, the exact date wins over the first one."""
        candidates = [
            md for md in mealdates
            if isinstance(md, dict) and weekday_from_date_string(str(md.get("date") or "")) == target_day
        ]

        for md in candidates:
            parsed = parse_vendor_date(str(md.get("date") or ""))
            if parsed is not None and parsed.isoformat() == date_key:
                return md

        return candidates[0] if candidates else None

    @staticmethod
    def _course_line(course: dict, language: str) -> str:
        if language == "fi":
            title = course.get("title_fi") or course.get("title_en")
        else:
            title = course.get("title_en") or course.get("title_fi")
        title = (title or "").strip() or "TBA"

        codes = join_codes(course.get("dietcodes"), course.get("properties"))
        return f"{title} — {codes}" if codes else title
