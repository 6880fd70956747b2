"""
Weekday and calendar-date helpers.

All day keys are civil dates in the service timezone (Europe/Helsinki), so the
cache partition never depends on the host's local time zone. Finnish weekday
labels are the internal day identity; English labels are display projections.
"""

import re
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Optional
from zoneinfo import ZoneInfo

from lunchmenus.core.config import settings

HELSINKI_TZ = ZoneInfo(settings.TIMEZONE)

FI_WEEKDAYS = ["Maanantai", "Tiistai", "Keskiviikko", "Torstai", "Perjantai", "Lauantai", "Sunnuntai"]
EN_WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Lunch is served Monday to Friday only
FI_DAYS = FI_WEEKDAYS[:5]
EN_DAYS = EN_WEEKDAYS[:5]

FI_TO_EN: Dict[str, str] = dict(zip(FI_DAYS, EN_DAYS))
EN_TO_FI: Dict[str, str] = dict(zip(EN_DAYS, FI_DAYS))

FI_SHORT: Dict[str, str] = dict(zip(FI_DAYS, ["Ma", "Ti", "Ke", "To", "Pe"]))
EN_SHORT: Dict[str, str] = dict(zip(EN_DAYS, ["Mon", "Tue", "Wed", "Thu", "Fri"]))

_DAY_ALIASES: Dict[str, str] = {}
for _fi, _en in zip(FI_DAYS, EN_DAYS):
    for _alias in (_fi, _en, FI_SHORT[_fi], EN_SHORT[_en]):
        _DAY_ALIASES[_alias.lower()] = _fi


def _helsinki_now(moment: Optional[datetime] = None) -> datetime:
    if moment is None:
        return datetime.now(HELSINKI_TZ)
    if moment.tzinfo is None:
        # Naive datetimes are treated as UTC instants
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(HELSINKI_TZ)


def today_key(moment: Optional[datetime] = None) -> str:
    """YYYY-MM-DD of the given instant (default: now) on the Helsinki calendar."""
    return _helsinki_now(moment).date().isoformat()


def weekday_label(moment: Optional[datetime] = None) -> str:
    """Capitalized Finnish weekday name, e.g. 'Tiistai'."""
    return FI_WEEKDAYS[_helsinki_now(moment).weekday()]


def weekday_labels(moment: Optional[datetime] = None) -> Dict[str, str]:
    idx = _helsinki_now(moment).weekday()
    return {"fi": FI_WEEKDAYS[idx], "en": EN_WEEKDAYS[idx]}


def _match_day(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return _DAY_ALIASES.get(value.strip().lower())


def normalize_day(value: Optional[str] = None, moment: Optional[datetime] = None) -> str:
    """
    Map an English or Finnish weekday name or abbreviation to a canonical
    Finnish label (Maanantai..Perjantai).

    Missing or unrecognized input falls back to today's weekday; on weekends
    that fallback is settings.WEEKEND_DEFAULT_DAY. Never raises.
    """
    day = _match_day(value)
    if day:
        return day

    today = _match_day(weekday_label(moment))
    if today:
        return today

    return _match_day(settings.WEEKEND_DEFAULT_DAY) or FI_DAYS[0]


def day_override_to_fi_en(value: str) -> Optional[Dict[str, str]]:
    """Resolve a debug day slug ('tue', 'tuesday', 'tiistai') to both labels."""
    day = _match_day(value)
    if not day:
        return None
    return {"fi": day, "en": FI_TO_EN[day]}


def display_day(day_fi: str, language: str) -> str:
    return FI_TO_EN.get(day_fi, day_fi) if language == "en" else day_fi


def next_occurrence_date(day: str, moment: Optional[datetime] = None) -> str:
    """
    Day key of the next date strictly after `moment` falling on `day`.

    If today already is that weekday the result is one week ahead, so a
    "pretend today" request never rewrites today's cache partition.
    """
    target = FI_WEEKDAYS.index(normalize_day(day, moment))
    local_date = _helsinki_now(moment).date()

    days_ahead = (target - local_date.weekday()) % 7 or 7
    return (local_date + timedelta(days=days_ahead)).isoformat()


_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_FI_DATE_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})")


def parse_vendor_date(value: str) -> Optional[date]:
    """Parse 'YYYY-MM-DD[...]' or 'DD.MM.YYYY' vendor date strings."""
    if not value:
        return None
    value = value.strip()
    try:
        m = _ISO_DATE_RE.match(value)
        if m:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        m = _FI_DATE_RE.match(value)
        if m:
            return date(int(m.group(3)), int(m.group(2)), int(m.group(1)))
    except ValueError:
        return None
    return None


def weekday_from_date_string(value: str) -> Optional[str]:
    """
    Finnish weekday label for a vendor date field.

    Accepts ISO dates, Finnish DD.MM.YYYY dates, or free text that embeds a
    Finnish weekday name ('Tiistai 26.8.').
    """
    parsed = parse_vendor_date(value)
    if parsed:
        return FI_WEEKDAYS[parsed.weekday()]

    lowered = (value or "").lower()
    for day in FI_WEEKDAYS:
        if day.lower() in lowered:
            return day
    return None
