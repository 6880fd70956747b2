import re
from typing import Optional

from lunchmenus.menu.classify import classify_dish_type, extract_diet_codes
from lunchmenus.menu.day import today_key
from lunchmenus.menu.text import clean_menu_for_display, non_empty_lines
from lunchmenus.schemas import NormalizedItem, NormalizedMenu

_TRAILING_CODES_RE = re.compile(r"\s*[\[(（][A-Za-zÄÖÅäöå ,\-/+]+[\])）]\s*$")


def lines_to_normalized_menu(
    restaurant_id: str,
    restaurant_name: str,
    language: str,
    source: str,
    raw_block: str,
    day_key: Optional[str] = None,
) -> NormalizedMenu:
    """Project cached menu text into items. Recomputed on demand, never stored."""
    items = []
    for line in non_empty_lines(clean_menu_for_display(raw_block)):
        items.append(NormalizedItem(
            name=_TRAILING_CODES_RE.sub("", line).strip() or line,
            diet_codes=extract_diet_codes(line),
            type=classify_dish_type(line),
        ))

    return NormalizedMenu(
        restaurant_id=restaurant_id,
        restaurant_name=restaurant_name,
        day_key=day_key or today_key(),
        language=language,
        items=items,
        source=source,
    )
