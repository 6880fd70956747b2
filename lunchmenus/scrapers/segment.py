"""
Day-block segmentation shared by the weekly sources.

Weekly menus arrive as one text with weekday headings ("Tiistai 26.8.",
"Tuesday:", "--- Tiistai ---"). Segmentation finds the ordered heading
positions, slices from each heading to the next one, and drops legend and
boilerplate lines from every slice.
"""

import re
from typing import List, NamedTuple, Optional

from lunchmenus.menu.day import EN_DAYS, EN_TO_FI, FI_DAYS, display_day

DAY_NAMES = FI_DAYS + EN_DAYS
DAY_ALTERNATION = "|".join(DAY_NAMES)

DAY_MARKER_RE = re.compile(rf"\b({DAY_ALTERNATION})\b", re.IGNORECASE)
# Heading prefix of a slice: the day name, optional dates, optional colon
HEADER_PREFIX_RE = re.compile(
    rf"^\s*({DAY_ALTERNATION})\b(?:\s*\d{{1,2}}[./-]\d{{1,2}}\.?)*\s*:?\s*", re.IGNORECASE
)
DISPLAY_HEADER_RE = re.compile(rf"---\s*({DAY_ALTERNATION})\s*---", re.IGNORECASE)

# Allergen legend lines such as "(L = laktoositon, G = gluteeniton)" or a bare "(L, G)".
# A dish line that merely starts with its codes is not a legend.
_LEGEND_CODES = "vl|l|m|g|vs|mp|so|se|si|sm|ka|kl|äy"
LEGEND_RE = re.compile(
    rf"^\(\s*(?:{_LEGEND_CODES})\s*(?:=.*|(?:[,/]\s*(?:{_LEGEND_CODES})\s*)*\)\s*)$", re.IGNORECASE
)
BOILERPLATE_RE = re.compile(
    r"(EU-asetus|regulation|Hinnat|Prices|We reserve rights|Opening hours|Aukiolo)", re.IGNORECASE
)
FACILITY_RE = re.compile(
    r"(Water\s*damage|Vesivahinko|We\s*apologize|Pahoittelemme|Week\s*\d+|Viikko\s*\d+)", re.IGNORECASE
)
_RULE_RE = re.compile(r"^[-–—]+$")


class DayMarker(NamedTuple):
    label: str
    day_fi: str
    language: str
    pos: int


class DayBlock(NamedTuple):
    day_fi: str
    language: str
    body: str


def canonical_day(label: str) -> Optional[tuple]:
    """(Finnish label, language) for a weekday name in either language."""
    for day in FI_DAYS:
        if day.lower() == label.lower():
            return day, "fi"
    for day in EN_DAYS:
        if day.lower() == label.lower():
            return EN_TO_FI[day], "en"
    return None


def find_day_markers(text: str) -> List[DayMarker]:
    """Ordered positions of every weekday name in the text."""
    markers = []
    for match in DAY_MARKER_RE.finditer(text or ""):
        day_fi, language = canonical_day(match.group(1))
        markers.append(DayMarker(match.group(1), day_fi, language, match.start()))
    return sorted(markers, key=lambda m: m.pos)


def is_noise_line(line: str) -> bool:
    return bool(
        LEGEND_RE.search(line)
        or BOILERPLATE_RE.search(line)
        or FACILITY_RE.search(line)
        or _RULE_RE.match(line)
    )


def clean_block(text: str) -> str:
    """Collapse whitespace per line and drop empty and noise lines."""
    lines = (re.sub(r"\s+", " ", line).strip() for line in (text or "").split("\n"))
    return "\n".join(line for line in lines if line and not is_noise_line(line))


def slice_day_blocks(text: str, markers: Optional[List[DayMarker]] = None) -> List[DayBlock]:
    """
    Cut text into one block per marker, each running up to the next marker of
    any language. Heading prefixes are removed; empty blocks are skipped.
    """
    if markers is None:
        markers = find_day_markers(text)

    blocks = []
    for i, marker in enumerate(markers):
        end = markers[i + 1].pos if i + 1 < len(markers) else len(text)
        chunk = text[marker.pos:end].strip()
        header = HEADER_PREFIX_RE.match(chunk)
        body = clean_block(chunk[header.end():] if header else chunk)
        if body:
            blocks.append(DayBlock(marker.day_fi, marker.language, body))
    return blocks


def select_block(blocks: List[DayBlock], target_day: str, language: Optional[str] = None) -> Optional[DayBlock]:
    for block in blocks:
        if block.day_fi.lower() != target_day.lower():
            continue
        if language and block.language != language:
            continue
        return block
    return None


def available_days(blocks: List[DayBlock]) -> List[str]:
    """Distinct Finnish labels in the order they appear."""
    days: List[str] = []
    for block in blocks:
        if block.day_fi not in days:
            days.append(block.day_fi)
    return days


def format_block(day_label: str, body: str) -> str:
    return f"--- {day_label} ---\n{body}"


def extract_day_section(weekly_text: str, target_day: str, language: str) -> str:
    """
    From text with '--- Day ---' headers, return the requested day's header
    and body in the requested language, ending at the next header of that
    language. Returns "" when the day is not present.
    """
    label = display_day(target_day, language)

    headers = []
    for match in DISPLAY_HEADER_RE.finditer(weekly_text or ""):
        _, header_lang = canonical_day(match.group(1))
        headers.append((match.start(), match.group(1), header_lang))

    for i, (start, name, header_lang) in enumerate(headers):
        if header_lang != language or name.lower() != label.lower():
            continue
        end = len(weekly_text)
        for next_start, _, next_lang in headers[i + 1:]:
            if next_lang == language:
                end = next_start
                break
        return weekly_text[start:end].strip()

    return ""
