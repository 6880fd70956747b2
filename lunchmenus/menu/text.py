"""
Line-oriented text cleanup for scraped menu fragments.

These helpers are deliberately regex based: upstream fragments are often
partial HTML (RSS CDATA, REST content fields) where a DOM parse buys nothing.
Malformed or unclosed tags may leak text through strip_markup.
"""

import re
from html.entities import html5, name2codepoint

# Single pass: decoded output is never decoded again
_ENTITY_RE = re.compile(r"&(?:([a-zA-Z][a-zA-Z0-9]*)|#(\d+)|#[xX]([0-9a-fA-F]+));")

_SCRIPT_STYLE_RE = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.IGNORECASE | re.DOTALL)
_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)
_BLOCK_CLOSE_RE = re.compile(
    r"</(p|li|div|h[1-6]|tr|ul|ol|table|section|article|header|footer)\s*>", re.IGNORECASE
)
_TAG_RE = re.compile(r"<[^>]*>")

_DAY_HEADER_RE = re.compile(
    r"---\s*(Monday|Tuesday|Wednesday|Thursday|Friday|Maanantai|Tiistai|Keskiviikko|Torstai|Perjantai)\s*---\s*",
    re.IGNORECASE,
)

FINNISH_INDICATORS = [
    "keitto", "kastike", "peruna", "broileri", "kana", "liha", "kala",
    "vihannekset", "salaatti", "pihvi", "paistileike", "paistettu",
    "grillattua", "uunissa", "maanantai", "tiistai", "keskiviikko",
    "torstai", "perjantai", "päivän", "viikon", "lounas",
    "jauheliha", "lohta", "naudanlihaa", "possua", "kasvispyöryköitä",
]


def _named(name: str) -> str:
    if name in name2codepoint:
        return chr(name2codepoint[name])
    # html5 table covers names like &apos; that predate name2codepoint
    return html5.get(name + ";", " ")


def _codepoint(value: int) -> str:
    try:
        return chr(value)
    except (ValueError, OverflowError):
        return " "


def _entity(match: "re.Match") -> str:
    name, dec, hexa = match.groups()
    if name:
        return _named(name)
    if dec:
        return _codepoint(int(dec))
    return _codepoint(int(hexa, 16))


def decode_entities(text: str) -> str:
    """Resolve named, decimal and hex character references.

    Unknown named entities become a single space.
    """
    if not text:
        return ""
    return _ENTITY_RE.sub(_entity, text)


def clean_whitespace(text: str) -> str:
    """Collapse space runs, trim line edges, keep at most one blank line."""
    if not text:
        return ""
    text = text.replace("\r", "")
    text = re.sub(r"[ \t\u00a0]+", " ", text)
    text = re.sub(r" *\n *", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def strip_markup(html: str) -> str:
    """Best-effort HTML to text: drop script/style, keep line structure."""
    if not html:
        return ""
    text = _SCRIPT_STYLE_RE.sub("", html)
    text = _BR_RE.sub("\n", text)
    text = _BLOCK_CLOSE_RE.sub("\n", text)
    text = _TAG_RE.sub(" ", text)
    return clean_whitespace(decode_entities(text))


def non_empty_lines(text: str) -> list[str]:
    return [line.strip() for line in (text or "").split("\n") if line.strip()]


def clean_menu_for_display(menu_text: str) -> str:
    """Remove '--- Day ---' headers and stray 'br' artifacts for display."""
    if not menu_text:
        return ""
    text = _DAY_HEADER_RE.sub("", menu_text)
    text = re.sub(r"\bbr\b\s*", "", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def detect_finnish(text: str) -> bool:
    """Three or more Finnish food/weekday words means the text is Finnish."""
    lowered = (text or "").lower()
    return sum(1 for word in FINNISH_INDICATORS if word in lowered) >= 3
