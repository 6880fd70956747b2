import asyncio
import json
import logging
import re
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from lunchmenus.core.config import settings
from lunchmenus.menu.day import EN_DAYS, FI_DAYS, FI_TO_EN, EN_TO_FI
from lunchmenus.menu.text import clean_whitespace, non_empty_lines, strip_markup
from lunchmenus.schemas import DayMenuExtraction, MenuTranslation, ParsedMenu

logger = logging.getLogger(__name__)

# Progressive shrinking input limits, one per attempt
EXTRACTION_LIMITS = [20000, 12000, 6000]
TEXT_LIMITS = [8000, 6000, 4000]

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_ANY_DAY_RE = re.compile(r"\b(" + "|".join(FI_DAYS + EN_DAYS) + r")\b", re.IGNORECASE)


def get_gemini_model():
    """Get configured Gemini model"""
    if not settings.GOOGLE_API_KEY:
        raise ValueError("GOOGLE_API_KEY not set")

    try:
        import google.generativeai as genai  # lazy import keeps model setup out of module import
    except Exception as e:
        raise ImportError("google-generativeai package is required to use Gemini client") from e

    genai.configure(api_key=settings.GOOGLE_API_KEY)
    return genai.GenerativeModel(
        settings.GEMINI_MODEL,
        generation_config={"response_mime_type": "application/json"}
    )


def _decode_json(text: str) -> Dict[str, Any]:
    content = (text or "").strip()
    if content.startswith("```json"):
        content = content[7:]
    elif content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    content = content.strip()

    try:
        return json.loads(content)
    except json.JSONDecodeError:
        match = _JSON_OBJECT_RE.search(content)
        if match:
            return json.loads(match.group())
        raise ValueError(f"No valid JSON found in Gemini response: {content[:200]}...")


def _shrink(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


async def _generate_json(
    build_prompt: Callable[[str], str],
    content: str,
    limits: List[int],
    label: str
) -> Dict[str, Any]:
    """
    Run a JSON-mode prompt, retrying timeouts and transient errors with a
    smaller input each time. Raises the last error once attempts run out.
    """
    model = get_gemini_model()
    max_attempts = min(settings.LLM_MAX_ATTEMPTS, len(limits)) if settings.LLM_MAX_ATTEMPTS else len(limits)

    last_error: Optional[Exception] = None
    for attempt in range(max_attempts):
        body = _shrink(content, limits[attempt])
        try:
            logger.info(
                "LLM ATTEMPT %d/%d (%s): content_len=%d, timeout=%ss",
                attempt + 1, max_attempts, label, len(body), settings.LLM_TIMEOUT_SECONDS
            )
            response = await model.generate_content_async(
                build_prompt(body),
                request_options={"timeout": settings.LLM_TIMEOUT_SECONDS}
            )
            if not response.text:
                raise ValueError("Empty response from Gemini")
            return _decode_json(response.text)

        except Exception as e:
            last_error = e
            msg = str(e).lower()
            is_transient = "timeout" in msg or "504" in msg or "deadline" in msg or "503" in msg
            if attempt < max_attempts - 1 and is_transient:
                backoff = 0.7 * (attempt + 1)
                logger.warning("LLM TIMEOUT/TRANSIENT ERROR (%s), retrying in %.1fs: %s", label, backoff, e)
                await asyncio.sleep(backoff)
                continue
            break

    raise Exception(f"Gemini {label} failed: {str(last_error) if last_error else 'Unknown error'}")


def _extraction_prompt(restaurant_name: str, target_day: str, language: str) -> Callable[[str], str]:
    other = FI_TO_EN.get(target_day) or EN_TO_FI.get(target_day) or target_day

    def build(html: str) -> str:
        return (
            "You are an expert at extracting restaurant lunch menu information from HTML content.\n\n"
            f"Restaurant: {restaurant_name}\n"
            f"Target Day: {target_day} (consider both Finnish and English headings, e.g. \"{target_day}\"/\"{other}\")\n"
            f"Menu Language: {language}\n\n"
            f"Extract ONLY the lunch/buffet menu items for {target_day} from this HTML content.\n\n"
            "INSTRUCTIONS:\n"
            f"1. Look for \"{target_day}\" followed by a date (like \"{target_day} 19.08.2025\")\n"
            "2. Extract ALL food items that appear AFTER that day heading until you reach the next day\n"
            "3. Include dietary codes in parentheses (L, VL, M, G, VEG/VE, etc.) verbatim if present\n"
            "4. Extract complete dish descriptions including sides and sauces\n"
            "5. Return items as a simple array of strings\n\n"
            "IGNORE completely:\n"
            "- Parking information (\"Ilmainen pysäköinti\")\n"
            "- Prices (\"12€/13,50€\", \"Salaattibaari lounas\")\n"
            "- Opening hours and contact details\n"
            "- Navigation elements\n"
            "- Other days' menus (only extract for the target day)\n\n"
            "Return ONLY valid JSON in this format:\n"
            "{\n"
            "  \"success\": true,\n"
            "  \"target_day_menu\": [\"Tomaatti-vuohenjuustokeitto (L,G) krutongit (M,G)\"],\n"
            "  \"error\": null\n"
            "}\n"
            "Set success to false and describe the problem in error if the target day menu is not found.\n\n"
            "HTML Content:\n"
            f"{html}"
        )

    return build


def _parse_prompt(restaurant_name: str) -> Callable[[str], str]:
    def build(menu_text: str) -> str:
        return (
            "You are an AI expert at parsing restaurant menus.\n\n"
            "Your task is to take the raw menu text from a restaurant and format it into a clean, easy-to-read format.\n"
            f"The restaurant name is: {restaurant_name}.\n\n"
            "The menu text might be plain text, XML, or a JSON string.\n"
            "- If it is JSON, parse it and present the 'name' of each item.\n"
            "- Put each menu item on its own line. Do not include markdown formatting.\n"
            "- Keep dietary codes such as (L), (G), (VEG) exactly as written.\n"
            "- Leave out prices, opening hours and other non-food lines.\n\n"
            "Return ONLY valid JSON: {\"parsed_menu\": \"<one item per line>\"}\n\n"
            "Here is the raw menu text:\n"
            f"{menu_text}"
        )

    return build


def _translation_prompt(restaurant_name: str) -> Callable[[str], str]:
    weekday_rules = "\n".join(f"   - {fi} -> {en}" for fi, en in FI_TO_EN.items())

    def build(finnish_menu: str) -> str:
        return (
            "You are an expert translator specializing in Finnish restaurant menus to English.\n\n"
            f"Restaurant: {restaurant_name}\n\n"
            "Translate this Finnish lunch menu to English while following these rules:\n\n"
            "PRESERVATION RULES:\n"
            "1. Keep ALL dietary codes EXACTLY as they are: (L), (G), (M), (VL), (VS), (VEG), (VE), etc.\n"
            "2. Keep day headers with \"---\" markers: \"--- Tiistai ---\" becomes \"--- Tuesday ---\"\n"
            "3. Preserve line breaks and structure\n"
            "4. Keep prices if present\n\n"
            "TRANSLATION RULES:\n"
            "1. Translate Finnish weekdays to English:\n"
            f"{weekday_rules}\n"
            "2. Translate dish names naturally (\"Tomaattikeitto\" -> \"Tomato soup\", \"Broileri\" -> \"Chicken\")\n"
            "3. Keep the menu concise and appetizing\n\n"
            "Return ONLY valid JSON in this format:\n"
            "{\"success\": true, \"translated_menu\": \"...\", \"error\": null}\n\n"
            "Finnish Menu to Translate:\n"
            f"{finnish_menu}"
        )

    return build


async def extract_day_menu(
    html: str,
    restaurant_name: str,
    target_day: str,
    language: str
) -> DayMenuExtraction:
    """
    Ask the model for the menu lines of one day. Never raises: any failure
    comes back as DayMenuExtraction(success=False, error=...).

    Output is untrusted; callers apply their own item-count and noise checks.
    """
    if settings.USE_MOCK:
        return _mock_extract_day_menu(html, target_day)

    try:
        data = await _generate_json(
            _extraction_prompt(restaurant_name, target_day, language),
            html or "",
            EXTRACTION_LIMITS,
            "day extraction"
        )
        # Accept the camelCase key some model outputs still use
        if "target_day_menu" not in data and "targetDayMenu" in data:
            data["target_day_menu"] = data.pop("targetDayMenu")
        return DayMenuExtraction.model_validate(data)
    except (ValidationError, ValueError) as e:
        logger.warning("LLM day extraction for %s returned malformed output: %s", restaurant_name, e)
        return DayMenuExtraction(success=False, error=f"Malformed extraction output: {e}")
    except Exception as e:
        logger.error("LLM day extraction for %s failed: %s", restaurant_name, e)
        return DayMenuExtraction(success=False, error=str(e))


async def parse_menu(menu_text: str, restaurant_name: str) -> ParsedMenu:
    """
    Generic free-text parse. Falls back to the input text whenever the model
    fails or returns nothing usable, so parsed_menu is never empty for
    non-empty input.
    """
    if settings.USE_MOCK:
        return ParsedMenu(parsed_menu=clean_whitespace(menu_text) or menu_text)

    try:
        data = await _generate_json(_parse_prompt(restaurant_name), menu_text, TEXT_LIMITS, "menu parse")
        parsed = ParsedMenu.model_validate(data)
        if parsed.parsed_menu.strip():
            return parsed
        logger.warning("LLM menu parse for %s returned empty text, keeping raw menu", restaurant_name)
    except Exception as e:
        logger.error("LLM menu parse for %s failed: %s", restaurant_name, e)

    return ParsedMenu(parsed_menu=menu_text)


async def translate_menu(finnish_menu: str, restaurant_name: str) -> MenuTranslation:
    """Finnish to English translation. Never raises."""
    if settings.USE_MOCK:
        return _mock_translate_menu(finnish_menu)

    try:
        data = await _generate_json(
            _translation_prompt(restaurant_name), finnish_menu, TEXT_LIMITS, "translation"
        )
        result = MenuTranslation.model_validate(data)
        if result.success and not (result.translated_menu or "").strip():
            return MenuTranslation(success=False, error="Empty translation")
        return result
    except Exception as e:
        logger.error("LLM translation for %s failed: %s", restaurant_name, e)
        return MenuTranslation(success=False, error=str(e))


def _mock_extract_day_menu(html: str, target_day: str) -> DayMenuExtraction:
    """Offline stand-in: lines between the target day heading and the next day heading."""
    wanted = {target_day.lower()}
    if target_day in FI_TO_EN:
        wanted.add(FI_TO_EN[target_day].lower())
    elif target_day in EN_TO_FI:
        wanted.add(EN_TO_FI[target_day].lower())

    items: List[str] = []
    collecting = False
    for line in non_empty_lines(strip_markup(html)):
        day = _ANY_DAY_RE.match(line)
        if day:
            if collecting:
                break
            collecting = day.group(1).lower() in wanted
            continue
        if collecting:
            items.append(line)

    if not items:
        return DayMenuExtraction(success=False, error=f"No menu found for {target_day}")
    return DayMenuExtraction(success=True, target_day_menu=items)


def _mock_translate_menu(finnish_menu: str) -> MenuTranslation:
    translated = finnish_menu
    for fi, en in FI_TO_EN.items():
        translated = translated.replace(fi, en)
    return MenuTranslation(success=True, translated_menu=translated)
