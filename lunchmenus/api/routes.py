import asyncio
import logging
import sqlite3
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, status

from lunchmenus.cache import db as cache_db
from lunchmenus.core.config import settings
from lunchmenus.core.errors import UnknownRestaurantError
from lunchmenus.menu.day import day_override_to_fi_en, display_day, next_occurrence_date, normalize_day, today_key
from lunchmenus.menu.normalize import lines_to_normalized_menu
from lunchmenus.restaurants import get_restaurant, list_restaurants
from lunchmenus.schemas import (
    Language,
    MenuStatus,
    MenusResponse,
    NormalizedMenu,
    RestaurantDescriptor,
    RestaurantMenu,
)
from lunchmenus.scrapers.registry import get_scraper

logger = logging.getLogger(__name__)

router = APIRouter()

SNIPPET_CHARS = 160


def _resolve_day(day: Optional[str]):
    """(target_day, date_key) for an optional ?day= override, or (None, None)."""
    if not day:
        return None, None
    override = day_override_to_fi_en(day)
    if override is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown day: {day}"
        )
    return override["fi"], next_occurrence_date(override["fi"])


def _require_restaurant(restaurant_id: str) -> RestaurantDescriptor:
    restaurant = get_restaurant(restaurant_id)
    if restaurant is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown restaurant: {restaurant_id}"
        )
    return restaurant


async def _restaurant_menu(
    request: Request,
    restaurant: RestaurantDescriptor,
    language: str,
    target_day: Optional[str],
    date_key: str,
    fresh: bool
) -> RestaurantMenu:
    processor = request.app.state.processor
    try:
        result = await processor.get_menu(
            restaurant.id,
            restaurant.name,
            language,
            target_day=target_day,
            date_key=date_key,
            skip_cache=fresh
        )
    except Exception as e:
        logger.error("Unexpected error processing %s: %s", restaurant.name, e)
        return RestaurantMenu(
            id=restaurant.id,
            name=restaurant.name,
            location=restaurant.location,
            description=restaurant.description,
            error=True,
            status=MenuStatus(scraped=False, note="Unexpected error occurred"),
        )

    note = f"Loaded from cache ({date_key})" if result.from_cache else f"Live scraped ({date_key})"
    return RestaurantMenu(
        id=restaurant.id,
        name=restaurant.name,
        location=restaurant.location,
        description=restaurant.description,
        raw_snippet=result.raw_menu[:SNIPPET_CHARS],
        parsed_menu=result.parsed_menu,
        from_cache=result.from_cache,
        status=MenuStatus(scraped=True, note=note),
    )


@router.get("/menus", response_model=MenusResponse)
async def get_menus(
    request: Request,
    language: Language = "en",
    fresh: bool = False,
    day: Optional[str] = None
):
    """
    Menus for every restaurant in the directory.

    `day` (mon..fri, English or Finnish) shows that weekday's menu as if it
    were today; its cache partition is the next date falling on that day.
    """
    target_day, date_key = _resolve_day(day)
    date_key = date_key or today_key()

    request.app.state.cleanup.run_if_due()

    logger.info(
        "Processing menus for language=%s (fresh=%s, day=%s, date_key=%s)",
        language, fresh, target_day or "auto", date_key
    )

    restaurants = list_restaurants()
    menus = await asyncio.gather(*(
        _restaurant_menu(request, r, language, target_day, date_key, fresh) for r in restaurants
    ))

    return MenusResponse(
        language=language,
        date_key=date_key,
        target_day=display_day(normalize_day(target_day), language),
        restaurants=list(menus),
    )


@router.get("/menus/{restaurant_id}", response_model=RestaurantMenu)
async def get_restaurant_menu(
    request: Request,
    restaurant_id: str,
    language: Language = "en",
    fresh: bool = False,
    day: Optional[str] = None
):
    restaurant = _require_restaurant(restaurant_id)
    target_day, date_key = _resolve_day(day)
    return await _restaurant_menu(request, restaurant, language, target_day, date_key or today_key(), fresh)


@router.get("/menus/{restaurant_id}/items", response_model=NormalizedMenu)
async def get_restaurant_items(
    request: Request,
    restaurant_id: str,
    language: Language = "en",
    day: Optional[str] = None
):
    """Menu lines as items with vendor diet codes and a heuristic dish type."""
    restaurant = _require_restaurant(restaurant_id)
    target_day, date_key = _resolve_day(day)
    date_key = date_key or today_key()

    try:
        scraper = get_scraper(restaurant.id)
        result = await request.app.state.processor.get_menu(
            restaurant.id, restaurant.name, language, target_day=target_day, date_key=date_key
        )
    except UnknownRestaurantError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return lines_to_normalized_menu(
        restaurant.id, restaurant.name, language, scraper.source, result.parsed_menu, day_key=date_key
    )


@router.get("/restaurants", response_model=list[RestaurantDescriptor])
async def restaurants():
    return list_restaurants()


@router.get("/cache")
async def list_cache():
    """All cached entries, newest first"""
    try:
        entries = cache_db.list_entries()
    except sqlite3.Error as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to get cache status: {str(e)}"
        )
    return {"data": [entry.model_dump() for entry in entries], "count": len(entries)}


@router.delete("/cache")
async def delete_cache(
    restaurant_id: Optional[str] = None,
    language: Optional[Language] = None,
    date: Optional[str] = None,
    all_dates: bool = False,
    days: int = Query(0, ge=0)
):
    """
    Targeted delete by restaurant (today's entry unless `date` or `all_dates`
    is given), age-based cleanup with `days`, or clear everything.
    """
    try:
        if restaurant_id:
            date_key = None if all_dates else (date or today_key())
            deleted = cache_db.delete_entries(restaurant_id, language, date_key)
            return {
                "deleted": deleted,
                "where": {"restaurant_id": restaurant_id, "language": language, "date": date_key},
            }

        if days > 0:
            deleted = cache_db.clean_old_cache(days)
            return {"deleted": deleted, "message": f"Cache older than {days} day(s) cleared"}

        deleted = cache_db.clear_all()
        return {"deleted": deleted, "message": "Cache cleared successfully"}
    except sqlite3.Error as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to clear cache: {str(e)}"
        )


@router.post("/cache/cleanup")
async def cleanup_cache():
    """Drop entries not dated today and entries past the retention window"""
    today = today_key()
    try:
        expired = cache_db.purge_other_dates(today)
    except sqlite3.Error as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Cache cleanup failed: {str(e)}"
        )
    old = cache_db.clean_old_cache(settings.CACHE_DAYS_TO_KEEP, today=today)
    return {"today": today, "deleted": expired + old}


@router.get("/cache/stats")
async def cache_statistics():
    """Get cache statistics for debugging"""
    return cache_db.get_stats()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "Lunch Menus"}
