import logging
import os
import sqlite3
from datetime import date, timedelta
from typing import List, Optional

from lunchmenus.core.config import settings
from lunchmenus.menu.day import today_key
from lunchmenus.schemas import CacheEntry

logger = logging.getLogger(__name__)

DATABASE_PATH = settings.DATABASE_PATH

# The cache is an optimization layer: read failures are misses and write
# failures are no-ops. Admin helpers (list/delete/stats) propagate errors.

_COLUMNS = "restaurant_id, restaurant_name, language, date, raw_menu, parsed_menu, scraped_at"

def _connect() -> sqlite3.Connection:
    conn = sqlite3.connect(DATABASE_PATH)
    conn.row_factory = sqlite3.Row
    return conn

def _to_entry(row: sqlite3.Row) -> CacheEntry:
    return CacheEntry(**{key: row[key] for key in row.keys()})

def init_db():
    """Initialize SQLite database with the menu cache table"""
    directory = os.path.dirname(DATABASE_PATH)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with _connect() as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS menu_cache (
                restaurant_id TEXT NOT NULL,
                restaurant_name TEXT,
                language TEXT NOT NULL,
                date TEXT NOT NULL,
                raw_menu TEXT NOT NULL,
                parsed_menu TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                scraped_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                UNIQUE(restaurant_id, date, language)
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_menu_cache_restaurant_lang "
            "ON menu_cache(restaurant_id, language)"
        )
        conn.commit()

def get(restaurant_id: str, language: str, date_key: str) -> Optional[CacheEntry]:
    """Exact lookup on the (restaurant, date, language) identity."""
    try:
        with _connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM menu_cache "
                "WHERE restaurant_id = ? AND language = ? AND date = ?",
                (restaurant_id, language, date_key)
            ).fetchone()
    except sqlite3.Error as e:
        logger.error("CACHE READ FAILED for %s (%s): %s", restaurant_id, language, e)
        return None

    if row:
        logger.info("CACHE HIT for %s (%s) on %s", restaurant_id, language, date_key)
        return _to_entry(row)
    return None

def get_with_validation(restaurant_id: str, language: str, date_key: str) -> Optional[CacheEntry]:
    """
    Return the newest entry for (restaurant, language) if it belongs to date_key.

    Otherwise every entry of that pair with a different date is deleted and
    None is returned, forcing a fresh scrape.
    """
    try:
        with _connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM menu_cache "
                "WHERE restaurant_id = ? AND language = ? "
                "ORDER BY created_at DESC, rowid DESC LIMIT 1",
                (restaurant_id, language)
            ).fetchone()

            if not row:
                return None

            if row["date"] == date_key:
                logger.info("CACHE HIT for %s (%s) on %s", restaurant_id, language, date_key)
                return _to_entry(row)

            logger.info(
                "CACHE STALE for %s (%s): newest entry is from %s, evicting",
                restaurant_id, language, row["date"]
            )
            conn.execute(
                "DELETE FROM menu_cache WHERE restaurant_id = ? AND language = ? AND date != ?",
                (restaurant_id, language, date_key)
            )
            conn.commit()
            return None
    except sqlite3.Error as e:
        logger.error("CACHE VALIDATION FAILED for %s (%s): %s", restaurant_id, language, e)
        return None

def set(
    restaurant_id: str,
    restaurant_name: str,
    language: str,
    raw_menu: str,
    parsed_menu: str,
    date_key: Optional[str] = None
):
    """Upsert on (restaurant, date, language); an update refreshes scraped_at."""
    date_key = date_key or today_key()
    try:
        with _connect() as conn:
            conn.execute(
                "INSERT INTO menu_cache (restaurant_id, restaurant_name, language, date, raw_menu, parsed_menu) "
                "VALUES (?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(restaurant_id, date, language) DO UPDATE SET "
                "raw_menu = excluded.raw_menu, parsed_menu = excluded.parsed_menu, "
                "restaurant_name = excluded.restaurant_name, scraped_at = CURRENT_TIMESTAMP",
                (restaurant_id, restaurant_name, language, date_key, raw_menu, parsed_menu)
            )
            conn.commit()
        logger.info("CACHED %s (%s) on %s", restaurant_name, language, date_key)
        return
    except sqlite3.Error as e:
        logger.error("CACHE UPSERT FAILED for %s (%s): %s", restaurant_id, language, e)

    # The unique constraint still guards against true duplicates
    try:
        with _connect() as conn:
            conn.execute(
                "INSERT INTO menu_cache (restaurant_id, restaurant_name, language, date, raw_menu, parsed_menu) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (restaurant_id, restaurant_name, language, date_key, raw_menu, parsed_menu)
            )
            conn.commit()
        logger.info("CACHED %s (%s) on %s via plain insert", restaurant_name, language, date_key)
    except sqlite3.Error as e:
        logger.error("CACHE INSERT FALLBACK FAILED for %s (%s): %s", restaurant_id, language, e)

def clean_old_cache(days_to_keep: int = 7, today: Optional[str] = None) -> int:
    """Delete entries dated more than days_to_keep days before today."""
    cutoff = date.fromisoformat(today or today_key()) - timedelta(days=days_to_keep)
    try:
        with _connect() as conn:
            cursor = conn.execute("DELETE FROM menu_cache WHERE date < ?", (cutoff.isoformat(),))
            conn.commit()
            logger.info("CACHE CLEANUP removed %d entries older than %s", cursor.rowcount, cutoff)
            return cursor.rowcount
    except sqlite3.Error as e:
        logger.error("CACHE CLEANUP FAILED: %s", e)
        return 0

def purge_other_dates(today: str) -> int:
    """Remove every entry not dated today"""
    with _connect() as conn:
        cursor = conn.execute("DELETE FROM menu_cache WHERE date != ?", (today,))
        conn.commit()
        return cursor.rowcount

def list_entries() -> List[CacheEntry]:
    with _connect() as conn:
        rows = conn.execute(
            f"SELECT {_COLUMNS} FROM menu_cache ORDER BY created_at DESC, rowid DESC"
        ).fetchall()
    return [_to_entry(row) for row in rows]

def delete_entries(restaurant_id: str, language: Optional[str] = None, date_key: Optional[str] = None) -> int:
    """Targeted delete; omitting date_key deletes every date for the restaurant."""
    query = "DELETE FROM menu_cache WHERE restaurant_id = ?"
    params: list = [restaurant_id]
    if language:
        query += " AND language = ?"
        params.append(language)
    if date_key:
        query += " AND date = ?"
        params.append(date_key)

    with _connect() as conn:
        cursor = conn.execute(query, params)
        conn.commit()
        return cursor.rowcount

def clear_all() -> int:
    """Clear all cache entries"""
    with _connect() as conn:
        cursor = conn.execute("DELETE FROM menu_cache")
        conn.commit()
        return cursor.rowcount

def get_stats() -> dict:
    """Get cache statistics"""
    with _connect() as conn:
        total_entries = conn.execute("SELECT COUNT(*) FROM menu_cache").fetchone()[0]
        today = today_key()
        today_entries = conn.execute(
            "SELECT COUNT(*) FROM menu_cache WHERE date = ?", (today,)
        ).fetchone()[0]

    return {
        "total_entries": total_entries,
        "today_entries": today_entries,
        "database_path": DATABASE_PATH
    }
