import os
import tempfile
import pytest
import sqlite3
from lunchmenus.cache import db as cache_db
from lunchmenus.core import config

@pytest.fixture(autouse=True)
def setup_test_environment():
    """Temporary cache database and deterministic settings for every test"""
    original_db_path = cache_db.DATABASE_PATH
    original_use_mock = config.settings.USE_MOCK
    original_backoff = config.settings.RETRY_BACKOFF_SECONDS
    original_js = config.settings.USE_JS_RENDERING

    temp_db = tempfile.NamedTemporaryFile(suffix='.sqlite', delete=False)
    temp_db_path = temp_db.name
    temp_db.close()

    cache_db.DATABASE_PATH = temp_db_path
    # Network and model boundaries are patched per test
    config.settings.USE_MOCK = False
    config.settings.RETRY_BACKOFF_SECONDS = 0
    config.settings.USE_JS_RENDERING = False

    cache_db.init_db()

    yield

    cache_db.DATABASE_PATH = original_db_path
    config.settings.USE_MOCK = original_use_mock
    config.settings.RETRY_BACKOFF_SECONDS = original_backoff
    config.settings.USE_JS_RENDERING = original_js

    try:
        conn = sqlite3.connect(temp_db_path)
        conn.close()
        if os.path.exists(temp_db_path):
            os.unlink(temp_db_path)
    except OSError:
        pass
