import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "tinker_test.db"
    # Point the storage layer at this temp DB
    os.environ["TINKER_DB_PATH"] = str(path)
    from tinker_backend.schema import init_database
    init_database()
    return str(path)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("TINKER_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        conn.execute("DELETE FROM lesson_progress")
        conn.execute("DELETE FROM users")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture()
def user_id():
    from tinker_backend.services.user_svc import ensure_user_exists
    ensure_user_exists("user_ada", {"username": "Ada", "email": "a@x.com", "imageUrl": "u"})
    return "user_ada"
