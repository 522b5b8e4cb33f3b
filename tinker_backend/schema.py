from __future__ import annotations

# tinker_backend/schema.py
import logging
import sqlite3

from .db import get_conn
from .errors import SchemaError

logger = logging.getLogger(__name__)

# users.id mirrors clerk_id (the external identity id)
USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
  id TEXT PRIMARY KEY,
  clerk_id TEXT UNIQUE NOT NULL,
  username TEXT NOT NULL,
  email TEXT,
  avatar_url TEXT,
  total_points INTEGER DEFAULT 0,
  created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
  updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
)
"""

LESSON_PROGRESS_DDL = """
CREATE TABLE IF NOT EXISTS lesson_progress (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  user_id TEXT NOT NULL,
  lesson_id INTEGER NOT NULL,
  completed BOOLEAN DEFAULT FALSE,
  points_earned INTEGER DEFAULT 0,
  completed_at DATETIME NULL,
  created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
  FOREIGN KEY (user_id) REFERENCES users(clerk_id) ON DELETE CASCADE,
  UNIQUE(user_id, lesson_id)
)
"""

TABLES = (("users", USERS_DDL), ("lesson_progress", LESSON_PROGRESS_DDL))


def init_database(db_path: str | None = None) -> None:
    """
    Create users and lesson_progress if they do not exist yet.
    Safe to call repeatedly: existing tables and rows are left alone.
    """
    with get_conn(db_path) as conn:
        conn.execute("PRAGMA foreign_keys = ON;")
        for name, ddl in TABLES:
            try:
                conn.execute(ddl)
            except sqlite3.Error as e:
                logger.exception("Error creating table %s", name)
                raise SchemaError(f"cannot create table {name}: {e}", ddl) from e
        conn.commit()
    logger.info("Database tables created successfully")


def table_names(db_path: str | None = None) -> list[str]:
    with get_conn(db_path) as conn:
        rows = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        ).fetchall()
    return [r["name"] for r in rows]
