from __future__ import annotations

# tinker_backend/db.py
import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator

import yaml

from .errors import DBConnectionError

logger = logging.getLogger(__name__)

# DB path resolution order:
# 1) explicit db_path argument
# 2) env TINKER_DB_PATH
# 3) config.yaml test_db_path (only when running under tests)
# 4) config.yaml db_path
# 5) fallback: <cwd>/data/tinker_foss.db
_PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_DB_RELPATH = os.path.join("data", "tinker_foss.db")
_CONFIG_KEYS = ("db_path", "test_db_path", "log_level")


def read_config_yaml() -> dict:
    cfg_path = os.environ.get("TINKER_CONFIG") or os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", cfg_path, e)
        return {}
    if not isinstance(cfg, dict):
        logger.warning("Ignoring config %s: top level is %s, expected a mapping", cfg_path, type(cfg).__name__)
        return {}
    out = {}
    for k in _CONFIG_KEYS:
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    return out


def _is_test_env() -> bool:
    return os.environ.get("APP_ENV") == "test" or os.environ.get("PYTEST_CURRENT_TEST") is not None


def get_db_path(db_path: str | None = None) -> str:
    """
    Resolve the database file path and make sure its directory exists.
    Raises DBConnectionError if the directory cannot be created.
    """
    if db_path:
        path = db_path
    else:
        env_path = os.environ.get("TINKER_DB_PATH")
        cfg = read_config_yaml()
        if env_path:
            path = env_path
        elif _is_test_env() and cfg.get("test_db_path"):
            path = cfg["test_db_path"]
        elif cfg.get("db_path"):
            path = cfg["db_path"]
        else:
            path = os.path.join(os.getcwd(), DEFAULT_DB_RELPATH)

    dirn = os.path.dirname(path) or "."
    try:
        os.makedirs(dirn, exist_ok=True)
    except OSError as e:
        logger.error("Cannot create database directory %s: %s", dirn, e)
        raise DBConnectionError(f"cannot create directory {dirn}: {e}") from e
    return path


def acquire(db_path: str | None = None) -> sqlite3.Connection:
    """
    Open a new, independent connection. The caller owns it and must close it.
    Foreign keys are switched on and rows come back as sqlite3.Row.
    """
    path = get_db_path(db_path)
    try:
        conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
    except sqlite3.Error as e:
        logger.error("Cannot open database %s: %s", path, e)
        raise DBConnectionError(f"cannot open {path}: {e}") from e
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
    except sqlite3.Error as e:
        conn.close()
        logger.error("Cannot configure database %s: %s", path, e)
        raise DBConnectionError(f"cannot open {path}: {e}") from e
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """Yield a fresh connection and always close it, success or failure."""
    conn = acquire(db_path)
    try:
        yield conn
    finally:
        conn.close()
