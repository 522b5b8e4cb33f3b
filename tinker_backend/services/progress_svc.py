from __future__ import annotations

# tinker_backend/services/progress_svc.py
import logging
import sqlite3
from typing import Any

from ..db import get_conn
from ..errors import ConstraintViolation
from ..repository import progress_repo, user_repo

logger = logging.getLogger(__name__)


def complete_lesson(user_id: str, lesson_id: int, points: int = 0, db_path: str | None = None) -> dict[str, Any]:
    """
    Mark a lesson completed for the user and credit its points.
    Points are only awarded by the call whose write flips the row to completed,
    so concurrent callers credit a lesson once.
    """
    if lesson_id < 0:
        raise ValueError("invalid_lesson_id")
    if points < 0:
        raise ValueError("points_must_be_non_negative")
    with get_conn(db_path) as conn:
        try:
            flipped = progress_repo.upsert_completion(conn, user_id, lesson_id, points)
        except sqlite3.IntegrityError as e:
            logger.error("Cannot record lesson %s for %s: %s", lesson_id, user_id, e)
            raise ConstraintViolation(str(e)) from e
        awarded = points if flipped == 1 else 0
        if awarded:
            user_repo.add_points(conn, user_id, awarded)
        conn.commit()
        row = progress_repo.get_one(conn, user_id, lesson_id)
    out = dict(row)
    out["completed"] = bool(out["completed"])
    out["awarded"] = awarded
    return out


def get_user_progress(user_id: str, db_path: str | None = None) -> list[dict[str, Any]]:
    with get_conn(db_path) as conn:
        rows = progress_repo.list_for_user(conn, user_id)
    items = []
    for r in rows:
        it = dict(r)
        it["completed"] = bool(it["completed"])
        items.append(it)
    return items


def get_user_stats(user_id: str, db_path: str | None = None) -> dict[str, Any] | None:
    with get_conn(db_path) as conn:
        user = user_repo.get_by_clerk_id(conn, user_id)
        if not user:
            return None
        completed = progress_repo.count_completed(conn, user_id)
    return {
        "user_id": user["clerk_id"],
        "username": user["username"],
        "total_points": int(user["total_points"] or 0),
        "completed_lessons": completed,
    }
