from __future__ import annotations

# tinker_backend/services/user_svc.py
import logging
from typing import Any

from pydantic import ValidationError

from ..db import get_conn
from ..errors import StorageError, UpsertError
from ..models import UserProfile
from ..repository import user_repo
from ..runner import run_query, run_statement

logger = logging.getLogger(__name__)


def ensure_user_exists(
    user_id: str,
    profile: Any = None,
    db_path: str | None = None,
) -> None:
    """
    Insert the user on first sight, otherwise refresh username/email/avatar_url.
    total_points and created_at are never touched here. `profile` may be a
    UserProfile, a mapping or the identity provider's user object.

    Two round trips (lookup, then write). When another caller inserts the same
    user between them the insert is a no-op and we fall through to the update.
    """
    if not user_id:
        raise ValueError("user_id_required")
    try:
        p = UserProfile.coerce(profile)
    except ValidationError as e:
        logger.error("Invalid profile for %s: %s", user_id, e)
        raise UpsertError(f"invalid profile for {user_id}: {e}", user_id) from e
    username, email, avatar = p.display_name(), p.email_or_blank(), p.avatar_or_blank()
    try:
        existing = run_query(user_repo.SELECT_BY_CLERK_ID, (user_id,), db_path=db_path)
        if not existing:
            res = run_statement(
                user_repo.INSERT_IF_ABSENT,
                (user_id, user_id, username, email, avatar),
                db_path=db_path,
            )
            if res.rowcount > 0:
                logger.info("Created new user in database: %s", user_id)
                return
            logger.info("User %s was created concurrently; updating instead", user_id)
        run_statement(user_repo.UPDATE_PROFILE, (username, email, avatar, user_id), db_path=db_path)
    except StorageError as e:
        logger.error("Error ensuring user exists: %s (%s)", user_id, e)
        raise UpsertError(f"ensure_user_exists failed for {user_id}: {e}", user_id) from e


def get_user(user_id: str, db_path: str | None = None) -> dict[str, Any] | None:
    with get_conn(db_path) as conn:
        row = user_repo.get_by_clerk_id(conn, user_id)
    return dict(row) if row else None


def delete_user(user_id: str, db_path: str | None = None) -> bool:
    """Remove the user; its lesson_progress rows go with it (ON DELETE CASCADE)."""
    with get_conn(db_path) as conn:
        deleted = user_repo.delete(conn, user_id)
        conn.commit()
    if deleted:
        logger.info("Deleted user %s", user_id)
    return deleted


def get_leaderboard(limit: int = 10, db_path: str | None = None) -> list[dict[str, Any]]:
    if limit <= 0:
        raise ValueError("limit_must_be_positive")
    with get_conn(db_path) as conn:
        rows = user_repo.list_top_by_points(conn, limit)
    return [{"rank": i + 1, **dict(r)} for i, r in enumerate(rows)]
