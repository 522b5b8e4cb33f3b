from __future__ import annotations

from sqlite3 import Connection


def get_one(conn: Connection, user_id: str, lesson_id: int):
    return conn.execute(
        "SELECT * FROM lesson_progress WHERE user_id = ? AND lesson_id = ?",
        (user_id, lesson_id),
    ).fetchone()


def upsert_completion(conn: Connection, user_id: str, lesson_id: int, points: int) -> int:
    """
    Mark (user_id, lesson_id) completed. Returns 1 only when this call flipped the
    row to completed; a row that was already completed is left as is and 0 comes back.
    """
    cur = conn.execute(
        "INSERT INTO lesson_progress(user_id, lesson_id, completed, points_earned, completed_at) "
        "VALUES(?, ?, 1, ?, datetime('now')) "
        "ON CONFLICT(user_id, lesson_id) DO UPDATE SET "
        "completed = 1, points_earned = excluded.points_earned, completed_at = excluded.completed_at "
        "WHERE NOT COALESCE(lesson_progress.completed, 0)",
        (user_id, lesson_id, points),
    )
    return cur.rowcount


def list_for_user(conn: Connection, user_id: str):
    return conn.execute(
        "SELECT id, user_id, lesson_id, completed, points_earned, completed_at, created_at "
        "FROM lesson_progress WHERE user_id = ? ORDER BY lesson_id ASC",
        (user_id,),
    ).fetchall()


def count_completed(conn: Connection, user_id: str) -> int:
    row = conn.execute(
        "SELECT COUNT(1) AS c FROM lesson_progress WHERE user_id = ? AND completed = 1",
        (user_id,),
    ).fetchone()
    return int(row["c"])
