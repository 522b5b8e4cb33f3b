from __future__ import annotations

from sqlite3 import Connection

SELECT_BY_CLERK_ID = "SELECT * FROM users WHERE clerk_id = ?"

# id mirrors clerk_id; a concurrent insert of the same user becomes a no-op
INSERT_IF_ABSENT = (
    "INSERT INTO users(id, clerk_id, username, email, avatar_url) VALUES(?, ?, ?, ?, ?) "
    "ON CONFLICT DO NOTHING"
)

UPDATE_PROFILE = (
    "UPDATE users SET username = ?, email = ?, avatar_url = ?, updated_at = datetime('now') "
    "WHERE clerk_id = ?"
)


def get_by_clerk_id(conn: Connection, clerk_id: str):
    return conn.execute(SELECT_BY_CLERK_ID, (clerk_id,)).fetchone()


def insert_if_absent(conn: Connection, clerk_id: str, username: str, email: str, avatar_url: str) -> bool:
    cur = conn.execute(INSERT_IF_ABSENT, (clerk_id, clerk_id, username, email, avatar_url))
    return cur.rowcount > 0


def update_profile(conn: Connection, clerk_id: str, username: str, email: str, avatar_url: str) -> int:
    cur = conn.execute(UPDATE_PROFILE, (username, email, avatar_url, clerk_id))
    return cur.rowcount


def add_points(conn: Connection, clerk_id: str, points: int) -> int:
    cur = conn.execute(
        "UPDATE users SET total_points = COALESCE(total_points, 0) + ?, updated_at = datetime('now') "
        "WHERE clerk_id = ?",
        (points, clerk_id),
    )
    return cur.rowcount


def delete(conn: Connection, clerk_id: str) -> bool:
    cur = conn.execute("DELETE FROM users WHERE clerk_id = ?", (clerk_id,))
    return cur.rowcount > 0


def list_top_by_points(conn: Connection, limit: int):
    return conn.execute(
        "SELECT clerk_id, username, avatar_url, total_points FROM users "
        "ORDER BY total_points DESC, created_at ASC, clerk_id ASC LIMIT ?",
        (limit,),
    ).fetchall()
