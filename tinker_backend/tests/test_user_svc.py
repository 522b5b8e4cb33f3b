from concurrent.futures import ThreadPoolExecutor
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from tinker_backend.db import get_conn
from tinker_backend.errors import QueryError, UpsertError
from tinker_backend.models import UserProfile
from tinker_backend.services import user_svc
from tinker_backend.services.user_svc import ensure_user_exists


def _row(clerk_id):
    with get_conn() as conn:
        return conn.execute("SELECT * FROM users WHERE clerk_id=?", (clerk_id,)).fetchone()


def test_first_sight_creates_user():
    ensure_user_exists("user_1", {"username": "Ada", "email": "a@x.com", "imageUrl": "u"})
    with get_conn() as conn:
        rows = conn.execute("SELECT * FROM users").fetchall()
    assert len(rows) == 1
    r = rows[0]
    assert r["id"] == "user_1" and r["clerk_id"] == "user_1"
    assert r["username"] == "Ada"
    assert r["email"] == "a@x.com"
    assert r["avatar_url"] == "u"
    assert r["total_points"] == 0
    assert r["created_at"] is not None and r["updated_at"] is not None


def test_second_sight_updates_in_place():
    ensure_user_exists("user_1", {"username": "Ada", "email": "a@x.com", "imageUrl": "u"})
    with get_conn() as conn:
        conn.execute(
            "UPDATE users SET total_points=42, created_at='2000-01-01 00:00:00', "
            "updated_at='2000-01-01 00:00:00' WHERE clerk_id=?",
            ("user_1",),
        )

    ensure_user_exists("user_1", {"username": "Ada L.", "email": "ada@x.com"})

    r = _row("user_1")
    assert r["username"] == "Ada L."
    assert r["email"] == "ada@x.com"
    assert r["avatar_url"] == ""
    assert r["total_points"] == 42
    assert r["created_at"] == "2000-01-01 00:00:00"
    assert r["updated_at"] != "2000-01-01 00:00:00"
    with get_conn() as conn:
        assert conn.execute("SELECT COUNT(1) AS c FROM users").fetchone()["c"] == 1


@pytest.mark.parametrize(
    "profile, expected",
    [
        ({"username": "ada", "firstName": "Ada"}, "ada"),
        ({"firstName": "Ada"}, "Ada"),
        ({"username": "", "firstName": ""}, "User"),
        ({}, "User"),
        (None, "User"),
    ],
)
def test_username_fallback(profile, expected):
    ensure_user_exists("user_fb", profile)
    r = _row("user_fb")
    assert r["username"] == expected
    assert r["email"] == ""
    assert r["avatar_url"] == ""


def test_accepts_typed_profile():
    ensure_user_exists("user_t", UserProfile(first_name="Grace", image_url="http://img"))
    r = _row("user_t")
    assert r["username"] == "Grace"
    assert r["avatar_url"] == "http://img"


def test_empty_user_id_rejected():
    with pytest.raises(ValueError):
        ensure_user_exists("", {"username": "x"})


def test_upsert_error_wraps_runner_failure(tmp_path):
    # fresh file without tables: the lookup fails
    empty_db = str(tmp_path / "empty.db")
    with pytest.raises(UpsertError) as ei:
        ensure_user_exists("user_x", {"username": "x"}, db_path=empty_db)
    assert ei.value.user_id == "user_x"
    assert isinstance(ei.value.__cause__, QueryError)


def test_concurrent_first_sight_yields_one_row():
    names = [f"name{i}" for i in range(8)]

    def call(name):
        ensure_user_exists("user_race", {"username": name})

    with ThreadPoolExecutor(max_workers=8) as ex:
        list(ex.map(call, names))

    with get_conn() as conn:
        rows = conn.execute("SELECT username FROM users WHERE clerk_id=?", ("user_race",)).fetchall()
    assert len(rows) == 1
    assert rows[0]["username"] in names


def test_get_user_and_delete(user_id):
    u = user_svc.get_user(user_id)
    assert u["username"] == "Ada"
    assert user_svc.delete_user(user_id) is True
    assert user_svc.get_user(user_id) is None
    assert user_svc.delete_user(user_id) is False


def test_delete_cascades_to_progress(user_id):
    with get_conn() as conn:
        conn.execute("INSERT INTO lesson_progress(user_id, lesson_id) VALUES(?, 1)", (user_id,))
        conn.execute("INSERT INTO lesson_progress(user_id, lesson_id) VALUES(?, 2)", (user_id,))
    user_svc.delete_user(user_id)
    with get_conn() as conn:
        c = conn.execute("SELECT COUNT(1) AS c FROM lesson_progress WHERE user_id=?", (user_id,)).fetchone()["c"]
    assert c == 0


def test_leaderboard_orders_by_points():
    for uid, pts in (("a", 5), ("b", 20), ("c", 10)):
        ensure_user_exists(uid, {"username": uid.upper()})
        with get_conn() as conn:
            conn.execute("UPDATE users SET total_points=? WHERE clerk_id=?", (pts, uid))
    board = user_svc.get_leaderboard(limit=2)
    assert [b["clerk_id"] for b in board] == ["b", "c"]
    assert [b["rank"] for b in board] == [1, 2]
    with pytest.raises(ValueError):
        user_svc.get_leaderboard(limit=0)


def test_accepts_identity_object_with_attributes():
    identity = SimpleNamespace(id="user_obj", firstName="Grace", email="g@x.com", imageUrl="http://img")
    ensure_user_exists(identity.id, identity)
    r = _row("user_obj")
    assert r["username"] == "Grace"
    assert r["email"] == "g@x.com"
    assert r["avatar_url"] == "http://img"


def test_malformed_profile_raises_upsert_error():
    with pytest.raises(UpsertError) as ei:
        ensure_user_exists("user_bad", {"username": 123})
    assert isinstance(ei.value.__cause__, ValidationError)
    assert _row("user_bad") is None
