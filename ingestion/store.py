from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone

from profiles.history import HISTORY_LIMIT, is_duplicate, retention_cap
from profiles.models import Profile


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_profile(row: tuple | None) -> Profile | None:
    if row is None:
        return None
    return Profile.from_dict(json.loads(row[0]))


def get_or_create_user_sync(
    conn: sqlite3.Connection,
    *,
    platform: str,
    external_id: str,
    user_name: str | None = None,
    display_name: str | None = None,
) -> int:
    plat = str(platform or "").strip().lower()
    ext = str(external_id or "").strip()
    if not plat or not ext:
        raise ValueError("platform and external_id are required")

    cur = conn.cursor()
    cur.execute(
        "SELECT id, user_name, display_name FROM users WHERE platform = ? AND external_id = ? LIMIT 1",
        (plat, ext),
    )
    row = cur.fetchone()
    now = _utc_now_iso()
    if row:
        user_id = int(row[0])
        if row[1] != user_name or row[2] != display_name:
            cur.execute(
                "UPDATE users SET user_name = ?, display_name = ?, updated_at_utc = ? WHERE id = ?",
                (user_name, display_name, now, user_id),
            )
            conn.commit()
        return user_id

    cur.execute(
        """
        INSERT INTO users (platform, external_id, user_name, display_name, created_at_utc, updated_at_utc)
        VALUES (?, ?, ?, ?, ?, ?)
        """,
        (plat, ext, user_name, display_name, now, now),
    )
    conn.commit()
    return int(cur.lastrowid)


def fetch_latest_profile_sync(conn: sqlite3.Connection, user_id: int) -> Profile | None:
    cur = conn.cursor()
    cur.execute(
        """
        SELECT payload_json
        FROM profile_snapshots
        WHERE user_id = ?
        ORDER BY id DESC
        LIMIT 1
        """,
        (int(user_id),),
    )
    return _row_to_profile(cur.fetchone())


def fetch_profile_history_sync(
    conn: sqlite3.Connection,
    user_id: int,
    limit: int = HISTORY_LIMIT,
) -> list[Profile]:
    """Most recent `limit` snapshots for a user, oldest first (insertion order)."""
    cur = conn.cursor()
    cur.execute(
        """
        SELECT payload_json
        FROM profile_snapshots
        WHERE user_id = ?
        ORDER BY id DESC
        LIMIT ?
        """,
        (int(user_id), max(1, int(limit))),
    )
    rows = cur.fetchall()
    rows.reverse()
    return [Profile.from_dict(json.loads(r[0])) for r in rows]


def count_profiles_sync(conn: sqlite3.Connection, user_id: int) -> int:
    cur = conn.cursor()
    cur.execute("SELECT COUNT(*) FROM profile_snapshots WHERE user_id = ?", (int(user_id),))
    row = cur.fetchone()
    return int(row[0]) if row else 0


def _trim_history(cur: sqlite3.Cursor, user_id: int, limit: int) -> int:
    cur.execute(
        """
        DELETE FROM profile_snapshots
        WHERE user_id = ?
          AND id NOT IN (
            SELECT id FROM profile_snapshots
            WHERE user_id = ?
            ORDER BY id DESC
            LIMIT ?
          )
        """,
        (int(user_id), int(user_id), retention_cap(limit)),
    )
    return int(cur.rowcount or 0)


def append_profile_if_new_sync(
    conn: sqlite3.Connection,
    user_id: int,
    profile: Profile,
    *,
    limit: int = HISTORY_LIMIT,
    source_message_id: int | None = None,
) -> tuple[bool, Profile | None]:
    """
    Append `profile` unless it equals the user's latest snapshot, then evict
    the oldest rows beyond `limit`. Check and write share one transaction.

    Returns (stored, previous_latest).
    """
    if not conn.in_transaction:
        conn.execute("BEGIN IMMEDIATE")
    try:
        cur = conn.cursor()
        cur.execute(
            "SELECT payload_json FROM profile_snapshots WHERE user_id = ? ORDER BY id DESC LIMIT 1",
            (int(user_id),),
        )
        previous = _row_to_profile(cur.fetchone())
        if is_duplicate(previous, profile):
            conn.rollback()
            return (False, previous)

        payload = profile.to_dict()
        cur.execute(
            """
            INSERT INTO profile_snapshots (user_id, captured_at_utc, payload_json, source_message_id, created_at_utc)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                int(user_id),
                payload["timestamp"],
                json.dumps(payload, ensure_ascii=False),
                source_message_id,
                _utc_now_iso(),
            ),
        )
        evicted = _trim_history(cur, user_id, limit)
        conn.commit()
    except Exception:
        conn.rollback()
        raise

    if evicted:
        print(f"[Profile] user_id={user_id} evicted {evicted} old snapshot(s) (limit={limit})")
    return (True, previous)
