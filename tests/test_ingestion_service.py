from __future__ import annotations

import asyncio
import sqlite3
import unittest
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace

from config.strings import Strings
from db.migrate import apply_sqlite_migrations
from ingestion.service import IngestResult
from ingestion.service import ingest_profile_message
from ingestion.service import message_timestamp
from ingestion.service import reply_for_ingest
from ingestion.store import count_profiles_sync
from ingestion.store import fetch_latest_profile_sync


MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"

PROFILE_LINES = [
    "⚔️ Hero - Рівень 5",
    "Здоров'я: 100/200 (7хв до повного відновлення)",
    "Енергія: 3/10",
    "Витрачено енергії за день: 12",
    "Атака: 50",
    "Захист: 40",
    "Сила героя: 300",
    "Досвід: 900/1000",
    "Золото: 250",
]


def _message(content: str, *, message_id: int = 1, day: int = 1, author_id: int = 42):
    return SimpleNamespace(
        id=message_id,
        content=content,
        created_at=datetime(2026, 3, day, 12, 0, tzinfo=timezone.utc),
        edited_at=None,
        author=SimpleNamespace(id=author_id, name="hero", display_name="Hero", bot=False),
    )


class MessageTimestampTests(unittest.TestCase):
    def test_edited_at_wins_and_offset_applies(self):
        message = SimpleNamespace(
            created_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
            edited_at=datetime(2026, 3, 1, 13, 0, tzinfo=timezone.utc),
        )
        self.assertEqual(message_timestamp(message), datetime(2026, 3, 1, 13, 0, tzinfo=timezone.utc))
        self.assertEqual(
            message_timestamp(message, offset_hours=3),
            datetime(2026, 3, 1, 16, 0, tzinfo=timezone.utc),
        )

    def test_naive_created_at_is_utc(self):
        message = SimpleNamespace(created_at=datetime(2026, 3, 1, 12, 0), edited_at=None)
        self.assertEqual(message_timestamp(message).tzinfo, timezone.utc)


class IngestProfileMessageTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.conn = sqlite3.connect(":memory:", check_same_thread=False)
        apply_sqlite_migrations(self.conn, MIGRATIONS_DIR)
        self.lock = asyncio.Lock()

    def tearDown(self):
        self.conn.close()

    async def _ingest(self, message, **kwargs):
        return await ingest_profile_message(
            message,
            db_lock=self.lock,
            db_conn=self.conn,
            platform="discord",
            **kwargs,
        )

    async def test_first_profile_is_saved(self):
        result = await self._ingest(_message("\n".join(PROFILE_LINES)))
        self.assertEqual(result.status, "saved")
        self.assertEqual(result.profile.level, 5)
        self.assertIsNone(result.report)
        self.assertEqual(count_profiles_sync(self.conn, 1), 1)

    async def test_resent_profile_is_duplicate(self):
        await self._ingest(_message("\n".join(PROFILE_LINES)))
        result = await self._ingest(_message("\n".join(PROFILE_LINES), message_id=2, day=2))
        self.assertEqual(result.status, "duplicate")
        self.assertEqual(count_profiles_sync(self.conn, 1), 1)

    async def test_changed_profile_gets_comparison(self):
        await self._ingest(_message("\n".join(PROFILE_LINES)))
        changed = PROFILE_LINES[:-1] + ["Золото: 300"]
        result = await self._ingest(_message("\n".join(changed), message_id=2, day=2))
        self.assertEqual(result.status, "compared")
        self.assertEqual(result.previous.gold, 250)
        self.assertIn("💰 Gold: 250 → 300 (+50)", result.report)
        self.assertEqual(count_profiles_sync(self.conn, 1), 2)

    async def test_chat_message_is_ignored_without_storage(self):
        result = await self._ingest(_message("привіт усім"), log_ignored=True)
        self.assertEqual(result.status, "ignored")
        cur = self.conn.cursor()
        cur.execute("SELECT COUNT(*) FROM users")
        self.assertEqual(cur.fetchone()[0], 0)

    async def test_chat_line_with_level_phrase_is_ignored(self):
        for text in ("Hero - Рівень 5, хто зі мною?", "⚔️ Hero - Рівень 5\nхто йде в рейд?"):
            result = await self._ingest(_message(text))
            self.assertEqual(result.status, "ignored", text)

    async def test_broken_profile_is_malformed(self):
        broken = ["Атака: багато" if line.startswith("Атака:") else line for line in PROFILE_LINES]
        result = await self._ingest(_message("\n".join(broken)))
        self.assertEqual(result.status, "malformed")
        self.assertEqual(count_profiles_sync(self.conn, 1), 0)

    async def test_incomplete_profile_is_malformed(self):
        result = await self._ingest(_message("\n".join(PROFILE_LINES[:3])))
        self.assertEqual(result.status, "malformed")
        self.assertIn("missing lines", result.reason)

    async def test_timestamp_offset_is_stored(self):
        await self._ingest(_message("\n".join(PROFILE_LINES)), timestamp_offset_hours=2)
        latest = fetch_latest_profile_sync(self.conn, 1)
        self.assertEqual(latest.timestamp, datetime(2026, 3, 1, 14, 0, tzinfo=timezone.utc))

    async def test_history_limit_is_applied(self):
        for day in range(1, 5):
            lines = PROFILE_LINES[:-1] + [f"Золото: {day}"]
            await self._ingest(_message("\n".join(lines), message_id=day, day=day), history_limit=2)
        self.assertEqual(count_profiles_sync(self.conn, 1), 2)


class ReplyForIngestTests(unittest.TestCase):
    def test_reply_per_status(self):
        strings = Strings()
        self.assertEqual(reply_for_ingest(IngestResult("saved"), strings), strings.get("profile_saved"))
        self.assertEqual(reply_for_ingest(IngestResult("duplicate"), strings), strings.get("duplicate"))
        self.assertEqual(reply_for_ingest(IngestResult("malformed"), strings), strings.get("format_error"))
        self.assertEqual(reply_for_ingest(IngestResult("compared", report="diff"), strings), "diff")
        self.assertIsNone(reply_for_ingest(IngestResult("ignored"), strings))


if __name__ == "__main__":
    unittest.main()
