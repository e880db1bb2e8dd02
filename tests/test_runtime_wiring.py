from __future__ import annotations

import asyncio
import sqlite3
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

try:
    import discord
    from discord.ext import commands
except ModuleNotFoundError:
    discord = None
    commands = None

if commands is not None:
    from config.strings import Strings
    from db.migrate import apply_sqlite_migrations
    from misc.runtime_wiring import wire_bot_runtime


MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"


class FakeThread:
    def __init__(self, channel_id: int, parent_id: int):
        self.id = int(channel_id)
        self.parent = SimpleNamespace(id=int(parent_id))
        self.sent: list[str] = []

    async def send(self, text):
        self.sent.append(text)


class FakeCtx:
    def __init__(self, channel, *, guild=None):
        self.channel = channel
        self.guild = guild
        self.author = SimpleNamespace(id=42, name="hero", display_name="Hero")
        self.sent: list[str] = []

    async def send(self, text):
        self.sent.append(text)


async def _send_chunked(channel, text):
    await channel.send(text)


@unittest.skipIf(commands is None, "discord.py not installed")
class RuntimeWiringGateTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.conn = sqlite3.connect(":memory:", check_same_thread=False)
        apply_sqlite_migrations(self.conn, MIGRATIONS_DIR)
        self.strings = Strings()
        self.bot = commands.Bot(command_prefix="!", intents=discord.Intents.none(), help_command=None)
        wire_bot_runtime(
            self.bot,
            allowed_channel_ids={123},
            user_is_owner=lambda user: False,
            db_lock=asyncio.Lock(),
            db_conn=self.conn,
            send_chunked=_send_chunked,
            strings=self.strings,
            platform="discord",
            history_limit=100,
            history_default_rows=5,
            history_max_rows=20,
            timestamp_offset_hours=0,
            log_ignored=False,
        )

    def tearDown(self):
        self.conn.close()

    async def _start(self, ctx: FakeCtx) -> FakeCtx:
        cmd = self.bot.get_command("start")
        self.assertIsNotNone(cmd)
        with mock.patch("misc.discord_gates.discord.Thread", FakeThread):
            await cmd.callback(ctx)
        return ctx

    async def test_commands_answer_in_thread_under_allowlisted_channel(self):
        ctx = await self._start(FakeCtx(FakeThread(777, parent_id=123), guild=SimpleNamespace(id=1)))
        self.assertEqual(ctx.sent, [self.strings.get("welcome")])

    async def test_commands_silent_in_thread_under_other_channel(self):
        ctx = await self._start(FakeCtx(FakeThread(777, parent_id=999), guild=SimpleNamespace(id=1)))
        self.assertEqual(ctx.sent, [])

    async def test_commands_answer_in_dm_and_allowlisted_channel(self):
        ctx = await self._start(FakeCtx(SimpleNamespace(id=555)))
        self.assertEqual(ctx.sent, [self.strings.get("welcome")])
        ctx = await self._start(FakeCtx(SimpleNamespace(id=123), guild=SimpleNamespace(id=1)))
        self.assertEqual(ctx.sent, [self.strings.get("welcome")])


if __name__ == "__main__":
    unittest.main()
