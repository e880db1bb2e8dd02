from __future__ import annotations

import unittest
from types import SimpleNamespace

try:
    import discord
    from discord.ext import commands
except ModuleNotFoundError:
    discord = None
    commands = None

if commands is not None:
    from config.strings import Strings
    from ingestion.service import IngestResult
    from ingestion.service import reply_for_ingest
    from misc.events_runtime import handle_profile_message
    from misc.events_runtime import register_runtime_events
    from misc.runtime_deps import RuntimeDeps


class _FakeChannel:
    id = 555

    def __init__(self):
        self.sent: list[str] = []

    async def send(self, text):
        self.sent.append(text)


async def _send_chunked(channel, text):
    await channel.send(text)


def _message(content: str, *, bot: bool = False):
    return SimpleNamespace(
        id=10,
        content=content,
        guild=None,
        channel=_FakeChannel(),
        author=SimpleNamespace(id=42, bot=bot),
    )


@unittest.skipIf(commands is None, "discord.py not installed")
class HandleProfileMessageTests(unittest.IsolatedAsyncioTestCase):
    def _deps(self, ingest, **overrides):
        params = dict(
            db_lock=None,
            db_conn=None,
            send_chunked=_send_chunked,
            strings=Strings(),
            ingest_profile_func=ingest,
            reply_for_ingest=reply_for_ingest,
            allowed_channel_ids=set(),
        )
        params.update(overrides)
        return RuntimeDeps(**params)

    async def test_saved_profile_gets_confirmation(self):
        seen = []

        async def _ingest(message):
            seen.append(message.id)
            return IngestResult("saved")

        message = _message("⚔️ Hero - Рівень 5")
        reply = await handle_profile_message(message, deps=self._deps(_ingest))
        self.assertEqual(seen, [10])
        self.assertEqual(reply, Strings().get("profile_saved"))
        self.assertEqual(message.channel.sent, [reply])

    async def test_ignored_message_is_silent(self):
        async def _ingest(message):
            return IngestResult("ignored")

        message = _message("привіт")
        self.assertIsNone(await handle_profile_message(message, deps=self._deps(_ingest)))
        self.assertEqual(message.channel.sent, [])

    async def test_bot_and_command_messages_are_skipped(self):
        async def _ingest(message):
            raise AssertionError("should not ingest")

        deps = self._deps(_ingest)
        self.assertIsNone(await handle_profile_message(_message("text", bot=True), deps=deps))
        self.assertIsNone(await handle_profile_message(_message("!eta"), deps=deps))

    async def test_ingest_errors_are_logged_not_raised(self):
        async def _ingest(message):
            raise RuntimeError("database is locked")

        message = _message("⚔️ Hero - Рівень 5")
        self.assertIsNone(await handle_profile_message(message, deps=self._deps(_ingest)))
        self.assertEqual(message.channel.sent, [])

    async def test_edit_handler_respects_flag_and_unchanged_content(self):
        calls = []

        async def _ingest(message):
            calls.append(message.content)
            return IngestResult("saved")

        bot = commands.Bot(command_prefix="!", intents=discord.Intents.none(), help_command=None)
        register_runtime_events(bot, deps=self._deps(_ingest))
        before = _message("⚔️ Hero - Рівень 5")
        after = _message("⚔️ Hero - Рівень 6")
        await bot.on_message_edit(before, before)
        await bot.on_message_edit(before, after)
        self.assertEqual(calls, ["⚔️ Hero - Рівень 6"])

        quiet = commands.Bot(command_prefix="!", intents=discord.Intents.none(), help_command=None)
        register_runtime_events(quiet, deps=self._deps(_ingest, handle_edits=False))
        await quiet.on_message_edit(before, after)
        self.assertEqual(len(calls), 1)


if __name__ == "__main__":
    unittest.main()
