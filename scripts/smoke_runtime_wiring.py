from __future__ import annotations

import asyncio
import importlib
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from types import SimpleNamespace


SAMPLE_PROFILE = "\n".join(
    [
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
)


class _FakeChannel:
    id = 1

    def __init__(self):
        self.sent: list[str] = []

    async def send(self, text):
        self.sent.append(text)


async def _collect(channel, text):
    await channel.send(text)


def _try_import_or_skip(module_name: str, pip_name: str | None = None) -> bool:
    try:
        importlib.import_module(module_name)
        return True
    except ModuleNotFoundError:
        install_name = pip_name or module_name
        print(
            f"Smoke wiring check skipped: missing dependency '{module_name}'. "
            f"Install the project and retry (e.g. `pip install {install_name}` "
            f"or `pip install -e .`)."
        )
        return False


def _main() -> int:
    if not _try_import_or_skip("discord", "discord.py"):
        return 0

    import discord
    from discord.ext import commands
    from config.strings import Strings
    from db.migrate import apply_sqlite_migrations
    from misc.events_runtime import handle_profile_message
    from misc.runtime_wiring import wire_bot_runtime

    repo_root = Path(__file__).resolve().parents[1]
    db_conn = sqlite3.connect(":memory:", check_same_thread=False)
    apply_sqlite_migrations(db_conn, repo_root / "migrations")
    db_lock = asyncio.Lock()

    bot = commands.Bot(command_prefix="!", intents=discord.Intents.none(), help_command=None)
    wire_bot_runtime(
        bot,
        allowed_channel_ids={123456789012345678},
        user_is_owner=lambda user: True,
        db_lock=db_lock,
        db_conn=db_conn,
        send_chunked=_collect,
        strings=Strings(),
        platform="discord",
        history_limit=100,
        history_default_rows=5,
        history_max_rows=20,
        timestamp_offset_hours=0,
        log_ignored=True,
    )

    expected_commands = {"start", "help", "eta", "history", "last", "compare", "dbmigrations"}
    missing = sorted(expected_commands - set(bot.all_commands.keys()))
    if missing:
        raise RuntimeError(f"Missing expected commands: {missing}")

    for name in ("on_ready", "on_message", "on_message_edit"):
        handler = getattr(bot, name, None)
        if getattr(handler, "__module__", "") != "misc.events_runtime":
            raise RuntimeError(f"Runtime event {name} was not registered")

    from misc.runtime_deps import RuntimeDeps
    from ingestion.service import ingest_profile_message
    from ingestion.service import reply_for_ingest

    async def _ingest(message):
        return await ingest_profile_message(message, db_lock=db_lock, db_conn=db_conn, platform="discord")

    deps = RuntimeDeps(
        db_lock=db_lock,
        db_conn=db_conn,
        send_chunked=_collect,
        strings=Strings(),
        ingest_profile_func=_ingest,
        reply_for_ingest=reply_for_ingest,
        allowed_channel_ids=set(),
    )
    channel = _FakeChannel()
    message = SimpleNamespace(
        id=1,
        content=SAMPLE_PROFILE,
        guild=None,
        channel=channel,
        author=SimpleNamespace(id=42, bot=False, name="hero", display_name="Hero"),
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        edited_at=None,
    )

    async def _exercise():
        first = await handle_profile_message(message, deps=deps)
        second = await handle_profile_message(message, deps=deps)
        return first, second

    first, second = asyncio.run(_exercise())
    if first != Strings().get("profile_saved") or second != Strings().get("duplicate"):
        raise RuntimeError(f"Unexpected ingest replies: {channel.sent}")

    print("Smoke wiring check passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(_main())
