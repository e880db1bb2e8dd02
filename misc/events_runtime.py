from __future__ import annotations

import discord
from discord.ext import commands

from misc.discord_gates import is_command_message
from misc.discord_gates import is_profile_candidate
from misc.runtime_deps import RuntimeDeps


async def handle_profile_message(message: discord.Message, *, deps: RuntimeDeps) -> str | None:
    """Run one message through ingestion and send the reply, if any. Returns the reply text."""
    if not is_profile_candidate(message, deps.allowed_channel_ids):
        return None
    try:
        result = await deps.ingest_profile_func(message)
    except Exception as e:
        print(f"[Ingest] Error for message {getattr(message, 'id', '?')}: {e}")
        return None

    reply = deps.reply_for_ingest(result, deps.strings)
    if reply:
        await deps.send_chunked(message.channel, reply)
    return reply


def register_runtime_events(bot: commands.Bot, *, deps: RuntimeDeps) -> None:
    @bot.event
    async def on_ready():
        print(f"Ostro-Eye is online as {bot.user} (allowed_channels={len(deps.allowed_channel_ids)})")

    @bot.event
    async def on_message(message: discord.Message):
        if message.author.bot:
            return
        if is_command_message(message):
            await bot.process_commands(message)
            return
        await handle_profile_message(message, deps=deps)

    @bot.event
    async def on_message_edit(before: discord.Message, after: discord.Message):
        if not deps.handle_edits:
            return
        if (before.content or "") == (after.content or ""):
            return
        await handle_profile_message(after, deps=deps)
