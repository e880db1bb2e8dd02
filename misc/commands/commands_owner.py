from __future__ import annotations

import asyncio

from discord.ext import commands
from misc.commands.command_deps import CommandDeps
from misc.commands.command_deps import CommandGates


def register(
    bot: commands.Bot,
    *,
    deps: CommandDeps,
    gates: CommandGates,
    list_applied_migrations_sync,
) -> None:
    @bot.command(name="dbmigrations")
    async def cmd_dbmigrations(ctx: commands.Context):
        if not gates.in_allowed_channel(ctx):
            return
        if not gates.user_is_owner(ctx.author):
            await ctx.send("This command is owner-only.")
            return

        async with deps.db_lock:
            applied = await asyncio.to_thread(list_applied_migrations_sync, deps.db_conn)

        if not applied:
            await ctx.send("No schema migrations recorded.")
            return

        lines = [f"Schema migrations ({len(applied)}):"]
        for version, (name, checksum) in sorted(applied.items()):
            lines.append(f"- {version}_{name} sha256={checksum[:12]}")
        await deps.send_chunked(ctx.channel, "```\n" + "\n".join(lines)[:7000] + "\n```")
