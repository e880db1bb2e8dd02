from __future__ import annotations

import asyncio

from discord.ext import commands
from misc.commands.command_deps import CommandDeps
from misc.commands.command_deps import CommandGates
from misc.profile_format import format_history_line
from misc.profile_format import format_profile_summary


def register(
    bot: commands.Bot,
    *,
    deps: CommandDeps,
    gates: CommandGates,
) -> None:
    strings = deps.strings

    async def _with_user(ctx: commands.Context, work):
        author = ctx.author

        def _run():
            user_id = deps.get_or_create_user_sync(
                deps.db_conn,
                platform=deps.platform,
                external_id=str(author.id),
                user_name=getattr(author, "name", None),
                display_name=getattr(author, "display_name", None),
            )
            return work(user_id)

        async with deps.db_lock:
            return await asyncio.to_thread(_run)

    async def _load_history(ctx: commands.Context, limit: int):
        return await _with_user(
            ctx,
            lambda user_id: (
                deps.fetch_profile_history_sync(deps.db_conn, user_id, limit),
                deps.count_profiles_sync(deps.db_conn, user_id),
            ),
        )

    @bot.command(name="start")
    async def cmd_start(ctx: commands.Context):
        if not gates.in_allowed_channel(ctx):
            return
        await ctx.send(strings.get("welcome"))

    @bot.command(name="help")
    async def cmd_help(ctx: commands.Context):
        if not gates.in_allowed_channel(ctx):
            return
        await ctx.send(strings.get("help"))

    @bot.command(name="eta")
    async def cmd_eta(ctx: commands.Context):
        if not gates.in_allowed_channel(ctx):
            return
        history, _total = await _load_history(ctx, deps.history_limit)
        if not history:
            await ctx.send(strings.get("eta_unavailable"))
            return

        latest = history[-1]
        days = deps.estimate_days_func(latest, history)
        if days is None:
            await ctx.send(strings.get("eta_unavailable"))
        elif days == 0:
            await ctx.send(strings.get("eta_due", next_level=latest.level + 1))
        else:
            await ctx.send(
                strings.get(
                    "eta_days",
                    days=days,
                    next_level=latest.level + 1,
                    remaining=latest.experience_to_next_level,
                )
            )

    @bot.command(name="history")
    async def cmd_history(ctx: commands.Context, limit: int = 0):
        if not gates.in_allowed_channel(ctx):
            return
        rows = max(1, min(int(limit or deps.history_default_rows), deps.history_max_rows))
        history, total = await _load_history(ctx, rows)
        if not history:
            await ctx.send(strings.get("history_empty"))
            return

        lines = [strings.get("history_header", shown=len(history), total=total)]
        lines.extend(format_history_line(p) for p in reversed(history))
        await deps.send_chunked(ctx.channel, "\n".join(lines))

    @bot.command(name="last")
    async def cmd_last(ctx: commands.Context):
        if not gates.in_allowed_channel(ctx):
            return
        latest = await _with_user(ctx, lambda user_id: deps.fetch_latest_profile_sync(deps.db_conn, user_id))
        if latest is None:
            await ctx.send(strings.get("history_empty"))
            return
        await deps.send_chunked(ctx.channel, format_profile_summary(latest))

    @bot.command(name="compare")
    async def cmd_compare(ctx: commands.Context):
        if not gates.in_allowed_channel(ctx):
            return
        history, _total = await _load_history(ctx, 2)
        if len(history) < 2:
            await ctx.send(strings.get("compare_unavailable"))
            return
        await deps.send_chunked(ctx.channel, deps.compare_profiles_func(history[-2], history[-1]))
