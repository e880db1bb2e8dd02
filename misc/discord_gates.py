from __future__ import annotations

import discord

from config.defaults import COMMAND_PREFIX


def message_in_allowed_channels(message: discord.Message, allowed_channel_ids: set[int]) -> bool:
    # Profiles are usually pasted in DMs; guild channels must be allowlisted.
    if getattr(message, "guild", None) is None:
        return True

    channel_id = int(getattr(message.channel, "id", 0) or 0)
    if channel_id in allowed_channel_ids:
        return True
    if isinstance(message.channel, discord.Thread) and message.channel.parent:
        return int(message.channel.parent.id) in allowed_channel_ids
    return False


def is_command_message(message: discord.Message, prefix: str = COMMAND_PREFIX) -> bool:
    return (getattr(message, "content", None) or "").lstrip().startswith(prefix)


def is_profile_candidate(message: discord.Message, allowed_channel_ids: set[int]) -> bool:
    author = getattr(message, "author", None)
    if author is None or getattr(author, "bot", False):
        return False
    if not (getattr(message, "content", None) or "").strip():
        return False
    if is_command_message(message):
        return False
    return message_in_allowed_channels(message, allowed_channel_ids)
