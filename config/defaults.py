from __future__ import annotations

from profiles.history import HISTORY_LIMIT


COMMAND_PREFIX = "!"
PLATFORM = "discord"

DEFAULT_DB_PATH = "ostro_eye.db"
DEFAULT_HISTORY_LIMIT = HISTORY_LIMIT
DEFAULT_LOCALE = "uk"
DEFAULT_TIMESTAMP_OFFSET_HOURS = 0

# Empty means "DMs only"; set OSTRO_ALLOWED_CHANNEL_IDS to also listen in guild channels.
DEFAULT_ALLOWED_CHANNEL_IDS: set[int] = set()

HISTORY_COMMAND_DEFAULT_LIMIT = 5
HISTORY_COMMAND_MAX_LIMIT = 20

DISCORD_MAX_MESSAGE_LEN = 1900
