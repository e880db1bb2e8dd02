import os
import sqlite3
import asyncio

import discord
from discord.ext import commands
from config.defaults import COMMAND_PREFIX
from config.defaults import DEFAULT_ALLOWED_CHANNEL_IDS
from config.defaults import DEFAULT_DB_PATH
from config.defaults import DEFAULT_HISTORY_LIMIT
from config.defaults import DEFAULT_LOCALE
from config.defaults import DEFAULT_TIMESTAMP_OFFSET_HOURS
from config.defaults import DISCORD_MAX_MESSAGE_LEN
from config.defaults import HISTORY_COMMAND_DEFAULT_LIMIT
from config.defaults import HISTORY_COMMAND_MAX_LIMIT
from config.defaults import PLATFORM
from config.env import env_flag
from config.env import env_int
from config.env import parse_id_set
from config.env import resolve_allowed_channel_ids
from config.strings import load_strings
from db.migrate import apply_sqlite_migrations
from misc.runtime_wiring import wire_bot_runtime

# =========================
# ENV
# =========================
DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")

if not DISCORD_TOKEN:
    raise RuntimeError("Missing DISCORD_TOKEN env var")

REPO_ROOT = os.path.dirname(os.path.abspath(__file__))

# Railway persistent path (set this to your mounted volume path)
DB_PATH = os.getenv("OSTRO_DB_PATH", DEFAULT_DB_PATH)

ALLOWED_CHANNEL_IDS = resolve_allowed_channel_ids(DEFAULT_ALLOWED_CHANNEL_IDS)
OWNER_USER_IDS = parse_id_set(os.getenv("OSTRO_OWNER_USER_IDS"))

HISTORY_LIMIT = env_int("OSTRO_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT, minimum=2)
# Hours added to the Discord message time before it is stored as the capture time.
TIMESTAMP_OFFSET_HOURS = env_int("OSTRO_TIMESTAMP_OFFSET_HOURS", DEFAULT_TIMESTAMP_OFFSET_HOURS)
LOG_IGNORED = env_flag("OSTRO_LOG_IGNORED", False)
HANDLE_EDITS = env_flag("OSTRO_HANDLE_EDITS", True)

LOCALE = (os.getenv("OSTRO_LOCALE", DEFAULT_LOCALE) or DEFAULT_LOCALE).strip().lower()
STRINGS_PATH = os.getenv("OSTRO_STRINGS_PATH", os.path.join(REPO_ROOT, "config", "strings.yml"))
STRINGS, STRINGS_WARNING = load_strings(STRINGS_PATH, LOCALE)

print(
    f"[CFG] db_path={DB_PATH} allowed_channels={len(ALLOWED_CHANNEL_IDS)} owner_ids={len(OWNER_USER_IDS)} "
    f"history_limit={HISTORY_LIMIT} ts_offset_h={TIMESTAMP_OFFSET_HOURS} "
    f"log_ignored={LOG_IGNORED} handle_edits={HANDLE_EDITS} locale={LOCALE}"
)
if STRINGS_WARNING:
    print(f"[CFG] strings source=fallback path={STRINGS_PATH}")
    print(f"[CFG] {STRINGS_WARNING}")
else:
    print(f"[CFG] strings source=file path={STRINGS_PATH}")


def chunk_text(text: str, limit: int = DISCORD_MAX_MESSAGE_LEN) -> list[str]:
    text = text or ""
    if len(text) <= limit:
        return [text]

    chunks = []
    remaining = text

    while len(remaining) > limit:
        # Prefer splitting on a line break, then a space
        split_at = remaining.rfind("\n", 0, limit)
        if split_at == -1:
            split_at = remaining.rfind(" ", 0, limit)
        if split_at == -1:
            split_at = limit

        chunk = remaining[:split_at].strip()
        if chunk:
            chunks.append(chunk)

        remaining = remaining[split_at:].strip()

    if remaining:
        chunks.append(remaining)

    return chunks


async def send_chunked(channel: discord.abc.Messageable, text: str) -> None:
    for part in chunk_text(text, DISCORD_MAX_MESSAGE_LEN):
        await channel.send(part)


# =========================
# SQLITE
# =========================
def init_db(db_path: str) -> sqlite3.Connection:
    # check_same_thread=False because discord.py event loop + to_thread usage
    conn = sqlite3.connect(db_path, check_same_thread=False)
    cur = conn.cursor()

    cur.execute("PRAGMA journal_mode=WAL;")
    cur.execute("PRAGMA synchronous=NORMAL;")
    applied = apply_sqlite_migrations(conn, os.path.join(REPO_ROOT, "migrations"))
    print(f"[DB] migrations applied this boot: {applied or 'none'}")

    conn.commit()
    return conn


db_conn = init_db(DB_PATH)
print(f"[DB] Using DB_PATH={DB_PATH}")
db_lock = asyncio.Lock()


def user_is_owner(user) -> bool:
    return int(getattr(user, "id", 0) or 0) in OWNER_USER_IDS


# =========================
# DISCORD
# =========================
intents = discord.Intents.default()
intents.message_content = True

bot = commands.Bot(command_prefix=COMMAND_PREFIX, intents=intents, help_command=None)

wire_bot_runtime(
    bot,
    allowed_channel_ids=ALLOWED_CHANNEL_IDS,
    user_is_owner=user_is_owner,
    db_lock=db_lock,
    db_conn=db_conn,
    send_chunked=send_chunked,
    strings=STRINGS,
    platform=PLATFORM,
    history_limit=HISTORY_LIMIT,
    history_default_rows=HISTORY_COMMAND_DEFAULT_LIMIT,
    history_max_rows=HISTORY_COMMAND_MAX_LIMIT,
    timestamp_offset_hours=TIMESTAMP_OFFSET_HOURS,
    log_ignored=LOG_IGNORED,
    handle_edits=HANDLE_EDITS,
)


bot.run(DISCORD_TOKEN)
