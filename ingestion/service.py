from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from config.strings import Strings
from ingestion.store import append_profile_if_new_sync
from ingestion.store import get_or_create_user_sync
from profiles.diff import compare_profiles
from profiles.history import HISTORY_LIMIT
from profiles.models import Profile
from profiles.parser import looks_like_profile
from profiles.parser import parse_profile


@dataclass(frozen=True, slots=True)
class IngestResult:
    status: str
    profile: Profile | None = None
    previous: Profile | None = None
    report: str | None = None
    reason: str | None = None


def message_timestamp(message: Any, *, offset_hours: int = 0) -> datetime:
    stamp = getattr(message, "edited_at", None) or getattr(message, "created_at", None)
    if stamp is None:
        stamp = datetime.now(timezone.utc)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp + timedelta(hours=int(offset_hours or 0))


def store_parsed_profile_sync(
    conn,
    *,
    user_id: int,
    profile: Profile,
    history_limit: int = HISTORY_LIMIT,
    source_message_id: int | None = None,
) -> IngestResult:
    stored, previous = append_profile_if_new_sync(
        conn,
        user_id,
        profile,
        limit=history_limit,
        source_message_id=source_message_id,
    )
    if not stored:
        return IngestResult("duplicate", profile=profile, previous=previous)
    if previous is None:
        return IngestResult("saved", profile=profile)
    return IngestResult(
        "compared",
        profile=profile,
        previous=previous,
        report=compare_profiles(previous, profile),
    )


async def ingest_profile_message(
    message: Any,
    *,
    db_lock,
    db_conn,
    platform: str,
    history_limit: int = HISTORY_LIMIT,
    timestamp_offset_hours: int = 0,
    log_ignored: bool = False,
) -> IngestResult:
    text = getattr(message, "content", None) or ""
    captured_at = message_timestamp(message, offset_hours=timestamp_offset_hours)
    parsed = parse_profile(text, captured_at)
    author = message.author

    if parsed.status == "not_a_profile" and not looks_like_profile(text):
        if log_ignored:
            print(f"[Profile] ignored message from author_id={author.id}: {parsed.reason}")
        return IngestResult("ignored", reason=parsed.reason)
    if not parsed.ok:
        print(f"[Profile] malformed profile from author_id={author.id}: {parsed.reason}")
        return IngestResult("malformed", reason=parsed.reason)

    def _store() -> IngestResult:
        user_id = get_or_create_user_sync(
            db_conn,
            platform=platform,
            external_id=str(author.id),
            user_name=getattr(author, "name", None),
            display_name=getattr(author, "display_name", None),
        )
        return store_parsed_profile_sync(
            db_conn,
            user_id=user_id,
            profile=parsed.profile,
            history_limit=history_limit,
            source_message_id=getattr(message, "id", None),
        )

    # check-then-append must not interleave for the same user
    async with db_lock:
        result = await asyncio.to_thread(_store)

    print(
        f"[Profile] author_id={author.id} status={result.status} "
        f"level={parsed.profile.level} xp={parsed.profile.current_experience}/{parsed.profile.next_level_experience}"
    )
    return result


def reply_for_ingest(result: IngestResult, strings: Strings) -> str | None:
    if result.status == "compared":
        return result.report
    if result.status == "saved":
        return strings.get("profile_saved")
    if result.status == "duplicate":
        return strings.get("duplicate")
    if result.status == "malformed":
        return strings.get("format_error")
    return None
