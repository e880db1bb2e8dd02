from __future__ import annotations

from functools import partial

from db.migrate import list_applied_migrations_sync
from ingestion.service import ingest_profile_message
from ingestion.service import reply_for_ingest
from ingestion.store import count_profiles_sync
from ingestion.store import fetch_latest_profile_sync
from ingestion.store import fetch_profile_history_sync
from ingestion.store import get_or_create_user_sync
from misc.commands.command_deps import CommandDeps
from misc.commands.command_deps import CommandGates
from misc.commands.commands_owner import register as register_owner
from misc.commands.commands_profile import register as register_profile
from misc.discord_gates import message_in_allowed_channels
from misc.events_runtime import register_runtime_events
from misc.runtime_deps import RuntimeDeps
from profiles.diff import compare_profiles
from profiles.estimator import estimate_days_to_level_up


def wire_bot_runtime(
    bot,
    *,
    allowed_channel_ids: set[int],
    user_is_owner,
    db_lock,
    db_conn,
    send_chunked,
    strings,
    platform: str,
    history_limit: int,
    history_default_rows: int,
    history_max_rows: int,
    timestamp_offset_hours: int,
    log_ignored: bool,
    handle_edits: bool = True,
    estimate_days_func=estimate_days_to_level_up,
) -> None:
    def in_allowed_channel(ctx) -> bool:
        # ctx exposes guild/channel the same way a Message does
        return message_in_allowed_channels(ctx, allowed_channel_ids)

    command_deps = CommandDeps(
        db_lock=db_lock,
        db_conn=db_conn,
        send_chunked=send_chunked,
        strings=strings,
        platform=platform,
        history_limit=history_limit,
        history_default_rows=history_default_rows,
        history_max_rows=history_max_rows,
        get_or_create_user_sync=get_or_create_user_sync,
        fetch_profile_history_sync=fetch_profile_history_sync,
        fetch_latest_profile_sync=fetch_latest_profile_sync,
        count_profiles_sync=count_profiles_sync,
        estimate_days_func=estimate_days_func,
        compare_profiles_func=compare_profiles,
    )
    command_gates = CommandGates(
        in_allowed_channel=in_allowed_channel,
        user_is_owner=user_is_owner,
    )

    register_profile(
        bot,
        deps=command_deps,
        gates=command_gates,
    )

    register_owner(
        bot,
        deps=command_deps,
        gates=command_gates,
        list_applied_migrations_sync=list_applied_migrations_sync,
    )

    register_runtime_events(
        bot,
        deps=RuntimeDeps(
            db_lock=db_lock,
            db_conn=db_conn,
            send_chunked=send_chunked,
            strings=strings,
            ingest_profile_func=partial(
                ingest_profile_message,
                db_lock=db_lock,
                db_conn=db_conn,
                platform=platform,
                history_limit=history_limit,
                timestamp_offset_hours=timestamp_offset_hours,
                log_ignored=log_ignored,
            ),
            reply_for_ingest=reply_for_ingest,
            allowed_channel_ids=allowed_channel_ids,
            handle_edits=handle_edits,
        ),
    )
