from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class RuntimeDeps:
    # core
    db_lock: Any
    db_conn: Any
    send_chunked: Callable
    strings: Any

    # ingestion
    ingest_profile_func: Callable
    reply_for_ingest: Callable
    allowed_channel_ids: set[int]
    handle_edits: bool = True
