from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from typing import Callable


def _default_false(*args, **kwargs) -> bool:
    return False


@dataclass(frozen=True)
class CommandDeps:
    # Core/shared
    db_lock: Any = None
    db_conn: Any = None
    send_chunked: Callable | None = None
    strings: Any = None
    platform: str = "discord"

    # Profile history
    history_limit: int = 100
    history_default_rows: int = 5
    history_max_rows: int = 20

    # Store/service functions
    get_or_create_user_sync: Callable | None = None
    fetch_profile_history_sync: Callable | None = None
    fetch_latest_profile_sync: Callable | None = None
    count_profiles_sync: Callable | None = None
    estimate_days_func: Callable | None = None
    compare_profiles_func: Callable | None = None


@dataclass(frozen=True)
class CommandGates:
    in_allowed_channel: Callable[[Any], bool] = _default_false
    user_is_owner: Callable[[Any], bool] = _default_false
