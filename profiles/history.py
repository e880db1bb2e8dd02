from __future__ import annotations

from typing import Sequence

from profiles.models import Profile


HISTORY_LIMIT = 100


def retention_cap(limit: int = HISTORY_LIMIT) -> int:
    """Number of snapshots kept per user; every trim path goes through this."""
    return max(1, int(limit))


def is_duplicate(latest: Profile | None, candidate: Profile) -> bool:
    if latest is None:
        return False
    return latest == candidate


def append_bounded(history: Sequence[Profile], profile: Profile, limit: int = HISTORY_LIMIT) -> list[Profile]:
    cap = retention_cap(limit)
    out = list(history)
    out.append(profile)
    if len(out) > cap:
        out = out[-cap:]
    return out
