from __future__ import annotations

import math
from typing import Callable, Iterable

from profiles.models import Profile


SECONDS_PER_DAY = 86400


def xp_threshold_for_level(level: int) -> int:
    """
    XP needed to clear `level`.

    Observed values only cover roughly levels 10..13; everything else is an
    approximation, so estimates spanning other levels are rough.
    """
    if level == 10:
        return 20000
    if level == 11:
        return 30000
    if level > 11:
        return 30000 + (level - 11) * 10000
    return 20000


def xp_gained_between(
    oldest: Profile,
    newest: Profile,
    *,
    xp_threshold: Callable[[int], int] = xp_threshold_for_level,
) -> int:
    if oldest.level == newest.level:
        return newest.current_experience - oldest.current_experience
    total = oldest.experience_to_next_level
    for level in range(oldest.level + 1, newest.level):
        total += int(xp_threshold(level))
    total += newest.current_experience
    return total


def estimate_days_to_level_up(
    latest: Profile,
    history: Iterable[Profile],
    *,
    xp_threshold: Callable[[int], int] = xp_threshold_for_level,
) -> int | None:
    points = sorted(history, key=lambda p: p.timestamp)
    if len(points) < 2:
        return None

    oldest, newest = points[0], points[-1]
    elapsed_days = (newest.timestamp - oldest.timestamp).total_seconds() / SECONDS_PER_DAY
    if elapsed_days <= 0:
        return None

    gained = xp_gained_between(oldest, newest, xp_threshold=xp_threshold)
    if gained <= 0:
        return None

    xp_per_day = gained / elapsed_days
    if xp_per_day <= 0:
        return None

    remaining = latest.experience_to_next_level
    if remaining <= 0:
        return 0
    return int(math.ceil(remaining / xp_per_day))
