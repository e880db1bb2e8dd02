from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any


def _as_aware_utc(value: datetime) -> datetime:
    if value.tzinfo is None or value.utcoffset() is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True, slots=True)
class Profile:
    """One point-in-time snapshot of a player's in-game stats.

    Equality and hashing cover the player state only: the capture timestamp
    and both regen countdowns are excluded, so a re-sent profile compares
    equal to the stored one even minutes later.
    """

    name: str
    level: int
    guild: str | None
    current_health: int
    max_health: int
    current_energy: int
    max_energy: int
    energy_spent_today: int
    attack: int
    defense: int
    hero_power: int
    current_experience: int
    next_level_experience: int
    gold: int
    timestamp: datetime = field(compare=False)
    health_regen_minutes: int | None = field(default=None, compare=False)
    energy_regen_minutes: int | None = field(default=None, compare=False)

    @property
    def experience_to_next_level(self) -> int:
        return self.next_level_experience - self.current_experience

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["timestamp"] = _as_aware_utc(self.timestamp).isoformat()
        return out

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> Profile:
        raw_ts = payload.get("timestamp")
        if isinstance(raw_ts, datetime):
            ts = _as_aware_utc(raw_ts)
        else:
            ts = _as_aware_utc(datetime.fromisoformat(str(raw_ts)))

        def _opt_int(key: str) -> int | None:
            value = payload.get(key)
            return None if value is None else int(value)

        guild = payload.get("guild")
        return cls(
            name=str(payload["name"]),
            level=int(payload["level"]),
            guild=str(guild) if guild is not None else None,
            current_health=int(payload["current_health"]),
            max_health=int(payload["max_health"]),
            current_energy=int(payload["current_energy"]),
            max_energy=int(payload["max_energy"]),
            energy_spent_today=int(payload.get("energy_spent_today") or 0),
            attack=int(payload["attack"]),
            defense=int(payload["defense"]),
            hero_power=int(payload["hero_power"]),
            current_experience=int(payload["current_experience"]),
            next_level_experience=int(payload["next_level_experience"]),
            gold=int(payload.get("gold") or 0),
            timestamp=ts,
            health_regen_minutes=_opt_int("health_regen_minutes"),
            energy_regen_minutes=_opt_int("energy_regen_minutes"),
        )


@dataclass(frozen=True, slots=True)
class ProfileParseResult:
    status: str
    profile: Profile | None = None
    reason: str | None = None
    labels_found: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.status == "parsed" and self.profile is not None
