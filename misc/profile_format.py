from __future__ import annotations

from datetime import datetime

from profiles.models import Profile


def format_timestamp(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%d %H:%M")


def _pool(current: int, maximum: int, regen_minutes: int | None) -> str:
    if regen_minutes is None:
        return f"{current}/{maximum}"
    return f"{current}/{maximum} (~{regen_minutes} min)"


def format_profile_summary(profile: Profile) -> str:
    lines = [f"⚔️ {profile.name} - Level {profile.level}"]
    if profile.guild is not None:
        lines.append(f"🏰 Guild: {profile.guild}")
    lines.extend(
        [
            f"❤️ Health: {_pool(profile.current_health, profile.max_health, profile.health_regen_minutes)}",
            f"⚡ Energy: {_pool(profile.current_energy, profile.max_energy, profile.energy_regen_minutes)}",
            f"🔋 Energy spent today: {profile.energy_spent_today}",
            f"⚔️ Attack: {profile.attack}  🛡️ Defense: {profile.defense}  💪 Power: {profile.hero_power}",
            f"✨ Experience: {profile.current_experience}/{profile.next_level_experience}",
            f"💰 Gold: {profile.gold}",
            f"🕒 Captured: {format_timestamp(profile.timestamp)}",
        ]
    )
    return "\n".join(lines)


def format_history_line(profile: Profile) -> str:
    return (
        f"- {format_timestamp(profile.timestamp)} | lvl {profile.level} | "
        f"XP {profile.current_experience}/{profile.next_level_experience} | gold {profile.gold}"
    )
