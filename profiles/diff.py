from __future__ import annotations

from profiles.models import Profile


NO_GUILD = "No Guild"

# (attribute, label) in report order, emitted only when the value changed.
STAT_LINES = (
    ("max_health", "❤️ Max Health"),
    ("max_energy", "⚡ Max Energy"),
    ("attack", "⚔️ Attack"),
    ("defense", "🛡️ Defense"),
    ("hero_power", "💪 Power"),
    ("gold", "💰 Gold"),
)


def _signed(delta: int) -> str:
    return f"+{delta}" if delta > 0 else str(delta)


def _level_line(old: Profile, new: Profile) -> str:
    if new.level != old.level:
        arrow = "⬆️" if new.level > old.level else "⬇️"
        return f"⚔️ Level: {old.level} → {new.level} {arrow}"
    return f"⚔️ Level: {new.level} (no change)"


def _experience_lines(old: Profile, new: Profile) -> list[str]:
    if new.level == old.level:
        xp_diff = new.current_experience - old.current_experience
        progress = (
            f"✨ Experience: {old.current_experience}/{old.next_level_experience} "
            f"→ {new.current_experience}/{new.next_level_experience}"
        )
        if xp_diff != 0:
            return [f"{progress} ({_signed(xp_diff)} XP)"]
        return [f"{progress} (no change)"]

    if new.level == old.level + 1:
        total_xp = old.experience_to_next_level + new.current_experience
        return [
            f"✨ Experience: Leveled up from {old.level} to {new.level}! Gained {total_xp} XP "
            f"(now {new.current_experience}/{new.next_level_experience} into level {new.level})."
        ]

    if new.level > old.level:
        # XP across the skipped levels is unknown without a threshold table.
        return [
            f"✨ Experience: Leveled up from {old.level} to {new.level}! (Multiple level-ups)",
            f"   Current XP: {new.current_experience}/{new.next_level_experience} at level {new.level}.",
        ]

    return []


def compare_profiles(old: Profile, new: Profile) -> str:
    lines = [_level_line(old, new)]
    lines.extend(_experience_lines(old, new))

    if old.guild != new.guild:
        old_guild = NO_GUILD if old.guild is None else old.guild
        new_guild = NO_GUILD if new.guild is None else new.guild
        lines.append(f"🏰 Guild: {old_guild} → {new_guild}")

    for attr, label in STAT_LINES:
        before = getattr(old, attr)
        after = getattr(new, attr)
        if after != before:
            lines.append(f"{label}: {before} → {after} ({_signed(after - before)})")

    return "\n".join(lines)
