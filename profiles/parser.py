from __future__ import annotations

import re
from datetime import datetime

from profiles.models import Profile, ProfileParseResult


NAME_MARKER_RE = re.compile(r"^\u2694\ufe0f?\s?")
LEVEL_DELIMITER = " - Рівень "
GUILD_MARKER = "Гільдія:"
GUILD_LABEL = "Гільдія: "

HEALTH_LABEL = "Здоров'я:"
ENERGY_LABEL = "Енергія:"
ENERGY_SPENT_LABEL = "Витрачено енергії за день:"
ATTACK_LABEL = "Атака:"
DEFENSE_LABEL = "Захист:"
HERO_POWER_LABEL = "Сила героя:"
EXPERIENCE_LABEL = "Досвід:"
GOLD_LABEL = "Золото:"

HEALTH_GLYPH = "❤️"
ENERGY_GLYPH = "🔋"

REQUIRED_LABELS = (
    HEALTH_LABEL,
    ENERGY_LABEL,
    ENERGY_SPENT_LABEL,
    ATTACK_LABEL,
    DEFENSE_LABEL,
    HERO_POWER_LABEL,
    EXPERIENCE_LABEL,
    GOLD_LABEL,
)

SECONDS_MARKER = "сек"
MINUTES_MARKER = "хв"
HOURS_MARKER = "год"

_INT_RE = re.compile(r"[+-]?\d+")
_DIGIT_RUN_RE = re.compile(r"\d+")


class _Malformed(Exception):
    pass


def _parse_int(text: str) -> int | None:
    if not _INT_RE.fullmatch(text or ""):
        return None
    return int(text)


def _split_lines(text: str) -> list[str]:
    out: list[str] = []
    for line in (text or "").splitlines():
        clean = line.strip()
        if clean:
            out.append(clean)
    return out


def parse_time_string(text: str) -> int | None:
    """Convert a regen countdown like "1год 30хв до ..." into whole minutes.

    Seconds-only countdowns round up to one minute so a nearly-full bar is
    never reported as zero remaining.
    """
    runs = _DIGIT_RUN_RE.findall(text or "")
    if not runs:
        return None

    has_seconds = SECONDS_MARKER in text
    has_minutes = MINUTES_MARKER in text
    has_hours = HOURS_MARKER in text

    if len(runs) == 1:
        value = int(runs[0])
        if has_seconds:
            return 1 if value > 0 else 0
        if has_minutes and not has_hours:
            return value
        if has_hours and not has_minutes:
            return value * 60
        return value

    if len(runs) == 2:
        first, second = int(runs[0]), int(runs[1])
        if has_hours and has_minutes:
            return first * 60 + second
        # minutes + seconds
        return first + (1 if second > 0 else 0)

    return None


def map_labeled_lines(lines: list[str], labels: tuple[str, ...] = REQUIRED_LABELS) -> dict[str, str]:
    found: dict[str, str] = {}
    for line in lines:
        for label in labels:
            if label not in found and label in line:
                found[label] = line
    return found


def looks_like_profile(text: str) -> bool:
    """A crossed-swords name/level header plus health and energy markers somewhere below."""
    lines = _split_lines(text)
    if not lines or not NAME_MARKER_RE.match(lines[0]) or LEVEL_DELIMITER not in lines[0]:
        return False
    has_health = HEALTH_GLYPH in text or HEALTH_LABEL in text
    has_energy = ENERGY_GLYPH in text or ENERGY_LABEL in text
    return has_health and has_energy


def _parse_name_line(line: str) -> tuple[str, int] | None:
    stripped = NAME_MARKER_RE.sub("", line, count=1)
    if LEVEL_DELIMITER not in stripped:
        return None
    name, level_raw = stripped.split(LEVEL_DELIMITER, 1)
    level = _parse_int(level_raw)
    if level is None:
        return None
    return (name, level)


def _parse_guild_line(lines: list[str]) -> str | None:
    if len(lines) < 2 or GUILD_MARKER not in lines[1]:
        return None
    line = lines[1]
    if GUILD_LABEL in line:
        return line.split(GUILD_LABEL, 1)[1]
    return line.split(GUILD_MARKER, 1)[1].strip()


def _parse_pool_line(line: str, label: str) -> tuple[int, int, int | None]:
    """Parse "label: current/max (regen text)" into (current, max, regen_minutes)."""
    values = line.split(label, 1)[1].strip()
    regen_minutes: int | None = None
    paren = values.find("(")
    if paren != -1:
        closing = values.find(")", paren)
        if closing != -1:
            regen_minutes = parse_time_string(values[paren + 1:closing])
        values = values[:paren].strip()

    parts = [p.strip() for p in values.split("/") if p.strip()]
    if len(parts) != 2:
        raise _Malformed(f"{label} expected current/max, got {values!r}")
    current, maximum = _parse_int(parts[0]), _parse_int(parts[1])
    if current is None or maximum is None:
        raise _Malformed(f"{label} values are not integers: {values!r}")
    return (current, maximum, regen_minutes)


def _parse_stat_line(line: str, label: str) -> int:
    _, sep, rest = line.partition(":")
    value = _parse_int(rest.lstrip()) if sep else None
    if value is None:
        raise _Malformed(f"{label} value is not an integer: {line!r}")
    return value


def _parse_lenient_line(line: str) -> int:
    colon = line.find(":")
    if colon == -1:
        return 0
    value = _parse_int(line[colon + 2:].strip())
    return value if value is not None else 0


def _parse_experience_line(line: str) -> tuple[int, int]:
    values = line.split(EXPERIENCE_LABEL, 1)[1].strip()
    parts = [p.strip() for p in values.split("/") if p.strip()]
    if len(parts) != 2:
        raise _Malformed(f"{EXPERIENCE_LABEL} expected current/next, got {values!r}")
    current, nxt = _parse_int(parts[0]), _parse_int(parts[1])
    if current is None or nxt is None:
        raise _Malformed(f"{EXPERIENCE_LABEL} values are not integers: {values!r}")
    return (current, nxt)


def parse_profile(text: str, captured_at: datetime) -> ProfileParseResult:
    lines = _split_lines(text)
    if not lines:
        return ProfileParseResult("not_a_profile", reason="empty text")

    head = _parse_name_line(lines[0])
    if head is None:
        return ProfileParseResult("not_a_profile", reason="first line is not a name/level line")
    name, level = head
    guild = _parse_guild_line(lines)

    by_label = map_labeled_lines(lines)
    labels_found = tuple(label for label in REQUIRED_LABELS if label in by_label)
    missing = [label for label in REQUIRED_LABELS if label not in by_label]
    if missing:
        return ProfileParseResult(
            "not_a_profile",
            reason=f"missing lines: {', '.join(missing)}",
            labels_found=labels_found,
        )

    try:
        current_hp, max_hp, hp_regen = _parse_pool_line(by_label[HEALTH_LABEL], HEALTH_LABEL)
        current_en, max_en, en_regen = _parse_pool_line(by_label[ENERGY_LABEL], ENERGY_LABEL)
        attack = _parse_stat_line(by_label[ATTACK_LABEL], ATTACK_LABEL)
        defense = _parse_stat_line(by_label[DEFENSE_LABEL], DEFENSE_LABEL)
        hero_power = _parse_stat_line(by_label[HERO_POWER_LABEL], HERO_POWER_LABEL)
        current_xp, next_xp = _parse_experience_line(by_label[EXPERIENCE_LABEL])
    except _Malformed as exc:
        return ProfileParseResult("malformed", reason=str(exc), labels_found=labels_found)

    profile = Profile(
        name=name,
        level=level,
        guild=guild,
        current_health=current_hp,
        max_health=max_hp,
        current_energy=current_en,
        max_energy=max_en,
        energy_spent_today=_parse_lenient_line(by_label[ENERGY_SPENT_LABEL]),
        attack=attack,
        defense=defense,
        hero_power=hero_power,
        current_experience=current_xp,
        next_level_experience=next_xp,
        gold=_parse_lenient_line(by_label[GOLD_LABEL]),
        timestamp=captured_at,
        health_regen_minutes=hp_regen,
        energy_regen_minutes=en_regen,
    )
    return ProfileParseResult("parsed", profile=profile, labels_found=labels_found)
