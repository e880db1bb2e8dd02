from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


DEFAULT_STRINGS: dict[str, str] = {
    "welcome": (
        "👋 Вітаю у боті Ostro-Eye!\n"
        "Надішліть мені профіль із гри, щоб я його зберіг.\n"
        "Надішліть мені профіль ще раз, щоб я їх порівняв."
    ),
    "help": (
        "👁️ **Як користуватись:**\n"
        "• Надішліть ігровий профіль, щоб зберегти.\n"
        "• Надішліть профіль ще раз, щоб порівняти.\n"
        "• `!eta` - прогноз до наступного рівня.\n"
        "• `!history` - останні збережені профілі.\n"
        "• `!last` - останній профіль.\n"
        "• `!compare` - порівняти два останні профілі."
    ),
    "profile_saved": "🙌 Профіль збережено!",
    "duplicate": "⚠️ Такий профіль вже збережено.",
    "format_error": "❌ Помилка при оновленні профілю. Перевірте формат.",
    "eta_unavailable": "📉 Недостатньо даних для прогнозу. Надішліть ще хоча б один профіль пізніше.",
    "eta_days": "⏳ До рівня {next_level} приблизно {days} дн. (залишилось {remaining} XP).",
    "eta_due": "✅ Досвіду вже достатньо для рівня {next_level}.",
    "history_empty": "📭 Збережених профілів ще немає.",
    "history_header": "🗂️ Останні профілі ({shown} з {total}):",
    "compare_unavailable": "ℹ️ Для порівняння потрібно щонайменше два збережені профілі.",
}


@dataclass(slots=True)
class Strings:
    locale: str = "uk"
    table: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_STRINGS))

    def get(self, key: str, **fmt: Any) -> str:
        template = self.table.get(key) or DEFAULT_STRINGS.get(key) or key
        if not fmt:
            return template
        try:
            return template.format(**fmt)
        except (KeyError, IndexError, ValueError) as exc:
            print(f"[CFG] string {key!r} ({self.locale}) failed to format: {exc}")
            return DEFAULT_STRINGS.get(key, key).format(**fmt)


def _as_table(value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    out: dict[str, str] = {}
    for key, text in value.items():
        clean = str(text or "").strip()
        if clean:
            out[str(key)] = clean
    return out


def load_strings(path: str | Path | None, locale: str) -> tuple[Strings, str | None]:
    """
    Returns (strings, warning_message). warning_message is None on clean load.

    The file maps locale -> {key: text}; keys missing from the requested
    locale fall back to the built-in table.
    """
    wanted = str(locale or "").strip().lower() or "uk"
    defaults = Strings(locale=wanted)
    if not path:
        return (defaults, "Strings path missing; using built-in strings.")

    p = Path(path)
    if not p.exists():
        return (defaults, f"Strings file not found at {p}; using built-in strings.")

    try:
        payload = yaml.safe_load(p.read_text(encoding="utf-8"))
    except Exception as exc:
        return (defaults, f"Failed to read strings from {p}: {exc}; using built-in strings.")

    if not isinstance(payload, dict):
        return (defaults, f"Invalid strings format in {p}; using built-in strings.")

    table = _as_table(payload.get(wanted))
    if not table:
        return (defaults, f"Locale {wanted!r} not found in {p}; using built-in strings.")

    merged = dict(DEFAULT_STRINGS)
    merged.update(table)
    return (Strings(locale=wanted, table=merged), None)
