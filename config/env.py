from __future__ import annotations

import os
import re


def parse_id_set(raw: str | None) -> set[int]:
    if not raw:
        return set()
    out: set[int] = set()
    for tok in re.split(r"[\s,;]+", raw.strip()):
        if tok and re.fullmatch(r"\d{8,22}", tok):
            out.add(int(tok))
    return out


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        value = int(raw) if raw else int(default)
    except ValueError:
        print(f"[CFG] invalid {name}={raw!r}; falling back to {default!r}")
        value = int(default)
    if minimum is not None and value < minimum:
        print(f"[CFG] {name}={value} below minimum {minimum}; using {minimum}")
        value = minimum
    return value


def resolve_allowed_channel_ids(default_ids: set[int]) -> set[int]:
    env_ids = parse_id_set(os.getenv("OSTRO_ALLOWED_CHANNEL_IDS"))
    return env_ids if env_ids else set(default_ids)
