"""User preferences (refresh settings + keyword set) backed by the JSON store."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jobscout.log import get_logger
from jobscout.storage import JsonStore

log = get_logger(__name__)

DEFAULT_REFRESH_MINUTES = 10

SETTINGS_DEFAULTS: dict[str, Any] = {
    "refresh_minutes": DEFAULT_REFRESH_MINUTES,
    "scrape_paused": False,
}


@dataclass(frozen=True)
class Settings:
    refresh_minutes: int = DEFAULT_REFRESH_MINUTES
    scrape_paused: bool = False


def validate_refresh_minutes(value: Any) -> int:
    """Accept ints (or int-looking strings) >= 1."""
    if isinstance(value, bool):
        raise ValueError("refresh interval must be a whole number of minutes")
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"refresh interval must be a whole number of minutes, got {value!r}") from None
    if isinstance(value, float) and value != minutes:
        raise ValueError(f"refresh interval must be a whole number of minutes, got {value!r}")
    if minutes < 1:
        raise ValueError("refresh interval must be at least 1 minute")
    return minutes


def normalize_keywords(raw: list[str]) -> list[str]:
    """Strip, drop blanks, dedupe case-insensitively keeping the first spelling."""
    seen: set[str] = set()
    out: list[str] = []
    for kw in raw:
        kw = (kw or "").strip()
        if not kw or kw.lower() in seen:
            continue
        seen.add(kw.lower())
        out.append(kw)
    return out


class SessionContext:
    """Explicit handle on persisted preferences, passed to whoever needs them."""

    def __init__(self, store: JsonStore) -> None:
        self.store = store

    # -- settings ---------------------------------------------------------

    @property
    def settings(self) -> Settings:
        raw = self.store.get(SETTINGS_DEFAULTS.keys(), SETTINGS_DEFAULTS)
        return Settings(
            refresh_minutes=int(raw["refresh_minutes"]),
            scrape_paused=bool(raw["scrape_paused"]),
        )

    def update_settings(self, **changes: Any) -> Settings:
        unknown = set(changes) - set(SETTINGS_DEFAULTS)
        if unknown:
            raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        if "refresh_minutes" in changes:
            changes["refresh_minutes"] = validate_refresh_minutes(changes["refresh_minutes"])
        if "scrape_paused" in changes:
            changes["scrape_paused"] = bool(changes["scrape_paused"])
        if changes:
            self.store.set(changes)
            log.info("Settings updated: %s", changes)
        return self.settings

    # -- keywords ---------------------------------------------------------

    @property
    def keywords(self) -> list[str]:
        return list(self.store.get(["keywords"], {"keywords": []})["keywords"] or [])

    def set_keywords(self, keywords: list[str]) -> list[str]:
        cleaned = normalize_keywords(keywords)
        self.store.set({"keywords": cleaned})
        return cleaned

    def add_keyword(self, keyword: str) -> bool:
        """Return False when the keyword is blank or already present (any case)."""
        current = self.keywords
        updated = normalize_keywords(current + [keyword])
        if len(updated) == len(current):
            return False
        self.store.set({"keywords": updated})
        log.info("Keyword added: %s", updated[-1])
        return True

    def remove_keyword(self, keyword: str) -> bool:
        target = (keyword or "").strip().lower()
        current = self.keywords
        remaining = [kw for kw in current if kw.lower() != target]
        if len(remaining) == len(current):
            return False
        self.store.set({"keywords": remaining})
        log.info("Keyword removed: %s", keyword.strip())
        return True
