"""Keyword shortlisting and the persisted, id-deduplicated shortlist."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable

from jobscout.log import get_logger
from jobscout.models import JobRecord
from jobscout.storage import JsonStore

log = get_logger(__name__)

SHORTLIST_KEY = "shortlist"
UPDATED_AT_KEY = "shortlist_updated_at"
DEFAULT_PREVIEW_SIZE = 50


def _haystack(job: JobRecord) -> str:
    return " ".join([job.title, job.snippet, " ".join(job.skills)]).lower()


def matches_keywords(job: JobRecord, keywords: Iterable[str]) -> bool:
    needles = [k.strip().lower() for k in keywords if k and k.strip()]
    if not needles:
        return True
    text = _haystack(job)
    return any(n in text for n in needles)


def shortlist(batch: list[JobRecord], keywords: list[str]) -> list[JobRecord]:
    """Records where any keyword is a case-insensitive substring of title/snippet/skills."""
    if not any(k and k.strip() for k in keywords):
        return list(batch)
    return [job for job in batch if matches_keywords(job, keywords)]


def merge_records(existing: dict[str, JobRecord], incoming: Iterable[JobRecord]) -> dict[str, JobRecord]:
    """Insert-or-overwrite by record id; the incoming record replaces all fields."""
    merged = dict(existing)
    for job in incoming:
        merged[job.id] = job
    return merged


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ShortlistStore:
    """Shortlist persisted under one store key, plus a last-updated timestamp.

    Reads come back in insertion order; an overwritten record keeps the
    position of the record it replaced.
    """

    def __init__(
        self,
        store: JsonStore,
        preview_size: int = DEFAULT_PREVIEW_SIZE,
        clock: Callable[[], str] = _utc_now,
    ) -> None:
        self.store = store
        self.preview_size = preview_size
        self._clock = clock

    def load(self) -> dict[str, JobRecord]:
        raw = self.store.get([SHORTLIST_KEY], {SHORTLIST_KEY: {}})[SHORTLIST_KEY] or {}
        return {key: JobRecord.from_dict(value) for key, value in raw.items()}

    def _save(self, records: dict[str, JobRecord]) -> None:
        self.store.set({
            SHORTLIST_KEY: {key: job.to_dict() for key, job in records.items()},
            UPDATED_AT_KEY: self._clock(),
        })

    def merge(self, incoming: Iterable[JobRecord]) -> dict[str, JobRecord]:
        incoming = list(incoming)
        merged = merge_records(self.load(), incoming)
        self._save(merged)
        log.info("Shortlist merged %d record(s); %d stored", len(incoming), len(merged))
        return merged

    def clear(self) -> None:
        self._save({})
        log.info("Shortlist cleared")

    def updated_at(self) -> str | None:
        return self.store.get([UPDATED_AT_KEY])[UPDATED_AT_KEY]

    def preview(self) -> list[JobRecord]:
        return list(self.load().values())[: self.preview_size]
