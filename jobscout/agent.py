"""
Job scout wiring.

One refresh cycle: page → scrape → keyword shortlist → merge into the stored
shortlist → one notification per newly stored job.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from jobscout.config import STORE_PATH, ensure_dirs, get_env, load_config
from jobscout.log import get_logger
from jobscout.messaging import MessageChannel
from jobscout.models import JobRecord
from jobscout.notify import Notifier, get_notifier, notify_new_jobs
from jobscout.session import SessionContext
from jobscout.shortlist import ShortlistStore, shortlist
from jobscout.storage import JsonStore

log = get_logger(__name__)


class ShortlistPipeline:
    def __init__(self, session: SessionContext, store: ShortlistStore, notifier: Notifier | None = None) -> None:
        self.session = session
        self.store = store
        self.notifier = notifier

    def process(self, batch: list[JobRecord]) -> dict[str, Any]:
        keywords = self.session.keywords
        picked = shortlist(batch, keywords)
        known = set(self.store.load())
        self.store.merge(picked)

        new_jobs: dict[str, JobRecord] = {}
        for job in picked:
            if job.id not in known:
                new_jobs.setdefault(job.id, job)

        notified = 0
        if new_jobs and self.notifier is not None:
            notified = notify_new_jobs(self.notifier, list(new_jobs.values()))

        log.info(
            "Batch %d → shortlisted %d (keywords: %s) → %d new",
            len(batch), len(picked), ", ".join(keywords) or "none", len(new_jobs),
        )
        return {
            "scraped": len(batch),
            "shortlisted": len(picked),
            "new": len(new_jobs),
            "notified": notified,
            "new_jobs": list(new_jobs.values()),
        }


@dataclass
class Scout:
    """Everything a surface (CLI, Streamlit) needs, built from one config."""

    config: dict[str, Any]
    session: SessionContext
    shortlist_store: ShortlistStore
    notifier: Notifier
    channel: MessageChannel
    pipeline: ShortlistPipeline
    # one refresh cycle at a time per scout, whichever surface triggers it
    cycle_lock: threading.Lock = field(default_factory=threading.Lock)


def build_scout(config: dict[str, Any] | None = None, store: JsonStore | None = None) -> Scout:
    cfg = config or load_config()
    if store is None:
        ensure_dirs()
        store = JsonStore(STORE_PATH)
    session = SessionContext(store)
    shortlist_store = ShortlistStore(store, preview_size=int(cfg["preview_size"]))
    notifier = get_notifier(get_env)
    channel = MessageChannel(retry_delay=float(cfg["message_retry_delay_seconds"]))
    pipeline = ShortlistPipeline(session, shortlist_store, notifier)
    return Scout(cfg, session, shortlist_store, notifier, channel, pipeline)
