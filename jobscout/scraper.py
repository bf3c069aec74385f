"""
Scrape the currently loaded listing page into a batch of JobRecords.

A ScrapeRun checks the page address, locates the cards, extracts them one by
one (yielding every few cards), posts progress and completion on the message
channel, and finally asks the notifier for a summary toast.
"""
from __future__ import annotations

import re
import time
from enum import Enum
from typing import Callable

from bs4 import BeautifulSoup

from jobscout.config import DEFAULT_TARGET_URL
from jobscout.extractor import extract_job
from jobscout.locator import find_job_cards
from jobscout.log import get_logger
from jobscout.messaging import (
    SCRAPER_DONE,
    SCRAPER_LOG,
    SCRAPER_PROGRESS,
    START_SCRAPE,
    Message,
    MessageChannel,
)
from jobscout.models import JobRecord, PageSnapshot, ScrapeResult
from jobscout.notify import Notifier

log = get_logger(__name__)

YIELD_EVERY = 15


class ScrapeState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


def target_pattern(target_url: str) -> re.Pattern[str]:
    """Base listing URL, optionally followed by a path, query or fragment."""
    base = re.escape(target_url.rstrip("/"))
    return re.compile(rf"^{base}(?:[/?#].*)?$")


def is_listing_page(url: str, target_url: str = DEFAULT_TARGET_URL) -> bool:
    return bool(target_pattern(target_url).match(url or ""))


def format_preview(jobs: list[JobRecord], limit: int = 5) -> str:
    lines = [f"{i}. {j.title or '(no title)'} - {j.url}" for i, j in enumerate(jobs[:limit], 1)]
    if len(jobs) > limit:
        lines.append(f"...and {len(jobs) - limit} more.")
    return "\n".join(lines)


class ScrapeRun:
    """One scrape of one page snapshot: idle → running → done | failed."""

    def __init__(
        self,
        snapshot: PageSnapshot,
        *,
        target_url: str = DEFAULT_TARGET_URL,
        channel: MessageChannel | None = None,
        notifier: Notifier | None = None,
        notification_title: str = "Job Scout",
        yield_every: int = YIELD_EVERY,
        pause: Callable[[float], None] = time.sleep,
    ) -> None:
        self.snapshot = snapshot
        self.target_url = target_url
        self.channel = channel
        self.notifier = notifier
        self.notification_title = notification_title
        self.yield_every = max(1, yield_every)
        self._pause = pause
        self.state = ScrapeState.IDLE

    def _emit(self, message_type: str, payload=None) -> None:
        if self.channel is not None:
            self.channel.post(message_type, payload)

    def _log(self, msg: str) -> None:
        log.info(msg)
        self._emit(SCRAPER_LOG, msg)

    def _fail(self, error: str) -> ScrapeResult:
        self.state = ScrapeState.FAILED
        return ScrapeResult(ok=False, error=error)

    def run(self) -> ScrapeResult:
        if self.state is not ScrapeState.IDLE:
            raise RuntimeError(f"ScrapeRun already {self.state.value}; start a new run instead")
        self.state = ScrapeState.RUNNING

        if not is_listing_page(self.snapshot.url, self.target_url):
            msg = f"Please open {self.target_url} and run again."
            self._log(msg)
            return self._fail(msg)

        self._log("Starting scrape...")
        try:
            jobs = self._extract_all()
        except Exception as exc:
            log.exception("Scrape aborted")
            self._emit(SCRAPER_LOG, f"Scrape failed: {exc}")
            return self._fail(str(exc) or type(exc).__name__)

        self._emit(SCRAPER_DONE, jobs)
        self._log(f"Scraping finished. Collected {len(jobs)} jobs.")
        if jobs:
            log.info("Preview:\n%s", format_preview(jobs))
        self._notify_summary(len(jobs))
        self.state = ScrapeState.DONE
        return ScrapeResult(ok=True, jobs=jobs)

    def _extract_all(self) -> list[JobRecord]:
        document = BeautifulSoup(self.snapshot.html, "html.parser")
        cards = find_job_cards(document)
        total = len(cards)
        self._log(f"Parsing {total} job cards...")

        jobs: list[JobRecord] = []
        for i, card in enumerate(cards):
            try:
                job = extract_job(card, base_url=self.snapshot.url)
                if job.title:
                    jobs.append(job)
                    log.debug("Job parsed: %s", job.title)
                self._emit(SCRAPER_PROGRESS, {"current": i + 1, "total": total})
            except Exception as exc:
                log.debug("Card %d/%d skipped: %s", i + 1, total, exc)
            if i % self.yield_every == 0:
                self._pause(0)
        return jobs

    def _notify_summary(self, count: int) -> None:
        if self.notifier is None:
            log.info("Notification skipped: no notifier configured.")
            return
        try:
            self.notifier.notify(self.notification_title, f"Scraping complete. Collected {count} jobs.")
        except Exception as exc:
            log.warning("Notification not shown: %s", exc)


def run_scrape(snapshot: PageSnapshot, **kwargs) -> ScrapeResult:
    return ScrapeRun(snapshot, **kwargs).run()


def attach_scraper(
    channel: MessageChannel,
    snapshot_provider: Callable[[], PageSnapshot],
    *,
    cycle_id: str | None = None,
    **run_kwargs,
) -> Callable[[], None]:
    """Answer ``start_scrape`` commands on ``channel``; returns the detach callable.

    Each command scrapes a fresh snapshot in a fresh ScrapeRun; the
    ScrapeResult is the acknowledgment returned to the sender. With a
    ``cycle_id`` only commands carrying that id as payload are answered, so
    a listener never scrapes on behalf of another cycle sharing the channel.
    """
    run_kwargs.setdefault("channel", channel)

    def on_message(message: Message) -> ScrapeResult | None:
        if message.type != START_SCRAPE:
            return None
        if cycle_id is not None and message.payload != cycle_id:
            return None
        return ScrapeRun(snapshot_provider(), **run_kwargs).run()

    return channel.subscribe(on_message)
