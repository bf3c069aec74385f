"""
Periodic refresh of the listing page.

Handles the start / pause / update-settings / status commands and the refresh
timer. Cycles are serialized through the scout's cycle lock, so two
schedulers built on one scout never overlap: a trigger that arrives while a
cycle is running is refused with a failed summary and is not queued. No error
inside a cycle escapes ``run_cycle``.
"""
from __future__ import annotations

import threading
import time
import uuid
from typing import Any, Callable

from jobscout.agent import Scout
from jobscout.browser import BrowserError, PageLoadTimeout
from jobscout.log import get_logger
from jobscout.messaging import START_SCRAPE
from jobscout.models import ScrapeResult
from jobscout.scraper import attach_scraper
from jobscout.session import Settings

log = get_logger(__name__)

ALREADY_RUNNING = "scrape already in progress"


def _failed(error: str) -> dict[str, Any]:
    return {"ok": False, "error": error, "scraped": 0, "shortlisted": 0, "new": 0, "notified": 0, "new_jobs": []}


class Scheduler:
    def __init__(self, scout: Scout, browser, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.scout = scout
        self.browser = browser
        self.target_url: str = scout.config["target_url"]
        self.timeout_ms = int(float(scout.config["page_load_timeout_seconds"]) * 1000)
        self._clock = clock
        self._wake = threading.Event()
        self._stop = threading.Event()
        self._period: float | None = None
        self._next_run: float | None = None

    @property
    def session(self):
        return self.scout.session

    # -- commands ---------------------------------------------------------

    def start(self) -> dict[str, Any]:
        """Unpause, scrape now, then (re)arm the timer."""
        self.session.update_settings(scrape_paused=False)
        summary = self.run_cycle(reload=False)
        self.reschedule(self.session.settings.refresh_minutes)
        return summary

    def resume(self) -> Settings:
        settings = self.session.update_settings(scrape_paused=False)
        self.reschedule(settings.refresh_minutes)
        return settings

    def pause(self) -> Settings:
        settings = self.session.update_settings(scrape_paused=True)
        self.reschedule(0)
        return settings

    def update_settings(self, **changes: Any) -> Settings:
        settings = self.session.update_settings(**changes)
        self.reschedule(0 if settings.scrape_paused else settings.refresh_minutes)
        return settings

    def status(self) -> dict[str, Any]:
        settings = self.session.settings
        next_in = None if self._next_run is None else max(0.0, self._next_run - self._clock())
        return {
            "refresh_minutes": settings.refresh_minutes,
            "scrape_paused": settings.scrape_paused,
            "next_run_in_seconds": next_in,
            "running": self.scout.cycle_lock.locked(),
        }

    # -- timer ------------------------------------------------------------

    def reschedule(self, minutes: int) -> None:
        """Arm the timer for every ``minutes``; 0 disarms it."""
        if minutes and minutes > 0:
            self._period = minutes * 60.0
            self._next_run = self._clock() + self._period
            log.info("Next refresh in %d minute(s)", minutes)
        else:
            self._period = None
            self._next_run = None
            log.info("Refresh timer cleared")
        self._wake.set()

    def tick(self) -> dict[str, Any] | None:
        """Fire the alarm if it is due; returns the cycle summary when one ran."""
        if self._next_run is None or self._clock() < self._next_run:
            return None
        # interval may have been changed from another process since arming
        self._period = self.session.settings.refresh_minutes * 60.0
        self._next_run = self._clock() + self._period
        return self.on_alarm()

    def on_alarm(self) -> dict[str, Any] | None:
        if self.session.settings.scrape_paused:
            log.info("Refresh skipped: scraping is paused")
            return None
        return self.run_cycle(reload=True)

    def run_forever(self, start_now: bool = True) -> None:
        settings = self.session.settings
        if start_now and not settings.scrape_paused:
            self.start()
        else:
            self.reschedule(0 if settings.scrape_paused else settings.refresh_minutes)
        log.info("Scheduler running (refresh every %d min, paused=%s)",
                 settings.refresh_minutes, settings.scrape_paused)
        while not self._stop.is_set():
            timeout = None if self._next_run is None else max(0.0, self._next_run - self._clock())
            self._wake.wait(timeout)
            self._wake.clear()
            if self._stop.is_set():
                break
            try:
                self.tick()
            except Exception:
                log.exception("Refresh alarm failed")
        log.info("Scheduler stopped")

    def stop(self) -> None:
        self._stop.set()
        self._wake.set()

    # -- cycle ------------------------------------------------------------

    def run_cycle(self, *, reload: bool = True) -> dict[str, Any]:
        if not self.scout.cycle_lock.acquire(blocking=False):
            log.warning("Refresh trigger ignored: %s", ALREADY_RUNNING)
            return _failed(ALREADY_RUNNING)
        try:
            page = self.browser.open_or_focus(self.target_url)
            if reload:
                self.browser.reload(page)
            self.browser.wait_for_complete(page, self.timeout_ms)
            result = self._inject_and_scrape(page)
            if result is None:
                return _failed("scraper did not respond")
            if not result.ok:
                return _failed(result.error)
            summary = self.scout.pipeline.process(result.jobs)
        except PageLoadTimeout as exc:
            log.error("Page did not load: %s", exc)
            return _failed(str(exc))
        except BrowserError as exc:
            log.error("Browser failure: %s", exc)
            return _failed(str(exc))
        except Exception as exc:
            # the host loop keeps running; the next alarm tries again
            log.exception("Refresh cycle failed")
            return _failed(str(exc) or type(exc).__name__)
        finally:
            self.scout.cycle_lock.release()

        summary.update(ok=True, error="")
        return summary

    def _inject_and_scrape(self, page) -> ScrapeResult | None:
        cfg = self.scout.config
        cycle_id = uuid.uuid4().hex
        detach = attach_scraper(
            self.scout.channel,
            lambda: self.browser.snapshot(page),
            cycle_id=cycle_id,
            target_url=self.target_url,
            notifier=self.scout.notifier,
            notification_title=cfg["notification_title"],
            yield_every=int(cfg["yield_every"]),
        )
        try:
            return self.scout.channel.send(START_SCRAPE, cycle_id)
        finally:
            detach()
