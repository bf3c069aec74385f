from __future__ import annotations

import itertools

import pytest

from jobscout.agent import Scout, ShortlistPipeline
from jobscout.browser import PageLoadTimeout
from jobscout.config import DEFAULTS
from jobscout.messaging import MessageChannel
from jobscout.models import PageSnapshot
from jobscout.notify import NotificationError, Notifier
from jobscout.session import SessionContext
from jobscout.shortlist import ShortlistStore
from jobscout.storage import JsonStore

LISTING_URL = "https://www.upwork.com/nx/search/jobs/?q=developer&sort=recency"

# Three cards: two titled (one mentions Python), one without any title link.
LISTING_HTML = """
<html><body>
<section data-test="job-tile-list">
  <article data-ev-job-uid="111" data-test="JobTile">
    <h2><a data-test="job-tile-title-link" href="/jobs/Python-Developer_~111/">Python Developer</a></h2>
    <div data-test="UpCLineClamp JobDescription"><p>Build REST APIs
      for our   data platform.</p></div>
    <ul>
      <li data-test="job-type-label"><strong>Hourly: $30.00 - $60.00</strong></li>
      <li data-test="experience-level"><strong>Expert</strong></li>
      <li data-test="duration-label"><strong>3 to 6 months</strong></li>
      <li data-test="workload"><strong>30+ hrs/week</strong></li>
    </ul>
    <small data-test="job-pubilshed-date"><span>Posted</span> <span>5 minutes ago</span></small>
    <div data-test="TokenClamp JobAttrs">
      <button data-test="token"><span>Python</span></button>
      <button data-test="token"><span>Django</span></button>
      <button data-test="token"><span>Python</span></button>
    </div>
    <ul data-test="client-info">
      <li data-test="payment-verified">Payment verified</li>
      <li data-test="total-feedback"><div aria-label="Rating is 4.9 out of 5."><span>4.9</span></div></li>
      <li data-test="total-spent"><strong>$10K+</strong> spent</li>
      <li data-test="location"><span>United States</span></li>
    </ul>
    <li data-test="proposals-tier">Proposals: 5 to 10</li>
  </article>
  <article data-ev-job-uid="222" data-test="JobTile">
    <h2><a data-test="job-tile-title-link" href="https://www.upwork.com/jobs/Vue-Engineer_~222/">Vue Frontend Engineer</a></h2>
    <div data-test="UpCLineClamp JobDescription">no match here</div>
    <strong data-test="is-fixed-price">Est. budget: $500</strong>
    <div><span data-test="token-Chip">Vue</span><span data-test="token-Chip">CSS</span></div>
    <li data-test="total-feedback"><span>No feedback yet</span></li>
  </article>
  <article data-job-uid="333" data-test="JobTile">
    <div data-test="UpCLineClamp JobDescription">A card whose title failed to render</div>
  </article>
</section>
</body></html>
"""


class RecordingNotifier(Notifier):
    name = "recording"

    def __init__(self, fail: bool = False) -> None:
        self.sent: list[tuple[str, str, str]] = []
        self.fail = fail

    def notify(self, title: str, body: str, url: str = "") -> None:
        if self.fail:
            raise NotificationError("permission denied")
        self.sent.append((title, body, url))


class FakeBrowser:
    """Stands in for BrowserSession; records the lifecycle calls it receives."""

    def __init__(
        self,
        html: str = LISTING_HTML,
        url: str = LISTING_URL,
        *,
        timeout: bool = False,
        open_error: Exception | None = None,
        snapshot_error: Exception | None = None,
    ) -> None:
        self.html = html
        self.url = url
        self.timeout = timeout
        self.open_error = open_error
        self.snapshot_error = snapshot_error
        self.calls: list[str] = []
        self.on_wait = None
        self.on_snapshot = None

    def open_or_focus(self, target_url):
        self.calls.append("open")
        if self.open_error is not None:
            raise self.open_error
        return "page-1"

    def reload(self, page):
        self.calls.append("reload")

    def wait_for_complete(self, page, timeout_ms=60_000):
        self.calls.append("wait")
        if self.on_wait is not None:
            self.on_wait()
        if self.timeout:
            raise PageLoadTimeout("Timeout waiting for load")

    def snapshot(self, page):
        self.calls.append("snapshot")
        if self.on_snapshot is not None:
            self.on_snapshot()
        if self.snapshot_error is not None:
            raise self.snapshot_error
        return PageSnapshot(url=self.url, html=self.html)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def listing_page() -> PageSnapshot:
    return PageSnapshot(url=LISTING_URL, html=LISTING_HTML)


@pytest.fixture
def store(tmp_path) -> JsonStore:
    return JsonStore(tmp_path / "store.json")


@pytest.fixture
def session(store) -> SessionContext:
    return SessionContext(store)


@pytest.fixture
def shortlist_store(store) -> ShortlistStore:
    ticks = itertools.count(1)
    return ShortlistStore(store, preview_size=50, clock=lambda: f"2026-01-01T00:00:{next(ticks):02d}+00:00")


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def scout(session, shortlist_store, notifier) -> Scout:
    config = dict(DEFAULTS)
    channel = MessageChannel(retry_delay=0, sleep=lambda _: None)
    pipeline = ShortlistPipeline(session, shortlist_store, notifier)
    return Scout(config, session, shortlist_store, notifier, channel, pipeline)
