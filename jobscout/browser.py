"""
Page lifecycle on Playwright (Chromium).

Opens the listing page (or focuses one that is already open), reloads it,
waits for the load event with a bounded timeout and serializes the DOM into a
PageSnapshot for the scraper.
"""
from __future__ import annotations

from pathlib import Path

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from jobscout.log import get_logger
from jobscout.models import PageSnapshot
from jobscout.retry import retry
from jobscout.scraper import is_listing_page

log = get_logger(__name__)

DEFAULT_TIMEOUT_MS = 60_000
_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


class BrowserError(Exception):
    """Browser could not be launched, or the page went away."""


class PageLoadTimeout(BrowserError):
    """The page did not reach the load state within the allowed time."""


class BrowserSession:
    def __init__(self, *, headless: bool = True, user_data_dir: str | Path | None = None) -> None:
        self.headless = headless
        self.user_data_dir = str(user_data_dir) if user_data_dir else ""
        self._pw = None
        self._browser = None
        self._context = None

    def __enter__(self) -> "BrowserSession":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def start(self) -> None:
        if self._context is not None:
            return
        try:
            self._pw = sync_playwright().start()
            options = {
                "headless": self.headless,
                "viewport": {"width": 1280, "height": 900},
                "user_agent": _USER_AGENT,
            }
            if self.user_data_dir:
                Path(self.user_data_dir).mkdir(parents=True, exist_ok=True)
                self._context = self._pw.chromium.launch_persistent_context(self.user_data_dir, **options)
            else:
                self._browser = self._pw.chromium.launch(headless=self.headless)
                options.pop("headless")
                self._context = self._browser.new_context(**options)
        except PlaywrightError as exc:
            self.close()
            msg = str(exc).split("\n")[0]
            if "executable doesn't exist" in msg.lower():
                msg = "Chromium not installed — run `playwright install chromium`"
            raise BrowserError(msg) from exc
        log.info("Browser started (headless=%s%s)", self.headless,
                 f", profile={self.user_data_dir}" if self.user_data_dir else "")

    def close(self) -> None:
        for closer in (self._context, self._browser):
            if closer is None:
                continue
            try:
                closer.close()
            except PlaywrightError as exc:
                log.debug("Close failed: %s", exc)
        if self._pw is not None:
            self._pw.stop()
        self._pw = self._browser = self._context = None

    def open_or_focus(self, target_url: str):
        """Reuse an open listing page when there is one, otherwise open the target."""
        self.start()
        try:
            for page in self._context.pages:
                if not page.is_closed() and is_listing_page(page.url, target_url):
                    page.bring_to_front()
                    log.debug("Focused existing page %s", page.url)
                    return page
            page = self._context.new_page()
        except PlaywrightError as exc:
            raise BrowserError(str(exc).split("\n")[0]) from exc
        self._goto(page, target_url)
        try:
            page.bring_to_front()
        except PlaywrightError as exc:
            raise BrowserError(str(exc).split("\n")[0]) from exc
        log.info("Opened %s", target_url)
        return page

    @retry(max_attempts=2, base_delay=2.0, jitter=False, retryable=(PlaywrightError,))
    def _navigate(self, page, url: str) -> None:
        page.goto(url, wait_until="commit", timeout=DEFAULT_TIMEOUT_MS)

    def _goto(self, page, url: str) -> None:
        try:
            self._navigate(page, url)
        except PlaywrightTimeoutError as exc:
            raise PageLoadTimeout(f"Timeout opening {url}") from exc
        except PlaywrightError as exc:
            raise BrowserError(str(exc).split("\n")[0]) from exc

    def reload(self, page) -> None:
        try:
            page.reload(wait_until="commit", timeout=DEFAULT_TIMEOUT_MS)
        except PlaywrightTimeoutError as exc:
            raise PageLoadTimeout("Timeout reloading page") from exc
        except PlaywrightError as exc:
            raise BrowserError(str(exc).split("\n")[0]) from exc

    def wait_for_complete(self, page, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        if page.is_closed():
            raise BrowserError("Page closed")
        try:
            page.wait_for_load_state("load", timeout=timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise PageLoadTimeout("Timeout waiting for load") from exc
        except PlaywrightError as exc:
            if page.is_closed():
                raise BrowserError("Page closed") from exc
            raise BrowserError(str(exc).split("\n")[0]) from exc

    def snapshot(self, page) -> PageSnapshot:
        try:
            return PageSnapshot(url=page.url, html=page.content())
        except PlaywrightError as exc:
            raise BrowserError(f"Could not read page: {str(exc).split(chr(10))[0]}") from exc
