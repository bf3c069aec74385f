"""In-process message channel between the scraper, the scheduler and the UI.

``post`` is fire-and-forget (log/progress/done events). ``send`` is for
commands: a listener acknowledges by returning something other than None;
without an acknowledgment the message is redelivered exactly once after
``retry_delay`` seconds and then dropped.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable

from jobscout.log import get_logger

log = get_logger(__name__)

SCRAPER_LOG = "scraper_log"
SCRAPER_PROGRESS = "scraper_progress"
SCRAPER_DONE = "scraper_done"
START_SCRAPE = "start_scrape"


@dataclass(frozen=True)
class Message:
    type: str
    payload: Any = None


Listener = Callable[[Message], Any]


class MessageChannel:
    def __init__(self, retry_delay: float = 1.0, sleep: Callable[[float], None] = time.sleep) -> None:
        self.retry_delay = retry_delay
        self._sleep = sleep
        self._listeners: list[Listener] = []
        self._guard = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Attach a listener; returns a callable that detaches it."""
        with self._guard:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._guard:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _deliver(self, message: Message) -> Any:
        """Hand the message to every listener; return the first acknowledgment."""
        with self._guard:
            listeners = list(self._listeners)
        ack = None
        for listener in listeners:
            try:
                response = listener(message)
            except Exception as exc:
                log.warning("Listener %r failed on %s: %s", listener, message.type, exc)
                continue
            if ack is None and response is not None:
                ack = response
        return ack

    def post(self, message_type: str, payload: Any = None) -> None:
        self._deliver(Message(message_type, payload))

    def send(self, message_type: str, payload: Any = None) -> Any:
        message = Message(message_type, payload)
        ack = self._deliver(message)
        if ack is not None:
            return ack
        log.debug("No acknowledgment for %s; redelivering in %.1fs", message_type, self.retry_delay)
        self._sleep(self.retry_delay)
        ack = self._deliver(message)
        if ack is None:
            log.debug("Dropped %s after one redelivery", message_type)
        return ack
