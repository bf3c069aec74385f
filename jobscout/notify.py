"""User notifications: log line, email or Telegram.

A notifier takes ``(title, body)`` and either shows it or raises
``NotificationError``. Callers treat that as non-fatal.
"""
from __future__ import annotations

import html
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Callable

import requests

from jobscout.log import get_logger
from jobscout.models import JobRecord
from jobscout.retry import retry

log = get_logger(__name__)

EnvGetter = Callable[[str], str]


class NotificationError(Exception):
    """The notification backend is unavailable, unconfigured or refused the message."""


class Notifier:
    name = "base"

    def notify(self, title: str, body: str, url: str = "") -> None:
        raise NotImplementedError


class LogNotifier(Notifier):
    name = "log"

    def notify(self, title: str, body: str, url: str = "") -> None:
        log.info("🔔 %s — %s%s", title, body, f" ({url})" if url else "")


@retry(max_attempts=3, base_delay=3.0, retryable=(smtplib.SMTPException, OSError))
def _smtp_send(
    host: str, port: int, user: str, password: str,
    from_addr: str, to_addr: str, msg: MIMEMultipart,
) -> None:
    with smtplib.SMTP(host, port, timeout=30) as server:
        server.starttls()
        server.login(user, password)
        server.sendmail(from_addr, [to_addr], msg.as_string())


class EmailNotifier(Notifier):
    name = "email"

    def __init__(self, env: EnvGetter) -> None:
        self.host = env("SMTP_HOST")
        self.user = env("SMTP_USER")
        self.password = env("SMTP_PASSWORD")
        self.from_addr = env("FROM_EMAIL") or self.user
        self.to_addr = env("TO_EMAIL")
        try:
            self.port = int(env("SMTP_PORT") or 587)
        except ValueError:
            self.port = 587

    @property
    def configured(self) -> bool:
        return all([self.host, self.user, self.password, self.to_addr])

    def notify(self, title: str, body: str, url: str = "") -> None:
        if not self.configured:
            raise NotificationError("SMTP not configured (set SMTP_HOST, SMTP_USER, SMTP_PASSWORD, TO_EMAIL)")
        msg = MIMEMultipart("alternative")
        msg["Subject"] = title
        msg["From"] = self.from_addr
        msg["To"] = self.to_addr
        text = body + (f"\n\n{url}" if url else "")
        link = f'<p><a href="{html.escape(url)}" style="color:#1a73e8">Open job</a></p>' if url else ""
        msg.attach(MIMEText(text, "plain", "utf-8"))
        msg.attach(MIMEText(f"<p>{html.escape(body)}</p>{link}", "html", "utf-8"))
        try:
            _smtp_send(self.host, self.port, self.user, self.password, self.from_addr, self.to_addr, msg)
        except (smtplib.SMTPException, OSError) as exc:
            raise NotificationError(f"Email failed: {str(exc)[:150]}") from exc
        log.info("Email notification sent to %s", self.to_addr)


class TelegramNotifier(Notifier):
    name = "telegram"
    API_URL = "https://api.telegram.org/bot{token}/sendMessage"

    def __init__(self, env: EnvGetter, session: requests.Session | None = None) -> None:
        self.token = env("TELEGRAM_BOT_TOKEN")
        self.chat_id = env("TELEGRAM_CHAT_ID")
        self.session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self.token and self.chat_id)

    def notify(self, title: str, body: str, url: str = "") -> None:
        if not self.configured:
            raise NotificationError("Telegram credentials missing (TELEGRAM_BOT_TOKEN, TELEGRAM_CHAT_ID)")
        message = f"<b>{html.escape(title)}</b>\n{html.escape(body)}"
        if url:
            message += f"\n<a href='{html.escape(url)}'>Open job</a>"
        payload = {
            "chat_id": self.chat_id,
            "text": message,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        try:
            response = self.session.post(self.API_URL.format(token=self.token), json=payload, timeout=10)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise NotificationError(f"Telegram send failed: {exc}") from exc


class MultiNotifier(Notifier):
    """Fan out to several backends; fails only if every backend failed."""

    name = "multi"

    def __init__(self, notifiers: list[Notifier]) -> None:
        self.notifiers = notifiers

    def notify(self, title: str, body: str, url: str = "") -> None:
        errors: list[str] = []
        for notifier in self.notifiers:
            try:
                notifier.notify(title, body, url)
            except NotificationError as exc:
                log.warning("[%s] notification failed: %s", notifier.name, exc)
                errors.append(f"{notifier.name}: {exc}")
        if errors and len(errors) == len(self.notifiers):
            raise NotificationError("; ".join(errors))


def get_notifier(env: EnvGetter) -> Notifier:
    """Every configured backend plus the log; the log alone when nothing is set up."""
    backends: list[Notifier] = [LogNotifier()]
    telegram = TelegramNotifier(env)
    if telegram.configured:
        backends.append(telegram)
        log.info("Registered notifier: Telegram")
    email = EmailNotifier(env)
    if email.configured:
        backends.append(email)
        log.info("Registered notifier: email → %s", email.to_addr)
    return backends[0] if len(backends) == 1 else MultiNotifier(backends)


def job_notification(job: JobRecord) -> tuple[str, str]:
    title = job.title or "New job"
    meta = [part for part in (job.payment, job.experience_level, job.posted) if part]
    return title, " • ".join(meta) or "New shortlisted job"


def notify_new_jobs(notifier: Notifier, jobs: list[JobRecord]) -> int:
    """One notification per job; returns how many were delivered."""
    sent = 0
    for job in jobs:
        title, body = job_notification(job)
        try:
            notifier.notify(title, body, job.url)
            sent += 1
        except NotificationError as exc:
            log.warning("Notification for %r not shown: %s", job.title, exc)
    return sent
