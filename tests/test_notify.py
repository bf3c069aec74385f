import pytest
import requests

from jobscout.models import JobRecord
from jobscout.notify import (
    EmailNotifier,
    LogNotifier,
    MultiNotifier,
    NotificationError,
    TelegramNotifier,
    get_notifier,
    job_notification,
    notify_new_jobs,
)

from tests.conftest import RecordingNotifier


def _env(values):
    return lambda key: values.get(key, "")


def test_job_notification_body_joins_metadata():
    job = JobRecord(title="Python Developer", payment="Hourly", experience_level="Expert", posted="Posted 1h ago")
    assert job_notification(job) == ("Python Developer", "Hourly • Expert • Posted 1h ago")


def test_job_notification_defaults():
    assert job_notification(JobRecord()) == ("New job", "New shortlisted job")


def test_notify_new_jobs_counts_only_delivered(caplog):
    ok = RecordingNotifier()
    jobs = [JobRecord(title="A", url="https://x/a"), JobRecord(title="B")]
    assert notify_new_jobs(ok, jobs) == 2
    assert ok.sent[0] == ("A", "New shortlisted job", "https://x/a")
    assert notify_new_jobs(RecordingNotifier(fail=True), jobs) == 0


def test_unconfigured_backends_raise():
    with pytest.raises(NotificationError):
        TelegramNotifier(_env({})).notify("t", "b")
    with pytest.raises(NotificationError):
        EmailNotifier(_env({"SMTP_HOST": "smtp.example.com"})).notify("t", "b")


def test_get_notifier_falls_back_to_log():
    assert isinstance(get_notifier(_env({})), LogNotifier)


def test_get_notifier_fans_out_when_configured():
    notifier = get_notifier(_env({"TELEGRAM_BOT_TOKEN": "t", "TELEGRAM_CHAT_ID": "42"}))
    assert isinstance(notifier, MultiNotifier)
    assert [n.name for n in notifier.notifiers] == ["log", "telegram"]


class _FakeResponse:
    def __init__(self, status: int) -> None:
        self.status = status

    def raise_for_status(self) -> None:
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


class _FakeSession:
    def __init__(self, status: int = 200) -> None:
        self.status = status
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        return _FakeResponse(self.status)


def test_telegram_posts_html_message():
    session = _FakeSession()
    TelegramNotifier(_env({"TELEGRAM_BOT_TOKEN": "abc", "TELEGRAM_CHAT_ID": "42"}), session=session).notify(
        "Python <Dev>", "Hourly", "https://x/jobs/~1"
    )
    url, payload = session.posts[0]
    assert url == "https://api.telegram.org/botabc/sendMessage"
    assert payload["chat_id"] == "42"
    assert "<b>Python &lt;Dev&gt;</b>" in payload["text"]
    assert "https://x/jobs/~1" in payload["text"]


def test_telegram_http_error_becomes_notification_error():
    notifier = TelegramNotifier(_env({"TELEGRAM_BOT_TOKEN": "abc", "TELEGRAM_CHAT_ID": "42"}), session=_FakeSession(403))
    with pytest.raises(NotificationError):
        notifier.notify("t", "b")


def test_multi_notifier_fails_only_when_all_fail():
    good = RecordingNotifier()
    MultiNotifier([RecordingNotifier(fail=True), good]).notify("t", "b")
    assert good.sent == [("t", "b", "")]
    with pytest.raises(NotificationError):
        MultiNotifier([RecordingNotifier(fail=True)]).notify("t", "b")
