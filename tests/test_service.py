"""Tests for the end-to-end share service."""

import pytest

from share_mail.config import ShareSettings
from share_mail.dispatch import DispatchRequest, MailDispatcher, MailTarget
from share_mail.exceptions import (
    DispatchError,
    MailTargetUnavailableError,
    MissingMailTargetError,
    MissingRecipientError,
    ShareInProgressError,
)
from share_mail.lock import ShareLock
from share_mail.service import ShareService
from share_mail.share.models import FileReference, RawSharePayload

TARGET = MailTarget("com.example.mail", "com.example.mail.Compose")


class FakeDispatcher(MailDispatcher):
    def __init__(self, available=True, error=None):
        self.available = available
        self.error = error
        self.requests = []

    def is_available(self, target):
        return self.available

    def dispatch(self, request):
        if self.error:
            raise self.error
        self.requests.append(request)


class FakeFetcher:
    def __init__(self, titles):
        self.titles = titles
        self.calls = []

    async def fetch_titles(self, urls):
        self.calls.append(list(urls))
        return {url: self.titles.get(url) for url in urls}


def _settings(**overrides):
    values = {
        "recipients": {"A": "a@example.com", "B": "b@example.com"},
        "default_email_app": TARGET,
    }
    values.update(overrides)
    return ShareSettings(**values)


def _service(settings=None, dispatcher=None, fetcher=None, lock=None):
    return ShareService(
        settings or _settings(),
        dispatcher or FakeDispatcher(),
        fetcher=fetcher,
        lock=lock or ShareLock(),
    )


def test_share_dispatches_draft():
    dispatcher = FakeDispatcher()
    payload = RawSharePayload(
        text="Hello\nWorld",
        streams=[FileReference("content://m/a.jpg", mime_type="image/jpeg")],
    )
    request = _service(dispatcher=dispatcher).share(payload, slot="B")

    assert isinstance(request, DispatchRequest)
    assert dispatcher.requests == [request]
    assert request.recipients == ["b@example.com"]
    assert request.target == TARGET
    assert request.draft.subject == "[img] a.jpg"
    assert request.draft.text_body == "— a.jpg"
    assert [a.locator for a in request.attachments] == ["content://m/a.jpg"]
    assert request.action == "send"
    assert request.mime_type == "*/*"


def test_share_uses_fetched_titles_when_enabled():
    fetcher = FakeFetcher({"https://a.example/x": "Fetched"})
    service = _service(settings=_settings(fetch_titles_enabled=True), fetcher=fetcher)
    request = service.share(RawSharePayload(text="Guess\nhttps://a.example/x"))
    assert fetcher.calls == [["https://a.example/x"]]
    assert request.draft.subject == "[url] Fetched"


def test_share_infers_titles_when_fetch_disabled():
    fetcher = FakeFetcher({"https://a.example/x": "Fetched"})
    service = _service(fetcher=fetcher)
    request = service.share(RawSharePayload(text="Guess\nhttps://a.example/x"))
    assert fetcher.calls == []
    assert request.draft.subject == "[url] Guess"


def test_failed_fetch_falls_back_to_bare_url():
    fetcher = FakeFetcher({})
    service = _service(settings=_settings(fetch_titles_enabled=True), fetcher=fetcher)
    parsed, draft = service.prepare(RawSharePayload(text="https://a.example/x"))
    assert parsed.urls == ["https://a.example/x"]
    assert draft.text_body == "— https://a.example/x"


def test_missing_recipient():
    lock = ShareLock()
    service = _service(settings=_settings(recipients={"A": "  "}), lock=lock)
    with pytest.raises(MissingRecipientError, match="@A"):
        service.share(RawSharePayload(text="hi"))
    assert lock.busy is False


def test_missing_mail_target():
    service = _service(settings=_settings(default_email_app=None))
    with pytest.raises(MissingMailTargetError):
        service.share(RawSharePayload(text="hi"))


def test_uninstalled_mail_target():
    dispatcher = FakeDispatcher(available=False)
    with pytest.raises(MailTargetUnavailableError, match="com.example.mail"):
        _service(dispatcher=dispatcher).share(RawSharePayload(text="hi"))
    assert dispatcher.requests == []


def test_dispatch_failure_is_wrapped_and_lock_released():
    lock = ShareLock()
    dispatcher = FakeDispatcher(error=RuntimeError("no activity"))
    with pytest.raises(DispatchError, match="no activity"):
        _service(dispatcher=dispatcher, lock=lock).share(RawSharePayload(text="hi"))
    assert lock.busy is False


def test_concurrent_share_is_refused():
    lock = ShareLock()
    dispatcher = FakeDispatcher()
    assert lock.try_acquire()
    with pytest.raises(ShareInProgressError):
        _service(dispatcher=dispatcher, lock=lock).share(RawSharePayload(text="hi"))
    assert dispatcher.requests == []
    lock.release()
