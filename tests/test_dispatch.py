"""Tests for mail targets and dispatch requests."""

import pytest

from share_mail.dispatch import (
    DispatchRequest,
    MailDispatcher,
    MailTarget,
    filter_email_targets,
    resolve_slot,
)
from share_mail.share.models import Attachment, EmailDraft

DRAFT = EmailDraft(subject="[txt] Hi", text_body="— Hi", html_body="<ul><li>Hi</li></ul>")


def _attachment(locator):
    return Attachment(locator=locator, mime_type=None, display_name=None, size_bytes=None)


def test_mail_dispatcher_is_abstract():
    with pytest.raises(TypeError):
        MailDispatcher()


def test_mail_target_parse():
    assert MailTarget.parse("com.mail/com.mail.Send") == MailTarget("com.mail", "com.mail.Send")
    assert MailTarget.parse("com.mail/.Send") == MailTarget("com.mail", "com.mail.Send")
    assert MailTarget.parse("com.mail") is None
    assert MailTarget.parse("/x") is None
    assert MailTarget.parse("") is None
    assert str(MailTarget("com.mail", "com.mail.Send")) == "com.mail/com.mail.Send"


def test_filter_email_targets():
    handlers = [
        MailTarget("org.chat", "org.chat.Share"),
        MailTarget("com.zmail", "com.zmail.Compose"),
        MailTarget("com.amail", "com.amail.Compose"),
        MailTarget("com.zmail", "com.zmail.Compose"),
    ]
    result = filter_email_targets(handlers, {"com.zmail", "com.amail"})
    assert result == [
        MailTarget("com.amail", "com.amail.Compose"),
        MailTarget("com.zmail", "com.zmail.Compose"),
    ]


def test_resolve_slot():
    assert resolve_slot("ch.example.ShareAliasB") == "B"
    assert resolve_slot("ch.example.ShareAliasC") == "C"
    assert resolve_slot("ch.example.ShareActivity") == "A"
    assert resolve_slot(None) == "A"


def test_request_without_attachments():
    request = DispatchRequest(["me@example.com"], DRAFT, MailTarget("com.mail", "com.mail.Send"))
    assert request.action == "send"
    assert request.mime_type == "text/plain"


def test_request_with_attachments():
    target = MailTarget("com.mail", "com.mail.Send")
    single = DispatchRequest(["me@example.com"], DRAFT, target, [_attachment("content://1")])
    assert single.action == "send"
    assert single.mime_type == "*/*"

    multiple = DispatchRequest(
        ["me@example.com"], DRAFT, target, [_attachment("content://1"), _attachment("content://2")],
    )
    assert multiple.action == "send_multiple"
