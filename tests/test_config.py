"""Tests for share settings."""

import pytest

from share_mail.config import Recipient, ShareSettings
from share_mail.dispatch import MailTarget
from share_mail.exceptions import ConfigError


def test_defaults():
    settings = ShareSettings()
    assert settings.fetch_titles_enabled is False
    assert settings.default_email_app is None
    assert settings.subject_max == 160
    assert settings.connect_timeout == 2.5
    assert settings.read_timeout == 2.5
    assert settings.recipient_for_slot("A") == ""


def test_from_mapping():
    settings = ShareSettings.from_mapping({
        "recipient_a_email": " me@example.com ",
        "recipient_b_email": "work@example.com",
        "fetch_titles_enabled": "true",
        "default_email_app": "com.example.mail/.ComposeActivity",
        "recipients_json": '[{"id": "1", "label": "Mom", "email": "mom@example.com"},'
                           ' {"id": "", "label": "broken", "email": "x@example.com"}]',
        "subject_max": "80",
        "read_timeout": 4,
    })
    assert settings.recipient_for_slot("A") == "me@example.com"
    assert settings.recipient_for_slot("B") == "work@example.com"
    assert settings.recipient_for_slot("C") == ""
    assert settings.recipient_for_slot("Z") == "me@example.com"
    assert settings.fetch_titles_enabled is True
    assert settings.default_email_app == MailTarget(
        package="com.example.mail",
        component="com.example.mail.ComposeActivity",
    )
    assert settings.other_recipients == [Recipient(id="1", label="Mom", email="mom@example.com")]
    assert settings.subject_max == 80
    assert settings.read_timeout == 4.0


def test_malformed_recipients_json_is_ignored():
    settings = ShareSettings.from_mapping({"recipients_json": "{not json"})
    assert settings.other_recipients == []


def test_malformed_default_app_is_ignored():
    settings = ShareSettings.from_mapping({"default_email_app": "no-slash"})
    assert settings.default_email_app is None


def test_bad_boolean_raises():
    with pytest.raises(ConfigError, match="fetch_titles_enabled"):
        ShareSettings.from_mapping({"fetch_titles_enabled": "maybe"})


def test_bad_number_raises():
    with pytest.raises(ConfigError, match="subject_max"):
        ShareSettings.from_mapping({"subject_max": "lots"})
    with pytest.raises(ConfigError, match="subject_max"):
        ShareSettings.from_mapping({"subject_max": 0})


def test_from_env():
    settings = ShareSettings.from_env({
        "SHARE_MAIL_RECIPIENT_C_EMAIL": "c@example.com",
        "SHARE_MAIL_FETCH_TITLES_ENABLED": "1",
        "UNRELATED": "ignored",
    })
    assert settings.recipient_for_slot("C") == "c@example.com"
    assert settings.fetch_titles_enabled is True


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv("SHARE_MAIL_SUBJECT_MAX", "120")
    assert ShareSettings.from_env().subject_max == 120
