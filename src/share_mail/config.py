"""Read-only settings for share operations."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

from share_mail.dispatch import MailTarget
from share_mail.exceptions import ConfigError
from share_mail.share.composer import SUBJECT_MAX
from share_mail.web.fetcher import DEFAULT_CONNECT_TIMEOUT, DEFAULT_READ_TIMEOUT

logger = logging.getLogger(__name__)

ENV_PREFIX = "SHARE_MAIL_"
SLOTS = ("A", "B", "C")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Recipient:
    """An additional recipient stored alongside the slot addresses."""

    id: str
    label: str
    email: str


@dataclass(frozen=True)
class ShareSettings:
    """Configuration consumed by :class:`~share_mail.service.ShareService`.

    Attributes:
        recipients: Recipient address per slot ("A", "B", "C").
        other_recipients: Extra recipients offered by the picker.
        fetch_titles_enabled: Fetch page titles over the network.
        default_email_app: Mail app chosen by the user, if any.
        subject_max: Maximum subject length.
        connect_timeout: Title fetch connect timeout in seconds.
        read_timeout: Title fetch read timeout in seconds.
    """

    recipients: dict[str, str] = field(default_factory=dict)
    other_recipients: list[Recipient] = field(default_factory=list)
    fetch_titles_enabled: bool = False
    default_email_app: MailTarget | None = None
    subject_max: int = SUBJECT_MAX
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT

    def recipient_for_slot(self, slot: str) -> str:
        """Trimmed address for ``slot``; unknown slots fall back to slot A."""
        key = slot if slot in SLOTS else "A"
        return (self.recipients.get(key) or "").strip()

    @classmethod
    def from_mapping(cls, values: Mapping[str, object]) -> ShareSettings:
        """Build settings from a key-value store (missing keys use defaults)."""
        recipients = {
            slot: str(values.get(f"recipient_{slot.lower()}_email") or "").strip()
            for slot in SLOTS
        }
        default_app = values.get("default_email_app")
        if isinstance(default_app, MailTarget):
            target = default_app
        else:
            target = MailTarget.parse(str(default_app or ""))
            if default_app and target is None:
                logger.warning("Ignoring malformed default_email_app: %r", default_app)

        return cls(
            recipients=recipients,
            other_recipients=_parse_recipients(values.get("recipients_json")),
            fetch_titles_enabled=_parse_bool(
                "fetch_titles_enabled", values.get("fetch_titles_enabled"), False,
            ),
            default_email_app=target,
            subject_max=_parse_number(
                "subject_max", values.get("subject_max"), SUBJECT_MAX, int, minimum=1,
            ),
            connect_timeout=_parse_number(
                "connect_timeout", values.get("connect_timeout"),
                DEFAULT_CONNECT_TIMEOUT, float, minimum=0,
            ),
            read_timeout=_parse_number(
                "read_timeout", values.get("read_timeout"),
                DEFAULT_READ_TIMEOUT, float, minimum=0,
            ),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ShareSettings:
        """Build settings from ``SHARE_MAIL_*`` environment variables."""
        environ = os.environ if environ is None else environ
        values = {
            key[len(ENV_PREFIX):].lower(): value
            for key, value in environ.items()
            if key.startswith(ENV_PREFIX)
        }
        return cls.from_mapping(values)


def _parse_bool(name: str, value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _parse_number(name, value, default, kind, minimum):
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        number = kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{name} must be a number, got {value!r}") from e
    if number < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {number}")
    return number


def _parse_recipients(raw: object) -> list[Recipient]:
    """Decode the stored recipient list; unreadable data means no recipients."""
    if not raw:
        return []
    try:
        items = json.loads(raw) if isinstance(raw, str) else raw
        recipients = [
            Recipient(
                id=str(item.get("id") or ""),
                label=str(item.get("label") or ""),
                email=str(item.get("email") or ""),
            )
            for item in items
        ]
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning("Ignoring malformed recipients_json: %s", e)
        return []
    return [r for r in recipients if r.id.strip() and r.email.strip()]
