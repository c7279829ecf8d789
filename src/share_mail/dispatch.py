"""Mail targets and the contract for handing drafts to the host."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from share_mail.share.models import Attachment, EmailDraft

SEND = "send"
SEND_MULTIPLE = "send_multiple"


@dataclass(frozen=True)
class MailTarget:
    """An installed mail-capable app, identified by package and component."""

    package: str
    component: str
    label: str = ""

    @classmethod
    def parse(cls, value: str) -> MailTarget | None:
        """Parse ``"package/component"``; a component starting with ``.`` is package-relative."""
        package, sep, component = (value or "").strip().partition("/")
        package, component = package.strip(), component.strip()
        if not sep or not package or not component:
            return None
        if component.startswith("."):
            component = package + component
        return cls(package=package, component=component)

    def __str__(self) -> str:
        return f"{self.package}/{self.component}"


@dataclass(frozen=True)
class DispatchRequest:
    """Everything the host needs to open the mail client with a draft."""

    recipients: list[str]
    draft: EmailDraft
    target: MailTarget
    attachments: list[Attachment] = field(default_factory=list)

    @property
    def action(self) -> str:
        return SEND_MULTIPLE if len(self.attachments) > 1 else SEND

    @property
    def mime_type(self) -> str:
        return "*/*" if self.attachments else "text/plain"


class MailDispatcher(ABC):
    """Host-side launcher for the chosen email app."""

    @abstractmethod
    def is_available(self, target: MailTarget) -> bool:
        """Whether the target app is still installed and can take a share."""
        ...

    @abstractmethod
    def dispatch(self, request: DispatchRequest) -> None:
        """Open the target app with the composed draft."""
        ...


def filter_email_targets(
    send_handlers: list[MailTarget],
    mailto_packages: set[str] | list[str],
) -> list[MailTarget]:
    """Keep send handlers whose package also handles ``mailto:`` links."""
    mail_packages = set(mailto_packages)
    distinct = dict.fromkeys(send_handlers)
    return sorted(
        (target for target in distinct if target.package in mail_packages),
        key=lambda target: (target.package, target.component),
    )


def resolve_slot(component_name: str | None) -> str:
    """Recipient slot from the share alias that was invoked; defaults to ``"A"``."""
    name = component_name or ""
    for slot in ("A", "B", "C"):
        if name.endswith(f"ShareAlias{slot}"):
            return slot
    return "A"
