"""Data models for the share module."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class FileReference:
    """An opaque file locator handed over by the host."""

    locator: str  # content URI, file:// URI or plain path
    mime_type: str | None = None
    display_name: str | None = None
    size_bytes: int | None = None


@dataclass(frozen=True)
class ClipItem:
    """One clip entry; may carry inline text, a file, or both."""

    text: str | None = None
    file: FileReference | None = None


@dataclass
class RawSharePayload:
    """The bundle of text and files received for one share operation."""

    subject: str | None = None
    text: str | None = None
    stream: FileReference | None = None
    streams: list[FileReference] = field(default_factory=list)
    clip_items: list[ClipItem] = field(default_factory=list)


@dataclass(frozen=True)
class Attachment:
    """A shared file that survived filtering."""

    locator: str
    mime_type: str | None
    display_name: str | None
    size_bytes: int | None

    @property
    def is_image(self) -> bool:
        return bool(self.mime_type and self.mime_type.startswith("image/"))


@dataclass(frozen=True)
class ParsedShare:
    """Normalized share content: combined text, URLs and attachments."""

    raw_text: str
    urls: list[str] = field(default_factory=list)
    attachments: list[Attachment] = field(default_factory=list)


@dataclass(frozen=True)
class LinkItem:
    """A shared URL with its resolved title, if any."""

    url: str
    title: str | None = None


@dataclass(frozen=True)
class EmailDraft:
    """Subject plus plain-text and HTML bodies, ready for a mail client."""

    subject: str
    text_body: str
    html_body: str
