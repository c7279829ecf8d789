"""Turn shared text, links and files into ready-to-send email drafts."""

from share_mail.share import (
    Attachment,
    ClipItem,
    EmailDraft,
    FileReference,
    LinkItem,
    ParsedShare,
    RawSharePayload,
    compose,
    infer_titles,
    parse_share,
)

__version__ = "0.1.0"

__all__ = [
    "Attachment",
    "ClipItem",
    "EmailDraft",
    "FileReference",
    "LinkItem",
    "ParsedShare",
    "RawSharePayload",
    "compose",
    "infer_titles",
    "parse_share",
]
