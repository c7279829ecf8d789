"""Share payload parsing, title inference and draft composition."""

from share_mail.share.models import (
    Attachment,
    ClipItem,
    EmailDraft,
    FileReference,
    LinkItem,
    ParsedShare,
    RawSharePayload,
)
from share_mail.share.parser import extract_urls, parse_share, payload_from_dict
from share_mail.share.titles import infer_titles
from share_mail.share.composer import ComposerSettings, DraftComposer, compose, ellipsize

__all__ = [
    "Attachment",
    "ClipItem",
    "EmailDraft",
    "FileReference",
    "LinkItem",
    "ParsedShare",
    "RawSharePayload",
    "extract_urls",
    "parse_share",
    "payload_from_dict",
    "infer_titles",
    "ComposerSettings",
    "DraftComposer",
    "compose",
    "ellipsize",
]
