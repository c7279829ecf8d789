"""Parse raw share payloads into normalized share records."""

from __future__ import annotations

import logging
import mimetypes
import re
from pathlib import Path
from typing import Any, Callable
from urllib.parse import unquote, urlparse

from share_mail.share.models import (
    Attachment,
    ClipItem,
    FileReference,
    ParsedShare,
    RawSharePayload,
)

logger = logging.getLogger(__name__)

MimeResolver = Callable[[FileReference], "str | None"]

_URL_RE = re.compile(r"""https?://[^\s<>()"]+""", re.IGNORECASE)
_URL_TRAILING = ".,)]};"


def parse_share(
    payload: RawSharePayload,
    mime_resolver: MimeResolver | None = None,
) -> ParsedShare:
    """Normalize one share payload.

    This never raises: malformed file references are dropped, and a MIME
    type that cannot be resolved is treated as unknown.
    """
    text_parts: list[str] = []
    candidates: list[Any] = []

    for value in (payload.subject, payload.text):
        text = _clean_text(value)
        if text:
            text_parts.append(text)

    if payload.stream is not None:
        candidates.append(payload.stream)
    candidates.extend(payload.streams or [])

    for item in payload.clip_items or []:
        if not isinstance(item, ClipItem):
            logger.debug("Skipping malformed clip item: %r", item)
            continue
        text = _clean_text(item.text)
        if text:
            text_parts.append(text)
        if item.file is not None:
            candidates.append(item.file)

    raw_text = "\n\n".join(text_parts).strip()

    attachments = []
    for ref in _dedupe_references(candidates):
        attachment = _to_attachment(ref, mime_resolver or guess_mime_type)
        if attachment is not None:
            attachments.append(attachment)

    return ParsedShare(
        raw_text=raw_text,
        urls=extract_urls(raw_text),
        attachments=attachments,
    )


def extract_urls(text: str) -> list[str]:
    """Return distinct http(s) URLs from ``text`` in first-seen order."""
    if not text or not text.strip():
        return []

    urls: list[str] = []
    seen: set[str] = set()
    for match in _URL_RE.finditer(text):
        url = match.group(0).strip().rstrip(_URL_TRAILING)
        if url and url not in seen:
            seen.add(url)
            urls.append(url)
    return urls


def guess_mime_type(ref: FileReference) -> str | None:
    """Declared MIME type, else a guess from the locator's extension."""
    if ref.mime_type:
        return ref.mime_type
    content_type, _ = mimetypes.guess_type(ref.display_name or ref.locator)
    return content_type


def payload_from_dict(raw: dict) -> RawSharePayload:
    """Build a payload from a host-provided dict, dropping malformed entries."""
    streams = raw.get("streams") or []
    if not isinstance(streams, (list, tuple)):
        streams = [streams]

    clip_items = []
    for item in raw.get("clip_items") or []:
        if isinstance(item, str):
            clip_items.append(ClipItem(text=item))
        elif isinstance(item, dict):
            clip_items.append(ClipItem(
                text=_optional_str(item.get("text")),
                file=_file_from_raw(item.get("file") or item.get("uri")),
            ))

    return RawSharePayload(
        subject=_optional_str(raw.get("subject")),
        text=_optional_str(raw.get("text")),
        stream=_file_from_raw(raw.get("stream")),
        streams=[ref for ref in map(_file_from_raw, streams) if ref is not None],
        clip_items=clip_items,
    )


def _clean_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def _optional_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _file_from_raw(value: Any) -> FileReference | None:
    if isinstance(value, str):
        return FileReference(locator=value) if value.strip() else None
    if not isinstance(value, dict):
        return None
    locator = value.get("uri") or value.get("locator")
    if not isinstance(locator, str) or not locator.strip():
        return None
    size = value.get("size_bytes")
    return FileReference(
        locator=locator,
        mime_type=_optional_str(value.get("mime_type")),
        display_name=_optional_str(value.get("display_name")),
        size_bytes=size if isinstance(size, int) and not isinstance(size, bool) else None,
    )


def _dedupe_references(candidates: list[Any]) -> list[FileReference]:
    refs: list[FileReference] = []
    seen: set[str] = set()
    for candidate in candidates:
        if isinstance(candidate, str):
            candidate = FileReference(locator=candidate)
        if not isinstance(candidate, FileReference):
            logger.debug("Skipping malformed file reference: %r", candidate)
            continue
        locator = candidate.locator.strip() if isinstance(candidate.locator, str) else ""
        if not locator:
            logger.debug("Skipping file reference without locator")
            continue
        if locator in seen:
            continue
        seen.add(locator)
        refs.append(candidate)
    return refs


def _to_attachment(ref: FileReference, resolve: MimeResolver) -> Attachment | None:
    try:
        mime_type = resolve(ref)
    except Exception as e:
        logger.debug("MIME lookup failed for %s: %s", ref.locator, e)
        mime_type = None

    if mime_type and mime_type.lower().startswith("video/"):
        logger.debug("Skipping video attachment %s (%s)", ref.locator, mime_type)
        return None

    size = ref.size_bytes
    if size is None:
        size = _local_file_size(ref.locator)

    return Attachment(
        locator=ref.locator,
        mime_type=mime_type,
        display_name=ref.display_name,
        size_bytes=size,
    )


def _local_file_size(locator: str) -> int | None:
    """Size of a file:// or plain-path locator; None for anything else."""
    parsed = urlparse(locator)
    if parsed.scheme == "file":
        path = Path(unquote(parsed.path))
    elif not parsed.scheme:
        path = Path(locator)
    else:
        return None
    try:
        return path.stat().st_size if path.is_file() else None
    except OSError:
        return None
