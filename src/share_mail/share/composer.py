"""Compose an email draft (subject + text/HTML body) from parsed share content."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urlparse

from share_mail.exceptions import ConfigError
from share_mail.share.models import Attachment, EmailDraft, LinkItem, ParsedShare
from share_mail.share.titles import infer_titles

logger = logging.getLogger(__name__)

SUBJECT_MAX = 160
SUBJECT_ITEM_MAX = 40
SUBJECT_SEPARATOR = " | "
BULLET = "— "
ELLIPSIS = "…"
PLACEHOLDER = "Shared content"


@dataclass(frozen=True)
class ComposerSettings:
    """Formatting knobs for :class:`DraftComposer`."""

    subject_max: int = SUBJECT_MAX
    item_max: int = SUBJECT_ITEM_MAX
    separator: str = SUBJECT_SEPARATOR
    bullet: str = BULLET


def ellipsize(text: str, budget: int) -> str:
    """Shorten ``text`` to at most ``budget`` characters, ending in an ellipsis."""
    if len(text) <= budget:
        return text
    if budget <= 1:
        return ELLIPSIS
    return text[: budget - 1].rstrip() + ELLIPSIS


class DraftComposer:
    """Turn a :class:`ParsedShare` into an :class:`EmailDraft`.

    Composition is pure and never fails: a share with no usable content still
    produces the "Shared content" placeholder subject and body.

    Args:
        settings: Subject limits, separator and bullet marker.
    """

    def __init__(self, settings: ComposerSettings | None = None):
        settings = settings or ComposerSettings()
        if settings.subject_max < 1:
            raise ConfigError(
                f"subject_max must be at least 1, got {settings.subject_max}"
            )
        self.settings = settings

    def compose(
        self,
        parsed: ParsedShare,
        fetched_titles: Mapping[str, str | None] | None = None,
    ) -> EmailDraft:
        links = self.resolve_links(parsed, fetched_titles or {})
        subject = self._build_subject(parsed, links)
        text_body, html_body = self._render(self._body_items(parsed, links))
        logger.debug(
            "Composed draft: %d link(s), %d attachment(s)",
            len(links), len(parsed.attachments),
        )
        return EmailDraft(subject=subject, text_body=text_body, html_body=html_body)

    @staticmethod
    def resolve_links(
        parsed: ParsedShare,
        fetched_titles: Mapping[str, str | None],
    ) -> list[LinkItem]:
        """Fetched title wins, then the inferred one, then no title at all."""
        inferred = infer_titles(parsed.raw_text, parsed.urls)
        links = []
        for url in parsed.urls:
            title = _non_blank(fetched_titles.get(url)) or _non_blank(inferred.get(url))
            links.append(LinkItem(url=url, title=title))
        return links

    # Subject

    def _build_subject(self, parsed: ParsedShare, links: list[LinkItem]) -> str:
        prefix = _subject_prefix(parsed)
        budget = max(0, self.settings.subject_max - (len(prefix) + 1))
        core = self._subject_core(parsed, links, budget)
        return ellipsize(f"{prefix} {core}", self.settings.subject_max)

    def _subject_core(
        self,
        parsed: ParsedShare,
        links: list[LinkItem],
        budget: int,
    ) -> str:
        if len(links) == 1:
            link = links[0]
            return ellipsize(link.title or link.url, budget)
        if links:
            labels = [link.title or _host_label(link.url) for link in links]
            return self._join_within_budget(labels, budget)

        if len(parsed.attachments) == 1:
            return ellipsize(_attachment_name(parsed.attachments[0]), budget)
        if parsed.attachments:
            names = [_attachment_name(a) for a in parsed.attachments]
            return self._join_within_budget(names, budget)

        first_line = next(iter(_text_lines(parsed.raw_text)), "")
        if first_line:
            return ellipsize(first_line, budget)
        return PLACEHOLDER

    def _join_within_budget(self, labels: list[str], budget: int) -> str:
        """Join capped labels until the next one would overflow ``budget``.

        When even the first label does not fit it is ellipsized instead, so
        the subject never loses its core entirely.
        """
        capped = [ellipsize(label, self.settings.item_max) for label in labels]
        joined = ""
        for label in capped:
            candidate = f"{joined}{self.settings.separator}{label}" if joined else label
            if len(candidate) > budget:
                break
            joined = candidate
        if not joined and capped:
            joined = ellipsize(capped[0], budget)
        return joined

    # Body

    def _body_items(
        self,
        parsed: ParsedShare,
        links: list[LinkItem],
    ) -> list[tuple[str, str] | None]:
        """Bullet items as ``(plain, html)`` pairs; ``None`` is a blank spacer."""
        attachment_items = []
        for attachment in parsed.attachments:
            name = _last_path_component(attachment.display_name or attachment.locator)
            attachment_items.append((name, html.escape(name)))

        items: list[tuple[str, str] | None] = []
        if links:
            # Links alone get a blank line after each bullet.
            spaced = not attachment_items
            for link in links:
                items.append((_link_text(link), _link_html(link)))
                if spaced:
                    items.append(None)
            while items and items[-1] is None:
                items.pop()
            items.extend(attachment_items)
        elif attachment_items:
            items = list(attachment_items)
        else:
            items = [(line, html.escape(line)) for line in _text_lines(parsed.raw_text)]

        return items or [(PLACEHOLDER, PLACEHOLDER)]

    def _render(self, items: list[tuple[str, str] | None]) -> tuple[str, str]:
        plain_lines = []
        html_items = []
        for item in items:
            if item is None:
                plain_lines.append("")
                continue
            plain, markup = item
            plain_lines.append(self.settings.bullet + plain)
            html_items.append(f"<li>{markup}</li>")
        text_body = "\n".join(plain_lines)
        html_body = f"<html><body><ul>{''.join(html_items)}</ul></body></html>"
        return text_body, html_body


def compose(
    parsed: ParsedShare,
    fetched_titles: Mapping[str, str | None] | None = None,
) -> EmailDraft:
    """Compose a draft with the default formatting settings."""
    return DraftComposer().compose(parsed, fetched_titles)


def _subject_prefix(parsed: ParsedShare) -> str:
    if parsed.urls:
        return "[url]"
    if parsed.attachments and all(a.is_image for a in parsed.attachments):
        return "[img]"
    if parsed.attachments:
        return "[file]"
    if parsed.raw_text.strip():
        return "[txt]"
    return "[file]"


def _non_blank(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _text_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def _host_label(url: str) -> str:
    try:
        host = urlparse(url).hostname
    except ValueError:
        return url
    if not host:
        return url
    return host[4:] if host.startswith("www.") else host


def _attachment_name(attachment: Attachment) -> str:
    if attachment.display_name and attachment.display_name.strip():
        return attachment.display_name.strip()
    return _last_path_component(attachment.locator)


def _last_path_component(value: str) -> str:
    path = urlparse(value).path if "://" in value else value
    segments = [s for s in path.replace("\\", "/").split("/") if s]
    return segments[-1] if segments else value


def _has_distinct_title(link: LinkItem) -> bool:
    return bool(link.title) and link.title != link.url


def _link_text(link: LinkItem) -> str:
    if _has_distinct_title(link):
        return f"{link.title} {link.url}"
    return link.url


def _link_html(link: LinkItem) -> str:
    escaped = html.escape(link.url)
    anchor = f'<a href="{escaped}">{escaped}</a>'
    if _has_distinct_title(link):
        return f"{html.escape(link.title)} {anchor}"
    return anchor
