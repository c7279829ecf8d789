"""Offline title guessing from the text that accompanied shared links."""

from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_BULLETS = "•-–—"


def infer_titles(raw_text: str, urls: list[str]) -> dict[str, str]:
    """Guess a human title for each URL from the non-URL lines of ``raw_text``.

    One URL takes the first non-URL line. Several URLs take the last non-URL
    line split on commas, but only when there is a part for every URL;
    partial alignments are never guessed and yield an empty mapping.
    """
    if not urls or not raw_text or not raw_text.strip():
        return {}

    lines = [line.strip() for line in raw_text.splitlines()]
    text_lines = [line for line in lines if line and not _is_url_line(line)]
    if not text_lines:
        return {}

    if len(urls) == 1:
        title = clean_title(text_lines[0])
        return {urls[0]: title} if title else {}

    parts = [part.strip() for part in text_lines[-1].split(",")]
    parts = [part for part in parts if part]
    if len(parts) < len(urls):
        return {}

    titles: dict[str, str] = {}
    for url, part in zip(urls, parts):
        title = clean_title(part)
        if title:
            titles[url] = title
    return titles


def clean_title(text: str) -> str:
    """Collapse whitespace and strip leading bullet or dash punctuation."""
    title = _WHITESPACE_RE.sub(" ", text).strip()
    return title.lstrip(_LEADING_BULLETS).strip()


def _is_url_line(line: str) -> bool:
    lowered = line.lower()
    return lowered.startswith("http://") or lowered.startswith("https://")
