"""Best-effort, time-bounded page title fetcher with sync and async interfaces."""

from __future__ import annotations

import asyncio
import ipaddress
import logging
import re
import socket
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup

from share_mail.exceptions import TitleFetchError

logger = logging.getLogger(__name__)

USER_AGENT = "ShareMail/1.0 (+title preview)"
DEFAULT_CONNECT_TIMEOUT = 2.5
DEFAULT_READ_TIMEOUT = 2.5
MAX_TITLE_BYTES = 64 * 1024

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_WHITESPACE_RE = re.compile(r"\s+")

_ALLOWED_SCHEMES = {"http", "https"}

_BLOCKED_NETWORKS = [
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]


def _validate_url(url: str) -> tuple[bool, str | None]:
    """Check that a URL is http(s) and does not resolve to a private network."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False, "Invalid URL format"

    if parsed.scheme not in _ALLOWED_SCHEMES:
        return False, f"Blocked URL scheme: {parsed.scheme}. Only http/https allowed."

    hostname = parsed.hostname
    if not hostname:
        return False, "URL has no hostname"

    if hostname in ("localhost", "0.0.0.0"):
        return False, "Blocked: localhost access not allowed"

    try:
        for addr_info in socket.getaddrinfo(hostname, None):
            ip = ipaddress.ip_address(addr_info[4][0])
            for network in _BLOCKED_NETWORKS:
                if ip in network:
                    return False, f"Blocked: URL resolves to private/internal IP ({ip})"
    except socket.gaierror:
        return False, f"Cannot resolve hostname: {hostname}"

    return True, None


def extract_title(document: str) -> str | None:
    """Return the first ``<title>`` of an HTML document, whitespace-collapsed."""
    match = _TITLE_RE.search(document or "")
    if not match:
        return None
    text = BeautifulSoup(match.group(1), "html.parser").get_text()
    title = _WHITESPACE_RE.sub(" ", text).strip()
    return title or None


def _is_markup(content_type: str) -> bool:
    content_type = content_type.lower()
    return "html" in content_type or "xml" in content_type


class TitleFetcher:
    """Fetch ``<title>`` text for shared links.

    Every failure (connection error, timeout, non-HTML response, missing
    title) yields ``None``; nothing is raised to the caller. Only the first
    ``max_bytes`` of a response body are read.

    Args:
        connect_timeout: Seconds to wait for a connection (default 2.5).
        read_timeout: Seconds to wait between body chunks (default 2.5).
        max_bytes: Response body budget in bytes (default 64 KiB).
        max_redirects: Maximum number of redirects to follow (default 5).
        total_timeout: Hard deadline per URL; defaults to twice the sum of
            the connect and read timeouts.
        block_private_networks: Refuse hosts (and redirect hops) that
            resolve to loopback or private addresses.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        read_timeout: float = DEFAULT_READ_TIMEOUT,
        max_bytes: int = MAX_TITLE_BYTES,
        max_redirects: int = 5,
        total_timeout: float | None = None,
        block_private_networks: bool = False,
        user_agent: str = USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.max_bytes = max_bytes
        self.max_redirects = max_redirects
        self.total_timeout = (
            total_timeout
            if total_timeout is not None
            else 2 * (connect_timeout + read_timeout)
        )
        self.block_private_networks = block_private_networks
        self.user_agent = user_agent
        self._transport = transport

    async def fetch_title(self, url: str) -> str | None:
        """Async fetch of one page title; ``None`` on any failure."""
        try:
            return await asyncio.wait_for(self._fetch(url), timeout=self.total_timeout)
        except Exception as e:
            logger.debug("Title fetch failed for %s: %s", url, e)
            return None

    def fetch_title_sync(self, url: str) -> str | None:
        """Synchronous fetch of one page title."""
        return asyncio.run(self.fetch_title(url))

    async def fetch_titles(self, urls: list[str]) -> dict[str, str | None]:
        """Fetch titles for all distinct URLs concurrently.

        Returns only once every fetch has finished or timed out; a failed
        fetch maps its URL to ``None``.
        """
        distinct = list(dict.fromkeys(urls))
        if not distinct:
            return {}
        results = await asyncio.gather(*(self.fetch_title(url) for url in distinct))
        titles = dict(zip(distinct, results))
        logger.debug(
            "Fetched %d/%d title(s)",
            sum(1 for title in results if title), len(distinct),
        )
        return titles

    def fetch_titles_sync(self, urls: list[str]) -> dict[str, str | None]:
        """Synchronous wrapper around :meth:`fetch_titles`."""
        return asyncio.run(self.fetch_titles(urls))

    def _client(self) -> httpx.AsyncClient:
        event_hooks = {}
        if self.block_private_networks:
            event_hooks["request"] = [self._guard_request]
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.read_timeout, connect=self.connect_timeout),
            follow_redirects=True,
            max_redirects=self.max_redirects,
            headers={"User-Agent": self.user_agent},
            event_hooks=event_hooks,
            transport=self._transport,
        )

    async def _guard_request(self, request: httpx.Request) -> None:
        is_safe, error = await asyncio.to_thread(_validate_url, str(request.url))
        if not is_safe:
            raise TitleFetchError(error)

    async def _fetch(self, url: str) -> str | None:
        # Each call owns its client, so concurrent fetches share no connections.
        async with self._client() as client:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    logger.debug("Title fetch for %s returned %s", url, response.status_code)
                    return None
                content_type = response.headers.get("content-type", "")
                if content_type and not _is_markup(content_type):
                    logger.debug("Skipping non-HTML response for %s: %s", url, content_type)
                    return None
                body = await self._read_limited(response)

        return extract_title(body.decode("utf-8", errors="replace"))

    async def _read_limited(self, response: httpx.Response) -> bytes:
        buffer = bytearray()
        async for chunk in response.aiter_bytes():
            buffer.extend(chunk)
            if len(buffer) >= self.max_bytes:
                break
        return bytes(buffer[: self.max_bytes])
