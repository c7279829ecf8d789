"""End-to-end share flow: payload in, draft handed to the mail app."""

from __future__ import annotations

import asyncio
import logging

from share_mail.config import ShareSettings
from share_mail.dispatch import DispatchRequest, MailDispatcher, MailTarget
from share_mail.exceptions import (
    DispatchError,
    MailTargetUnavailableError,
    MissingMailTargetError,
    MissingRecipientError,
)
from share_mail.lock import ShareLock, default_lock
from share_mail.share.composer import ComposerSettings, DraftComposer
from share_mail.share.models import EmailDraft, ParsedShare, RawSharePayload
from share_mail.share.parser import parse_share
from share_mail.web.fetcher import TitleFetcher

logger = logging.getLogger(__name__)


class ShareService:
    """Parse a share, compose a draft and hand it to the chosen email app.

    Only one share runs at a time. Configuration problems (no recipient for
    the slot, no email app chosen, app uninstalled) raise a
    :class:`~share_mail.exceptions.ShareError` so the host can send the user
    to settings; content problems never do.

    Args:
        settings: Read-only configuration.
        dispatcher: Host launcher for the email app.
        fetcher: Title fetcher used when title fetching is enabled.
        composer: Draft composer; built from ``settings`` when omitted.
        lock: Mutual-exclusion guard; defaults to the process-wide lock.
    """

    def __init__(
        self,
        settings: ShareSettings,
        dispatcher: MailDispatcher,
        fetcher: TitleFetcher | None = None,
        composer: DraftComposer | None = None,
        lock: ShareLock | None = None,
    ):
        self.settings = settings
        self.dispatcher = dispatcher
        self.fetcher = fetcher or TitleFetcher(
            connect_timeout=settings.connect_timeout,
            read_timeout=settings.read_timeout,
        )
        self.composer = composer or DraftComposer(
            ComposerSettings(subject_max=settings.subject_max)
        )
        self.lock = lock or default_lock

    def share(self, payload: RawSharePayload, slot: str = "A") -> DispatchRequest:
        """Synchronous share; see :meth:`share_async`."""
        return asyncio.run(self.share_async(payload, slot))

    async def share_async(self, payload: RawSharePayload, slot: str = "A") -> DispatchRequest:
        """Run one share operation and return the request given to the dispatcher."""
        with self.lock.hold():
            recipient = self.settings.recipient_for_slot(slot)
            if not recipient:
                logger.warning("No recipient configured for slot %s", slot)
                raise MissingRecipientError(f"No recipient set for @{slot}")

            target = self._require_target()
            parsed, draft = await self.prepare_async(payload)

            request = DispatchRequest(
                recipients=[recipient],
                draft=draft,
                target=target,
                attachments=list(parsed.attachments),
            )
            try:
                self.dispatcher.dispatch(request)
            except Exception as e:
                raise DispatchError(f"Failed to open {target}: {e}") from e

            logger.info(
                "Dispatched share to %s via %s (%s, %d attachment(s))",
                recipient, target, request.action, len(request.attachments),
            )
            return request

    def prepare(self, payload: RawSharePayload) -> tuple[ParsedShare, EmailDraft]:
        """Synchronous :meth:`prepare_async`."""
        return asyncio.run(self.prepare_async(payload))

    async def prepare_async(
        self, payload: RawSharePayload,
    ) -> tuple[ParsedShare, EmailDraft]:
        """Parse and compose without dispatching."""
        parsed = parse_share(payload)
        fetched: dict[str, str | None] = {}
        if self.settings.fetch_titles_enabled and parsed.urls:
            fetched = await self.fetcher.fetch_titles(parsed.urls)
        return parsed, self.composer.compose(parsed, fetched)

    def _require_target(self) -> MailTarget:
        target = self.settings.default_email_app
        if target is None:
            logger.warning("No default email app configured")
            raise MissingMailTargetError("Please choose a default email app in settings")
        if not self.dispatcher.is_available(target):
            logger.warning("Configured email app %s is not available", target)
            raise MailTargetUnavailableError(
                f"Selected email app {target.package} is not installed"
            )
        return target
