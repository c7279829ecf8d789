"""Process-wide guard against overlapping share operations."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from share_mail.exceptions import ShareInProgressError

logger = logging.getLogger(__name__)


class ShareLock:
    """Non-blocking mutex: a second share is refused, never queued."""

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def try_acquire(self) -> bool:
        return self._lock.acquire(blocking=False)

    def release(self) -> None:
        if self._lock.locked():
            self._lock.release()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self) -> Iterator[None]:
        """Hold the lock for the block; raises if another share holds it."""
        if not self.try_acquire():
            logger.warning("Share already in progress; refusing a second one")
            raise ShareInProgressError("Another share operation is already in progress")
        try:
            yield
        finally:
            self.release()


default_lock = ShareLock()
