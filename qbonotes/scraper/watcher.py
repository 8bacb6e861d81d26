"""Re-run page classification after the URL settles.

The accounting app is a single-page app: navigation changes the URL without a
page load. Each change (re)arms one timer; a newer change cancels the pending
run, so only the URL that stayed put for the settle delay is processed.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from qbonotes.config import EXTRACT_SETTLE_DELAY_SECONDS
from qbonotes.observability.logging import get_logger

logger = get_logger(__name__)


class UrlChangeWatcher:
    def __init__(
        self,
        callback: Callable[[str], Any],
        settle_delay: float = EXTRACT_SETTLE_DELAY_SECONDS,
        timer_factory: Callable[..., Any] = threading.Timer,
        initial_url: str | None = None,
    ):
        self.callback = callback
        self.settle_delay = settle_delay
        self.timer_factory = timer_factory
        self.last_url = initial_url
        self._timer: Any = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._timer is not None

    def observe(self, url: str) -> bool:
        """
        Record the current URL.

        Returns:
            True if the URL changed and a run was scheduled
        """
        with self._lock:
            if url == self.last_url:
                return False
            self.last_url = url
            if self._timer is not None:
                self._timer.cancel()
            timer = self.timer_factory(self.settle_delay, self._fire, args=(url,))
            timer.daemon = True
            self._timer = timer
            timer.start()

        logger.debug("URL changed to %s, re-checking in %.1fs", url, self.settle_delay)
        return True

    def _fire(self, url: str) -> None:
        with self._lock:
            # A newer change may have replaced this run after it started
            if url != self.last_url:
                return
            self._timer = None
        self.callback(url)

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
