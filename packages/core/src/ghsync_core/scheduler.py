"""Daemon loop.

Runs one sync immediately, then one every `interval_seconds`, forever. The
interval is measured from the end of one pass to the start of the next, so a
slow pass can never overlap the following one. A failing pass is logged and
the loop carries on; only a termination signal stops it.
"""

from __future__ import annotations

import logging
import signal
import sys
import time
from typing import Callable, Optional

from ghsync_core.config import MIN_POLL_INTERVAL
from ghsync_core.models import ReconcileResult

logger = logging.getLogger(__name__)


class Daemon:
    def __init__(
        self,
        run_once: Callable[[], ReconcileResult],
        interval_seconds: int,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval_seconds < MIN_POLL_INTERVAL:
            raise ValueError(f"Poll interval must be at least {MIN_POLL_INTERVAL}s, got {interval_seconds}s")
        self._run_once = run_once
        self._interval = interval_seconds
        self._sleep = sleep

    @property
    def interval_seconds(self) -> int:
        return self._interval

    def run_pass(self) -> Optional[ReconcileResult]:
        """Run one sync and log its outcome. Never raises an Exception."""
        logger.info("Starting sync...")
        try:
            result = self._run_once()
        except Exception as e:
            # run_once has already recorded last_error in the store.
            logger.error("Sync failed: %s", e, exc_info=logger.isEnabledFor(logging.DEBUG))
            return None

        logger.info(
            "Sync complete: +%d created, %d completed, =%d unchanged",
            result.created,
            result.completed,
            result.unchanged,
        )
        for err in result.errors:
            logger.error("Error: %s", err)
        return result

    def run_forever(self, max_passes: Optional[int] = None) -> None:
        """Run the first pass now, then keep polling.

        max_passes bounds the loop for tests; None means until signalled.
        """
        passes = 0
        while True:
            self.run_pass()
            passes += 1
            if max_passes is not None and passes >= max_passes:
                return
            self._sleep(self._interval)


def install_signal_handlers() -> None:
    """Exit immediately on SIGINT/SIGTERM; an in-flight pass is abandoned."""

    def _handle(signum, frame):
        logger.info("Received %s, shutting down", signal.Signals(signum).name)
        sys.exit(0)

    signal.signal(signal.SIGINT, _handle)
    signal.signal(signal.SIGTERM, _handle)
