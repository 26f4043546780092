"""Periodic auto-checkout sweep.

One daemon thread runs the sweep at start-up and then every
``interval_seconds``. A failed run is logged and the next tick retries;
the thread never dies on a sweep error.
"""

from __future__ import annotations

import threading
from typing import Callable

from innkeep.domain.reconciliation import run_auto_checkout
from innkeep.observability.correlation import (
    generate_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from innkeep.observability.logging import get_logger
from innkeep.observability.redaction import safe_log_context

logger = get_logger(__name__)


class AutoCheckoutScheduler:
    """Runs a sweep job on a fixed cadence in a background thread."""

    def __init__(
        self,
        interval_seconds: float,
        job: Callable[[], dict] = run_auto_checkout,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._interval = interval_seconds
        self._job = job
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> dict | None:
        """Run the job once. Returns its result, or None if it failed."""
        token = set_correlation_id(generate_correlation_id())
        try:
            return self._job()
        except Exception:
            logger.exception(
                "auto-checkout sweep failed",
                extra={"extra_fields": safe_log_context(interval_seconds=self._interval)},
            )
            return None
        finally:
            reset_correlation_id(token)

    def _loop(self) -> None:
        while not self._stop.is_set():
            self.run_once()
            self._stop.wait(self._interval)

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop, name="auto-checkout", daemon=True
        )
        self._thread.start()
        logger.info(
            "auto-checkout scheduler started",
            extra={"extra_fields": safe_log_context(interval_seconds=self._interval)},
        )

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
