"""
Cancellable periodic task that drives a match clock.

Each live match session owns one ClockTicker. It calls the session's tick
callback once per interval on a daemon thread until cancelled, so stopping a
match, pausing it or closing the session leaves no timer behind.
"""
import logging
import threading
from typing import Callable, Optional

from ..utils import TICK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class ClockTicker:
    """Run ``callback`` every ``interval`` seconds until cancelled."""

    def __init__(
        self,
        callback: Callable[[], object],
        interval: float = TICK_INTERVAL_SECONDS,
        name: str = "clock-ticker",
    ) -> None:
        if interval <= 0:
            raise ValueError("Tick interval must be positive")
        self._callback = callback
        self.interval = interval
        self.name = name
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._stop_event is not None
            and not self._stop_event.is_set()
        )

    def start(self) -> None:
        """Start ticking. No-op if already running."""
        if self.is_running:
            return
        stop_event = threading.Event()
        thread = threading.Thread(target=self._run, args=(stop_event,), name=self.name, daemon=True)
        self._stop_event = stop_event
        self._thread = thread
        thread.start()
        logger.debug("%s started (interval %.2fs)", self.name, self.interval)

    def cancel(self, timeout: Optional[float] = None) -> None:
        """Stop ticking and wait for the worker thread to exit.

        Safe to call from inside the callback; the worker then exits after
        the callback returns.
        """
        if self._stop_event is not None:
            self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout if timeout is not None else self.interval * 2)
        self._thread = None if thread is not threading.current_thread() else thread
        logger.debug("%s cancelled", self.name)

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self._callback()
            except Exception:
                logger.exception("%s callback failed; stopping", self.name)
                stop_event.set()
