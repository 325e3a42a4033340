"""Timer service for the ScrumSync match tracker."""

import logging
from typing import Dict, Optional

from ..models import ClockSignal, MatchClock
from ..utils import PERIOD_LABELS, fmt_mmss

logger = logging.getLogger(__name__)


class TimerService:
    """Service for the match countdown: ticks, pauses and period changes."""

    def __init__(self, clock: MatchClock):
        self.clock = clock
        self.clock.validate()

    # ------------------------------------------------------------------
    # Core clock controls
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Start the clock. No-op if already running or the period has expired."""

        if self.clock.is_running or self.clock.seconds_remaining == 0:
            return
        self.clock.is_running = True
        logger.info("Clock started in period %d at %s", self.clock.current_period, self.display_time())

    def tick(self) -> ClockSignal:
        """Count down one second.

        Returns:
            PERIOD_EXPIRED on the tick that reaches zero (the clock stops and
            stays in the current period), TICKED for any other counted second,
            NONE when the clock is not running.
        """

        if not self.clock.is_running:
            return ClockSignal.NONE

        self.clock.seconds_remaining = max(0, self.clock.seconds_remaining - 1)
        if self.clock.seconds_remaining == 0:
            self.clock.is_running = False
            logger.info("Period %d expired", self.clock.current_period)
            return ClockSignal.PERIOD_EXPIRED
        return ClockSignal.TICKED

    def pause(self) -> None:
        """Stop counting without altering the remaining time."""

        self.clock.is_running = False

    def resume(self) -> None:
        """Continue counting from the remaining time.

        An expired period stays stopped until advance_period().
        """

        if self.clock.seconds_remaining == 0:
            return
        self.clock.is_running = True

    def advance_period(self) -> ClockSignal:
        """Move to the next period.

        Returns:
            PERIOD_ADVANCED after moving on, or MATCH_COMPLETE when the final
            period is already active (no state change in that case).
        """

        if self.clock.is_final_period():
            logger.info("Advance requested in final period %d: match complete", self.clock.current_period)
            return ClockSignal.MATCH_COMPLETE

        self.clock.current_period += 1
        self.clock.seconds_remaining = self.clock.period_length_seconds
        self.clock.is_running = False
        logger.info("Advanced to period %d of %d", self.clock.current_period, self.clock.total_periods)
        return ClockSignal.PERIOD_ADVANCED

    def reset(self) -> None:
        """Return the clock to the start of the first period, stopped."""

        self.clock.current_period = 1
        self.clock.seconds_remaining = self.clock.period_length_seconds
        self.clock.is_running = False

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------
    def elapsed_seconds(self) -> int:
        return self.clock.elapsed_seconds()

    def display_time(self) -> str:
        """Remaining time in the current period as mm:ss."""
        return fmt_mmss(self.clock.seconds_remaining)

    def period_label(self, period: Optional[int] = None) -> str:
        """Human name of a period, e.g. "Second Half" or "Third Quarter"."""
        number = self.clock.current_period if period is None else period
        labels = PERIOD_LABELS.get(self.clock.total_periods, [])
        if 1 <= number <= len(labels):
            return labels[number - 1]
        return f"Period {number}"

    def get_clock_state(self) -> Dict[str, object]:
        """Return the clock state for display purposes."""

        return {
            "current_period": self.clock.current_period,
            "total_periods": self.clock.total_periods,
            "period_label": self.period_label(),
            "period_length_seconds": self.clock.period_length_seconds,
            "seconds_remaining": self.clock.seconds_remaining,
            "display_time": self.display_time(),
            "elapsed_seconds": self.elapsed_seconds(),
            "is_running": self.clock.is_running,
            "is_final_period": self.clock.is_final_period(),
        }
