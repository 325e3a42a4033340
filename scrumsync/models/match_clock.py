"""
MatchClock model for the ScrumSync match tracker.

This module contains the MatchClock dataclass which holds the countdown state
of a live match, and the ClockSignal values reported by clock transitions.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..errors import PeriodBoundsExceeded
from ..utils.constants import ALLOWED_PERIOD_COUNTS, DEFAULT_PERIOD_COUNT, DEFAULT_PERIOD_LENGTH_MIN


class ClockSignal(Enum):
    """Outcome of a clock transition, reported to the caller."""
    NONE = "none"
    TICKED = "ticked"
    PERIOD_EXPIRED = "period_expired"
    PERIOD_ADVANCED = "period_advanced"
    MATCH_COMPLETE = "match_complete"


@dataclass
class MatchClock:
    """
    Countdown state of a single match.

    Attributes:
        period_length_seconds: Regulation length of every period
        total_periods: Number of periods in the match (2 halves or 4 quarters)
        current_period: Active period, 1-indexed
        seconds_remaining: Seconds left in the active period
        is_running: Whether ticks currently count down
    """
    period_length_seconds: int = DEFAULT_PERIOD_LENGTH_MIN * 60
    total_periods: int = DEFAULT_PERIOD_COUNT
    current_period: int = 1
    seconds_remaining: Optional[int] = None
    is_running: bool = False

    def __post_init__(self) -> None:
        if self.seconds_remaining is None:
            self.seconds_remaining = self.period_length_seconds
        self.validate()

    def validate(self) -> None:
        """
        Check the clock invariants.

        Raises:
            ValueError: If the configuration or remaining time is invalid
            PeriodBoundsExceeded: If current_period is outside 1..total_periods
        """
        if self.total_periods not in ALLOWED_PERIOD_COUNTS:
            raise ValueError(
                f"A match has {' or '.join(str(n) for n in ALLOWED_PERIOD_COUNTS)} periods, "
                f"got {self.total_periods}"
            )
        if self.period_length_seconds <= 0:
            raise ValueError("Period length must be positive")
        if not 1 <= self.current_period <= self.total_periods:
            raise PeriodBoundsExceeded(self.current_period, self.total_periods)
        if not 0 <= self.seconds_remaining <= self.period_length_seconds:
            raise ValueError(
                f"seconds_remaining must be within 0..{self.period_length_seconds}"
            )

    def elapsed_seconds(self) -> int:
        """
        Match time elapsed across all periods.

        This is the timestamp basis for stat events and roster transitions.
        """
        return (
            (self.current_period - 1) * self.period_length_seconds
            + (self.period_length_seconds - self.seconds_remaining)
        )

    def is_final_period(self) -> bool:
        return self.current_period >= self.total_periods

    def to_json(self) -> dict:
        """Convert MatchClock to a JSON-serializable dictionary."""
        return {
            "period_length_seconds": self.period_length_seconds,
            "total_periods": self.total_periods,
            "current_period": self.current_period,
            "seconds_remaining": self.seconds_remaining,
            "is_running": self.is_running,
        }

    @staticmethod
    def from_json(data: dict) -> "MatchClock":
        """
        Create MatchClock from JSON dictionary.

        A restored clock is never running; the session restarts the ticker.
        """
        length = int(data.get("period_length_seconds", DEFAULT_PERIOD_LENGTH_MIN * 60))
        remaining = data.get("seconds_remaining")
        return MatchClock(
            period_length_seconds=length,
            total_periods=int(data.get("total_periods", DEFAULT_PERIOD_COUNT)),
            current_period=int(data.get("current_period", 1)),
            seconds_remaining=length if remaining is None else int(remaining),
            is_running=False,
        )
