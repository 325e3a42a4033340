"""
Utilities package for the ScrumSync match tracker.

This package contains utility functions and constants used throughout the application.
"""
from .time_utils import fmt_mmss, now_ts
from .constants import (
    APP_TITLE, DEFAULT_PERIOD_LENGTH_MIN, DEFAULT_PERIOD_COUNT, ALLOWED_PERIOD_COUNTS,
    TICK_INTERVAL_SECONDS, ACTIVITY_LOG_LIMIT, PERIOD_LABELS, DEFAULT_STAT_TYPES
)

__all__ = [
    "fmt_mmss", "now_ts", "APP_TITLE", "DEFAULT_PERIOD_LENGTH_MIN",
    "DEFAULT_PERIOD_COUNT", "ALLOWED_PERIOD_COUNTS", "TICK_INTERVAL_SECONDS",
    "ACTIVITY_LOG_LIMIT", "PERIOD_LABELS", "DEFAULT_STAT_TYPES"
]
