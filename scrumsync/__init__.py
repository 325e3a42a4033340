"""
ScrumSync

Team management and live match stat tracking for rugby clubs: a match clock
with halves or quarters, on-field/bench tracking with atomic substitutions,
an append-only stat event ledger and event-derived totals and scores.

This package provides the match core services and a Flask JSON API for
scorekeepers to run matches from the sideline.
"""
from .errors import (
    DuplicateShirtNumber, InvalidStatValue, MatchStateError, PeriodBoundsExceeded, PlayerNotActive
)
from .models import ClockSignal, Match, MatchClock, Player, RosterEntry, StatEvent
from .services import InMemoryRepository, PersistenceService, ServiceFactory, TimerService
from .ui import create_app, run_web_app
from .utils import fmt_mmss, now_ts, APP_TITLE

__version__ = "1.0.0"
__author__ = "ScrumSync Development Team"

__all__ = [
    "DuplicateShirtNumber", "InvalidStatValue", "MatchStateError", "PeriodBoundsExceeded",
    "PlayerNotActive", "ClockSignal", "Match", "MatchClock", "Player", "RosterEntry",
    "StatEvent", "InMemoryRepository", "PersistenceService", "ServiceFactory", "TimerService",
    "create_app", "run_web_app", "fmt_mmss", "now_ts", "APP_TITLE"
]
