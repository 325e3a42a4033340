"""
Models package for the ScrumSync match tracker.

This package contains the core data models used throughout the application.
"""
from .club import Team, Player, Fixture, User
from .match import Match
from .match_clock import MatchClock, ClockSignal
from .roster import RosterEntry, LineupSlot
from .stat_event import StatEvent, StatType
from .match_report import MatchReport, PlayerStatLine, SeasonRecord, SeasonSummary, StatLeader

__all__ = [
    "Team", "Player", "Fixture", "User", "Match", "MatchClock", "ClockSignal",
    "RosterEntry", "LineupSlot", "StatEvent", "StatType",
    "MatchReport", "PlayerStatLine", "SeasonRecord", "SeasonSummary", "StatLeader"
]
