"""
Services package for the ScrumSync match tracker.

This package contains the service classes that hold the match logic: clock,
roster, event ledger, aggregation, club CRUD and live match sessions.
Includes a factory that wires them around one repository.
"""
from .persistence_service import InMemoryRepository, PersistenceService, Repository
from .timer_service import TimerService
from .clock_ticker import ClockTicker
from .stat_type_registry import StatTypeRegistry
from .roster_service import RosterService
from .event_ledger import EventLedger, EventStream
from .analytics_service import AnalyticsService, MatchReportExporter, summarize_events
from .club_service import ClubService
from .match_session import MatchSession, MatchSessionManager
from .service_factory import ServiceFactory

__all__ = [
    "InMemoryRepository", "PersistenceService", "Repository", "TimerService",
    "ClockTicker", "StatTypeRegistry", "RosterService", "EventLedger", "EventStream",
    "AnalyticsService", "MatchReportExporter", "summarize_events", "ClubService",
    "MatchSession", "MatchSessionManager", "ServiceFactory"
]
