"""
Service Factory for dependency injection.

This module wires the match core together around one repository: the
repository is created (or injected) once and every service receives it,
so tests can swap in their own repository double.
"""
from typing import Optional

from ..utils import TICK_INTERVAL_SECONDS
from .analytics_service import AnalyticsService, ExportServiceInterface, MatchReportExporter
from .club_service import ClubService
from .event_ledger import EventLedger
from .match_session import MatchSessionManager
from .persistence_service import InMemoryRepository, PersistenceService, Repository
from .roster_service import RosterService
from .stat_type_registry import StatTypeRegistry


class ServiceFactory:
    """
    Factory for creating service instances with their dependencies injected.
    """

    def __init__(
        self,
        repository: Optional[Repository] = None,
        auto_tick: bool = True,
        tick_interval: float = TICK_INTERVAL_SECONDS,
        seed_stat_types: bool = True,
    ):
        """
        Initialize factory.

        Args:
            repository: Repository to share; a fresh in-memory one by default
            auto_tick: Whether sessions drive their clocks with a background ticker
            tick_interval: Seconds between ticks
            seed_stat_types: Create the default stat types in an empty registry
        """
        self.repository = repository if repository is not None else InMemoryRepository()
        self.auto_tick = auto_tick
        self.tick_interval = tick_interval
        self.seed_stat_types = seed_stat_types
        self._persistence_service: Optional[PersistenceService] = None
        self._export_service: Optional[ExportServiceInterface] = None

    def create_registry(self) -> StatTypeRegistry:
        registry = StatTypeRegistry(self.repository)
        if self.seed_stat_types:
            registry.seed_defaults()
        return registry

    def create_roster_service(self) -> RosterService:
        return RosterService(self.repository)

    def create_event_ledger(
        self,
        roster_service: RosterService,
        registry: Optional[StatTypeRegistry] = None,
    ) -> EventLedger:
        return EventLedger(self.repository, roster_service, registry)

    def create_analytics_service(
        self,
        ledger: EventLedger,
        registry: StatTypeRegistry,
    ) -> AnalyticsService:
        return AnalyticsService(
            ledger=ledger,
            registry=registry,
            roster_service=ledger.roster_service,
            export_service=self._get_export_service(),
        )

    def create_complete_service_suite(self) -> dict:
        """
        Create a complete suite of services sharing one repository.

        Returns:
            Dictionary containing all configured services
        """
        registry = self.create_registry()
        roster = self.create_roster_service()
        ledger = self.create_event_ledger(roster, registry)
        analytics = self.create_analytics_service(ledger, registry)
        sessions = MatchSessionManager(
            self.repository,
            roster,
            ledger,
            analytics,
            auto_tick=self.auto_tick,
            tick_interval=self.tick_interval,
        )

        return {
            'repository': self.repository,
            'registry': registry,
            'roster': roster,
            'ledger': ledger,
            'analytics': analytics,
            'club': ClubService(self.repository),
            'sessions': sessions,
            'persistence': self._get_persistence_service(),
        }

    def _get_persistence_service(self) -> PersistenceService:
        """Get singleton persistence service."""
        if self._persistence_service is None:
            self._persistence_service = PersistenceService()
        return self._persistence_service

    def _get_export_service(self) -> ExportServiceInterface:
        """Get singleton export service."""
        if self._export_service is None:
            self._export_service = MatchReportExporter()
        return self._export_service

    def configure_custom_export_service(self, exporter: ExportServiceInterface) -> None:
        """Configure custom export service."""
        self._export_service = exporter
