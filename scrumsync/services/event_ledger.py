"""
Event ledger for the ScrumSync match tracker.

The ledger is the append-only record of stat events. An event is accepted only
when its player was on the field at the recorded time; accepted events are
never changed or removed.
"""
import logging
from typing import Any, Dict, Iterator, List, Optional

from ..errors import InvalidStatValue, PeriodBoundsExceeded, PlayerNotActive, UnknownStatType
from ..models import StatEvent
from ..utils import ACTIVITY_LOG_LIMIT
from .persistence_service import Repository
from .roster_service import RosterService
from .stat_type_registry import StatTypeRegistry

logger = logging.getLogger(__name__)


class EventStream:
    """
    Lazy view of a match's events, ordered by elapsed time then insertion.

    Nothing is read until iteration starts, and every iteration reads the
    ledger afresh, so the same stream can be walked any number of times and
    reflects events appended in between.
    """

    def __init__(
        self,
        repository: Repository,
        match_id: int,
        player_id: Optional[int] = None,
        period: Optional[int] = None,
    ) -> None:
        self._repository = repository
        self.match_id = match_id
        self.player_id = player_id
        self.period = period

    def __iter__(self) -> Iterator[StatEvent]:
        events = [
            event
            for event in self._repository.list("stat_events", match_id=self.match_id)
            if (self.player_id is None or event.player_id == self.player_id)
            and (self.period is None or event.period == self.period)
        ]
        events.sort(key=lambda event: (event.elapsed_seconds, event.id))
        yield from events

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"EventStream(match_id={self.match_id}, player_id={self.player_id}, period={self.period})"


class EventLedger:
    """Validate and append stat events; read them back in match order."""

    def __init__(
        self,
        repository: Repository,
        roster_service: RosterService,
        registry: Optional[StatTypeRegistry] = None,
    ) -> None:
        self.repository = repository
        self.roster_service = roster_service
        self.registry = registry

    def record(
        self,
        match_id: int,
        player_id: int,
        stat_type_name: str,
        value: int,
        elapsed_seconds: int,
        period: int,
    ) -> StatEvent:
        """
        Append a stat event.

        Raises:
            InvalidStatValue: If value is not a positive integer, or is not 1
                              for a scoring stat type
            UnknownStatType: If a registry is attached and the type is not active in it
            PeriodBoundsExceeded: If period is outside the match's periods
            PlayerNotActive: If the player was not on the field at elapsed_seconds
        """
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise InvalidStatValue(value)
        if self.registry is not None and not self.registry.is_recognized(stat_type_name):
            raise UnknownStatType(stat_type_name)
        if value != 1 and self.registry is not None and self.registry.get_by_name(stat_type_name).is_scoring:
            raise InvalidStatValue(value, f"{stat_type_name} is recorded one score at a time")
        self._check_period(match_id, period)
        if self.roster_service.entry_at(match_id, player_id, elapsed_seconds) is None:
            logger.warning(
                "Match %d: %s rejected, player %d not on field at %ds",
                match_id, stat_type_name, player_id, elapsed_seconds,
            )
            raise PlayerNotActive(player_id, elapsed_seconds)

        event = self.repository.create(
            "stat_events",
            match_id=match_id,
            player_id=player_id,
            stat_type_name=stat_type_name,
            value=value,
            elapsed_seconds=elapsed_seconds,
            period=period,
        )
        logger.debug("Match %d: recorded %s x%d for player %d", match_id, stat_type_name, value, player_id)
        return event

    def events_for_match(self, match_id: int, period: Optional[int] = None) -> EventStream:
        return EventStream(self.repository, match_id, period=period)

    def events_for_player(self, match_id: int, player_id: int, period: Optional[int] = None) -> EventStream:
        return EventStream(self.repository, match_id, player_id=player_id, period=period)

    def recent_activity(self, match_id: int, limit: int = ACTIVITY_LOG_LIMIT) -> List[Dict[str, Any]]:
        """Newest events first with player name and shirt number, for the live feed."""
        events = list(self.events_for_match(match_id))
        events.reverse()
        feed = []
        for event in events[:limit]:
            player = self.repository.get("players", event.player_id)
            entry = self.roster_service.entry_at(match_id, event.player_id, event.elapsed_seconds)
            feed.append({
                "id": event.id,
                "elapsed_seconds": event.elapsed_seconds,
                "period": event.period,
                "player_id": event.player_id,
                "player_name": player.name if player else f"Player {event.player_id}",
                "shirt_number": entry.shirt_number if entry else None,
                "stat_type_name": event.stat_type_name,
                "value": event.value,
            })
        return feed

    def _check_period(self, match_id: int, period: int) -> None:
        match = self.repository.get("matches", match_id)
        total = match.number_of_periods if match is not None else None
        if period < 1 or (total is not None and period > total):
            raise PeriodBoundsExceeded(period, total if total is not None else period)
