"""
Live match session for the ScrumSync match tracker.

A MatchSession is the single owner of one live match: its clock, the ticker
driving that clock, and the roster, ledger and aggregation services acting on
the match. Presentation layers send intents (start, pause, substitute,
record a stat, ...) to the session and subscribe to its change notifications.
"""
import logging
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..errors import MatchNotFound
from ..models import ClockSignal, LineupSlot, Match, MatchClock, RosterEntry, StatEvent
from ..utils import TICK_INTERVAL_SECONDS
from .analytics_service import AnalyticsService
from .clock_ticker import ClockTicker
from .event_ledger import EventLedger
from .persistence_service import Repository
from .roster_service import RosterService
from .timer_service import TimerService

logger = logging.getLogger(__name__)

# listener(event_name, payload); event names: "clock", "period_expired",
# "period_advanced", "match_complete", "roster", "stat", "completed", "closed"
SessionListener = Callable[[str, Dict[str, Any]], None]


class MatchSession:
    """Owns the clock and ticker of one match and routes its live intents."""

    def __init__(
        self,
        match: Match,
        repository: Repository,
        roster_service: RosterService,
        ledger: EventLedger,
        analytics: AnalyticsService,
        auto_tick: bool = True,
        tick_interval: float = TICK_INTERVAL_SECONDS,
    ) -> None:
        self.match_id = match.id
        self.repository = repository
        self.roster_service = roster_service
        self.ledger = ledger
        self.analytics = analytics
        self.auto_tick = auto_tick

        clock = MatchClock(
            period_length_seconds=match.period_length_seconds,
            total_periods=match.number_of_periods,
            current_period=match.current_period,
            seconds_remaining=match.seconds_remaining,
        )
        self.timer = TimerService(clock)
        self._ticker = ClockTicker(self.tick, tick_interval, name=f"match-{match.id}-ticker")
        self._lock = threading.RLock()
        self._listeners: List[SessionListener] = []
        self.closed = False

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event_name: str, payload: Dict[str, Any]) -> None:
        for listener in list(self._listeners):
            try:
                listener(event_name, payload)
            except Exception:
                logger.exception("Match %d: listener failed on %s", self.match_id, event_name)

    # ------------------------------------------------------------------
    # Clock intents
    # ------------------------------------------------------------------
    @property
    def match(self) -> Match:
        match = self.repository.get("matches", self.match_id)
        if match is None:
            raise MatchNotFound(self.match_id)
        return match

    @property
    def is_ticking(self) -> bool:
        return self._ticker.is_running

    def start(self) -> None:
        with self._lock:
            self._ensure_open()
            self.timer.start()
            self._start_ticker()
        self._notify("clock", self.timer.get_clock_state())

    def pause(self) -> None:
        self._ticker.cancel()
        with self._lock:
            self.timer.pause()
            self._persist_clock()
        self._notify("clock", self.timer.get_clock_state())

    def resume(self) -> None:
        with self._lock:
            self._ensure_open()
            self.timer.resume()
            self._start_ticker()
        self._notify("clock", self.timer.get_clock_state())

    def tick(self) -> ClockSignal:
        """Count one second; called by the ticker or by a UI-driven timer."""
        with self._lock:
            signal = self.timer.tick()
            if signal is ClockSignal.PERIOD_EXPIRED:
                self._ticker.cancel()
                self._persist_clock()
            state = self.timer.get_clock_state()
        if signal is ClockSignal.PERIOD_EXPIRED:
            self._notify("period_expired", state)
        if signal is not ClockSignal.NONE:
            self._notify("clock", state)
        return signal

    def advance_period(self) -> ClockSignal:
        self._ticker.cancel()
        with self._lock:
            signal = self.timer.advance_period()
            self._persist_clock()
            state = self.timer.get_clock_state()
        if signal is ClockSignal.MATCH_COMPLETE:
            self._notify("match_complete", state)
        else:
            self._notify("period_advanced", state)
        self._notify("clock", state)
        return signal

    # ------------------------------------------------------------------
    # Roster and stat intents
    # ------------------------------------------------------------------
    def assign_starting_lineup(self, slots: Iterable[LineupSlot]) -> List[RosterEntry]:
        with self._lock:
            self._ensure_open()
            entries = self.roster_service.assign_starting_lineup(self.match_id, slots)
        self._notify("roster", self.roster_state())
        return entries

    def substitute(self, out_player_id: int, in_player_id: int) -> RosterEntry:
        """Substitute at the current clock time."""
        with self._lock:
            self._ensure_open()
            entry = self.roster_service.substitute(
                self.match_id, out_player_id, in_player_id, self.timer.elapsed_seconds()
            )
        self._notify("roster", self.roster_state())
        return entry

    def record_stat(self, player_id: int, stat_type_name: str, value: int = 1) -> StatEvent:
        """Record a stat at the current clock time and period."""
        with self._lock:
            self._ensure_open()
            event = self.ledger.record(
                self.match_id,
                player_id,
                stat_type_name,
                value,
                self.timer.elapsed_seconds(),
                self.timer.clock.current_period,
            )
        self._notify("stat", {"event": event.to_dict(), "team_totals": self.analytics.team_totals(self.match_id)})
        return event

    # ------------------------------------------------------------------
    # Match lifecycle
    # ------------------------------------------------------------------
    def complete(
        self,
        opponent_score: int = 0,
        player_of_match_id: Optional[int] = None,
        player_of_match_comment: Optional[str] = None,
    ) -> Match:
        """
        Finish the match and store the final score.

        The club side's score is always the event-derived score; only the
        opponent's score is entered by hand.
        """
        if int(opponent_score) < 0:
            raise ValueError("Opponent score cannot be negative")
        self._ticker.cancel()
        with self._lock:
            self.timer.pause()
            club_score = self.analytics.derived_score(self.match_id)
            match = self.match
            home, away = (club_score, int(opponent_score)) if match.is_home else (int(opponent_score), club_score)
            match = self.repository.update(
                "matches",
                self.match_id,
                home_score=home,
                away_score=away,
                is_completed=True,
                player_of_match_id=player_of_match_id,
                player_of_match_comment=player_of_match_comment,
                current_period=self.timer.clock.current_period,
                seconds_remaining=self.timer.clock.seconds_remaining,
            )
            self.closed = True
        logger.info("Match %d completed %d-%d", self.match_id, match.home_score, match.away_score)
        self._notify("completed", match.to_dict())
        return match

    def abandon(self) -> None:
        """
        Stop the match and return it to kick-off.

        The clock rewinds to the start of the first period, so the roster
        timeline and the stat events recorded against it are discarded too.
        """
        self._ticker.cancel()
        with self._lock:
            with self.repository.transaction():
                for entry in self.roster_service.roster_entries(self.match_id):
                    self.repository.delete("roster_entries", entry.id)
                for event in self.repository.list("stat_events", match_id=self.match_id):
                    self.repository.delete("stat_events", event.id)
                self.timer.reset()
                self._persist_clock()
            self.closed = True
        logger.info("Match %d abandoned", self.match_id)
        self._notify("closed", {"match_id": self.match_id})

    def close(self) -> None:
        """Tear down the session: stop the ticker and keep the clock position."""
        self._ticker.cancel()
        with self._lock:
            if self.timer.clock.is_running:
                self.timer.pause()
            self._persist_clock()
            self.closed = True
        self._notify("closed", {"match_id": self.match_id})

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------
    def roster_state(self) -> Dict[str, Any]:
        return {
            "active": [entry.to_dict() for entry in self.roster_service.active_players(self.match_id)],
            "bench": [player.to_dict() for player in self.roster_service.bench_players(self.match_id)],
        }

    def snapshot(self) -> Dict[str, Any]:
        """Everything the live match screen renders."""
        with self._lock:
            clock = self.timer.get_clock_state()
            match = self.match
            return {
                "match": match.to_dict(),
                "clock": clock,
                "roster": self.roster_state(),
                "team_totals": self.analytics.team_totals(self.match_id),
                "player_totals": {
                    str(player_id): totals
                    for player_id, totals in self.analytics.aggregate_view(self.match_id).items()
                },
                "score": {
                    "club": self.analytics.derived_score(self.match_id),
                    "opponent": match.club_and_opponent_scores()["opponent"],
                },
                "activity": self.ledger.recent_activity(self.match_id),
                "is_ticking": self.is_ticking,
                "closed": self.closed,
            }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _start_ticker(self) -> None:
        if self.auto_tick and self.timer.clock.is_running:
            self._ticker.start()

    def _persist_clock(self) -> None:
        self.repository.update(
            "matches",
            self.match_id,
            current_period=self.timer.clock.current_period,
            seconds_remaining=self.timer.clock.seconds_remaining,
        )

    def _ensure_open(self) -> None:
        if self.closed:
            raise ValueError(f"Match {self.match_id} session is closed")


class MatchSessionManager:
    """Keeps one session per live match and tears them down on request."""

    def __init__(
        self,
        repository: Repository,
        roster_service: RosterService,
        ledger: EventLedger,
        analytics: AnalyticsService,
        auto_tick: bool = True,
        tick_interval: float = TICK_INTERVAL_SECONDS,
    ) -> None:
        self.repository = repository
        self.roster_service = roster_service
        self.ledger = ledger
        self.analytics = analytics
        self.auto_tick = auto_tick
        self.tick_interval = tick_interval
        self._sessions: Dict[int, MatchSession] = {}
        self._lock = threading.Lock()

    def open(self, match_id: int) -> MatchSession:
        """Return the live session for a match, creating it on first use."""
        with self._lock:
            session = self._sessions.get(match_id)
            if session is not None and not session.closed:
                return session
            match = self.repository.get("matches", match_id)
            if match is None:
                raise MatchNotFound(match_id)
            if match.is_completed:
                raise ValueError(f"Match {match_id} is already completed")
            session = MatchSession(
                match,
                self.repository,
                self.roster_service,
                self.ledger,
                self.analytics,
                auto_tick=self.auto_tick,
                tick_interval=self.tick_interval,
            )
            self._sessions[match_id] = session
            return session

    def get(self, match_id: int) -> Optional[MatchSession]:
        return self._sessions.get(match_id)

    def close(self, match_id: int) -> None:
        with self._lock:
            session = self._sessions.pop(match_id, None)
        if session is not None and not session.closed:
            session.close()

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            if not session.closed:
                session.close()
