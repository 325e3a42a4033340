"""Aggregation of stat events into totals, scores and match reports."""

from __future__ import annotations

import csv
import io
import logging
from collections import defaultdict
from itertools import chain
from typing import Dict, Iterable, List, Optional, Protocol

from ..models import Match, MatchReport, PlayerStatLine, SeasonRecord, SeasonSummary, StatEvent, StatLeader
from ..utils import now_ts
from .event_ledger import EventLedger
from .roster_service import RosterService
from .stat_type_registry import StatTypeRegistry

logger = logging.getLogger(__name__)


class ExportServiceInterface(Protocol):
    """Interface for data export - supports ISP."""

    def export_to_csv(self, report: MatchReport) -> str:
        """Export report to CSV format."""
        ...


def summarize_events(events: Iterable[StatEvent]) -> Dict[int, Dict[str, int]]:
    """Fold events into ``player_id -> stat_type_name -> sum(value)``."""
    view: Dict[int, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for event in events:
        view[event.player_id][event.stat_type_name] += event.value
    return {player_id: dict(totals) for player_id, totals in view.items()}


def score_events(events: Iterable[StatEvent], points: Dict[str, int]) -> int:
    """Points scored by the events: each scoring event counts once."""
    return sum(points.get(event.stat_type_name, 0) for event in events)


class MatchReportExporter:
    """Concrete implementation of export service - follows SRP."""

    def export_to_csv(self, report: MatchReport) -> str:
        """One row per player, one column per stat type seen in the match."""
        stat_names = sorted(report.team_totals)
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(["Player", "Shirt", "Position", "Minutes Played", "Points", *stat_names])
        for line in report.players:
            writer.writerow([
                line.name,
                "" if line.shirt_number is None else line.shirt_number,
                line.position_label or "",
                f"{line.seconds_played / 60:.1f}",
                line.points,
                *[line.totals.get(name, 0) for name in stat_names],
            ])
        writer.writerow(["Team", "", "", "", report.club_score, *[report.team_totals[name] for name in stat_names]])
        return buffer.getvalue()


class AnalyticsService:
    """
    The single source of derived match figures.

    Every figure is recomputed from the ledger on each call, so results
    always equal a fresh fold over the raw events.
    """

    def __init__(
        self,
        ledger: EventLedger,
        registry: StatTypeRegistry,
        roster_service: Optional[RosterService] = None,
        export_service: Optional[ExportServiceInterface] = None,
    ) -> None:
        self.ledger = ledger
        self.registry = registry
        self.roster_service = roster_service or ledger.roster_service
        self.export_service = export_service or MatchReportExporter()

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------
    def aggregate_view(self, match_id: int, period: Optional[int] = None) -> Dict[int, Dict[str, int]]:
        """``player_id -> stat_type_name -> total`` for the match."""
        return summarize_events(self.ledger.events_for_match(match_id, period=period))

    def player_totals(self, match_id: int, player_id: int, period: Optional[int] = None) -> Dict[str, int]:
        events = self.ledger.events_for_player(match_id, player_id, period=period)
        return summarize_events(events).get(player_id, {})

    def team_totals(self, match_id: int, period: Optional[int] = None) -> Dict[str, int]:
        totals: Dict[str, int] = defaultdict(int)
        for event in self.ledger.events_for_match(match_id, period=period):
            totals[event.stat_type_name] += event.value
        return dict(totals)

    def derived_score(self, match_id: int, period: Optional[int] = None) -> int:
        """Club score from scoring events (Try 5, Conversion 2, Penalty Goal 2, Field Goal 1)."""
        return score_events(self.ledger.events_for_match(match_id, period=period), self.registry.scoring_points())

    def player_points(self, match_id: int, period: Optional[int] = None) -> Dict[int, int]:
        points = self.registry.scoring_points()
        by_player: Dict[int, List[StatEvent]] = defaultdict(list)
        for event in self.ledger.events_for_match(match_id, period=period):
            by_player[event.player_id].append(event)
        return {player_id: score_events(events, points) for player_id, events in by_player.items()}

    def stat_leaders(self, match_id: int, period: Optional[int] = None) -> List[StatLeader]:
        """Highest total per stat type; ties go to the lowest player id."""
        return self._leaders(self.aggregate_view(match_id, period))

    def _leaders(self, view: Dict[int, Dict[str, int]]) -> List[StatLeader]:
        best: Dict[str, tuple] = {}
        for player_id, totals in sorted(view.items()):
            for name, value in totals.items():
                if name not in best or value > best[name][1]:
                    best[name] = (player_id, value)

        leaders = []
        for name in sorted(best):
            player_id, value = best[name]
            player = self.ledger.repository.get("players", player_id)
            leaders.append(StatLeader(
                stat_type_name=name,
                player_id=player_id,
                name=player.name if player else f"Player {player_id}",
                value=value,
            ))
        return leaders

    # ------------------------------------------------------------------
    # Season
    # ------------------------------------------------------------------
    def season_matches(self, team_id: Optional[int] = None) -> List[Match]:
        """Every match of the team, or of the club when team_id is None."""
        repository = self.ledger.repository
        if team_id is None:
            return repository.list("matches")
        return repository.list("matches", team_id=team_id)

    def season_record(self, team_id: Optional[int] = None) -> SeasonRecord:
        """Win/loss/draw record over completed matches, scored from the club side."""
        record = SeasonRecord()
        for match in self.season_matches(team_id):
            if not match.is_completed:
                continue
            scores = match.club_and_opponent_scores()
            record.played += 1
            record.points_for += scores["club"]
            record.points_against += scores["opponent"]
            if scores["club"] > scores["opponent"]:
                record.wins += 1
            elif scores["club"] < scores["opponent"]:
                record.losses += 1
            else:
                record.draws += 1
        return record

    def season_summary(self, team_id: Optional[int] = None) -> SeasonSummary:
        """
        Player and team totals folded over all of a team's matches.

        Live matches count too, so the totals always equal a fold over every
        recorded event of those matches.
        """
        matches = self.season_matches(team_id)
        events = list(chain.from_iterable(self.ledger.events_for_match(match.id) for match in matches))
        view = summarize_events(events)
        team_totals: Dict[str, int] = defaultdict(int)
        for totals in view.values():
            for name, value in totals.items():
                team_totals[name] += value
        return SeasonSummary(
            team_id=team_id,
            match_count=len(matches),
            record=self.season_record(team_id),
            team_totals=dict(team_totals),
            player_totals=view,
            leaders=self._leaders(view),
        )

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------
    def generate_match_report(
        self,
        match_id: int,
        elapsed_seconds: int,
        period: Optional[int] = None,
    ) -> MatchReport:
        """Build a :class:`MatchReport` snapshot for the match."""

        repository = self.ledger.repository
        match = repository.get("matches", match_id)
        view = self.aggregate_view(match_id, period)
        points = self.player_points(match_id, period)
        played = self.roster_service.seconds_played(match_id, elapsed_seconds)

        latest_entry = {}
        for entry in self.roster_service.roster_entries(match_id):
            latest_entry[entry.player_id] = entry

        lines = []
        for player_id in sorted(set(view) | set(latest_entry)):
            player = repository.get("players", player_id)
            entry = latest_entry.get(player_id)
            lines.append(PlayerStatLine(
                player_id=player_id,
                name=player.name if player else f"Player {player_id}",
                shirt_number=entry.shirt_number if entry else None,
                position_label=entry.position_label if entry else None,
                on_field=bool(entry and entry.is_active),
                is_starter=any(
                    e.is_starter for e in self.roster_service.roster_entries(match_id) if e.player_id == player_id
                ),
                seconds_played=played.get(player_id, 0),
                totals=view.get(player_id, {}),
                points=points.get(player_id, 0),
            ))
        lines.sort(key=lambda line: (line.shirt_number is None, line.shirt_number or 0, line.name))

        club_score = self.derived_score(match_id, period)
        opponent_score = match.club_and_opponent_scores()["opponent"] if match else 0

        return MatchReport(
            generated_ts=now_ts(),
            match_id=match_id,
            opponent=match.opponent if match else "",
            period=period,
            elapsed_seconds=elapsed_seconds,
            club_score=club_score,
            opponent_score=opponent_score,
            event_count=len(self.ledger.events_for_match(match_id, period=period)),
            team_totals=self.team_totals(match_id, period),
            players=lines,
            leaders=self.stat_leaders(match_id, period),
        )

    def generate_report_csv(self, report: MatchReport) -> str:
        """Return a CSV document for a generated report."""
        return self.export_service.export_to_csv(report)
