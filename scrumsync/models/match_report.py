"""Dataclasses representing aggregate stat reports for a match."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class PlayerStatLine:
    """Aggregated stats for a single player in one match."""

    player_id: int
    name: str
    shirt_number: Optional[int]
    position_label: Optional[str]
    on_field: bool
    is_starter: bool
    seconds_played: int
    totals: Dict[str, int] = field(default_factory=dict)
    points: int = 0


@dataclass
class StatLeader:
    """Top performer for one stat type."""

    stat_type_name: str
    player_id: int
    name: str
    value: int


@dataclass
class MatchReport:
    """Snapshot of all event-derived figures for a match."""

    generated_ts: float
    match_id: int
    opponent: str
    period: Optional[int]
    elapsed_seconds: int
    club_score: int
    opponent_score: int
    event_count: int
    team_totals: Dict[str, int] = field(default_factory=dict)
    players: List[PlayerStatLine] = field(default_factory=list)
    leaders: List[StatLeader] = field(default_factory=list)


@dataclass
class SeasonRecord:
    """Results of completed matches from the club side's point of view."""

    played: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    points_for: int = 0
    points_against: int = 0


@dataclass
class SeasonSummary:
    """Stat totals across every match of a team (or of the whole club)."""

    team_id: Optional[int]
    match_count: int
    record: SeasonRecord
    team_totals: Dict[str, int] = field(default_factory=dict)
    player_totals: Dict[int, Dict[str, int]] = field(default_factory=dict)
    leaders: List[StatLeader] = field(default_factory=list)
