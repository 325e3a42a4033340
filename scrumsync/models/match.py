"""
Match model for the ScrumSync match tracker.

A Match is one played fixture instance. Besides the fixture details it keeps
the persisted clock position so an interrupted match can be resumed, and the
final score written when the match is completed.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from .club import parse_datetime
from ..utils.constants import DEFAULT_PERIOD_COUNT, DEFAULT_PERIOD_LENGTH_MIN


@dataclass
class Match:
    """
    Represents a played match.

    Attributes:
        id: Repository-assigned identifier
        team_id: Club team playing the match
        opponent: Opposition name
        location: Venue
        date: Kick-off date/time
        period_length_min: Length of each period in minutes
        number_of_periods: 2 halves or 4 quarters
        fixture_id: Fixture this match was created from, if any
        is_home: Whether the club side is the home team
        home_score: Final home score, written on completion
        away_score: Final away score, written on completion
        is_completed: Whether the match has finished
        player_of_match_id: Player of the match, if chosen
        player_of_match_comment: Coach comment on the player of the match
        current_period: Persisted clock period (1-indexed)
        seconds_remaining: Persisted clock seconds left in the period
    """
    id: int
    team_id: int
    opponent: str
    location: str
    date: datetime = field(default_factory=datetime.now)
    period_length_min: int = DEFAULT_PERIOD_LENGTH_MIN
    number_of_periods: int = DEFAULT_PERIOD_COUNT
    fixture_id: Optional[int] = None
    is_home: bool = True
    home_score: int = 0
    away_score: int = 0
    is_completed: bool = False
    player_of_match_id: Optional[int] = None
    player_of_match_comment: Optional[str] = None
    current_period: int = 1
    seconds_remaining: Optional[int] = None

    @property
    def period_length_seconds(self) -> int:
        return self.period_length_min * 60

    def club_and_opponent_scores(self) -> Dict[str, int]:
        """Return the stored score from the club side's point of view."""
        if self.is_home:
            return {"club": self.home_score, "opponent": self.away_score}
        return {"club": self.away_score, "opponent": self.home_score}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "fixture_id": self.fixture_id,
            "opponent": self.opponent,
            "location": self.location,
            "date": self.date.isoformat(),
            "period_length_min": self.period_length_min,
            "number_of_periods": self.number_of_periods,
            "is_home": self.is_home,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "is_completed": self.is_completed,
            "player_of_match_id": self.player_of_match_id,
            "player_of_match_comment": self.player_of_match_comment,
            "current_period": self.current_period,
            "seconds_remaining": self.seconds_remaining,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        fixture_id = data.get("fixture_id")
        potm = data.get("player_of_match_id")
        remaining = data.get("seconds_remaining")
        return cls(
            id=int(data["id"]),
            team_id=int(data["team_id"]),
            fixture_id=None if fixture_id is None else int(fixture_id),
            opponent=data["opponent"],
            location=data.get("location", ""),
            date=parse_datetime(data.get("date")) or datetime.now(),
            period_length_min=int(data.get("period_length_min", DEFAULT_PERIOD_LENGTH_MIN)),
            number_of_periods=int(data.get("number_of_periods", DEFAULT_PERIOD_COUNT)),
            is_home=data.get("is_home", True),
            home_score=int(data.get("home_score", 0) or 0),
            away_score=int(data.get("away_score", 0) or 0),
            is_completed=data.get("is_completed", False),
            player_of_match_id=None if potm is None else int(potm),
            player_of_match_comment=data.get("player_of_match_comment"),
            current_period=int(data.get("current_period", 1)),
            seconds_remaining=None if remaining is None else int(remaining),
        )
