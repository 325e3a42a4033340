"""Stat models: recorded events and the configurable stat types."""

from dataclasses import dataclass, asdict
from typing import Any, Dict


@dataclass(frozen=True)
class StatEvent:
    """
    One immutable recorded action attributed to a player.

    Attributes:
        id: Ledger sequence number, also the insertion order
        match_id: Match the event belongs to
        player_id: Player credited with the event
        stat_type_name: Name of the stat type (e.g. "Tackles")
        value: Positive quantity (1 for counting stats, meters for "Meters")
        elapsed_seconds: Match clock elapsed time when recorded
        period: Period in which the event happened
    """

    id: int
    match_id: int
    player_id: int
    stat_type_name: str
    value: int
    elapsed_seconds: int
    period: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatEvent":
        return cls(
            id=int(data["id"]),
            match_id=int(data["match_id"]),
            player_id=int(data["player_id"]),
            stat_type_name=data["stat_type_name"],
            value=int(data.get("value", 1)),
            elapsed_seconds=int(data.get("elapsed_seconds", 0)),
            period=int(data.get("period", 1)),
        )


@dataclass
class StatType:
    """A stat that can be recorded during a match."""

    id: int
    name: str
    description: str = ""
    is_active: bool = True
    is_default: bool = False
    color: str = "#1E3A8A"
    icon: str = "sports_rugby"
    scoring_points: int = 0  # > 0 marks Try, Conversion, Penalty Goal, Field Goal

    @property
    def is_scoring(self) -> bool:
        return self.scoring_points > 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["is_scoring"] = self.is_scoring
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StatType":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            description=data.get("description") or "",
            is_active=bool(data.get("is_active", True)),
            is_default=bool(data.get("is_default", False)),
            color=data.get("color") or "#1E3A8A",
            icon=data.get("icon") or "sports_rugby",
            scoring_points=int(data.get("scoring_points", 0) or 0),
        )
