"""Roster models: a player's occupancy of a shirt number during a match."""

from dataclasses import dataclass, asdict
from typing import Optional


@dataclass(frozen=True)
class LineupSlot:
    """One requested starting position, before it becomes a roster entry."""

    player_id: int
    shirt_number: int
    position_label: str


@dataclass(frozen=True)
class RosterEntry:
    """
    A player's time window on the field wearing a given shirt number.

    Entries are immutable; closing a window produces a copy with
    ``exited_at_seconds`` set, which happens exactly once.
    """

    id: int
    match_id: int
    player_id: int
    shirt_number: int
    position_label: str
    is_starter: bool
    entered_at_seconds: int
    exited_at_seconds: Optional[int] = None

    @property
    def is_active(self) -> bool:
        return self.exited_at_seconds is None

    def was_active_at(self, at_seconds: int) -> bool:
        """Return True when the player was on the field at ``at_seconds``."""
        if self.entered_at_seconds > at_seconds:
            return False
        return self.exited_at_seconds is None or self.exited_at_seconds > at_seconds

    def seconds_played(self, at_seconds: int) -> int:
        """Seconds spent on the field up to ``at_seconds``."""
        end = at_seconds if self.exited_at_seconds is None else min(at_seconds, self.exited_at_seconds)
        return max(0, end - self.entered_at_seconds)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "RosterEntry":
        exited = data.get("exited_at_seconds")
        return cls(
            id=int(data["id"]),
            match_id=int(data["match_id"]),
            player_id=int(data["player_id"]),
            shirt_number=int(data["shirt_number"]),
            position_label=data.get("position_label", ""),
            is_starter=bool(data.get("is_starter", False)),
            entered_at_seconds=int(data.get("entered_at_seconds", 0)),
            exited_at_seconds=None if exited is None else int(exited),
        )
