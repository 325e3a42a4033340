"""
Roster service for the ScrumSync match tracker.

This module tracks which players are on the field and which are on the bench
for a match. A shirt number is worn by exactly one active player at a time:
lineups are validated as a whole before anything is written, and a
substitution closes the outgoing entry and opens the incoming one inside a
single repository transaction.
"""
import logging
from typing import Dict, Iterable, List, Optional

from ..errors import DuplicateShirtNumber, EntityValidationError, PlayerAlreadyActive, PlayerNotActive
from ..models import LineupSlot, Player, RosterEntry
from .persistence_service import Repository

logger = logging.getLogger(__name__)


class RosterService:
    """Active/bench tracking and substitutions for matches."""

    def __init__(self, repository: Repository):
        self.repository = repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def roster_entries(self, match_id: int) -> List[RosterEntry]:
        """Every entry of the match, active or closed, in creation order."""
        return self.repository.list("roster_entries", match_id=match_id)

    def active_players(self, match_id: int) -> List[RosterEntry]:
        """Entries currently on the field, ordered by shirt number."""
        active = [entry for entry in self.roster_entries(match_id) if entry.is_active]
        return sorted(active, key=lambda entry: entry.shirt_number)

    def bench_players(self, match_id: int) -> List[Player]:
        """Active club players who are not currently on the field."""
        on_field = {entry.player_id for entry in self.active_players(match_id)}
        bench = [
            player
            for player in self.repository.list("players")
            if player.is_active and player.id not in on_field
        ]
        return sorted(bench, key=lambda player: (player.name, player.id))

    def active_entry_for(self, match_id: int, player_id: int) -> Optional[RosterEntry]:
        for entry in self.roster_entries(match_id):
            if entry.player_id == player_id and entry.is_active:
                return entry
        return None

    def entry_at(self, match_id: int, player_id: int, at_seconds: int) -> Optional[RosterEntry]:
        """The player's entry that was on the field at ``at_seconds``, if any."""
        for entry in self.roster_entries(match_id):
            if entry.player_id == player_id and entry.was_active_at(at_seconds):
                return entry
        return None

    def seconds_played(self, match_id: int, at_seconds: int) -> Dict[int, int]:
        """Seconds on the field per player up to ``at_seconds``."""
        totals: Dict[int, int] = {}
        for entry in self.roster_entries(match_id):
            totals[entry.player_id] = totals.get(entry.player_id, 0) + entry.seconds_played(at_seconds)
        return totals

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def assign_starting_lineup(self, match_id: int, slots: Iterable[LineupSlot]) -> List[RosterEntry]:
        """
        Put the starting players on the field at time zero.

        The whole lineup is validated before any entry is created.

        Raises:
            DuplicateShirtNumber: If two slots share a shirt number, or a
                                  number is already worn on the field
            PlayerAlreadyActive: If a player appears twice or is already on
            EntityValidationError: If a player is not an active club player
        """
        slots = list(slots)
        taken_numbers = {entry.shirt_number for entry in self.active_players(match_id)}
        active_ids = {entry.player_id for entry in self.active_players(match_id)}

        seen_numbers = set()
        seen_players = set()
        for slot in slots:
            if slot.shirt_number in seen_numbers or slot.shirt_number in taken_numbers:
                raise DuplicateShirtNumber(slot.shirt_number)
            if slot.player_id in seen_players or slot.player_id in active_ids:
                raise PlayerAlreadyActive(slot.player_id)
            self._require_club_player(slot.player_id)
            seen_numbers.add(slot.shirt_number)
            seen_players.add(slot.player_id)

        with self.repository.transaction():
            entries = [
                self.repository.create(
                    "roster_entries",
                    match_id=match_id,
                    player_id=slot.player_id,
                    shirt_number=slot.shirt_number,
                    position_label=slot.position_label,
                    is_starter=True,
                    entered_at_seconds=0,
                    exited_at_seconds=None,
                )
                for slot in slots
            ]

        logger.info("Match %d: starting lineup of %d players assigned", match_id, len(entries))
        return sorted(entries, key=lambda entry: entry.shirt_number)

    def substitute(
        self,
        match_id: int,
        out_player_id: int,
        in_player_id: int,
        at_seconds: int,
    ) -> RosterEntry:
        """
        Replace an active player, handing over their shirt number and position.

        Returns:
            The incoming player's new roster entry

        Raises:
            PlayerNotActive: If the outgoing player is not on the field, or
                             entered after ``at_seconds``
            PlayerAlreadyActive: If the incoming player is already on the field
            EntityValidationError: If the incoming player is not an active club player
        """
        out_entry = self.active_entry_for(match_id, out_player_id)
        if out_entry is None or out_entry.entered_at_seconds > at_seconds:
            logger.warning("Match %d: substitution rejected, player %d not on field", match_id, out_player_id)
            raise PlayerNotActive(out_player_id, at_seconds)
        if self.active_entry_for(match_id, in_player_id) is not None:
            logger.warning("Match %d: substitution rejected, player %d already on field", match_id, in_player_id)
            raise PlayerAlreadyActive(in_player_id)
        self._require_club_player(in_player_id)

        with self.repository.transaction():
            self.repository.close_roster_entry(out_entry.id, at_seconds)
            in_entry = self.repository.create(
                "roster_entries",
                match_id=match_id,
                player_id=in_player_id,
                shirt_number=out_entry.shirt_number,
                position_label=out_entry.position_label,
                is_starter=False,
                entered_at_seconds=at_seconds,
                exited_at_seconds=None,
            )

        logger.info(
            "Match %d: #%d player %d off, player %d on at %ds",
            match_id, out_entry.shirt_number, out_player_id, in_player_id, at_seconds,
        )
        return in_entry

    def _require_club_player(self, player_id: int) -> Player:
        player = self.repository.get("players", player_id)
        if player is None:
            raise EntityValidationError(f"Player {player_id} does not exist")
        if not player.is_active:
            raise EntityValidationError(f"Player {player_id} is not an active club player")
        return player
