"""Shared fixtures: a wired service suite with a team, players and a match."""

import pytest

from scrumsync.models import LineupSlot
from scrumsync.services import ServiceFactory


@pytest.fixture
def suite():
    return ServiceFactory(auto_tick=False).create_complete_service_suite()


@pytest.fixture
def club(suite):
    """A team with six pool players and one 2x40 match."""
    club_service = suite["club"]
    team = club_service.create_team("Under 16s", "U16")
    players = [
        club_service.create_player(name, team_id=team.id)
        for name in ("Alex Carter", "Ben Hughes", "Callum Reid", "Dan Moss", "Eli Shaw", "Finn Lowe")
    ]
    match = club_service.create_match(team.id, "Harlequins", "Home Ground")
    return {"team": team, "players": players, "match": match}


@pytest.fixture
def make_lineup():
    """Build lineup slots pairing players with shirt numbers."""

    def _make(players, numbers):
        return [
            LineupSlot(player_id=player.id, shirt_number=number, position_label=f"Pos {number}")
            for player, number in zip(players, numbers)
        ]

    return _make
