"""
Club service for the ScrumSync match tracker.

This module provides validated create/read/update/delete operations for the
entities a club manages around its matches: teams, the player pool,
fixtures, matches and scorekeeper accounts.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..errors import EntityValidationError, MatchNotFound
from ..models import Fixture, Match, Player, Team, User
from ..models.club import parse_date
from ..utils import ALLOWED_PERIOD_COUNTS, DEFAULT_PERIOD_COUNT, DEFAULT_PERIOD_LENGTH_MIN
from ..utils.constants import MAX_PERIOD_LENGTH_MIN, MIN_PERIOD_LENGTH_MIN
from .persistence_service import Repository

logger = logging.getLogger(__name__)

# Score and completion are written by MatchSession.complete() from events
PROTECTED_MATCH_FIELDS = {"home_score", "away_score", "is_completed", "current_period", "seconds_remaining"}


def _raise_if(errors: List[str], entity: str) -> None:
    if errors:
        raise EntityValidationError(f"{entity} validation failed: {'; '.join(errors)}")


def _parse_when(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except (TypeError, ValueError):
        raise EntityValidationError(f"Invalid date: {value!r}")


class ClubService:
    """Validated CRUD over the repository for club entities."""

    def __init__(self, repository: Repository):
        self.repository = repository

    # ------------------------------------------------------------------
    # Teams
    # ------------------------------------------------------------------
    def validate_team_data(self, data: Dict[str, Any]) -> List[str]:
        errors = []
        if "name" in data and not (data["name"] or "").strip():
            errors.append("Team name is required")
        if "age_group" in data and not (data["age_group"] or "").strip():
            errors.append("Age group is required")
        return errors

    def create_team(self, name: str, age_group: str, description: Optional[str] = None) -> Team:
        data = {"name": name, "age_group": age_group}
        _raise_if(self.validate_team_data(data), "Team")
        return self.repository.create(
            "teams", name=name.strip(), age_group=age_group.strip(), description=description, is_active=True
        )

    def update_team(self, team_id: int, **fields) -> Optional[Team]:
        _raise_if(self.validate_team_data(fields), "Team")
        return self.repository.update("teams", team_id, **fields)

    def list_teams(self) -> List[Team]:
        return self.repository.list("teams")

    def get_team(self, team_id: int) -> Optional[Team]:
        return self.repository.get("teams", team_id)

    def delete_team(self, team_id: int) -> bool:
        return self.repository.delete("teams", team_id)

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------
    def validate_player_data(self, data: Dict[str, Any]) -> List[str]:
        """
        Validate player fields and return list of validation errors.

        Only the fields present in ``data`` are checked, so the same rules
        serve creation and partial updates.
        """
        errors = []
        if "name" in data:
            name = (data["name"] or "").strip()
            if not name:
                errors.append("Player name is required")
            elif len(name) < 2:
                errors.append("Player name must be at least 2 characters long")
        number = data.get("number")
        if number is not None:
            if isinstance(number, bool) or not isinstance(number, int):
                errors.append("Player number must be numeric")
            elif not 1 <= number <= 99:
                errors.append("Player number must be between 1 and 99")
        team_id = data.get("team_id")
        if team_id is not None and self.repository.get("teams", team_id) is None:
            errors.append(f"Team {team_id} does not exist")
        email = data.get("email")
        if email and ("@" not in email or "." not in email.split("@")[-1]):
            errors.append("Invalid email format")
        return errors

    def create_player(self, name: str, **fields) -> Player:
        """
        Create a pool player.

        Raises:
            EntityValidationError: If the player data is invalid
        """
        data = dict(fields, name=name)
        _raise_if(self.validate_player_data(data), "Player")
        data["name"] = name.strip()
        if "date_of_birth" in data:
            data["date_of_birth"] = parse_date(data["date_of_birth"])
        data.setdefault("is_active", True)
        player = self.repository.create("players", **data)
        logger.info("Created player %d (%s)", player.id, player.name)
        return player

    def update_player(self, player_id: int, **fields) -> Optional[Player]:
        _raise_if(self.validate_player_data(fields), "Player")
        if "date_of_birth" in fields:
            fields["date_of_birth"] = parse_date(fields["date_of_birth"])
        return self.repository.update("players", player_id, **fields)

    def list_players(self, team_id: Optional[int] = None) -> List[Player]:
        if team_id is None:
            return self.repository.list("players")
        return self.repository.list("players", team_id=team_id)

    def get_player(self, player_id: int) -> Optional[Player]:
        return self.repository.get("players", player_id)

    def delete_player(self, player_id: int) -> bool:
        """
        Delete a pool player who has never taken the field.

        Raises:
            EntityValidationError: If roster entries or stat events refer to
                                   the player; deactivate them instead
        """
        if self.repository.list("roster_entries", player_id=player_id) or self.repository.list(
            "stat_events", player_id=player_id
        ):
            raise EntityValidationError(
                f"Player {player_id} has match records; set is_active=False instead of deleting"
            )
        return self.repository.delete("players", player_id)

    # ------------------------------------------------------------------
    # Fixtures
    # ------------------------------------------------------------------
    def create_fixture(
        self,
        team_id: int,
        opponent: str,
        date: Any,
        location: str,
        is_home: bool = True,
        notes: Optional[str] = None,
    ) -> Fixture:
        errors = []
        if self.repository.get("teams", team_id) is None:
            errors.append(f"Team {team_id} does not exist")
        if not (opponent or "").strip():
            errors.append("Opponent is required")
        if not (location or "").strip():
            errors.append("Location is required")
        _raise_if(errors, "Fixture")
        return self.repository.create(
            "fixtures",
            team_id=team_id,
            opponent=opponent.strip(),
            date=_parse_when(date),
            location=location.strip(),
            is_home=is_home,
            notes=notes,
        )

    def update_fixture(self, fixture_id: int, **fields) -> Optional[Fixture]:
        if "date" in fields:
            fields["date"] = _parse_when(fields["date"])
        return self.repository.update("fixtures", fixture_id, **fields)

    def list_fixtures(self, team_id: Optional[int] = None) -> List[Fixture]:
        if team_id is None:
            return self.repository.list("fixtures")
        return self.repository.list("fixtures", team_id=team_id)

    def get_fixture(self, fixture_id: int) -> Optional[Fixture]:
        return self.repository.get("fixtures", fixture_id)

    def delete_fixture(self, fixture_id: int) -> bool:
        return self.repository.delete("fixtures", fixture_id)

    # ------------------------------------------------------------------
    # Matches
    # ------------------------------------------------------------------
    def validate_match_timing(self, period_length_min: int, number_of_periods: int) -> List[str]:
        errors = []
        if number_of_periods not in ALLOWED_PERIOD_COUNTS:
            errors.append(f"Number of periods must be one of {ALLOWED_PERIOD_COUNTS}")
        if not MIN_PERIOD_LENGTH_MIN <= period_length_min <= MAX_PERIOD_LENGTH_MIN:
            errors.append(
                f"Period length must be between {MIN_PERIOD_LENGTH_MIN} and {MAX_PERIOD_LENGTH_MIN} minutes"
            )
        return errors

    def create_match(
        self,
        team_id: int,
        opponent: str,
        location: str,
        date: Any = None,
        period_length_min: int = DEFAULT_PERIOD_LENGTH_MIN,
        number_of_periods: int = DEFAULT_PERIOD_COUNT,
        fixture_id: Optional[int] = None,
        is_home: bool = True,
    ) -> Match:
        """
        Create a match ready to be played.

        Raises:
            EntityValidationError: If the match data is invalid
        """
        errors = self.validate_match_timing(int(period_length_min), int(number_of_periods))
        if self.repository.get("teams", team_id) is None:
            errors.append(f"Team {team_id} does not exist")
        if not (opponent or "").strip():
            errors.append("Opponent is required")
        if not (location or "").strip():
            errors.append("Location is required")
        _raise_if(errors, "Match")

        match = self.repository.create(
            "matches",
            team_id=team_id,
            fixture_id=fixture_id,
            opponent=opponent.strip(),
            location=location.strip(),
            date=_parse_when(date) if date is not None else datetime.now(),
            period_length_min=int(period_length_min),
            number_of_periods=int(number_of_periods),
            is_home=is_home,
        )
        logger.info("Created match %d vs %s", match.id, match.opponent)
        return match

    def create_match_from_fixture(
        self,
        fixture_id: int,
        period_length_min: int = DEFAULT_PERIOD_LENGTH_MIN,
        number_of_periods: int = DEFAULT_PERIOD_COUNT,
    ) -> Match:
        fixture = self.repository.get("fixtures", fixture_id)
        if fixture is None:
            raise EntityValidationError(f"Fixture {fixture_id} does not exist")
        return self.create_match(
            team_id=fixture.team_id,
            opponent=fixture.opponent,
            location=fixture.location,
            date=fixture.date,
            period_length_min=period_length_min,
            number_of_periods=number_of_periods,
            fixture_id=fixture.id,
            is_home=fixture.is_home,
        )

    def update_match(self, match_id: int, **fields) -> Optional[Match]:
        """
        Update editable match details.

        Raises:
            EntityValidationError: On score/clock fields, or timing changes
                                   after events exist
        """
        protected = PROTECTED_MATCH_FIELDS & set(fields)
        if protected:
            raise EntityValidationError(
                f"Fields {sorted(protected)} are written by the live match, not edited"
            )
        match = self.repository.get("matches", match_id)
        if match is None:
            return None
        timing = {"period_length_min", "number_of_periods"} & set(fields)
        if timing:
            if self.repository.list("stat_events", match_id=match_id) or self.repository.list(
                "roster_entries", match_id=match_id
            ):
                raise EntityValidationError("Match timing cannot change once the match has begun")
            _raise_if(
                self.validate_match_timing(
                    int(fields.get("period_length_min", match.period_length_min)),
                    int(fields.get("number_of_periods", match.number_of_periods)),
                ),
                "Match",
            )
        if "date" in fields:
            fields["date"] = _parse_when(fields["date"])
        return self.repository.update("matches", match_id, **fields)

    def list_matches(self, team_id: Optional[int] = None) -> List[Match]:
        if team_id is None:
            return self.repository.list("matches")
        return self.repository.list("matches", team_id=team_id)

    def get_match(self, match_id: int) -> Match:
        match = self.repository.get("matches", match_id)
        if match is None:
            raise MatchNotFound(match_id)
        return match

    def delete_match(self, match_id: int) -> bool:
        """Delete a match together with its roster entries and stat events."""
        if self.repository.get("matches", match_id) is None:
            return False
        with self.repository.transaction():
            for entry in self.repository.list("roster_entries", match_id=match_id):
                self.repository.delete("roster_entries", entry.id)
            for event in self.repository.list("stat_events", match_id=match_id):
                self.repository.delete("stat_events", event.id)
            self.repository.delete("matches", match_id)
        logger.info("Deleted match %d", match_id)
        return True

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def create_user(self, username: str, password: str, team_name: Optional[str] = None) -> User:
        username = (username or "").strip()
        errors = []
        if not username:
            errors.append("Username is required")
        elif self.repository.list("users", username=username):
            errors.append(f"Username '{username}' is taken")
        if not password or len(password) < 8:
            errors.append("Password must be at least 8 characters long")
        _raise_if(errors, "User")
        return self.repository.create(
            "users",
            username=username,
            password_hash=generate_password_hash(password),
            team_name=team_name,
        )

    def verify_user(self, username: str, password: str) -> Optional[User]:
        """Return the user when the password matches, else None."""
        for user in self.repository.list("users", username=username):
            if check_password_hash(user.password_hash, password):
                return user
        return None
