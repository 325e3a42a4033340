"""
Club models for the ScrumSync match tracker.

This module contains the dataclasses for the entities a club manages outside
of a live match: teams, the player pool, fixtures and user accounts.
"""
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Optional


def parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value)).date()
    except ValueError:
        return None  # Invalid date format, skip


def parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


@dataclass
class Team:
    """A club side, e.g. "Under 16s"."""
    id: int
    name: str
    age_group: str
    description: Optional[str] = None
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "age_group": self.age_group,
            "description": self.description,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        return cls(
            id=int(data["id"]),
            name=data["name"],
            age_group=data.get("age_group", ""),
            description=data.get("description"),
            is_active=data.get("is_active", True),
        )


@dataclass
class Player:
    """
    A player in the club pool.

    Attributes:
        id: Repository-assigned identifier
        name: Player's full name
        number: Usual shirt number (optional; match shirts come from the lineup)
        position: Usual position label (e.g. "Hooker")
        date_of_birth: Player's date of birth
        team_id: Team the player belongs to; None keeps them in the pool only
        email: Contact email
        phone: Contact phone
        notes: Free-form notes
        is_active: Inactive players are hidden from benches
    """
    id: int
    name: str
    number: Optional[int] = None
    position: Optional[str] = None
    date_of_birth: Optional[date] = None
    team_id: Optional[int] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool = True

    def age(self) -> Optional[int]:
        """
        Calculate player's current age.

        Returns:
            Player's age in years, or None if date_of_birth not set
        """
        if not self.date_of_birth:
            return None
        today = date.today()
        return today.year - self.date_of_birth.year - (
            (today.month, today.day) < (self.date_of_birth.month, self.date_of_birth.day)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "number": self.number,
            "position": self.position,
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "team_id": self.team_id,
            "email": self.email,
            "phone": self.phone,
            "notes": self.notes,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        number = data.get("number")
        team_id = data.get("team_id")
        return cls(
            id=int(data["id"]),
            name=data["name"],
            number=None if number in (None, "") else int(number),
            position=data.get("position"),
            date_of_birth=parse_date(data.get("date_of_birth")),
            team_id=None if team_id is None else int(team_id),
            email=data.get("email"),
            phone=data.get("phone"),
            notes=data.get("notes"),
            is_active=data.get("is_active", True),
        )


@dataclass
class Fixture:
    """An upcoming game before it is played."""
    id: int
    team_id: int
    opponent: str
    date: datetime
    location: str
    is_home: bool = True
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "opponent": self.opponent,
            "date": self.date.isoformat(),
            "location": self.location,
            "is_home": self.is_home,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Fixture":
        return cls(
            id=int(data["id"]),
            team_id=int(data["team_id"]),
            opponent=data["opponent"],
            date=parse_datetime(data.get("date")) or datetime.now(),
            location=data.get("location", ""),
            is_home=data.get("is_home", True),
            notes=data.get("notes"),
        )


@dataclass
class User:
    """A scorekeeper account. Passwords are stored as hashes only."""
    id: int
    username: str
    password_hash: str
    team_name: Optional[str] = None

    def to_dict(self, include_secret: bool = False) -> Dict[str, Any]:
        data = {"id": self.id, "username": self.username, "team_name": self.team_name}
        if include_secret:
            data["password_hash"] = self.password_hash
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=int(data["id"]),
            username=data["username"],
            password_hash=data.get("password_hash", ""),
            team_name=data.get("team_name"),
        )
