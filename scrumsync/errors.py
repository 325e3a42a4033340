"""
Error taxonomy for the ScrumSync match tracker.

Every failure raised by the match core is a :class:`MatchStateError`. They are
all local validation failures: the caller surfaces the message and the state
that existed before the failed call is left untouched.
"""


class MatchStateError(Exception):
    """Base class for recoverable match validation failures."""
    pass


class DuplicateShirtNumber(MatchStateError):
    """Two active roster entries would share a shirt number."""

    def __init__(self, shirt_number: int):
        self.shirt_number = shirt_number
        super().__init__(f"Shirt number {shirt_number} is already taken")


class PlayerNotActive(MatchStateError):
    """The player has no roster entry on the field at the given time."""

    def __init__(self, player_id: int, at_seconds=None):
        self.player_id = player_id
        self.at_seconds = at_seconds
        if at_seconds is None:
            message = f"Player {player_id} is not on the field"
        else:
            message = f"Player {player_id} is not on the field at {at_seconds}s"
        super().__init__(message)


class PlayerAlreadyActive(MatchStateError):
    """The player is already on the field."""

    def __init__(self, player_id: int):
        self.player_id = player_id
        super().__init__(f"Player {player_id} is already on the field")


class PeriodBoundsExceeded(MatchStateError):
    """A period number outside ``1..total_periods``."""

    def __init__(self, period: int, total_periods: int):
        self.period = period
        self.total_periods = total_periods
        super().__init__(f"Period {period} is outside 1..{total_periods}")


class InvalidStatValue(MatchStateError):
    """Stat values must be positive integers; scoring stats are always 1."""

    def __init__(self, value, reason: str = "Stat value must be a positive integer"):
        self.value = value
        super().__init__(f"{reason}, got {value!r}")


class UnknownStatType(MatchStateError):
    """The stat type is not registered or has been deactivated."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown or inactive stat type: {name}")


class MatchNotFound(MatchStateError):
    """No match with the given id."""

    def __init__(self, match_id: int):
        self.match_id = match_id
        super().__init__(f"Match {match_id} not found")


class EntityValidationError(MatchStateError):
    """Club entity data (team, player, fixture, match, user) is invalid."""
    pass
