"""
Stat type registry for the ScrumSync match tracker.

The registry owns the set of recognised stat type names and classifies which
of them score points. Aggregation reads the classification from here instead
of relying on hardcoded names.
"""
import logging
from typing import Dict, List, Optional

from ..errors import EntityValidationError
from ..models import StatType
from ..utils import DEFAULT_STAT_TYPES
from .persistence_service import Repository

logger = logging.getLogger(__name__)


class StatTypeRegistry:
    """Create, look up and classify stat types stored in the repository."""

    def __init__(self, repository: Repository):
        self.repository = repository

    def seed_defaults(self) -> List[StatType]:
        """Create the default stat types when the registry is empty."""
        if self.repository.list("stat_types"):
            return []
        created = [
            self.repository.create(
                "stat_types",
                name=seed["name"],
                description=seed.get("description", ""),
                is_active=True,
                is_default=True,
                color=seed.get("color", "#1E3A8A"),
                icon=seed.get("icon", "sports_rugby"),
                scoring_points=seed.get("scoring_points", 0),
            )
            for seed in DEFAULT_STAT_TYPES
        ]
        logger.info("Seeded %d default stat types", len(created))
        return created

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def list_stat_types(self, include_inactive: bool = False) -> List[StatType]:
        stat_types = self.repository.list("stat_types")
        if include_inactive:
            return stat_types
        return [stat_type for stat_type in stat_types if stat_type.is_active]

    def get_by_name(self, name: str) -> Optional[StatType]:
        for stat_type in self.repository.list("stat_types"):
            if stat_type.name == name:
                return stat_type
        return None

    def is_recognized(self, name: str) -> bool:
        """True when ``name`` is a registered, active stat type."""
        stat_type = self.get_by_name(name)
        return stat_type is not None and stat_type.is_active

    def scoring_points(self) -> Dict[str, int]:
        """Points per scoring stat type name.

        Deactivated types keep their classification so events recorded
        before deactivation still count towards the score.
        """
        return {
            stat_type.name: stat_type.scoring_points
            for stat_type in self.repository.list("stat_types")
            if stat_type.is_scoring
        }

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_stat_type(
        self,
        name: str,
        description: str = "",
        color: str = "#1E3A8A",
        icon: str = "sports_rugby",
        scoring_points: int = 0,
        is_active: bool = True,
    ) -> StatType:
        """
        Register a new stat type.

        Raises:
            EntityValidationError: If the name is blank, taken, or points are negative
        """
        name = (name or "").strip()
        errors = []
        if not name:
            errors.append("Stat type name is required")
        elif self.get_by_name(name) is not None:
            errors.append(f"Stat type '{name}' already exists")
        if int(scoring_points) < 0:
            errors.append("Scoring points cannot be negative")
        if errors:
            raise EntityValidationError(f"Stat type validation failed: {'; '.join(errors)}")

        return self.repository.create(
            "stat_types",
            name=name,
            description=description or "",
            is_active=is_active,
            is_default=False,
            color=color,
            icon=icon,
            scoring_points=int(scoring_points),
        )

    def update_stat_type(self, stat_type_id: int, **fields) -> Optional[StatType]:
        """
        Update a stat type. Renaming is not allowed once events may refer to it.

        Raises:
            EntityValidationError: On a rename or negative points
        """
        existing = self.repository.get("stat_types", stat_type_id)
        if existing is None:
            return None
        if "name" in fields and fields["name"] != existing.name:
            raise EntityValidationError("Stat types cannot be renamed")
        if int(fields.get("scoring_points", 0) or 0) < 0:
            raise EntityValidationError("Scoring points cannot be negative")
        allowed = {"description", "is_active", "color", "icon", "scoring_points"}
        return self.repository.update(
            "stat_types", stat_type_id, **{k: v for k, v in fields.items() if k in allowed}
        )

    def deactivate(self, stat_type_id: int) -> Optional[StatType]:
        return self.update_stat_type(stat_type_id, is_active=False)
