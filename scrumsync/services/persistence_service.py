"""
Persistence service for the ScrumSync match tracker.

This module defines the repository contract the match core depends on, an
in-memory implementation with identifier allocation and all-or-nothing
transactions, and helpers for saving/loading a repository to JSON files.
"""
import json
import logging
import os
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Protocol

from ..models import Fixture, Match, Player, RosterEntry, StatEvent, StatType, Team, User

logger = logging.getLogger(__name__)

# Entity kinds and the model class stored under each
ENTITY_TYPES = {
    "teams": Team,
    "players": Player,
    "fixtures": Fixture,
    "matches": Match,
    "roster_entries": RosterEntry,
    "stat_events": StatEvent,
    "stat_types": StatType,
    "users": User,
}


class Repository(Protocol):
    """Storage contract consumed by the services - supports DIP."""

    def create(self, kind: str, **fields: Any) -> Any:
        """Create an entity; the repository assigns its integer id."""
        ...

    def get(self, kind: str, entity_id: int) -> Optional[Any]:
        """Read one entity, or None."""
        ...

    def list(self, kind: str, **filters: Any) -> List[Any]:
        """List entities in id order, filtered by attribute equality."""
        ...

    def update(self, kind: str, entity_id: int, **fields: Any) -> Optional[Any]:
        """Replace fields of an entity; None when it does not exist."""
        ...

    def delete(self, kind: str, entity_id: int) -> bool:
        """Delete an entity; False when it does not exist."""
        ...

    def close_roster_entry(self, entry_id: int, exited_at_seconds: int) -> RosterEntry:
        """Set a roster entry's exit time, exactly once."""
        ...

    def transaction(self) -> Any:
        """Context manager: every write inside commits together or not at all."""
        ...


class InMemoryRepository:
    """
    Dictionary-backed repository.

    Each kind is a table keyed by id; ids come from a per-kind counter. Stored
    entities are replaced rather than mutated, so a shallow copy of the tables
    is enough to roll back a transaction.
    """

    def __init__(self) -> None:
        self._tables: Dict[str, Dict[int, Any]] = {kind: {} for kind in ENTITY_TYPES}
        self._next_ids: Dict[str, int] = {kind: 1 for kind in ENTITY_TYPES}
        self._transaction_depth = 0

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------
    def create(self, kind: str, **fields: Any) -> Any:
        table = self._table(kind)
        entity_id = self._next_ids[kind]
        entity = ENTITY_TYPES[kind](id=entity_id, **fields)
        self._next_ids[kind] = entity_id + 1
        table[entity_id] = entity
        return entity

    def get(self, kind: str, entity_id: int) -> Optional[Any]:
        return self._table(kind).get(entity_id)

    def list(self, kind: str, **filters: Any) -> List[Any]:
        table = self._table(kind)
        return [
            entity
            for _, entity in sorted(table.items())
            if all(getattr(entity, key) == value for key, value in filters.items())
        ]

    def update(self, kind: str, entity_id: int, **fields: Any) -> Optional[Any]:
        table = self._table(kind)
        existing = table.get(entity_id)
        if existing is None:
            return None
        fields.pop("id", None)
        updated = replace(existing, **fields)
        table[entity_id] = updated
        return updated

    def delete(self, kind: str, entity_id: int) -> bool:
        return self._table(kind).pop(entity_id, None) is not None

    def close_roster_entry(self, entry_id: int, exited_at_seconds: int) -> RosterEntry:
        """
        Close a roster entry.

        Raises:
            KeyError: If the entry does not exist
            ValueError: If the entry was already closed
        """
        entry = self.get("roster_entries", entry_id)
        if entry is None:
            raise KeyError(f"Roster entry {entry_id} not found")
        if entry.exited_at_seconds is not None:
            raise ValueError(f"Roster entry {entry_id} is already closed")
        return self.update("roster_entries", entry_id, exited_at_seconds=exited_at_seconds)

    @contextmanager
    def transaction(self) -> Iterator["InMemoryRepository"]:
        """Commit every write in the block together, or restore the prior state."""
        if self._transaction_depth:
            self._transaction_depth += 1
            try:
                yield self
            finally:
                self._transaction_depth -= 1
            return

        saved_tables = {kind: dict(table) for kind, table in self._tables.items()}
        saved_ids = dict(self._next_ids)
        self._transaction_depth = 1
        try:
            yield self
        except BaseException:
            self._tables = saved_tables
            self._next_ids = saved_ids
            logger.debug("Transaction rolled back")
            raise
        finally:
            self._transaction_depth = 0

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_json(self) -> dict:
        """Convert the repository to a JSON-serializable dictionary."""
        data: Dict[str, Any] = {"next_ids": dict(self._next_ids)}
        for kind in ENTITY_TYPES:
            if kind == "users":
                data[kind] = [user.to_dict(include_secret=True) for user in self.list(kind)]
            else:
                data[kind] = [entity.to_dict() for entity in self.list(kind)]
        return data

    @staticmethod
    def from_json(data: dict) -> "InMemoryRepository":
        """
        Create a repository from a JSON dictionary.

        Raises:
            ValueError: If the JSON structure is invalid
        """
        repo = InMemoryRepository()
        try:
            for kind, model in ENTITY_TYPES.items():
                for item in data.get(kind, []) or []:
                    entity = model.from_dict(item)
                    repo._tables[kind][entity.id] = entity
            for kind in ENTITY_TYPES:
                highest = max(repo._tables[kind], default=0)
                stored = int((data.get("next_ids") or {}).get(kind, 1))
                repo._next_ids[kind] = max(stored, highest + 1)
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Invalid repository data: {exc}") from exc
        return repo

    def _table(self, kind: str) -> Dict[int, Any]:
        if kind not in self._tables:
            raise KeyError(f"Unknown entity kind: {kind}")
        return self._tables[kind]


class PersistenceService:
    """
    Service for persisting a repository to JSON files.

    Saved files hold every club entity, roster entry and stat event, so a
    match can be resumed from its persisted clock position after loading.
    """

    @staticmethod
    def serialize_repository(repository: InMemoryRepository) -> dict:
        return repository.to_json()

    @staticmethod
    def deserialize_repository(data: dict) -> InMemoryRepository:
        return InMemoryRepository.from_json(data)

    @staticmethod
    def save_to_file(repository: InMemoryRepository, file_path: str) -> None:
        """
        Save a repository to a JSON file.

        Args:
            repository: The repository to save
            file_path: Path where to save the file

        Raises:
            OSError: If the file cannot be written
        """
        directory = os.path.dirname(file_path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        with open(file_path, "w", encoding="utf-8") as f:
            json.dump(repository.to_json(), f, indent=2)
        logger.info("Saved repository to %s", file_path)

    @staticmethod
    def load_from_file(file_path: str) -> InMemoryRepository:
        """
        Load a repository from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            json.JSONDecodeError: If file contains invalid JSON
            ValueError: If JSON structure is invalid
        """
        if not os.path.exists(file_path):
            raise FileNotFoundError(f"Save file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)

        logger.info("Loaded repository from %s", file_path)
        return InMemoryRepository.from_json(data)

    @staticmethod
    def auto_save(repository: InMemoryRepository, auto_save_dir: str = "autosave") -> Optional[str]:
        """
        Save the repository with a timestamped filename.

        Returns:
            Path to saved file, or None if save failed
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_path = os.path.join(auto_save_dir, f"scrumsync_autosave_{timestamp}.json")
        try:
            PersistenceService.save_to_file(repository, file_path)
        except OSError:
            logger.exception("Auto-save to %s failed", file_path)
            return None
        return file_path

    @staticmethod
    def get_recent_saves(save_dir: str = ".", limit: int = 10) -> list:
        """
        Get list of recent save files.

        Returns:
            List of tuples (filename, modification_time) sorted by newest first
        """
        if not os.path.exists(save_dir):
            return []

        try:
            json_files = []
            for filename in os.listdir(save_dir):
                if filename.endswith('.json'):
                    file_path = os.path.join(save_dir, filename)
                    if os.path.isfile(file_path):
                        json_files.append((filename, os.path.getmtime(file_path)))

            json_files.sort(key=lambda x: x[1], reverse=True)
            return json_files[:limit]
        except OSError:
            return []
