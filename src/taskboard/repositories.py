from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from functools import lru_cache
from threading import RLock
from typing import Any, List, Mapping, Optional

from .models import MUTABLE_FIELDS, TaskEntity
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class Repository(ABC):
    """
    Abstract persistence contract for task storage backends.

    Backends report their own failures as StorageError. Ownership checks are
    the caller's job: find_by_id returns a task whoever owns it.
    """

    name = "abstract"

    @abstractmethod
    def find_all_for_user(self, user_id: str) -> List[TaskEntity]:
        """Return every task owned by user_id, newest first."""

    @abstractmethod
    def find_by_id(self, task_id: str) -> Optional[TaskEntity]:
        """Return a task by id, or None if not found."""

    @abstractmethod
    def insert(self, entity: TaskEntity) -> TaskEntity:
        """Store a fully built task and return the stored copy."""

    @abstractmethod
    def update_fields(self, task_id: str, changes: Mapping[str, Any]) -> Optional[TaskEntity]:
        """
        Overwrite the given mutable fields. None values are written as-is
        (clearing the field). Return the updated task or None if not found.
        """

    @abstractmethod
    def delete(self, task_id: str) -> bool:
        """Delete a task by id. Return True if deleted, False if not found."""


def _mutable_only(changes: Mapping[str, Any]) -> dict:
    return {k: v for k, v in changes.items() if k in MUTABLE_FIELDS}


def _newest_first(items: List[TaskEntity]) -> List[TaskEntity]:
    return sorted(items, key=lambda t: t["created_at"], reverse=True)


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and default runtime.
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: dict[str, TaskEntity] = {}

    def find_all_for_user(self, user_id: str) -> List[TaskEntity]:
        with self._lock:
            owned = [t.copy() for t in self._items.values() if t["user_id"] == user_id]
        return _newest_first(owned)  # type: ignore[arg-type]

    def find_by_id(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            item = self._items.get(task_id)
            return None if item is None else item.copy()  # type: ignore[return-value]

    def insert(self, entity: TaskEntity) -> TaskEntity:
        with self._lock:
            self._items[entity["id"]] = entity.copy()  # type: ignore[assignment]
        return entity.copy()  # type: ignore[return-value]

    def update_fields(self, task_id: str, changes: Mapping[str, Any]) -> Optional[TaskEntity]:
        with self._lock:
            existing = self._items.get(task_id)
            if existing is None:
                return None
            updated = existing.copy()
            updated.update(_mutable_only(changes))  # type: ignore[typeddict-item]
            self._items[task_id] = updated  # type: ignore[assignment]
            return updated.copy()  # type: ignore[return-value]

    def delete(self, task_id: str) -> bool:
        with self._lock:
            return self._items.pop(task_id, None) is not None


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_repository() -> Repository:
    """
    Return the process-wide repository selected by settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository at SQLITE_DB_PATH
    - json: JsonFileRepository at JSON_STORE_PATH
    """
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository

        repo: Repository = SQLiteRepository(settings.sqlite_db_path)
    elif settings.persistence_backend == "json":
        from .local_store import JsonFileRepository

        repo = JsonFileRepository(settings.json_store_path)
    else:
        repo = InMemoryRepository()
    logger.info("Using %s task repository", repo.name)
    return repo
