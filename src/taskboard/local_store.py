"""
Local key-value task storage.

The whole task collection lives as one JSON array under a single key of a
small JSON document on disk, the way a browser app keeps its list in local
storage. Every write rewrites the document through a temporary file so a
crash never leaves a half-written store behind.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import date, datetime
from threading import RLock
from typing import Any, Dict, List, Mapping, Optional

from .errors import StorageError
from .models import TaskEntity
from .repositories import Repository, _mutable_only, _newest_first

logger = logging.getLogger(__name__)

STORAGE_KEY = "todo.tasks:v1"


def _encode(task: TaskEntity) -> Dict[str, Any]:
    due = task["due_date"]
    return {
        "id": task["id"],
        "userId": task["user_id"],
        "title": task["title"],
        "completed": task["completed"],
        "createdAt": task["created_at"].isoformat(),
        "dueDate": due.isoformat() if due is not None else None,
        "priority": task["priority"],
        "timeCost": task["time_cost"],
    }


def _decode(raw: Mapping[str, Any]) -> TaskEntity:
    due = raw.get("dueDate")
    completed = raw.get("completed", False)
    if not isinstance(completed, bool):
        raise ValueError(f"completed must be a boolean, got {completed!r}")
    time_cost = raw.get("timeCost")
    if time_cost is not None and (isinstance(time_cost, bool) or not isinstance(time_cost, int)):
        raise ValueError(f"timeCost must be an integer, got {time_cost!r}")
    return {
        "id": str(raw["id"]),
        "user_id": str(raw["userId"]),
        "title": str(raw["title"]),
        "completed": completed,
        "created_at": datetime.fromisoformat(raw["createdAt"]),
        "due_date": date.fromisoformat(due) if due else None,
        "priority": raw.get("priority"),
        "time_cost": time_cost,
    }


class JsonFileRepository(Repository):
    """
    Repository backed by a JSON document holding the task list under STORAGE_KEY.
    A missing file reads as an empty list.
    """

    name = "json"

    def __init__(self, path: str) -> None:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        self._path = path
        self._lock = RLock()

    def _load(self) -> List[TaskEntity]:
        try:
            with open(self._path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except FileNotFoundError:
            return []
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read task store %s: %s", self._path, e)
            raise StorageError("Failed to load tasks from local storage") from e

        try:
            return [_decode(raw) for raw in document.get(STORAGE_KEY, [])]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error("Task store %s holds malformed records: %s", self._path, e)
            raise StorageError("Local task storage is corrupt") from e

    def _save(self, tasks: List[TaskEntity]) -> None:
        document = {STORAGE_KEY: [_encode(t) for t in tasks]}
        directory = os.path.dirname(self._path) or "."
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tasks-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self._path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error("Failed to write task store %s: %s", self._path, e)
            raise StorageError("Failed to save tasks to local storage") from e

    def find_all_for_user(self, user_id: str) -> List[TaskEntity]:
        with self._lock:
            return _newest_first([t for t in self._load() if t["user_id"] == user_id])

    def find_by_id(self, task_id: str) -> Optional[TaskEntity]:
        with self._lock:
            return next((t for t in self._load() if t["id"] == task_id), None)

    def insert(self, entity: TaskEntity) -> TaskEntity:
        with self._lock:
            tasks = self._load()
            tasks.append(entity.copy())  # type: ignore[arg-type]
            self._save(tasks)
        return entity.copy()  # type: ignore[return-value]

    def update_fields(self, task_id: str, changes: Mapping[str, Any]) -> Optional[TaskEntity]:
        with self._lock:
            tasks = self._load()
            for task in tasks:
                if task["id"] == task_id:
                    task.update(_mutable_only(changes))  # type: ignore[typeddict-item]
                    self._save(tasks)
                    return task.copy()  # type: ignore[return-value]
            return None

    def delete(self, task_id: str) -> bool:
        with self._lock:
            tasks = self._load()
            remaining = [t for t in tasks if t["id"] != task_id]
            if len(remaining) == len(tasks):
                return False
            self._save(remaining)
            return True
