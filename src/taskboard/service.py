from __future__ import annotations

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .calendar_view import DayBucket, bucket_by_date
from .errors import ForbiddenError, NotFoundError, ValidationError
from .models import TaskEntity
from .query import TaskQuery, select
from .repositories import Repository
from .schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validated(model: Type[M], data: Mapping[str, Any]) -> M:
    """Run the pydantic schema and turn its failures into a ValidationError."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        detail = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in e.errors(include_url=False)
        ]
        raise ValidationError("Task validation failed", detail=detail) from e


class TaskService:
    """
    Mutation and read operations on one user's tasks.

    Input is validated before any storage call, so a rejected request never
    leaves a partial change behind. Each successful mutation is written to the
    repository before it returns; callers recompute any derived views
    afterwards.
    """

    def __init__(
        self,
        repository: Repository,
        user_id: str,
        id_factory: Callable[[], str] = _new_id,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._repo = repository
        self.user_id = user_id
        self._new_id = id_factory
        self._now = clock

    def _owned(self, task_id: str) -> TaskEntity:
        task = self._repo.find_by_id(task_id)
        if task is None:
            raise NotFoundError("Task not found")
        if task["user_id"] != self.user_id:
            logger.warning("User %s denied access to task %s", self.user_id, task_id)
            raise ForbiddenError("Not allowed to access this task")
        return task

    # PUBLIC_INTERFACE
    def create(
        self,
        title: str,
        priority: Optional[str] = None,
        due_date: Optional[Union[date, str]] = None,
        time_cost: Optional[int] = None,
    ) -> TaskEntity:
        """Validate and store a new, incomplete task owned by the acting user."""
        data = _validated(
            TaskCreate,
            {"title": title, "priority": priority, "due_date": due_date, "time_cost": time_cost},
        )
        entity: TaskEntity = {
            "id": self._new_id(),
            "user_id": self.user_id,
            "title": data.title,
            "completed": False,
            "created_at": self._now(),
            "due_date": data.due_date,
            "priority": data.priority,
            "time_cost": data.time_cost,
        }
        created = self._repo.insert(entity)
        logger.info("Created task %s for user %s", created["id"], self.user_id)
        return created

    # PUBLIC_INTERFACE
    def get(self, task_id: str) -> TaskEntity:
        return self._owned(task_id)

    # PUBLIC_INTERFACE
    def update(self, task_id: str, changes: Union[Mapping[str, Any], TaskUpdate]) -> TaskEntity:
        """
        Apply a partial update. Keys absent from `changes` are left alone and
        an explicit None clears priority, due_date or time_cost.
        """
        if isinstance(changes, TaskUpdate):
            patch = changes.changes()
        else:
            patch = _validated(TaskUpdate, changes).changes()
        self._owned(task_id)
        updated = self._repo.update_fields(task_id, patch)
        if updated is None:
            # Deleted between the ownership check and the write.
            raise NotFoundError("Task not found")
        logger.info("Updated task %s fields=%s", task_id, sorted(patch))
        return updated

    # PUBLIC_INTERFACE
    def toggle_complete(self, task_id: str) -> TaskEntity:
        current = self._owned(task_id)
        return self.update(task_id, {"completed": not current["completed"]})

    # PUBLIC_INTERFACE
    def delete(self, task_id: str) -> None:
        self._owned(task_id)
        if not self._repo.delete(task_id):
            raise NotFoundError("Task not found")
        logger.info("Deleted task %s for user %s", task_id, self.user_id)

    # PUBLIC_INTERFACE
    def all(self) -> List[TaskEntity]:
        """Every task of the acting user in storage order (newest first)."""
        return self._repo.find_all_for_user(self.user_id)

    # PUBLIC_INTERFACE
    def list(self, query: Optional[TaskQuery] = None) -> List[TaskEntity]:
        return select(self.all(), query)

    # PUBLIC_INTERFACE
    def calendar(self, year: int, month: int) -> Dict[date, DayBucket]:
        return bucket_by_date(self.all(), year, month)
