from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .calendar_view import DayBucket, MonthView, bucket_by_date, month_view, shift_month
from .models import TaskEntity
from .query import TaskQuery, select
from .repositories import get_repository
from .service import TaskService
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

WELCOME_TASKS = (
    ("Welcome to your todo list!", False),
    ("Click to mark tasks as complete", True),
)


class TaskListController:
    """
    Owns the task list shown to one user.

    Lifecycle: load() once, then change tasks only through the mutation
    methods here. Each mutation is persisted by the service first and the
    collection is then re-read, so `tasks`, `visible` and `calendar` always
    reflect what storage holds.

    Selection and navigation state (selected date, displayed month, active
    sort) are kept here as well; they never touch storage.
    """

    def __init__(
        self,
        service: TaskService,
        today: Optional[Callable[[], date]] = None,
        seed_welcome: bool = False,
    ) -> None:
        self._service = service
        self._today = today or date.today
        self._seed_welcome = seed_welcome
        self._tasks: List[TaskEntity] = []
        self._loaded = False
        self.query = TaskQuery()
        self.selected_date: Optional[date] = None
        current = self._today()
        self.year, self.month = current.year, current.month

    @classmethod
    def for_user(cls, user_id: str, settings: Optional[Settings] = None) -> "TaskListController":
        """Build a controller on the configured repository for one user."""
        settings = settings or get_settings()
        service = TaskService(get_repository(), user_id)
        return cls(service, seed_welcome=settings.seed_welcome_tasks)

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def tasks(self) -> List[TaskEntity]:
        return list(self._tasks)

    # PUBLIC_INTERFACE
    def load(self) -> List[TaskEntity]:
        """Read the collection from storage, seeding welcome tasks into an empty list if enabled."""
        self._tasks = self._service.all()
        if not self._tasks and self._seed_welcome:
            for title, done in WELCOME_TASKS:
                created = self._service.create(title)
                if done:
                    self._service.toggle_complete(created["id"])
            self._tasks = self._service.all()
            logger.info("Seeded %d welcome tasks", len(WELCOME_TASKS))
        self._loaded = True
        return self.tasks

    def _refresh(self) -> None:
        self._tasks = self._service.all()

    # Mutations

    def add(
        self,
        title: str,
        priority: Optional[str] = None,
        due_date: Optional[Any] = None,
        time_cost: Optional[int] = None,
    ) -> TaskEntity:
        task = self._service.create(title, priority=priority, due_date=due_date, time_cost=time_cost)
        self._refresh()
        return task

    def edit(self, task_id: str, changes: Mapping[str, Any]) -> TaskEntity:
        task = self._service.update(task_id, changes)
        self._refresh()
        return task

    def toggle(self, task_id: str) -> TaskEntity:
        task = self._service.toggle_complete(task_id)
        self._refresh()
        return task

    def set_priority(self, task_id: str, priority: Optional[str]) -> TaskEntity:
        return self.edit(task_id, {"priority": priority})

    def set_due_date(self, task_id: str, due_date: Optional[Any]) -> TaskEntity:
        return self.edit(task_id, {"due_date": due_date})

    def set_time_cost(self, task_id: str, time_cost: Optional[int]) -> TaskEntity:
        return self.edit(task_id, {"time_cost": time_cost})

    def remove(self, task_id: str) -> None:
        self._service.delete(task_id)
        self._refresh()

    # View state

    def set_sort(self, sort_by: str, sort_order: str = "desc", then_by: Optional[str] = None) -> None:
        self.query = replace(self.query, sort_by=sort_by, sort_order=sort_order, then_by=then_by)

    def set_search(self, text: Optional[str]) -> None:
        self.query = replace(self.query, search=text or None)

    def select_date(self, day: date) -> Optional[date]:
        """Select a day; selecting the already selected day clears the selection."""
        self.selected_date = None if self.selected_date == day else day
        return self.selected_date

    def clear_selection(self) -> None:
        self.selected_date = None

    def next_month(self) -> Tuple[int, int]:
        self.year, self.month = shift_month(self.year, self.month, 1)
        return self.year, self.month

    def previous_month(self) -> Tuple[int, int]:
        self.year, self.month = shift_month(self.year, self.month, -1)
        return self.year, self.month

    # Derived views, recomputed from the current collection on every access

    @property
    def visible(self) -> List[TaskEntity]:
        return select(self._tasks, replace(self.query, date=self.selected_date))

    @property
    def calendar(self) -> Dict[date, DayBucket]:
        return bucket_by_date(self._tasks, self.year, self.month)

    def grid(self) -> MonthView:
        return month_view(
            self._tasks, self.year, self.month, today=self._today(), selected=self.selected_date
        )
