from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Mapping, Optional, TypedDict

DEFAULT_TIME_COST = 30
DAILY_LIMIT_MINUTES = 300
MAX_TIME_COST = 1440
MAX_TITLE_LENGTH = 500
MARKERS_PER_DAY = 3

PRIORITIES = ("low", "medium", "high")
PRIORITY_RANK: Dict[Optional[str], int] = {"high": 3, "medium": 2, "low": 1, None: 0}

# Fields a caller may change after creation. id, user_id and created_at are fixed.
MUTABLE_FIELDS = frozenset({"title", "completed", "due_date", "priority", "time_cost"})


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    Storage-agnostic representation of a task.

    Fields:
    - id: Opaque unique identifier (uuid4 hex)
    - user_id: Owner identifier, never changes
    - title: Trimmed title (1..500 chars)
    - completed: Completion flag
    - created_at: Creation timestamp (UTC)
    - due_date: Optional calendar date without a time component
    - priority: Optional 'low' | 'medium' | 'high'
    - time_cost: Optional estimated duration in minutes (1..1440). Absent is
      not stored as 30; consumers use effective_time_cost() instead.
    """

    id: str
    user_id: str
    title: str
    completed: bool
    created_at: datetime
    due_date: Optional[date]
    priority: Optional[str]
    time_cost: Optional[int]


def effective_time_cost(task: Mapping) -> int:
    """Minutes a task counts for in totals and duration sorts."""
    value = task.get("time_cost")
    return DEFAULT_TIME_COST if value is None else value


def priority_rank(task: Mapping) -> int:
    return PRIORITY_RANK.get(task.get("priority"), 0)
