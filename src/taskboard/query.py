from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .errors import ValidationError
from .models import TaskEntity, effective_time_cost, priority_rank
from .schemas import coerce_due_date

SORT_KEYS = ("priority", "duration", "createdAt")
SORT_ORDERS = ("asc", "desc")

_KEY_FUNCS: Dict[str, Callable[[Mapping], object]] = {
    "priority": priority_rank,
    "duration": effective_time_cost,
    "createdAt": lambda t: t["created_at"],
}


@dataclass(frozen=True)
class TaskQuery:
    """
    Filter and sort options for a task listing.

    Filters that are None impose no constraint. Ordering defaults to newest
    first; an unspecified sort_order is treated as 'desc' for every key.
    then_by names an optional secondary key (e.g. duration under a priority
    sort) whose direction defaults to sort_order.
    """
    date: Optional[date] = None
    search: Optional[str] = None
    completed: Optional[bool] = None
    sort_by: str = "createdAt"
    sort_order: str = "desc"
    then_by: Optional[str] = None
    then_order: Optional[str] = None


def _matches(task: Mapping, q: TaskQuery, needle: Optional[str]) -> bool:
    if q.date is not None and task.get("due_date") != q.date:
        return False
    if q.completed is not None and task["completed"] != q.completed:
        return False
    if needle is not None and needle not in (task["title"] or "").lower():
        return False
    return True


# PUBLIC_INTERFACE
def select(tasks: Iterable[TaskEntity], query: Optional[TaskQuery] = None) -> List[TaskEntity]:
    """
    Return the tasks that pass every filter in `query`, ordered by its sort keys.

    Sorting is stable: tasks that compare equal keep their input order. The
    input collection and its tasks are never modified.
    """
    q = query or TaskQuery()
    needle = q.search.lower() if q.search else None
    items = [t for t in tasks if _matches(t, q, needle)]

    primary = q.sort_by if q.sort_by in _KEY_FUNCS else "createdAt"
    passes = [(primary, q.sort_order)]
    if q.then_by and q.then_by in _KEY_FUNCS and q.then_by != primary:
        passes.append((q.then_by, q.then_order or q.sort_order))

    # Least significant key first; each stable pass keeps the previous order on ties.
    for key, order in reversed(passes):
        items.sort(key=_KEY_FUNCS[key], reverse=(order == "desc"))
    return items


def _parse_bool(value: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValueError("completed must be 'true' or 'false'")


# PUBLIC_INTERFACE
def parse_query(
    date: Optional[str] = None,
    search: Optional[str] = None,
    completed: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    then_by: Optional[str] = None,
) -> TaskQuery:
    """
    Build a TaskQuery from HTTP-style string parameters.

    Empty strings count as absent. Raises ValidationError listing every
    invalid parameter.
    """
    problems = []
    kwargs: dict = {}

    if date:
        try:
            kwargs["date"] = coerce_due_date(date)
        except ValueError as e:
            problems.append({"loc": ["query", "date"], "msg": str(e)})

    if search and search.strip():
        kwargs["search"] = search

    if completed:
        try:
            kwargs["completed"] = _parse_bool(completed)
        except ValueError as e:
            problems.append({"loc": ["query", "completed"], "msg": str(e)})

    for name, value, allowed in (
        ("sortBy", sort_by, SORT_KEYS),
        ("thenBy", then_by, SORT_KEYS),
        ("sortOrder", sort_order, SORT_ORDERS),
    ):
        if not value:
            continue
        if value not in allowed:
            problems.append(
                {"loc": ["query", name], "msg": f"{name} must be one of: {', '.join(allowed)}"}
            )
            continue
        field = {"sortBy": "sort_by", "thenBy": "then_by", "sortOrder": "sort_order"}[name]
        kwargs[field] = value

    if problems:
        raise ValidationError("Invalid query parameters", detail=problems)
    return TaskQuery(**kwargs)
