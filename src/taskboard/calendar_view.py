from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from .models import DAILY_LIMIT_MINUTES, MARKERS_PER_DAY, TaskEntity, effective_time_cost

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


@dataclass
class DayBucket:
    """
    Open tasks due on one day and their combined workload.
    """
    tasks: List[TaskEntity] = field(default_factory=list)
    total_minutes: int = 0

    @property
    def over_limit(self) -> bool:
        return self.total_minutes > DAILY_LIMIT_MINUTES

    @property
    def markers(self) -> List[TaskEntity]:
        """Tasks that get a visual marker. Only a display cap; totals cover every task."""
        return self.tasks[:MARKERS_PER_DAY]

    def add(self, task: TaskEntity) -> None:
        self.tasks.append(task)
        self.total_minutes += effective_time_cost(task)


@dataclass
class CalendarDay:
    day: date
    bucket: DayBucket
    is_today: bool = False
    is_selected: bool = False


@dataclass
class MonthView:
    year: int
    month: int
    leading_blanks: int
    days: List[CalendarDay]

    @property
    def month_name(self) -> str:
        return MONTH_NAMES[self.month - 1]

    @property
    def days_in_month(self) -> int:
        return len(self.days)

    @property
    def previous(self) -> Tuple[int, int]:
        return shift_month(self.year, self.month, -1)

    @property
    def next(self) -> Tuple[int, int]:
        return shift_month(self.year, self.month, 1)


# PUBLIC_INTERFACE
def bucket_by_date(
    tasks: Iterable[TaskEntity],
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> Dict[date, DayBucket]:
    """
    Group open, dated tasks by due date.

    Completed and undated tasks are skipped. Days without qualifying tasks are
    absent from the result. When year and month are given only that month is
    kept. Tasks within a bucket keep the caller's iteration order.
    """
    buckets: Dict[date, DayBucket] = {}
    for task in tasks:
        due = task.get("due_date")
        if due is None or task["completed"]:
            continue
        if year is not None and due.year != year:
            continue
        if month is not None and due.month != month:
            continue
        buckets.setdefault(due, DayBucket()).add(task)
    return buckets


# PUBLIC_INTERFACE
def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move a (year, month) pair by delta months, wrapping across years."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


# PUBLIC_INTERFACE
def month_view(
    tasks: Iterable[TaskEntity],
    year: int,
    month: int,
    today: Optional[date] = None,
    selected: Optional[date] = None,
) -> MonthView:
    """
    Build every day cell for a month, with workload for days that have open tasks.

    leading_blanks counts the empty cells before day 1 in a Sunday-first week grid.
    """
    buckets = bucket_by_date(tasks, year, month)
    first_weekday, days_in_month = calendar.monthrange(year, month)
    # monthrange is Monday=0; shift to Sunday=0
    leading = (first_weekday + 1) % 7

    days = []
    for n in range(1, days_in_month + 1):
        d = date(year, month, n)
        days.append(
            CalendarDay(
                day=d,
                bucket=buckets.get(d) or DayBucket(),
                is_today=(d == today),
                is_selected=(d == selected),
            )
        )
    return MonthView(year=year, month=month, leading_blanks=leading, days=days)
