from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .models import MAX_TIME_COST, MAX_TITLE_LENGTH

Priority = Literal["low", "medium", "high"]

# Incoming dueDate is a strict YYYY-MM-DD string (or an already-parsed date)
DueDateInput = Union[date, str]

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def coerce_due_date(value: Optional[DueDateInput]) -> Optional[date]:
    """
    Normalize dueDate input into a date.
    - Strings must match YYYY-MM-DD exactly and name a real calendar day.
    - date instances pass through; datetimes are rejected since due dates carry no time.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        raise ValueError("Invalid date format (YYYY-MM-DD)")

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        if not _DATE_PATTERN.match(value):
            raise ValueError("Invalid date format (YYYY-MM-DD)")
        try:
            return date.fromisoformat(value)
        except ValueError as e:
            raise ValueError("Invalid date (no such calendar day)") from e

    raise ValueError("Invalid type for dueDate; expected a YYYY-MM-DD string.")


def _clean_title(value: str) -> str:
    s = value.strip()
    if not s:
        raise ValueError("Title is required")
    if len(s) > MAX_TITLE_LENGTH:
        raise ValueError("Title too long")
    return s


def _whole_minutes(value: object) -> object:
    # JSON numbers like 30.0 are whole minutes; strings and bools still fail the strict int check
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class _CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# PUBLIC_INTERFACE
class TaskCreate(_CamelModel):
    """
    Schema for creating a task. New tasks always start incomplete.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Buy groceries",
                "priority": "medium",
                "dueDate": "2025-06-01",
                "timeCost": 45,
            }
        },
    )

    title: str = Field(..., description="Task title, trimmed, 1..500 characters")
    priority: Optional[Priority] = Field(default=None, description="low, medium or high")
    due_date: Optional[date] = Field(default=None, description="Due date as YYYY-MM-DD")
    time_cost: Optional[int] = Field(
        default=None,
        gt=0,
        le=MAX_TIME_COST,
        strict=True,
        description="Estimated duration in minutes (1..1440)",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[date]:
        return coerce_due_date(v)

    @field_validator("time_cost", mode="before")
    @classmethod
    def accept_whole_float(cls, v: object) -> object:
        return _whole_minutes(v)


# PUBLIC_INTERFACE
class TaskUpdate(_CamelModel):
    """
    Schema for a partial task update.

    Only fields present in the payload change. An explicit null clears
    priority, dueDate or timeCost; title and completed cannot be cleared.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "completed": True,
                "priority": None,
                "timeCost": 90,
            }
        },
    )

    title: Optional[str] = Field(default=None, description="Task title, trimmed, 1..500 characters")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")
    priority: Optional[Priority] = Field(default=None, description="low, medium, high or null")
    due_date: Optional[date] = Field(default=None, description="Due date as YYYY-MM-DD, or null")
    time_cost: Optional[int] = Field(
        default=None,
        gt=0,
        le=MAX_TIME_COST,
        strict=True,
        description="Estimated duration in minutes (1..1440), or null",
    )

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _clean_title(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_due_date(cls, v: Optional[DueDateInput]) -> Optional[date]:
        return coerce_due_date(v)

    @field_validator("time_cost", mode="before")
    @classmethod
    def accept_whole_float(cls, v: object) -> object:
        return _whole_minutes(v)

    @model_validator(mode="after")
    def reject_cleared_required(self) -> "TaskUpdate":
        for name in ("title", "completed"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{to_camel(name)} cannot be null")
        return self

    # PUBLIC_INTERFACE
    def changes(self) -> dict:
        """Return only the fields the caller supplied, keyed by Python field name."""
        return self.model_dump(exclude_unset=True)


# PUBLIC_INTERFACE
class TaskOut(_CamelModel):
    """
    Schema returned by the API for a task.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "5f0c1d6e8a2b4c7d9e0f1a2b3c4d5e6f",
                "userId": "dev-user",
                "title": "Buy groceries",
                "completed": False,
                "createdAt": "2025-05-30T10:15:30.123456Z",
                "dueDate": "2025-06-01",
                "priority": "medium",
                "timeCost": 45,
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the task")
    user_id: str = Field(..., description="Owner of the task")
    title: str = Field(..., description="Task title")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    due_date: Optional[date] = Field(default=None, description="Due date (YYYY-MM-DD)")
    priority: Optional[Priority] = Field(default=None, description="Priority, if any")
    time_cost: Optional[int] = Field(default=None, description="Estimated minutes, if any")


class TaskEnvelope(BaseModel):
    task: TaskOut


class TaskListEnvelope(BaseModel):
    tasks: List[TaskOut]


class DeleteResult(BaseModel):
    success: bool = True


class CalendarMarkerOut(_CamelModel):
    id: str
    priority: Optional[Priority] = None


class CalendarDayOut(_CamelModel):
    """
    One day cell of the month view. Days without open tasks report zero totals.
    """

    date: str = Field(..., description="Day as YYYY-MM-DD")
    day: int
    task_count: int = Field(..., description="Number of open tasks due that day")
    total_minutes: int = Field(..., description="Sum of effective durations (absent counts as 30)")
    total_label: str = Field(..., description="Human readable total, e.g. '5 hours 50 min'")
    over_limit: bool = Field(..., description="True when total exceeds 300 minutes")
    markers: List[CalendarMarkerOut] = Field(default_factory=list, description="At most 3 task markers")
    is_today: bool = False
    is_selected: bool = False


class MonthRef(BaseModel):
    year: int
    month: int


class CalendarMonthOut(_CamelModel):
    year: int
    month: int
    month_name: str
    leading_blanks: int = Field(..., description="Empty cells before day 1 in a Sunday-first grid")
    days_in_month: int
    previous: MonthRef
    next: MonthRef
    days: List[CalendarDayOut]
