"""
Taskboard: personal task tracking with a workload calendar.

The pure pieces (query engine, calendar aggregation, task service and list
controller) import without starting the web app; the FastAPI instance lives
in taskboard.main.
"""

from .calendar_view import DayBucket, bucket_by_date, month_view, shift_month
from .controller import TaskListController
from .errors import ForbiddenError, NotFoundError, StorageError, TaskError, ValidationError
from .query import TaskQuery, parse_query, select
from .service import TaskService

__all__ = [
    "DayBucket",
    "ForbiddenError",
    "NotFoundError",
    "StorageError",
    "TaskError",
    "TaskListController",
    "TaskQuery",
    "TaskService",
    "ValidationError",
    "bucket_by_date",
    "month_view",
    "parse_query",
    "select",
    "shift_month",
]
