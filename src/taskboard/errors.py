from __future__ import annotations

from typing import Any, List, Optional


class TaskError(Exception):
    """Base class for errors raised by the task service and stores."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[List[Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or []

    @property
    def kind(self) -> str:
        return type(self).__name__


class ValidationError(TaskError):
    """Malformed or out-of-range input. Carries field-level messages in `detail`."""

    status_code = 422


class NotFoundError(TaskError):
    status_code = 404


class ForbiddenError(TaskError):
    """The task exists but belongs to someone else."""

    status_code = 403


class StorageError(TaskError):
    """The persistence backend failed."""

    status_code = 500
