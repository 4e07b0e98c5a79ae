from datetime import date, datetime, timedelta, timezone

BASE_TIME = datetime(2025, 5, 1, 9, 0, tzinfo=timezone.utc)


def make_task(
    title="Task",
    *,
    id=None,
    user_id="alice",
    completed=False,
    created_offset=0,
    due_date=None,
    priority=None,
    time_cost=None,
):
    """Build a TaskEntity directly, bypassing validation, for pure-function tests."""
    if isinstance(due_date, str):
        due_date = date.fromisoformat(due_date)
    return {
        "id": id or title,
        "user_id": user_id,
        "title": title,
        "completed": completed,
        "created_at": BASE_TIME + timedelta(minutes=created_offset),
        "due_date": due_date,
        "priority": priority,
        "time_cost": time_cost,
    }


class StepClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start=BASE_TIME):
        self._now = start

    def __call__(self):
        self._now = self._now + timedelta(seconds=1)
        return self._now
