from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..calendar_view import month_view
from ..errors import ValidationError
from ..schemas import CalendarDayOut, CalendarMarkerOut, CalendarMonthOut, MonthRef, coerce_due_date
from ..service import TaskService
from ..utils import format_duration
from .tasks import get_service

router = APIRouter(
    prefix="/api/calendar",
    tags=["calendar"],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=CalendarMonthOut,
    summary="Month Workload",
    description=(
        "Per-day workload of the caller's open tasks for one month.\n\n"
        "Query parameters:\n"
        "- year, month: month to show (defaults to the current month)\n"
        "- selected: optional selected day (YYYY-MM-DD) to flag in the grid\n\n"
        "Days whose open tasks add up to more than 300 minutes are flagged overLimit. "
        "Tasks without timeCost count as 30 minutes."
    ),
    responses={
        200: {"description": "Month view computed"},
        422: {"description": "Invalid query parameters"},
    },
)
def get_month(
    year: Optional[int] = Query(None, ge=1, le=9999, description="Calendar year"),
    month: Optional[int] = Query(None, ge=1, le=12, description="Calendar month (1..12)"),
    selected: Optional[str] = Query(None, description="Selected day (YYYY-MM-DD)"),
    service: TaskService = Depends(get_service),
) -> CalendarMonthOut:
    today = date.today()
    year = year or today.year
    month = month or today.month

    selected_day = None
    if selected:
        try:
            selected_day = coerce_due_date(selected)
        except ValueError as e:
            raise ValidationError(
                "Invalid query parameters",
                detail=[{"loc": ["query", "selected"], "msg": str(e)}],
            ) from e

    view = month_view(service.all(), year, month, today=today, selected=selected_day)
    days = [
        CalendarDayOut(
            date=cell.day.isoformat(),
            day=cell.day.day,
            task_count=len(cell.bucket.tasks),
            total_minutes=cell.bucket.total_minutes,
            total_label=format_duration(cell.bucket.total_minutes),
            over_limit=cell.bucket.over_limit,
            markers=[CalendarMarkerOut(id=t["id"], priority=t["priority"]) for t in cell.bucket.markers],
            is_today=cell.is_today,
            is_selected=cell.is_selected,
        )
        for cell in view.days
    ]
    prev_year, prev_month = view.previous
    next_year, next_month = view.next
    return CalendarMonthOut(
        year=view.year,
        month=view.month,
        month_name=view.month_name,
        leading_blanks=view.leading_blanks,
        days_in_month=view.days_in_month,
        previous=MonthRef(year=prev_year, month=prev_month),
        next=MonthRef(year=next_year, month=next_month),
        days=days,
    )
