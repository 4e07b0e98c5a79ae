from __future__ import annotations

from typing import List, Tuple

# Durations offered by the task editor, in minutes
DURATION_OPTIONS = (15, 30, 45, 60, 90, 120)


def _hours(n: float) -> str:
    text = f"{n:g}"
    return f"{text} hour" if n == 1 else f"{text} hours"


# PUBLIC_INTERFACE
def format_duration(minutes: int) -> str:
    """
    Render a minute count the way the task editor labels durations.

    Examples:
        format_duration(45)  -> '45 min'
        format_duration(60)  -> '1 hour'
        format_duration(90)  -> '1.5 hours'
        format_duration(350) -> '5 hours 50 min'
    """
    minutes = max(int(minutes), 0)
    if minutes < 60:
        return f"{minutes} min"
    hours, rest = divmod(minutes, 60)
    if rest == 0:
        return _hours(hours)
    if rest == 30:
        return _hours(hours + 0.5)
    return f"{_hours(hours)} {rest} min"


# PUBLIC_INTERFACE
def duration_choices() -> List[Tuple[int, str]]:
    """(minutes, label) pairs for the duration picker."""
    return [(m, format_duration(m)) for m in DURATION_OPTIONS]
