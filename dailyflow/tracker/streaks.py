"""
Streak Engine — consecutive fully-completed days ending today.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Mapping, Optional, Sequence

from dailyflow.tracker.completion import percent_for_day
from dailyflow.tracker.dates import current_date, to_key
from dailyflow.tracker.document import Habit


def calculate_streak(
    history: Mapping[str, Mapping[str, Any]],
    habits: Sequence[Habit],
    today: Optional[date] = None,
) -> int:
    """
    Walk backwards from today while each day has a history entry at 100%.

    A day without an entry ends the streak just like a partial day does,
    so today must itself be complete for the streak to be non-zero.
    """
    streak = 0
    cursor = today or current_date()
    while True:
        record = history.get(to_key(cursor))
        if record is None:
            break
        if percent_for_day(record.get("habits"), habits) != 100:
            break
        streak += 1
        cursor -= timedelta(days=1)
    return streak
