"""
Completion Calculator — share of the habit list done on one day.
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Optional, Sequence

from dailyflow.tracker.document import Habit


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def completed_count(day_habits: Optional[Mapping[str, bool]], habits: Sequence[Habit]) -> int:
    """Habits from the list marked true that day. Stale keys are ignored."""
    day_habits = day_habits or {}
    return sum(1 for h in habits if day_habits.get(h.id))


def percent_for_day(day_habits: Optional[Mapping[str, bool]], habits: Sequence[Habit]) -> int:
    """
    Integer percentage (0–100) of `habits` completed in `day_habits`.

    An empty habit list counts as a total of 1, so the result is 0 rather
    than a division error.
    """
    total = max(len(habits), 1)
    completed = completed_count(day_habits, habits)
    return round_half_up(Decimal(100 * completed) / Decimal(total))
