"""Daily quote and streak banner shown on the dashboard."""
from __future__ import annotations

from datetime import date
from typing import Optional

from dailyflow.tracker.dates import current_date

QUOTES = (
    "Small steps daily beat big leaps occasionally.",
    "Discipline is choosing what you want most over what you want now.",
    "Your future self is already thanking you.",
    "Consistency turns goals into habits.",
    "Done is better than perfect.",
    "Tiny victories compound into momentum.",
    "Energy follows focus. Guard it.",
    "Show up. Even for five minutes.",
    "Progress is quiet but powerful.",
    "Momentum is built, not found.",
)

STREAK_BANNER_MIN_DAYS = 3


def quote_for_day(today: Optional[date] = None) -> str:
    # Month counted from zero.
    day = today or current_date()
    return QUOTES[(day.day + day.month - 1) % len(QUOTES)]


def streak_banner(streak: int) -> str:
    if streak >= STREAK_BANNER_MIN_DAYS:
        return f"\N{FIRE} {streak} days in a row"
    return "Keep stacking reps"
