"""
Aggregation Engine — weekly and monthly views over the history.

Public API
----------
weekly_percentages(history, habits, today)   -> list[int]      (7 values, oldest first)
weekly_average(percentages)                  -> int
weekly_full_days(percentages)                -> int
monthly_insight(history, habits, today)      -> MonthlyInsight
build_dashboard(doc, selected_date, today)   -> Dashboard      (everything the UI renders)

All functions are pure and total: empty habit lists, missing days and
empty windows all produce a value, never an exception.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from dailyflow.tracker.completion import completed_count, percent_for_day, round_half_up
from dailyflow.tracker.dates import current_date, last_n_dates, to_key, weekday_labels
from dailyflow.tracker.document import Habit, UserDocument
from dailyflow.tracker.motivation import quote_for_day, streak_banner
from dailyflow.tracker.streaks import calculate_streak

WEEK_DAYS = 7
MONTH_DAYS = 30


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class MonthlyInsight:
    best_habit: Optional[Habit]
    worst_habit: Optional[Habit]


@dataclass
class DayCompletion:
    day: str
    label: str
    percent: int


@dataclass
class Dashboard:
    today: str
    selected_date: str
    total_habits: int
    completed_today: int
    today_percent: int
    streak: int
    weekly: list[DayCompletion]
    weekly_average: int
    weekly_full_days: int
    best_habit: Optional[Habit]
    worst_habit: Optional[Habit]
    tasks_total: int
    tasks_completed: int
    quote: str
    banner: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Weekly
# ---------------------------------------------------------------------------

def _day_habits(history: Mapping[str, Mapping[str, Any]], day: str) -> Mapping[str, bool]:
    return (history.get(day) or {}).get("habits") or {}


def weekly_percentages(
    history: Mapping[str, Mapping[str, Any]],
    habits: Sequence[Habit],
    today: Optional[date] = None,
) -> list[int]:
    return [
        percent_for_day(_day_habits(history, day), habits)
        for day in last_n_dates(WEEK_DAYS, today)
    ]


def weekly_average(percentages: Sequence[int]) -> int:
    if not percentages:
        return 0
    return round_half_up(Decimal(sum(percentages)) / Decimal(len(percentages)))


def weekly_full_days(percentages: Sequence[int]) -> int:
    return sum(1 for p in percentages if p == 100)


# ---------------------------------------------------------------------------
# Monthly
# ---------------------------------------------------------------------------

def monthly_insight(
    history: Mapping[str, Mapping[str, Any]],
    habits: Sequence[Habit],
    today: Optional[date] = None,
) -> MonthlyInsight:
    """
    Best and worst habit by number of completed days in the last 30 days.

    Ties go to the habit listed first: a later habit only replaces the
    current pick on a strict improvement.
    """
    if not habits:
        return MonthlyInsight(best_habit=None, worst_habit=None)

    counts = {h.id: 0 for h in habits}
    for day in last_n_dates(MONTH_DAYS, today):
        record = history.get(day)
        if record is None:
            continue
        day_habits = record.get("habits") or {}
        for h in habits:
            if day_habits.get(h.id):
                counts[h.id] += 1

    best = worst = habits[0]
    for h in habits[1:]:
        if counts[h.id] > counts[best.id]:
            best = h
        if counts[h.id] < counts[worst.id]:
            worst = h
    return MonthlyInsight(best_habit=best, worst_habit=worst)


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------

def build_dashboard(
    doc: UserDocument,
    selected_date: Optional[str] = None,
    today: Optional[date] = None,
) -> Dashboard:
    today = today or current_date()
    today_str = to_key(today)
    selected = selected_date or today_str

    todays = doc.habits_on(today_str)
    percentages = weekly_percentages(doc.history, doc.habits, today)
    labels = weekday_labels(WEEK_DAYS, today)
    insight = monthly_insight(doc.history, doc.habits, today)
    streak = calculate_streak(doc.history, doc.habits, today)
    tasks = doc.tasks_for(selected)

    return Dashboard(
        today=today_str,
        selected_date=selected,
        total_habits=len(doc.habits),
        completed_today=completed_count(todays, doc.habits),
        today_percent=percent_for_day(todays, doc.habits),
        streak=streak,
        weekly=[
            DayCompletion(day=day, label=label, percent=pct)
            for day, label, pct in zip(last_n_dates(WEEK_DAYS, today), labels, percentages)
        ],
        weekly_average=weekly_average(percentages),
        weekly_full_days=weekly_full_days(percentages),
        best_habit=insight.best_habit,
        worst_habit=insight.worst_habit,
        tasks_total=len(tasks),
        tasks_completed=sum(1 for t in tasks if t.done),
        quote=quote_for_day(today),
        banner=streak_banner(streak),
    )
