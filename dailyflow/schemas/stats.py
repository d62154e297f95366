"""
Dashboard statistics schema.

GET /api/stats → StatsResponse
"""
from typing import Optional
from pydantic import BaseModel, Field

from dailyflow.schemas.document import HabitSchema


class DayCompletionResponse(BaseModel):
    day: str = Field(description="ISO date key.")
    label: str = Field(description='Short weekday name, e.g. "Mon".')
    percent: int = Field(ge=0, le=100)


class StatsResponse(BaseModel):
    today: str
    selected_date: str
    total_habits: int
    completed_today: int
    today_percent: int = Field(ge=0, le=100)
    streak: int = Field(ge=0, description="Consecutive 100% days ending today.")
    weekly: list[DayCompletionResponse] = Field(description="Last 7 days, oldest first.")
    weekly_average: int
    weekly_full_days: int
    best_habit: Optional[HabitSchema] = Field(
        default=None, description="Most completed habit over the last 30 days (first listed wins ties).",
    )
    worst_habit: Optional[HabitSchema] = Field(
        default=None, description="Least completed habit over the last 30 days (first listed wins ties).",
    )
    tasks_total: int
    tasks_completed: int
    quote: str
    banner: str
