"""
User document schemas.

GET  /api/data → DocumentResponse
POST /api/data → DocumentPayload → DocumentResponse

History and task lists are passed through as JSON; only habits are
validated, because an unusable habit list is replaced by the defaults.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class HabitSchema(BaseModel):
    id: str = Field(min_length=1)
    label: str


class DocumentPayload(BaseModel):
    """Full-document upsert. Every field is optional."""
    model_config = ConfigDict(populate_by_name=True)

    habits: Optional[Any] = Field(
        default=None,
        description="List of {id, label}. Empty or invalid lists fall back to the default habits.",
    )
    history: Optional[dict[str, Any]] = Field(
        default=None,
        description='Map of "YYYY-MM-DD" → {"habits": {habitId: bool}}.',
    )
    tasks_by_date: Optional[dict[str, Any]] = Field(
        default=None,
        alias="tasksByDate",
        description='Map of "YYYY-MM-DD" → [{id, text, done, reminderTime}], newest first.',
    )


class DocumentResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    habits: list[HabitSchema]
    history: dict[str, Any]
    tasks_by_date: dict[str, Any] = Field(serialization_alias="tasksByDate")
