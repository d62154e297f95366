"""
UserData — the single persisted record per identity.

habits, history and tasks_by_date are stored as JSON exactly as the
client sends them; the server never interprets history or task contents.
"""
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from dailyflow.db.base import Base


class UserData(Base):
    __tablename__ = "user_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    mobile: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    habits: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    history: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    tasks_by_date: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
