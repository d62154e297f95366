"""
Document service: account lookup, default seeding and full-document upsert.

Public API
----------
signup(db, mobile)                     -> (UserData, created)
login(db, mobile)                      -> UserData            (UserNotFoundError)
get_or_create_document(db, mobile)     -> UserData            (seeds on first access)
save_document(db, mobile, payload)     -> UserData            (upsert)
to_payload(record)                     -> dict                ({habits, history, tasksByDate})
to_tracker_document(record)            -> tracker UserDocument

Storage failures are logged and re-raised as StorageUnavailableError.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from dailyflow.core.errors import MobileRequiredError, StorageUnavailableError, UserNotFoundError
from dailyflow.models.user_data import UserData
from dailyflow.schemas.document import DocumentPayload, HabitSchema
from dailyflow.tracker.dates import today_key
from dailyflow.tracker.document import DEFAULT_HABITS, UserDocument

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _require_mobile(mobile: Optional[str]) -> str:
    mobile = (mobile or "").strip()
    if not mobile:
        raise MobileRequiredError()
    return mobile


def default_habits() -> list[dict[str, str]]:
    return [h.to_dict() for h in DEFAULT_HABITS]


def seed(mobile: str, today: Optional[date] = None) -> UserData:
    key = today_key(today)
    return UserData(
        mobile=mobile,
        habits=default_habits(),
        history={key: {"habits": {}}},
        tasks_by_date={key: []},
    )


def clean_habits(raw: Any) -> list[dict[str, str]]:
    """Validated habit list, or the defaults when `raw` is empty or unusable."""
    if not isinstance(raw, list) or not raw:
        return default_habits()
    try:
        return [HabitSchema.model_validate(h).model_dump() for h in raw]
    except ValidationError:
        log.warning("Invalid habits in payload, falling back to defaults")
        return default_habits()


def find_user(db: Session, mobile: str) -> Optional[UserData]:
    return db.query(UserData).filter(UserData.mobile == mobile).first()


def _create(db: Session, record: UserData) -> tuple[UserData, bool]:
    """Insert `record`; if another request created it first, return that row."""
    db.add(record)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = find_user(db, record.mobile)
        if existing is None:
            raise
        return existing, False
    db.refresh(record)
    log.info("Seeded document for %s", record.mobile)
    return record, True


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

def signup(db: Session, mobile: Optional[str]) -> tuple[UserData, bool]:
    """Create the account with a seeded document. Idempotent."""
    mobile = _require_mobile(mobile)
    try:
        existing = find_user(db, mobile)
        if existing is not None:
            return existing, False
        return _create(db, seed(mobile))
    except SQLAlchemyError:
        db.rollback()
        log.exception("Signup failed for %s", mobile)
        raise StorageUnavailableError("sign up")


def login(db: Session, mobile: Optional[str]) -> UserData:
    mobile = _require_mobile(mobile)
    try:
        record = find_user(db, mobile)
    except SQLAlchemyError:
        log.exception("Login failed for %s", mobile)
        raise StorageUnavailableError("log in")
    if record is None:
        raise UserNotFoundError(mobile)
    return record


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

def get_or_create_document(db: Session, mobile: str) -> UserData:
    try:
        record = find_user(db, mobile)
        if record is None:
            record, _ = _create(db, seed(mobile))
        return record
    except SQLAlchemyError:
        db.rollback()
        log.exception("Failed to load data for %s", mobile)
        raise StorageUnavailableError("load data")


def save_document(db: Session, mobile: str, payload: Optional[DocumentPayload]) -> UserData:
    """Replace the stored document. Absent history/tasks become empty maps."""
    payload = payload or DocumentPayload()
    habits = clean_habits(payload.habits)
    history = payload.history or {}
    tasks_by_date = payload.tasks_by_date or {}
    try:
        record = find_user(db, mobile)
        if record is None:
            record = UserData(mobile=mobile)
            db.add(record)
        record.habits = habits
        record.history = history
        record.tasks_by_date = tasks_by_date
        db.commit()
        db.refresh(record)
        return record
    except SQLAlchemyError:
        db.rollback()
        log.exception("Failed to save data for %s", mobile)
        raise StorageUnavailableError("save data")


# --- serialization ---

def to_payload(record: UserData) -> dict[str, Any]:
    return {
        "habits": record.habits or [],
        "history": record.history or {},
        "tasks_by_date": record.tasks_by_date or {},
    }


def to_tracker_document(record: UserData) -> UserDocument:
    return UserDocument.from_payload(
        record.mobile,
        {
            "habits": record.habits,
            "history": record.history,
            "tasksByDate": record.tasks_by_date,
        },
    )
