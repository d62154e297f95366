"""
Stats router.

GET /api/stats   — dashboard statistics computed from the stored document
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dailyflow.core.identity import Identity, current_identity
from dailyflow.db.base import get_db
from dailyflow.schemas.common import ErrorResponse
from dailyflow.schemas.stats import StatsResponse
from dailyflow.services import documents
from dailyflow.tracker.aggregation import build_dashboard
from dailyflow.tracker.dates import to_key

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get(
    "",
    response_model=StatsResponse,
    summary="Streak, weekly and monthly statistics",
    responses={
        401: {"model": ErrorResponse, "description": "X-User-Mobile header is missing."},
        503: {"model": ErrorResponse, "description": "Storage is unavailable."},
    },
)
def stats(
    selected_date: Optional[date] = Query(
        default=None,
        description="Date whose task counts are reported. Defaults to today.",
        examples=["2026-02-20"],
    ),
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db),
):
    """
    Same numbers the tracker shows on its dashboard:

    - **streak**: consecutive days at 100% ending today (a missing day breaks it)
    - **weekly**: completion % for each of the last 7 days, with average and full-day count
    - **best_habit / worst_habit**: most and least completed habit over 30 days
    """
    record = documents.get_or_create_document(db=db, mobile=identity.mobile)
    doc = documents.to_tracker_document(record)
    dashboard = build_dashboard(doc, to_key(selected_date) if selected_date else None)
    return StatsResponse.model_validate(dashboard.to_dict())
