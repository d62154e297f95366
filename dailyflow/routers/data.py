"""
Document router.

GET  /api/data   — the caller's document, seeded on first access
POST /api/data   — replace the caller's document (upsert)
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from dailyflow.core.identity import Identity, current_identity
from dailyflow.db.base import get_db
from dailyflow.schemas.common import ErrorResponse
from dailyflow.schemas.document import DocumentPayload, DocumentResponse
from dailyflow.services import documents

router = APIRouter(prefix="/api/data", tags=["data"])


@router.get(
    "",
    response_model=DocumentResponse,
    summary="Load the user document",
    responses={
        401: {"model": ErrorResponse, "description": "X-User-Mobile header is missing."},
        503: {"model": ErrorResponse, "description": "Storage is unavailable."},
    },
)
def load_data(
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db),
):
    record = documents.get_or_create_document(db=db, mobile=identity.mobile)
    return DocumentResponse(**documents.to_payload(record))


@router.post(
    "",
    response_model=DocumentResponse,
    summary="Save the whole user document",
    responses={
        401: {"model": ErrorResponse, "description": "X-User-Mobile header is missing."},
        503: {"model": ErrorResponse, "description": "Storage is unavailable."},
    },
)
def save_data(
    payload: Optional[DocumentPayload] = Body(default=None),
    identity: Identity = Depends(current_identity),
    db: Session = Depends(get_db),
):
    """
    Upsert the caller's document. Missing `history` / `tasksByDate` are
    stored as empty maps; an empty or invalid `habits` list is replaced by
    the seven default habits. Returns the stored document.
    """
    record = documents.save_document(db=db, mobile=identity.mobile, payload=payload)
    return DocumentResponse(**documents.to_payload(record))
