"""
Auth router.

POST /api/auth/signup
POST /api/auth/login

Identity is the mobile number alone; there are no passwords or tokens.
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.orm import Session

from dailyflow.db.base import get_db
from dailyflow.schemas.auth import AuthRequest, AuthResponse
from dailyflow.schemas.common import ErrorResponse
from dailyflow.services import documents

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account (idempotent)",
    responses={
        200: {"description": "Account already existed."},
        201: {"description": "Account created with the default document."},
        400: {"model": ErrorResponse, "description": "Mobile is missing."},
        503: {"model": ErrorResponse, "description": "Storage is unavailable."},
    },
)
def signup(
    response: Response,
    payload: Optional[AuthRequest] = Body(default=None),
    db: Session = Depends(get_db),
):
    record, created = documents.signup(db=db, mobile=payload.mobile if payload else None)
    if not created:
        response.status_code = status.HTTP_200_OK
    return AuthResponse(mobile=record.mobile)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in with an existing mobile number",
    responses={
        400: {"model": ErrorResponse, "description": "Mobile is missing."},
        404: {"model": ErrorResponse, "description": "No account for this mobile."},
        503: {"model": ErrorResponse, "description": "Storage is unavailable."},
    },
)
def login(
    payload: Optional[AuthRequest] = Body(default=None),
    db: Session = Depends(get_db),
):
    record = documents.login(db=db, mobile=payload.mobile if payload else None)
    return AuthResponse(mobile=record.mobile)
