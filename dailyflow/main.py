import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dailyflow.core.config import settings
from dailyflow.core.errors import (
    DailyFlowException,
    dailyflow_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from dailyflow.db.base import get_db
from dailyflow.routers import auth as auth_router
from dailyflow.routers import data as data_router
from dailyflow.routers import stats as stats_router
from dailyflow.schemas.common import HealthResponse

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s — %(message)s",
)
log = logging.getLogger("dailyflow")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.DATABASE_URL:
        log.critical("DATABASE_URL is not set. Add it to your .env file.")
        raise SystemExit(1)
    log.info("DailyFlow API starting (env=%s)", settings.APP_ENV)
    yield


app = FastAPI(
    title="DailyFlow API",
    description=(
        "**Habit and task tracker backend**\n\n"
        "Stores one document per user (habits, history by date, tasks by date), "
        "identified by the `X-User-Mobile` header.\n\n"
        "All error responses follow the `{code, message, details}` envelope."
    ),
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# --- CORS ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Exception handlers (most specific first) ---
app.add_exception_handler(DailyFlowException, dailyflow_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# --- Routers ---
app.include_router(auth_router.router)
app.include_router(data_router.router)
app.include_router(stats_router.router)


@app.get("/api/health", tags=["health"], summary="Health check", response_model=HealthResponse)
def health(db: Session = Depends(get_db)):
    """
    Returns `{"ok": true}` when both the API and the database are reachable.
    Returns HTTP 503 with `{"ok": false}` if the DB is down.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.exception("Health check could not reach the database")
        return JSONResponse(status_code=503, content={"ok": False})
    return {"ok": True}
