"""
SQLAlchemy engine, session factory and declarative base.

The engine is built lazily from `settings.DATABASE_URL` so importing the
models never requires a reachable database.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from dailyflow.core.config import settings


class Base(DeclarativeBase):
    pass


class StorageNotConfiguredError(RuntimeError):
    """DATABASE_URL is not set."""


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    if not settings.DATABASE_URL:
        raise StorageNotConfiguredError("DATABASE_URL is not set. Add it to your .env file.")
    connect_args = {}
    if settings.DATABASE_URL.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(settings.DATABASE_URL, pool_pre_ping=True, connect_args=connect_args)


@lru_cache(maxsize=1)
def get_sessionmaker() -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=get_engine())


def get_db() -> Iterator[Session]:
    db = get_sessionmaker()()
    try:
        yield db
    finally:
        db.close()
