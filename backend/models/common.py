"""Common database utilities and base models"""

import datetime
import functools
from contextlib import contextmanager

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy.engine import Engine
from sqlmodel import create_engine, Session
from typing import Generator

import logging

logger = logging.getLogger("habitpals.db")


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def engine_connect_args(database_url: str, statement_timeout_ms: int) -> dict:
    """Bound every statement so a stuck lock surfaces as an OperationalError"""
    if database_url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={statement_timeout_ms}"}
    if database_url.startswith("sqlite"):
        return {"timeout": statement_timeout_ms / 1000}
    return {}


@functools.cache
def get_engine() -> Engine:  # pragma: no cover
    from settings import DATABASE_URL, DB_STATEMENT_TIMEOUT_MS

    return create_engine(
        DATABASE_URL,
        connect_args=engine_connect_args(DATABASE_URL, DB_STATEMENT_TIMEOUT_MS),
    )


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def get_session() -> Generator[Session, None, None]:  # pragma: no cover
    """Get database session for FastAPI dependency, always closes session."""
    session = Session(get_engine(), expire_on_commit=False)
    try:
        yield session
    finally:
        session.close()


@contextmanager
def get_db() -> Generator[Session, None, None]:  # pragma: no cover
    """Context manager for a database session outside of a request"""
    session = Session(get_engine(), expire_on_commit=False)
    try:
        yield session
    except Exception as e:
        logger.exception(f"Exception in the database session rolling back - {e}")
        session.rollback()
        raise
    finally:
        session.close()


def parse_bool(bool_str: str | bool):
    if isinstance(bool_str, str):
        return bool_str.lower() in ("true", "1")
    return bool(bool_str)
