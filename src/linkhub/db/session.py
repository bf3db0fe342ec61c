from __future__ import annotations
from contextlib import contextmanager
import logging
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from linkhub.core.config import settings
from linkhub.core.errors import StoreError

logger = logging.getLogger(__name__)


def _connect_args(url: str) -> dict:
    # SQLite connections are shared across FastAPI's threadpool
    return {"check_same_thread": False} if url.startswith("sqlite") else {}


engine = create_engine(settings.database_url, connect_args=_connect_args(settings.database_url))
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def store_message(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


@contextmanager
def store_errors(db: Session) -> Iterator[None]:
    """
    Roll back and re-raise any persistence failure as StoreError,
    keeping the store's own message.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Store call failed: %s", store_message(exc))
        raise StoreError(store_message(exc)) from exc
