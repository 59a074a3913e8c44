"""Engine and session factory."""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import Settings, settings
from app.core.errors import TransientInfrastructureFailure

logger = logging.getLogger(__name__)


def build_engine(config: Settings = settings) -> Engine:
    """Create an engine whose every round-trip is bounded by a timeout."""
    url = str(config.database_url)
    if url.startswith("sqlite"):
        # timeout = how long a writer waits for the database lock
        connect_args = {
            "check_same_thread": False,
            "timeout": config.db_connect_timeout_seconds,
        }
        return create_engine(url, connect_args=connect_args)

    connect_args = {
        "connect_timeout": config.db_connect_timeout_seconds,
        "options": f"-c statement_timeout={config.db_statement_timeout_ms}",
    }
    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        pool_timeout=config.db_pool_timeout_seconds,
    )


engine = build_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def get_db() -> Iterator[Session]:
    """Yield a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def store_errors(db: Session) -> Iterator[None]:
    """Turn data-store failures into a retriable domain error."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Data store failure: %s", exc)
        raise TransientInfrastructureFailure() from exc
