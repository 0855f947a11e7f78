"""
Database configuration and session management.

This module sets up the SQLAlchemy engine, the session factory and the
``get_db`` dependency used by every route.
"""

import logging
import time
from collections.abc import Generator

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker

from bmvt.core.config import settings

logger = logging.getLogger("bmvt.db")

DATABASE_URL = settings.get_database_url()


def _engine_options(url: str) -> dict:
    """Pool and driver options for the configured backend."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}

    options = {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": settings.db_pool_recycle,
        "pool_timeout": settings.db_pool_timeout,
    }
    if url.startswith("mysql"):
        options["connect_args"] = {
            "charset": "utf8mb4",
            "connect_timeout": settings.db_connect_timeout,
        }
    return options


engine = create_engine(
    DATABASE_URL,
    echo=settings.debug,
    future=True,
    **_engine_options(DATABASE_URL),
)

# Session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)


@event.listens_for(engine, "connect")
def connect_handler(dbapi_connection, connection_record):
    logger.debug(f"Opened {engine.dialect.name} connection")


@event.listens_for(engine, "invalidate")
def invalidate_handler(dbapi_connection, connection_record, exception):
    """Log connection invalidation."""
    logger.warning(f"Database connection invalidated: {exception}")


def get_db() -> Generator[Session, None, None]:
    """
    Database dependency that provides a database session.

    Services commit explicitly; anything left pending when the request fails
    is rolled back before the session is closed.
    """
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_database_health() -> dict:
    """
    Check database connection health and return status.

    Example:
        {
            "status": "healthy",
            "dialect": "mysql",
            "response_time_ms": 5.2
        }
    """
    started = time.perf_counter()
    status = {"status": "unhealthy", "dialect": engine.dialect.name, "error": None}

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        status.update(
            {
                "status": "healthy",
                "response_time_ms": round((time.perf_counter() - started) * 1000, 2),
            }
        )
        logger.debug("Database health check: HEALTHY")

    except Exception as e:
        status["error"] = str(e)
        logger.error(f"Database health check: UNHEALTHY - {e}")

    return status
