#!/usr/bin/env python3
"""
Database initialization script.

Creates the tables from the SQLAlchemy models and, when ``ADMIN_EMAIL`` and
``ADMIN_PASSWORD`` are set, bootstraps an Admin account.
Uses environment variables (or a .env file) for credentials.
NO credentials are hardcoded.
"""

import logging
import os
import sys

from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# Load environment variables from .env before the settings are read
load_dotenv()

from bmvt.core.errors import DatabaseError  # noqa: E402
from bmvt.core.security import get_password_hash  # noqa: E402
from bmvt.db.executor import QueryExecutor  # noqa: E402
from bmvt.db.models import Base, UserRole  # noqa: E402
from bmvt.db.session import SessionLocal, engine  # noqa: E402
from bmvt.services.common import build_insert  # noqa: E402

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def create_database_tables() -> None:
    logger.info(f"Connecting to database at {str(engine.url).split('@')[-1]}")
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection successful")

    Base.metadata.create_all(bind=engine)
    logger.info(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


def bootstrap_admin(email: str, password: str, name: str) -> bool:
    """
    Create the Admin account unless the email is already registered.

    Returns:
        True when an account was created
    """
    email = email.strip().lower()
    with SessionLocal() as session:
        db = QueryExecutor(session)
        if db.fetch_one("SELECT id FROM users WHERE email = ?", [email]):
            logger.info(f"Admin account {email} already exists")
            return False
        sql, args = build_insert(
            "users",
            {
                "name": name,
                "email": email,
                "password_hash": get_password_hash(password),
                "role": UserRole.ADMIN.value,
            },
        )
        db.execute(sql, args)
        db.commit()
    logger.info(f"Admin account {email} created")
    return True


def main():
    """Main entry point."""
    logger.info("Database Initialization Script")
    try:
        create_database_tables()

        email = os.getenv("ADMIN_EMAIL")
        password = os.getenv("ADMIN_PASSWORD")
        if email and password:
            if len(password) < 8:
                logger.error("ADMIN_PASSWORD must be at least 8 characters")
                sys.exit(1)
            bootstrap_admin(email, password, os.getenv("ADMIN_NAME", "Administrateur"))
        else:
            logger.info("ADMIN_EMAIL / ADMIN_PASSWORD not set, skipping admin bootstrap")
    except (SQLAlchemyError, DatabaseError) as e:
        logger.error(f"Database error: {e}")
        sys.exit(1)

    logger.info("Database initialization completed successfully")


if __name__ == "__main__":
    main()
