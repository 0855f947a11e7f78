"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest before any tests run.
"""

import os
import tempfile

# Set test environment variables BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-testing"
os.environ["UPLOAD_DIRECTORY"] = tempfile.mkdtemp(prefix="bmvt-uploads-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from bmvt.core.security import create_access_token, get_password_hash  # noqa: E402
from bmvt.db.executor import QueryExecutor  # noqa: E402
from bmvt.db.models import Base  # noqa: E402
from bmvt.db.session import SessionLocal, engine, get_db  # noqa: E402
from bmvt.services.common import build_insert  # noqa: E402
from main import app  # noqa: E402


def override_get_db():
    """Override database dependency for testing."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def clean_database():
    """Fresh tables for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield QueryExecutor(session)
    finally:
        session.close()


def token_for(user_id: int, email: str, role: str) -> str:
    return create_access_token({"id": user_id, "email": email, "role": role})


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def create_user(db):
    """Insert an account directly and return ``(row, headers)``."""

    def _create(email: str, role: str = "Agent", password: str = "motdepasse123", name: str = "Test"):
        sql, args = build_insert(
            "users",
            {
                "name": name,
                "email": email,
                "password_hash": get_password_hash(password),
                "role": role,
            },
        )
        result = db.execute(sql, args)
        db.commit()
        row = {"id": result.insert_id, "email": email, "role": role}
        return row, auth_headers(token_for(row["id"], email, role))

    return _create


@pytest.fixture
def admin_headers():
    return auth_headers(token_for(1000, "admin@bmvt.sn", "Admin"))


@pytest.fixture
def agent_headers():
    return auth_headers(token_for(2000, "agent@bmvt.sn", "Agent"))
