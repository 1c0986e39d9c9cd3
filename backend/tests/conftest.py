"""Shared pytest fixtures and configuration."""

import os

# Settings are cached on first import, so the test environment goes in first.
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789-abcdefghijklmnop")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("ALLOWED_HOSTS", '["testserver", "localhost"]')
os.environ.setdefault("SMTP_HOST", "")

import pytest
from fastapi.testclient import TestClient

from marketplace.core.database import Base, SessionLocal, engine
from marketplace.core.security import create_access_token
from marketplace.main import app
from marketplace.models.user import UserRole
from tests.factories import make_user


@pytest.fixture
def db():
    """Fresh schema per test on the shared in-memory sqlite connection."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    with TestClient(app) as test_client:
        yield test_client


def token_for(user) -> str:
    return create_access_token(user.email, user.id, user.session_version)


def auth_headers(user) -> dict:
    return {"Authorization": f"Bearer {token_for(user)}"}


@pytest.fixture
def owner(db):
    return make_user(db)


@pytest.fixture
def buyer(db):
    return make_user(db)


@pytest.fixture
def admin(db):
    return make_user(db, role=UserRole.ADMIN)
