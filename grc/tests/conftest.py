"""
Shared fixtures: an in-memory database, an app wired to it, and logged-in users.
"""
import os
import tempfile

# Settings are read at import time by grc.db.session; these must be set first.
os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="grc-uploads-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from grc.core.config import Settings, get_settings
from grc.db import models  # noqa - register models on Base.metadata
from grc.db.session import Base, get_db
from grc.main import create_app
from grc.tests.utils import signed_up

# ============= FIXTURES =============

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        SECRET_KEY="test-secret-key-0123456789abcdef0123456789",
        DATABASE_URL="sqlite://",
        BCRYPT_ROUNDS=4,
        UPLOAD_DIR=str(tmp_path / "uploads"),
    )


@pytest.fixture
def app(settings, session_factory):
    app = create_app(settings)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    return app


@pytest.fixture
def client(app):
    # No context manager: the lifespan would initialise the module-level engine.
    return TestClient(app)


@pytest.fixture
def admin(client):
    return signed_up(client, "admin@example.com", role="admin")


@pytest.fixture
def alice(client):
    return signed_up(client, "alice@example.com")


@pytest.fixture
def bob(client):
    return signed_up(client, "bob@example.com")


@pytest.fixture
def admin_headers(admin):
    return admin[1]


@pytest.fixture
def alice_headers(alice):
    return alice[1]


@pytest.fixture
def bob_headers(bob):
    return bob[1]
