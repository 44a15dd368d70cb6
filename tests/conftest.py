import os
import uuid

# Configure the service before any myumc module reads the environment
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-myumc"
os.environ["AUTH_PROVIDER"] = "local"
os.environ["DEV_MODE"] = "false"
os.environ.setdefault("PYTEST_RUNNING", "1")

import pytest
from fastapi.testclient import TestClient

from myumc.db import models
from myumc.db import database as db_mod
from myumc.services.auth_service import AuthService
from myumc.utils.role_permissions import ROLE_MEMBER


@pytest.fixture(scope="session", autouse=True)
def _schema():
    """Create all tables once on the shared in-memory SQLite database."""
    db_mod._ensure_sqlite_schema()
    yield


@pytest.fixture(autouse=True)
def _clean_tables():
    """Empty every table after each test so tests stay independent."""
    yield
    with db_mod.engine.begin() as conn:
        for table in reversed(models.Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db_session():
    session = db_mod.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from myumc.api.main import app
    return TestClient(app)


@pytest.fixture
def org_factory(db_session):
    def _create(name=None, slug=None):
        suffix = uuid.uuid4().hex[:8]
        org = models.Organization(name=name or f"Church {suffix}", slug=slug or f"church-{suffix}")
        db_session.add(org)
        db_session.commit()
        db_session.refresh(org)
        return org
    return _create


@pytest.fixture
def user_factory(db_session):
    def _create(role=ROLE_MEMBER, organization=None, email=None, **fields):
        user = models.User(
            email=email or f"user_{uuid.uuid4().hex[:8]}@example.com",
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", "User"),
            user_type=role,
            organization_id=organization.id if organization is not None else None,
            is_active=fields.pop("is_active", True),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _create


@pytest.fixture
def auth_headers(db_session):
    """Bearer headers carrying a locally issued access token for `user`."""
    def _headers(user):
        token, _expires = AuthService(db_session).create_access_token(user)
        return {"Authorization": f"Bearer {token}"}
    return _headers
