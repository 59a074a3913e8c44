import os
import tempfile
from pathlib import Path

_DB_PATH = Path(tempfile.gettempdir()) / f"euroloo-test-{os.getpid()}.db"

# must be set before any app module reads the settings
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_PATH}"
os.environ["AUTH_SECRET_KEY"] = "test-secret"
os.environ["AUTH_ALGORITHMS"] = "HS256"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from jose import jwt  # noqa: E402

from app import models  # noqa: F401,E402
from app.db.base import Base  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.models.user import Role  # noqa: E402
from app.services import toilet_store, users  # noqa: E402
from helpers import TEST_SECRET  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_toilet(db):
    def _make(lat, lon, **kwargs):
        data = {"lat": lat, "lon": lon, "name": kwargs.pop("name", None)}
        return toilet_store.insert_toilet(db, data, **kwargs)

    return _make


@pytest.fixture
def admin(db):
    users.get_or_create_user(db, "admin-1")
    users.set_role(db, "admin-1", Role.ADMIN)
    return "admin-1"


def auth_header(sub: str, email: str | None = None) -> dict[str, str]:
    token = jwt.encode({"sub": sub, "email": email}, TEST_SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth():
    return auth_header
