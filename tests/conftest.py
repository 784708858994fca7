import os

# the datastore engine is built at import time, so configure it first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["APP_ENV"] = "development"
os.environ["CLOUDINARY_CLOUD_NAME"] = "demo-cloud"
os.environ["CLOUDINARY_API_KEY"] = "123456789"
os.environ["CLOUDINARY_API_SECRET"] = "test-secret"
os.environ["CLOUDINARY_UPLOAD_PRESET"] = "pdf-upload-signed"
os.environ["CAMPAIGN_WEBHOOK_URL"] = "https://hooks.example.com/campaigns"

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from db.base import Base  # noqa: E402
from db.session import SessionLocal, engine  # noqa: E402
from errors import ObjectStoreError  # noqa: E402
from main import app  # noqa: E402
from services.object_store import get_object_store  # noqa: E402
from settings import get_settings  # noqa: E402


class FakeStore:
    """Object store double that records destroys and fails on request."""

    def __init__(self) -> None:
        self.destroyed: list[str] = []
        self.failing: set[str] = set()

    def destroy(self, public_id: str) -> None:
        if public_id in self.failing:
            raise ObjectStoreError(f"Failed to delete remote object {public_id}", detail="boom")
        self.destroyed.append(public_id)


@pytest.fixture()
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(db_session: Session, fake_store: FakeStore) -> Generator[TestClient, None, None]:
    get_settings.cache_clear()
    app.state.rate_limiter.reset()
    app.dependency_overrides[get_object_store] = lambda: fake_store
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
        get_settings.cache_clear()
