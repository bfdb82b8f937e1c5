import os

# Settings are read at import time, so the test environment goes in first
os.environ.setdefault("ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("MAIL_USERNAME", "mailer")
os.environ.setdefault("MAIL_PASSWORD", "mailer-password")
os.environ.setdefault("MAIL_FROM", "noreply@example.com")
os.environ.setdefault("MAIL_SERVER", "localhost")
os.environ.setdefault("MAIL_PORT", "587")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_S3_BUCKET_NAME", "test-bucket")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from main import app
from core.database import Base
from models.enums import UserRole, UserStatus
from models.users import User
from services.storage_service import get_storage
from utils.deps import get_db
from tests.factories import FakeStorage, make_user

# SYNC SQLite for testing (matches sync service layer)
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False}
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    """
    Creates a fresh, empty database for each test.
    Uses SYNC SQLAlchemy to match the service layer.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def sent_emails(monkeypatch):
    """Captures outgoing mail as (kind, to_email, payload) tuples."""
    sent = []

    def fake_verification(to_email, code):
        sent.append(("verification", to_email, code))

    def fake_reset(to_email, token, reset_link):
        sent.append(("reset", to_email, {"token": token, "link": reset_link}))

    monkeypatch.setattr("services.auth_service.send_verification_email", fake_verification)
    monkeypatch.setattr("services.auth_service.send_password_reset_email", fake_reset)
    return sent


@pytest.fixture
async def client(session: Session, storage: FakeStorage):
    """
    Yields an HTTP client that interacts with the app using the test database.
    The client is async (for FastAPI), but the DB session is sync.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass  # Session cleanup handled by session fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def verified_user(session) -> User:
    return make_user(session, "manufacturer@example.com")


@pytest.fixture
def other_manufacturer(session) -> User:
    return make_user(session, "other@example.com", name="Other Maker")


@pytest.fixture
def brand_user(session) -> User:
    return make_user(session, "brand@example.com", role=UserRole.BRAND.value, name="Brand User")


@pytest.fixture
def admin_user(session) -> User:
    return make_user(session, "admin@example.com", role=UserRole.ADMIN.value, name="Admin")


@pytest.fixture
def pending_user(session) -> User:
    return make_user(session, "pending@example.com", status=UserStatus.PENDING.value)
