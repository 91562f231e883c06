import os

# Must be set before the app modules are imported
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_app.db")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from database import Base
from app import app, get_db
from models.profile import Profile
from services import email_service
from services.password_service import hash_password
from utils.jwt_auth import create_access_token
from utils.short_id import generate_short_id

# Use a test database URL (set this in your environment or hardcode for local dev)
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite:///./test_test.db")
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False} if TEST_DATABASE_URL.startswith("sqlite") else {})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    # Create tables before any tests
    Base.metadata.create_all(bind=engine)
    yield
    # Drop tables after all tests
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(db):
    # Override get_db dependency to use the test DB
    def override_get_db():
        yield db
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides = {}


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture OTP emails instead of talking to an SMTP server."""
    sent = []

    def fake_send_otp_email(to_email, full_name, code, expiry_minutes):
        sent.append({"to": to_email, "full_name": full_name, "code": code, "expiry_minutes": expiry_minutes})
        return f"<{len(sent)}@test.shift.example>"

    monkeypatch.setattr(email_service, "send_otp_email", fake_send_otp_email)
    return sent


@pytest.fixture
def failing_email(monkeypatch):
    def fake_send_otp_email(to_email, full_name, code, expiry_minutes):
        raise email_service.EmailDeliveryFailed("SMTP server unavailable")

    monkeypatch.setattr(email_service, "send_otp_email", fake_send_otp_email)


@pytest.fixture
def make_profile(db):
    def _make(email="user@shift.example", role="USER", password="secret123", full_name="Test User", country=None):
        profile = Profile(
            public_id=generate_short_id(),
            email=email,
            full_name=full_name,
            country=country,
            password_hash=hash_password(password),
            role=role,
        )
        db.add(profile)
        db.commit()
        db.refresh(profile)
        return profile
    return _make


@pytest.fixture
def auth_header():
    def _header(profile) -> dict:
        return {"Authorization": f"Bearer {create_access_token(profile.public_id, profile.role, profile.email)}"}
    return _header
