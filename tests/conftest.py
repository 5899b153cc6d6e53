"""
Pytest configuration and fixtures
"""
import os
from datetime import datetime
from typing import List, Optional

# Settings are cached on first use, so the environment must be set before bloom is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENABLE_NURTURE_DISPATCHER"] = "false"
os.environ["COACHING_LOADING_DELAY_MS"] = "0"
os.environ["LOG_FORMAT"] = "text"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["STRIPE_SECRET_KEY"] = ""

import pytest  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import bloom.models  # noqa: E402,F401
from bloom.core.clock import FakeClock  # noqa: E402
from bloom.core.database import Base, build_engine, configure_engine, get_session_local  # noqa: E402
from bloom.models.user import UserRole  # noqa: E402
from bloom.services.auth_service import AuthService  # noqa: E402
from bloom.services.email_sender import EmailSender  # noqa: E402


class RecordingEmailSender(EmailSender):
    """Keeps every message instead of sending it"""

    def __init__(self, succeed: bool = True, error: Optional[Exception] = None):
        self.succeed = succeed
        self.error = error
        self.sent: List[dict] = []

    async def send(self, to, from_, subject, text=None, html=None) -> bool:
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to, "from": from_, "subject": subject, "text": text, "html": html})
        return self.succeed


@pytest.fixture(scope="function")
def engine():
    """Fresh in-memory SQLite database per test"""
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    configure_engine(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(engine) -> Session:
    """Create a database session for testing"""
    session = get_session_local()()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 1, 9, 0, 0))


@pytest.fixture
def sender():
    return RecordingEmailSender()


@pytest.fixture
def user(db):
    return AuthService(db).register_user(
        username="jane",
        email="jane@example.com",
        password="secret-pass-1",
        first_name="Jane",
    )


@pytest.fixture
def admin(db):
    return AuthService(db).register_user(
        username="admin",
        email="admin@example.com",
        password="admin-pass-1",
        role=UserRole.ADMIN.value,
    )


def _headers_for(db, user):
    session = AuthService(db).create_session(user.id)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def auth_headers(db, user):
    return _headers_for(db, user)


@pytest.fixture
def admin_headers(db, admin):
    return _headers_for(db, admin)


@pytest.fixture(scope="function")
def client(db: Session, sender: RecordingEmailSender):
    """Create test client with database, email and session store overrides"""
    from fastapi.testclient import TestClient

    from bloom.core.database import get_db
    from bloom.services.coaching_session_service import (CoachingSessionStore,
                                                         get_session_store)
    from bloom.services.email_sender import get_email_sender
    from main import app

    def override_get_db():
        try:
            yield db
        finally:
            pass

    store = CoachingSessionStore()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: sender
    app.dependency_overrides[get_session_store] = lambda: store
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_sender():
    """Build senders that reject or raise"""
    return RecordingEmailSender
