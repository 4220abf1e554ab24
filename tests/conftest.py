# tests/conftest.py
"""
Pytest configuration and shared fixtures.

Every test gets a fresh in-memory SQLite database, an outbox that records
emails instead of sending them, local media storage under a temp dir and a
scripted Google token verifier.
"""

import os
import tempfile

# Must be set before app.core.config is imported
os.environ["SECRET_KEY"] = "test-secret-for-testing-only-not-production"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CREATE_TABLES"] = "False"
os.environ["EMAIL_BACKEND"] = "console"
os.environ["ADMIN_EMAIL"] = "admin@wynngrid.test"
os.environ["MEDIA_BACKEND"] = "local"
os.environ["MEDIA_ROOT"] = tempfile.mkdtemp(prefix="wynngrid-media-")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Database  # noqa: E402
from app.core.exceptions import AuthError  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import AccountType, User  # noqa: E402
from app.utils.auth import create_session_token, get_password_hash  # noqa: E402
from app.utils.email import EmailSender, get_email_sender  # noqa: E402
from app.utils.file_storage import LocalMediaStorage, get_media_storage  # noqa: E402
from app.utils.google_auth import get_google_verifier  # noqa: E402

TEST_PASSWORD = "Secret1!"


# ============================================================
# Fakes
# ============================================================

class Outbox(EmailSender):
    """Records every email instead of delivering it."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def send(self, to, subject, body):
        if self.fail:
            raise ConnectionError("SMTP relay unreachable")
        self.sent.append({"to": to, "subject": subject, "body": body})

    def to(self, address):
        return [m for m in self.sent if m["to"] == address]


class FakeGoogleVerifier:
    """Maps ID tokens to Google payloads; unknown tokens are rejected."""

    def __init__(self):
        self.payloads = {}

    async def __call__(self, token):
        if token not in self.payloads:
            raise AuthError("Invalid Google token")
        return self.payloads[token]


# ============================================================
# Core fixtures
# ============================================================

@pytest.fixture
def database():
    db = Database("sqlite://", poolclass=StaticPool)
    db.create_all()
    app.state.database = db
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def outbox():
    return Outbox()


@pytest.fixture
def google():
    return FakeGoogleVerifier()


@pytest.fixture
def media_root(tmp_path):
    return tmp_path / "media"


@pytest.fixture
def client(database, outbox, google, media_root):
    app.dependency_overrides[get_email_sender] = lambda: outbox
    app.dependency_overrides[get_google_verifier] = lambda: google
    app.dependency_overrides[get_media_storage] = lambda: LocalMediaStorage(
        str(media_root), "http://testserver"
    )
    # No context manager: the lifespan would replace the test database
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()


# ============================================================
# Accounts
# ============================================================

def make_user(session, email, user_type=AccountType.STANDARD, verified=True, password=TEST_PASSWORD):
    user = User(
        first_name="Asha",
        last_name="Rao",
        email=email,
        password_hash=get_password_hash(password),
        user_type=user_type,
        is_verified=verified,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def auth_header(user):
    return {"Authorization": f"Bearer {create_session_token(user.id)}"}


@pytest.fixture
def user(db_session):
    return make_user(db_session, "asha@example.com")


@pytest.fixture
def pro_user(db_session):
    return make_user(db_session, "pro@example.com", user_type=AccountType.PRO)


# ============================================================
# Uploads
# ============================================================

def image(name="photo.jpg", content_type="image/jpeg", data=b"\xff\xd8\xff\xe0fake-jpeg"):
    return (name, data, content_type)


def images(field, count):
    return [(field, image(f"img{i}.jpg")) for i in range(count)]
