"""Pytest configuration and fixtures."""

import os
import tempfile
from urllib.parse import parse_qs, urlparse

# Settings are cached on first import, so the upload root must be set before src is imported
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="blog-uploads-"))

from unittest.mock import patch  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from src.config import get_settings  # noqa: E402
from src.database import Base, get_db  # noqa: E402
from src.main import app  # noqa: E402
from src.models.enums import Gender  # noqa: E402
from src.models.post import Post  # noqa: E402
from src.models.user import User  # noqa: E402
from src.services.auth import get_password_hash  # noqa: E402

TEST_PASSWORD = "testpass123"

# 1x1 transparent PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
    b"\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00"
    b"\x00\x00\x00IEND\xaeB`\x82"
)


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use SQLite unless a dedicated test database is provided
SQLALCHEMY_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///./test.db")

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture(scope="function", autouse=True)
def mail_outbox():
    """Capture queued verification e-mails instead of talking to the broker."""
    with patch("src.tasks.mail.send_verification_email.delay") as mock_delay:
        yield mock_delay


def token_from_outbox(mail_outbox, email: str) -> str:
    """Extract the raw verification token from the last e-mail queued for ``email``."""
    for call in reversed(mail_outbox.call_args_list):
        recipient, link = call.args
        if recipient == email:
            return parse_qs(urlparse(link).query)["token"][0]
    raise AssertionError(f"No verification e-mail queued for {email}")


@pytest.fixture(scope="function")
def client(db):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register_user(client, mail_outbox):
    """Factory: register, verify and log in a user through the API."""

    def _register(
        email: str = "test@example.com",
        first_name: str = "Test",
        last_name: str = "User",
        gender: str = "other",
    ) -> AuthHeaders:
        response = client.post(
            "/api/user/create",
            json={
                "email": email,
                "password": TEST_PASSWORD,
                "firstName": first_name,
                "lastName": last_name,
                "gender": gender,
            },
        )
        assert response.status_code == 201
        user_id = response.json()["userId"]

        token = token_from_outbox(mail_outbox, email)
        assert client.get("/api/user/verify", params={"token": token}).status_code == 200

        response = client.post("/api/user/auth", json={"email": email, "password": TEST_PASSWORD})
        assert response.status_code == 200
        access_token = response.json()["token"]

        return AuthHeaders({"x-auth-token": f"Bearer {access_token}"}, user_id=user_id, email=email)

    return _register


@pytest.fixture
def auth_headers(register_user):
    """Create a user and return auth headers with user info."""
    return register_user()


@pytest.fixture
def create_post(client):
    """Factory: create a post through the API and return its JSON."""

    def _create(headers: AuthHeaders, title: str = "Test Post", text: str = "Some text") -> dict:
        response = client.post(
            "/api/posts",
            headers=headers,
            data={"title": title, "text": text},
            files={"image": ("photo.png", PNG_BYTES, "image/png")},
        )
        assert response.status_code == 201
        return response.json()

    return _create


@pytest.fixture
def make_user(db):
    """Factory: insert a verified user directly."""

    def _make(email: str, gender: Gender = Gender.OTHER, avatar_url: str | None = None) -> User:
        user = User(
            email=email,
            password_hash=get_password_hash(TEST_PASSWORD),
            first_name="First",
            last_name="Last",
            gender=gender.value,
            avatar_url=avatar_url or gender.default_avatar_url,
            is_verified=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def make_post(db):
    """Factory: insert a post directly."""

    def _make(author: User, title: str = "Post", image: str | None = None) -> Post:
        post = Post(
            title=title,
            text="Body",
            image=image or f"{get_settings().uploads_base_url}/posts/missing.png",
            author_id=author.id,
        )
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make
