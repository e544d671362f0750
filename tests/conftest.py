"""Shared fixtures: the app wired to in-memory stores and fake external services."""

import base64
import io
from datetime import datetime, timezone

import mongomock
import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.application.services.auth_service import create_session_token, hash_password
from storefront.domain.models.user import Avatar, User
from storefront.infrastructure.database import init_action_log_store
from storefront.infrastructure.mongo import ensure_indexes
from storefront.infrastructure.repositories.user_repository import MongoUserRepository
from storefront.interfaces.deps import (
    get_action_log_session_factory,
    get_image_host,
    get_mailer,
    get_user_db,
)
from storefront.main import create_app

TEST_PASSWORD = "password123"


class FakeImageHost:
    """Records uploads and deletions instead of calling the image host."""

    def __init__(self):
        self.uploads = []
        self.destroyed = []
        self.fail_uploads = False
        self.fail_destroy = False

    def upload(self, data: bytes, folder: str) -> dict:
        if self.fail_uploads:
            raise RuntimeError("image host is down")
        public_id = f"{folder}/img{len(self.uploads) + 1}"
        self.uploads.append({"public_id": public_id, "folder": folder, "data": data})
        return {"public_id": public_id, "secure_url": f"https://images.test/{public_id}.png"}

    def destroy(self, public_id: str) -> None:
        if self.fail_destroy:
            raise RuntimeError("image host is down")
        self.destroyed.append(public_id)


class FakeMailer:
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, email: str, subject: str, message: str) -> None:
        if self.fail:
            raise ConnectionError("smtp unavailable")
        self.sent.append({"email": email, "subject": subject, "message": message})

    def last_activation_token(self) -> str:
        return self.sent[-1]["message"].rsplit("/activation/", 1)[1]


def png_data_uri(width: int = 40, height: int = 20) -> str:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), "red").save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode()


@pytest.fixture
def mongo_db():
    db = mongomock.MongoClient()["storefront_test"]
    ensure_indexes(db)
    return db


@pytest.fixture
def repo(mongo_db):
    return MongoUserRepository(mongo_db)


@pytest.fixture
def action_log_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_action_log_store(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def image_host():
    return FakeImageHost()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(mongo_db, action_log_factory, image_host, mailer):
    app = create_app(with_lifespan=False)
    app.dependency_overrides[get_user_db] = lambda: mongo_db
    app.dependency_overrides[get_action_log_session_factory] = lambda: action_log_factory
    app.dependency_overrides[get_image_host] = lambda: image_host
    app.dependency_overrides[get_mailer] = lambda: mailer
    return app


@pytest.fixture
def client(app):
    # https so the Secure session cookie is kept and sent back
    with TestClient(app, base_url="https://testserver") as c:
        yield c


@pytest.fixture
def make_user(repo):
    """Insert an account directly into the store."""

    def _make(
        email: str = "buyer@example.com",
        password: str = TEST_PASSWORD,
        role: str = "user",
        active: bool = True,
        created_at: datetime | None = None,
        name: str = "Buyer",
    ) -> User:
        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            active=active,
            avatar=Avatar(public_id=f"avatars/{email}", url=f"https://images.test/{email}.png"),
            created_at=created_at or datetime.now(timezone.utc),
        )
        return repo.create(user)

    return _make


def auth_headers(user: User) -> dict:
    return {"Cookie": f"token={create_session_token(user.id)}"}
