"""
Common fixtures for the API and client tests.

Every test gets its own in-memory sqlite database wired into the app via
dependency overrides, three seeded users and bearer tokens for them.
Image uploads never leave the process: the ImageKit uploader is replaced
by a recorder.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.security import token_for_user
from app.db.base import Base
from app.db.models import User
from app.db.session import get_db
from app.main import app as fastapi_app
from app.services.image_service import get_media_uploader
from app.services.socket_manager import manager
from tests.helpers import FakeApi


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def users(db_session):
    """Seed alice, bob and carol; returns their ids by username."""
    seeded = [
        User(username="alice", full_name="Alice Adams", profile_picture="https://img.test/alice.png"),
        User(username="bob", full_name="Bob Brown"),
        User(username="carol", full_name="Carol Chen"),
    ]
    db_session.add_all(seeded)
    db_session.commit()
    return {u.username: u.id for u in seeded}


@pytest.fixture
def tokens(db_session, users):
    return {
        name: token_for_user(db_session.get(User, user_id))
        for name, user_id in users.items()
    }


@pytest.fixture
def auth_headers(tokens):
    def build(name):
        return {"Authorization": f"Bearer {tokens[name]}"}
    return build


@pytest.fixture
def uploads():
    """Files handed to the (fake) media uploader."""
    return []


@pytest.fixture
def api_app(session_factory, uploads):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    async def fake_upload(file, uploader_id):
        uploads.append((file.filename, uploader_id, file.file.read()))
        return f"https://ik.imagekit.io/test/dm_images/{file.filename}"

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_media_uploader] = lambda: fake_upload
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    manager.active_connections.clear()


@pytest.fixture
def client(api_app):
    return TestClient(api_app)


@pytest.fixture
def fake_api():
    return FakeApi()
