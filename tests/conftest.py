"""
Shared fixtures: in-memory SQLite, a mocked object storage, a fresh memory thumbnail
store and test settings pointing tmp/asset dirs at pytest's tmp_path.
"""
from pathlib import Path
from typing import Dict, Generator
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tubely.auth import create_access_token, hash_password
from tubely.config import Settings, get_settings
from tubely.database import Base, get_db
from tubely.main import app
from tubely.models import User, Video
from tubely.services.storage import ObjectStorage, get_object_storage
from tubely.services.thumbnails import MemoryThumbnailStore, get_thumbnail_store


CDN_BASE_URL = "https://cdn.example.com"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        tmp_dir=str(tmp_path / "tmp"),
        assets_root=str(tmp_path / "assets"),
        max_video_upload_bytes=1024,
        max_thumbnail_upload_bytes=512,
        media_tool_timeout_seconds=5,
    )


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def mock_storage() -> Mock:
    """ObjectStorage stand-in: upload_file echoes the key, public_url joins the CDN base."""
    mock = Mock(spec=ObjectStorage)
    mock.upload_file = Mock(side_effect=lambda path, key, content_type: key)
    mock.public_url = Mock(side_effect=lambda key: f"{CDN_BASE_URL}/{key}")
    return mock


@pytest.fixture
def thumbnail_store() -> MemoryThumbnailStore:
    return MemoryThumbnailStore("http://localhost:8091")


@pytest.fixture
def client(
    session_factory: sessionmaker,
    test_settings: Settings,
    mock_storage: Mock,
    thumbnail_store: MemoryThumbnailStore,
) -> Generator[TestClient, None, None]:
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_object_storage] = lambda: mock_storage
    app.dependency_overrides[get_thumbnail_store] = lambda: thumbnail_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def _create_user(db: Session, email: str) -> User:
    user = User(email=email, password=hash_password("secret123"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def owner(db_session: Session) -> User:
    return _create_user(db_session, "owner@example.com")


@pytest.fixture
def other_user(db_session: Session) -> User:
    return _create_user(db_session, "someone-else@example.com")


@pytest.fixture
def video(db_session: Session, owner: User) -> Video:
    video = Video(user_id=owner.id, title="Boots on the ground", description="A walk through the city")
    db_session.add(video)
    db_session.commit()
    db_session.refresh(video)
    return video


def bearer(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}


@pytest.fixture
def owner_headers(owner: User) -> Dict[str, str]:
    return bearer(owner)


@pytest.fixture
def other_headers(other_user: User) -> Dict[str, str]:
    return bearer(other_user)
