"""Shared pytest fixtures: in-memory DB, fake bucket, fake ffprobe, authenticated client."""

import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import uuid
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from tubely.api.v1 import dependencies as deps
from tubely.core.config import jwt_settings
from tubely.db.models.videos import Video
from tubely.db.repositories.videos import VideoRepository
from tubely.db.session import get_session
from tubely.features.media.probe import AspectClassifier
from tubely.main import app
from tubely.security.tokens import create_access_token
from tubely.utils.s3 import ObjectNotFound
from tubely.utils.staging import StagingArea


class InMemoryObjectStore:
    """Same surface as S3ObjectStore, backed by a dict."""

    def __init__(self):
        self.objects = {}
        self.content_types = {}
        self.puts = []
        self.streams = []

    def put(self, key, body, content_type):
        data = body if isinstance(body, (bytes, bytearray)) else body.read()
        self.objects[key] = bytes(data)
        self.content_types[key] = content_type
        self.puts.append(key)

    def exists(self, key):
        return key in self.objects

    def size(self, key):
        if key not in self.objects:
            raise ObjectNotFound(key)
        return len(self.objects[key])

    def get(self, key, start=None, end=None):
        if key not in self.objects:
            raise ObjectNotFound(key)
        data = self.objects[key]
        if start is None:
            return data
        return data[start:len(data) if end is None else end + 1]

    def stream(self, key, start=None, end=None, chunk_size=64):
        if key not in self.objects:
            raise ObjectNotFound(key)
        data = self.objects[key]
        data = data[start or 0:len(data) if end is None else end + 1]
        self.streams.append(key)
        return (data[i:i + chunk_size] for i in range(0, len(data), chunk_size))

    def delete(self, key):
        self.objects.pop(key, None)


class FakeProber:
    """Returns canned ffprobe JSON and records which files it was asked about."""

    def __init__(self, width=1920, height=1080, error=None):
        self.width = width
        self.height = height
        self.error = error
        self.calls = []

    async def probe(self, path):
        path = Path(path)
        self.calls.append((path, path.exists()))
        if self.error is not None:
            raise self.error
        return {
            "streams": [
                {"index": 0, "codec_type": "audio", "codec_name": "aac"},
                {"index": 1, "codec_type": "video", "width": self.width, "height": self.height},
            ]
        }


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def object_store():
    return InMemoryObjectStore()


@pytest.fixture
def prober():
    return FakeProber()


@pytest.fixture
def staging_dir(tmp_path):
    path = tmp_path / "staging"
    path.mkdir()
    return path


@pytest.fixture
def client(engine, object_store, prober, staging_dir):
    def _session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[deps.get_object_store] = lambda: object_store
    app.dependency_overrides[deps.get_aspect_classifier] = lambda: AspectClassifier(prober)
    app.dependency_overrides[deps.get_staging_area] = lambda: StagingArea(str(staging_dir))
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def owner_id():
    return uuid.uuid4()


@pytest.fixture
def auth_headers(owner_id):
    token = create_access_token(user_id=owner_id, settings=jwt_settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_auth_headers():
    token = create_access_token(user_id=uuid.uuid4(), settings=jwt_settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def draft_video(session, owner_id) -> Video:
    return VideoRepository(session).create(title="Boots", owner_id=owner_id)


@pytest.fixture
def stored_video(session, draft_video, object_store) -> Video:
    """A video whose 1000-byte object is already in the bucket."""
    key = "landscape/" + "ab" * 32 + ".mp4"
    object_store.objects[key] = bytes(i % 256 for i in range(1000))
    return VideoRepository(session).update(draft_video, video_key=key)
