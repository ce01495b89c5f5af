import os

# avant tout import de l'app : pas de fichier SQLite ni d'echo SQL pendant les tests
os.environ.setdefault("ENV", "test")
os.environ.setdefault("SQLITE_PATH", ":memory:")

from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Optional, Set

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from app.core.config import jwt_settings, settings
from app.db.models.users import Role, User
from app.db.models.videos import Category, Video
from app.db.repositories.videos import VideoRepository
from app.db.session import get_session, init_db
from app.main import app
from app.api.v1.dependencies import get_blob_store
from app.security.password import hash_password
from app.security.tokens import JWTSettings, mint_token_pair
from app.utils.s3 import BlobStoreError, BlobUpload

PASSWORD = "s3cret-pass"


@dataclass
class FakeBlobStore:
    """Blob store en mémoire ; `fail` / `reject` simulent les erreurs par type de ressource."""
    uploads: List[dict] = field(default_factory=list)
    fail: Set[str] = field(default_factory=set)
    reject: Set[str] = field(default_factory=set)

    def upload(self, data: bytes, *, resource_type: str, folder: str, owner_id: Optional[int] = None) -> BlobUpload:
        if resource_type in self.reject:
            raise ValueError("File type not allowed: application/octet-stream")
        if resource_type in self.fail:
            raise BlobStoreError("storage unavailable")
        key = f"{folder}/{len(self.uploads) + 1}"
        self.uploads.append({"resource_type": resource_type, "folder": folder, "owner_id": owner_id})
        return BlobUpload(url=f"https://cdn.test/{key}", key=key, mime="application/octet-stream", bytes=len(data))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def blob_store():
    return FakeBlobStore()


@pytest.fixture
def client(engine, blob_store):
    def _get_session():
        with Session(engine) as s:
            yield s

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    # cookies `secure` : il faut une base https pour que le client les renvoie
    with TestClient(app, base_url="https://testserver", raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session):
    def _make(username: str = "alice", *, role: Role = Role.USER, is_banned: bool = False, **fields) -> User:
        user = User(
            username=username.lower(),
            email=fields.pop("email", f"{username.lower()}@example.com"),
            full_name=fields.pop("full_name", username.title()),
            hashed_password=hash_password(fields.pop("password", PASSWORD)),
            role=role,
            is_banned=is_banned,
            **fields,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make


@pytest.fixture
def make_video(session):
    def _make(owner: User, *, title: str = "Video", duration: float = 120, tags: List[str] = (), **fields) -> Video:
        video = Video(
            title=title,
            video_file="https://cdn.test/videos/1",
            duration=duration,
            is_short=duration <= settings.SHORT_MAX_DURATION_SECONDS,
            category=fields.pop("category", Category.OTHER),
            owner_id=owner.id,
            **fields,
        )
        session.add(video)
        session.commit()
        session.refresh(video)
        if tags:
            VideoRepository(session).replace_tags(video.id, tags)
        return video
    return _make


@pytest.fixture
def expired_jwt() -> JWTSettings:
    """Mêmes secrets, access token déjà expiré à l'émission."""
    return JWTSettings(
        access_secret=jwt_settings.access_secret,
        refresh_secret=jwt_settings.refresh_secret,
        issuer=jwt_settings.issuer,
        algorithm=jwt_settings.algorithm,
        access_ttl=timedelta(seconds=-10),
        refresh_ttl=jwt_settings.refresh_ttl,
    )


@pytest.fixture
def login(session):
    """Émet un couple pour `user`, le stocke comme refresh courant et renvoie l'en-tête Bearer."""
    def _login(user: User) -> dict:
        pair = mint_token_pair(user_id=user.id, settings=jwt_settings)
        user.refresh_token = pair["refresh_token"]
        session.add(user)
        session.commit()
        return {"Authorization": f"Bearer {pair['access_token']}"}
    return _login
