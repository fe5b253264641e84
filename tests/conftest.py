from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.database import Base, get_db
from app.models.user import User
from app.services.auth import create_access_token, get_password_hash
from app.services.media import get_media_storage
from app.services.realtime import manager
from backend import app as fastapi_app

PASSWORD = "Secret#123"


class FakeMediaStorage:
    def __init__(self, failing: tuple = ()):
        self.deleted: list[str] = []
        self.failing = set(failing)

    def delete(self, storage_id: str) -> None:
        if storage_id in self.failing:
            raise OSError(f"storage unavailable for {storage_id}")
        self.deleted.append(storage_id)


@pytest.fixture()
def db_session() -> Session:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def storage() -> FakeMediaStorage:
    return FakeMediaStorage()


@pytest.fixture()
def events(monkeypatch) -> list[tuple]:
    published: list[tuple] = []
    monkeypatch.setattr(manager, "publish", lambda user_id, event, data: published.append((user_id, event, data)))
    return published


@pytest.fixture()
def client(db_session, storage, events) -> TestClient:
    def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_media_storage] = lambda: storage
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session):
    def _make_user(username: str, role: str = "entrepreneur", verified: bool = True) -> User:
        user = User(
            username=username,
            fullname=f"{username.title()} Tester",
            email=f"{username}@example.com",
            hashed_password=get_password_hash(PASSWORD),
            role=role,
            profile={"sector": "fintech"},
            is_verified=verified,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


def auth(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def befriend(client: TestClient, sender: User, receiver: User) -> int:
    response = client.post("/api/friends/request", json={"receiverId": receiver.id}, headers=auth(sender))
    assert response.status_code == 201
    request_id = response.json()["id"]
    response = client.patch(f"/api/friends/{request_id}", json={"action": "accepted"}, headers=auth(receiver))
    assert response.status_code == 200
    return request_id
