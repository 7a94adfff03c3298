import itertools
import os
from typing import Optional

# Must be set before the app modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi import Header
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base, get_db
from main import app
from models.Post import Post
from models.User import User
from schemas import ExternalIdentity
from utils.auth import get_current_identity


@pytest.fixture()
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


@pytest.fixture()
def db(engine):
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session = TestingSession()
    yield session
    session.close()


@pytest.fixture()
def identities():
    """Identities the fake token check knows about, keyed by uid."""
    return {}


@pytest.fixture()
def client(db, identities):
    def override_get_db():
        yield db

    def override_get_current_identity(x_test_uid: Optional[str] = Header(None)):
        if x_test_uid is None:
            return None
        return identities[x_test_uid]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_identity] = override_get_current_identity
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db):
    counter = itertools.count(1)

    def _make(username: Optional[str] = None, **kwargs) -> User:
        username = username or f"user{next(counter)}"
        user = User(
            firebase_uid=f"uid-{username}",
            email=f"{username}@example.com",
            username=username,
            name=username.title(),
            **kwargs,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture()
def make_post(db):
    def _make(author: User, content: str = "hello world", **kwargs) -> Post:
        post = Post(author_id=author.id, content=content, **kwargs)
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make


@pytest.fixture()
def login(identities):
    """Register `user` with the fake token check and return request headers."""
    def _login(user: User) -> dict:
        identities[user.firebase_uid] = ExternalIdentity(
            uid=user.firebase_uid,
            email=user.email,
            name=user.name,
        )
        return {"X-Test-Uid": user.firebase_uid}

    return _login
