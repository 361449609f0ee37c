"""
Global test configuration and fixtures for the review pipeline tests.

Provides an in-memory SQLite store, seeded repository/owner rows and
GitHub payload builders shared across test modules.
"""

import hashlib
import hmac
import os
from typing import Any, Callable, Dict, Generator, List

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENV", "test")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.database import Base
from src.models.db import GithubConnection, Repository, User
from src.models.schemas.pr_review.pr_patch import PRFilePatch


WEBHOOK_SECRET = "s3cr3t-webhook"
REPO_FULL_NAME = "test-owner/test-repo"
GITHUB_TOKEN = "gho_test_token_1234567890"


@pytest.fixture
def session_factory() -> Generator[sessionmaker, None, None]:
    """Session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repo_owner(db_session) -> User:
    user = User(email="owner@example.com", name="Repo Owner")
    db_session.add(user)
    db_session.flush()
    db_session.add(
        GithubConnection(
            user_id=user.id,
            github_user_id=12345,
            username="test-owner",
            access_token=GITHUB_TOKEN,
        )
    )
    db_session.commit()
    return user


@pytest.fixture
def registered_repository(db_session, repo_owner) -> Repository:
    """Registered repository with a webhook secret and custom rules."""
    repository = Repository(
        user_id=repo_owner.id,
        name="test-repo",
        full_name=REPO_FULL_NAME,
        webhook_secret=WEBHOOK_SECRET,
        rules="Prefer explicit error handling over silent fallbacks.",
    )
    db_session.add(repository)
    db_session.commit()
    return repository


@pytest.fixture
def unsigned_repository(db_session, repo_owner) -> Repository:
    """Registered repository without a webhook secret."""
    repository = Repository(
        user_id=repo_owner.id,
        name="open-repo",
        full_name="test-owner/open-repo",
    )
    db_session.add(repository)
    db_session.commit()
    return repository


@pytest.fixture
def sign_payload() -> Callable[..., str]:
    """Builds X-Hub-Signature-256 header values."""

    def _sign(body: bytes, secret: str = WEBHOOK_SECRET) -> str:
        return "sha256=" + hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()

    return _sign


@pytest.fixture
def pull_request_event() -> Callable[..., Dict[str, Any]]:
    """Factory for pull_request webhook payloads."""

    def _build(
        action: str = "opened",
        number: int = 42,
        title: str = "Add new test feature",
        repo_full_name: str = REPO_FULL_NAME,
        state: str = "open",
        merged: bool = False,
    ) -> Dict[str, Any]:
        return {
            "action": action,
            "number": number,
            "pull_request": {
                "id": 123456789,
                "number": number,
                "title": title,
                "html_url": f"https://github.com/{repo_full_name}/pull/{number}",
                "state": state,
                "merged": merged,
                "user": {"login": "test-contributor", "id": 777},
            },
            "repository": {
                "id": 987654321,
                "name": repo_full_name.split("/")[-1],
                "full_name": repo_full_name,
            },
            "sender": {"login": "test-contributor", "id": 777},
        }

    return _build


@pytest.fixture
def sample_github_pr_files() -> List[Dict[str, Any]]:
    """Sample PR files as returned by the GitHub files API."""
    return [
        {
            "sha": "bbcd538c8e72b8c175046e27cc8f907076331401",
            "filename": "src/features/new_feature.py",
            "status": "added",
            "additions": 6,
            "deletions": 0,
            "changes": 6,
            "patch": (
                "@@ -0,0 +1,6 @@\n"
                "+import logging\n"
                "+\n"
                "+def process(data):\n"
                "+    if not data:\n"
                "+        return False\n"
                "+    return eval(data)"
            ),
        },
        {
            "sha": "a1b2c3d4e5f6a7b8c9d0e1f2a3b4c5d6e7f8a9b0",
            "filename": "package-lock.json",
            "status": "modified",
            "additions": 120,
            "deletions": 80,
            "changes": 200,
            "patch": "@@ -1,3 +1,3 @@\n-  \"version\": \"1.0.0\"\n+  \"version\": \"1.0.1\"",
        },
        {
            "sha": "binary123456789abcdef123456789abcdef12345678",
            "filename": "assets/logo.png",
            "status": "added",
            "additions": 0,
            "deletions": 0,
            "changes": 0,
        },
        {
            "sha": "f4b5c6d7e8f9a0b1c2d3e4f5a6b7c8d9e0f1a2b3",
            "filename": "README.md",
            "status": "modified",
            "additions": 1,
            "deletions": 1,
            "changes": 2,
            "patch": "@@ -15,3 +15,3 @@\n ## Features\n-- Error handling\n+- Enhanced error handling",
        },
    ]


@pytest.fixture
def sample_pr_patches(sample_github_pr_files) -> List[PRFilePatch]:
    return [PRFilePatch.from_github(f) for f in sample_github_pr_files]


@pytest.fixture
def make_patch() -> Callable[..., PRFilePatch]:
    def _make(path: str, patch: str = "@@ -1 +1 @@\n-a\n+b") -> PRFilePatch:
        return PRFilePatch(file_path=path, patch=patch)

    return _make
