"""
Pytest configuration and fixtures for API tests.
"""
import os
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient
from typing import Generator

# Override settings before the app is imported
os.environ["DATABASE_URL"] = "sqlite:///./test_featureforge.db"
os.environ["MAIL_USERNAME"] = ""
os.environ["MAIL_FROM"] = ""

import featureforge.models  # noqa: F401

from featureforge.main import app
from featureforge.database.base import Base
from featureforge.database.session import get_db
from featureforge.auth.auth_utils import create_access_token
from featureforge.models import User, Team, TeamMember, Feature


TEST_DATABASE_URL = "sqlite:///./test_featureforge.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def test_db():
    """Fresh tables for every test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(test_db: Session) -> Generator:
    """Test client sharing the test session."""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(test_db: Session):
    """Factory creating users; passwords are irrelevant outside auth tests."""
    def _make(name: str, email: str = None, role: str = "user") -> User:
        user = User(
            name=name,
            email=email or f"{name.lower().replace(' ', '.')}@example.com",
            hashed_password="not-a-real-hash",
            role=role
        )
        test_db.add(user)
        test_db.commit()
        test_db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_team(test_db: Session):
    """Factory creating a team with (user, role) memberships."""
    def _make(name: str, members) -> Team:
        creator = members[0][0]
        team = Team(name=name, created_by=creator.id, created_by_email=creator.email)
        test_db.add(team)
        test_db.flush()
        for user, role in members:
            test_db.add(TeamMember(team_id=team.id, user_id=user.id, role=role))
        test_db.commit()
        test_db.refresh(team)
        return team
    return _make


@pytest.fixture
def make_feature(test_db: Session):
    def _make(team: Team, creator: User, title: str, type: str = "story", status: str = "backlog", parent=None) -> Feature:
        feature = Feature(
            title=title,
            type=type,
            status=status,
            team_id=team.id,
            created_by=creator.id,
            created_by_email=creator.email,
            parent_id=parent.id if parent else None
        )
        test_db.add(feature)
        test_db.commit()
        test_db.refresh(feature)
        return feature
    return _make


@pytest.fixture
def headers_for():
    """Bearer headers for a given user."""
    def _headers(user: User) -> dict:
        token = create_access_token({"user_id": user.id, "email": user.email})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def alice(make_user) -> User:
    return make_user("Alice")


@pytest.fixture
def bob(make_user) -> User:
    return make_user("Bob")


@pytest.fixture
def outsider(make_user) -> User:
    return make_user("Mallory")


@pytest.fixture
def team(make_team, alice, bob) -> Team:
    """Alice administers the team, Bob is a plain member."""
    return make_team("Core", [(alice, "admin"), (bob, "user")])
