import os
import uuid

# must be set before tasktrack.config is imported
os.environ["DATABASE_URL"] = "sqlite:///./test_tasktrack.db"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient

from tasktrack.main import app
from tasktrack.database import SessionLocal, Base, engine
from tasktrack.models.user import User
from tasktrack.services.users import insert_user
from tasktrack.utils.passwords import PasswordHasher

PASSWORD = "SecurePass123"


# Recreate all tables for each test
@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def make_user(db, hasher):
    """Insert a user straight into the store, bypassing HTTP."""

    def _make(email=None, password=PASSWORD, name="Test User"):
        email = email or f"user_{uuid.uuid4().hex[:8]}@example.com"
        return insert_user(db, User(name=name, email=email, password_hash=hasher.hash(password)))

    return _make


@pytest.fixture
def register(client):
    """Sign up and log in over HTTP; returns (auth headers, user json)."""

    def _register(email=None, password=PASSWORD, name="Test User"):
        email = email or f"user_{uuid.uuid4().hex[:8]}@example.com"
        r = client.post("/auth/signup", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201, r.text
        r = client.post("/auth/login", json={"email": email, "password": password})
        assert r.status_code == 200, r.text
        body = r.json()
        return {"Authorization": f"Bearer {body['token']}"}, body["user"]

    return _register
