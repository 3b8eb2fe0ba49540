import os

# The app module builds its engine at import time; keep it off the real database.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda.api.deps import get_db
from agenda.db.base import Base
from agenda.main import app


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def register_user(client, *, email, role="coordinator", password="password123", name=None):
    response = client.post(
        "/api/auth/register",
        json={"name": name or email.split("@")[0].title(), "email": email, "password": password, "role": role},
    )
    assert response.status_code == 201, response.text
    return response.json()


def login_headers(client, *, email, password="password123"):
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture()
def coordinator_headers(client):
    register_user(client, email="coordenacao@example.com", role="coordinator")
    return login_headers(client, email="coordenacao@example.com")


@pytest.fixture()
def teacher_headers(client):
    register_user(client, email="professor@example.com", role="teacher")
    return login_headers(client, email="professor@example.com")
