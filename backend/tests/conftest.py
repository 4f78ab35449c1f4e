import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from noticeboard import models  # noqa: F401
from noticeboard.database.base import Base
from noticeboard.database.session import build_engine, get_db
from noticeboard.main import app
from noticeboard.services.admin_service import create_user

DEFAULT_PASSWORD = "secret1"


@pytest.fixture()
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'noticeboard_test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def make_client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    clients = []

    def _make(**kwargs):
        client = TestClient(app, **kwargs)
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.close()
    app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client):
    return make_client()


@pytest.fixture()
def register_user(make_client):
    """Register through the API and return ``(client, body)`` holding that session."""

    def _register(email, username, role, password=DEFAULT_PASSWORD, full_name=None, department=None):
        client = make_client()
        payload = {
            "email": email,
            "username": username,
            "password": password,
            "fullName": full_name or username.replace("_", " ").title(),
            "role": role,
        }
        if department is not None:
            payload["department"] = department
        response = client.post("/auth/register", json=payload)
        assert response.status_code == 200, response.text
        return client, response.json()

    return _register


@pytest.fixture()
def admin(register_user):
    return register_user("admin@school.edu", "admin_one", "admin")


@pytest.fixture()
def staff(register_user):
    return register_user("a@x.edu", "user_a", "staff", department="Science")


@pytest.fixture()
def student(register_user):
    return register_user("student@school.edu", "student_one", "student", department="Science")


@pytest.fixture()
def make_user(db):
    def _make(email, username, role="student", password=DEFAULT_PASSWORD, **extra):
        return create_user(
            db,
            email=email,
            username=username,
            password=password,
            full_name=username.title(),
            role=role,
            **extra,
        )

    return _make


@pytest.fixture()
def create_notice():
    def _create(client, title="Exam Notice", content="Midterm timetable is out.", **extra):
        response = client.post("/notices", json={"title": title, "content": content, **extra})
        assert response.status_code == 200, response.text
        return response.json()["id"]

    return _create
