# tests/conftest.py

import os
import tempfile

# Settings are read once per process, so the environment is fixed before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="taskflow-uploads-")
os.environ["ORPHAN_SWEEP_MINUTES"] = "0"

from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from taskflow.database import Base, get_db
from taskflow.models import Role
from taskflow.services.file_storage import FileStorageService, get_file_storage
from taskflow.services.user_directory import UserDirectory

from .helpers import auth_headers


@pytest.fixture()
def engine():
    """Fresh in-memory database per test; StaticPool keeps one shared connection"""
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
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def storage(tmp_path: Path) -> FileStorageService:
    return FileStorageService(str(tmp_path / "uploads"), max_file_size=1024 * 1024)


@pytest.fixture()
def client(session_factory, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db) -> Callable[..., int]:
    """Register a user directly through the user directory and return its id"""
    counter = {"n": 0}

    def _make_user(role: Role = Role.EMPLOYEE, name: str = None, email: str = None, password: str = "secret123") -> int:
        counter["n"] += 1
        name = name or f"{role.value} {counter['n']}"
        email = email or f"{role.value.lower()}{counter['n']}@example.com"
        return UserDirectory(db).register(name, email, password, role)

    return _make_user


@pytest.fixture()
def admin(make_user):
    user_id = make_user(Role.ADMIN)
    return user_id, auth_headers(user_id, Role.ADMIN)


@pytest.fixture()
def manager(make_user):
    user_id = make_user(Role.MANAGER)
    return user_id, auth_headers(user_id, Role.MANAGER)


@pytest.fixture()
def employee(make_user):
    user_id = make_user(Role.EMPLOYEE)
    return user_id, auth_headers(user_id, Role.EMPLOYEE)


@pytest.fixture()
def other_employee(make_user):
    user_id = make_user(Role.EMPLOYEE)
    return user_id, auth_headers(user_id, Role.EMPLOYEE)


@pytest.fixture()
def create_task(client, manager) -> Callable[..., dict]:
    """Create a task through the API as a Manager and return its JSON"""

    def _create_task(**fields) -> dict:
        body = {"title": "Task"}
        body.update(fields)
        response = client.post("/api/tasks", json=body, headers=manager[1])
        assert response.status_code == 201, response.text
        return response.json()

    return _create_task
