"""Fixtures for Web API tests."""

import pytest
from fastapi.testclient import TestClient

from staarkids.db.users_repository import upsert_user
from staarkids.web.api import create_app


@pytest.fixture
def app(db_path):
    """App bound to the test database. Overrides are cleared afterwards."""
    app = create_app()
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def student(db_path):
    return upsert_user("stu1", email="ana@example.com", first_name="Ana", current_grade=4)


@pytest.fixture
def teacher(db_path):
    return upsert_user("tch1", first_name="Ms. Garcia", role="teacher")
