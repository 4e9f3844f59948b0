"""
Shared fixtures: an isolated data file per test, a configured admin
password, and Flask test clients with and without a session.
"""

import pytest

import config
from app import app as flask_app

TEST_PASSWORD = "correct horse battery staple"


@pytest.fixture
def data_path(tmp_path, monkeypatch):
    path = tmp_path / "data" / "blog.json"
    monkeypatch.setattr(config, "DATA_PATH", path)
    return path


@pytest.fixture
def admin_password(monkeypatch):
    monkeypatch.setattr(config, "ADMIN_PASSWORD", TEST_PASSWORD)
    return TEST_PASSWORD


@pytest.fixture
def app(data_path, admin_password):
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def admin_client(client, admin_password):
    response = client.post("/api/admin/login", json={"password": admin_password})
    assert response.status_code == 200
    return client


@pytest.fixture
def sample_post():
    return {
        "title": "Hi",
        "slug": "hi",
        "content": "World",
    }
