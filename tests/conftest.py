"""Shared fixtures for meeting scheduler tests."""

import json

import pytest

from config import Config, StorageConfig
from monitoring import error_handler
from presentation import create_app, build_services


SAMPLE_PROJECTS = [
    {
        "id": "p1",
        "name": "Alpha",
        "members": [
            {"id": "m1", "name": "Alice"},
            {"id": "m2", "name": "Bob"},
        ],
    },
    {
        "id": "p2",
        "name": "Beta",
        "members": [
            {"id": "m3", "name": "Carol"},
        ],
    },
]

SAMPLE_TEMPLATES = [
    {"id": "t1", "name": "定例", "items": ["進捗", "課題"]},
    {"id": "t2", "name": "振り返り", "items": ["良かったこと"]},
]


@pytest.fixture(autouse=True)
def reset_error_stats():
    error_handler.reset_stats()
    yield
    error_handler.reset_stats()


@pytest.fixture
def data_dir(tmp_path):
    """Data directory holding the bundled projects and templates."""
    (tmp_path / "projects.json").write_text(json.dumps(SAMPLE_PROJECTS), encoding="utf-8")
    (tmp_path / "agenda_templates.json").write_text(json.dumps(SAMPLE_TEMPLATES), encoding="utf-8")
    return tmp_path


@pytest.fixture
def app_config(data_dir):
    return Config(storage=StorageConfig(data_dir=data_dir))


@pytest.fixture
def services(app_config):
    return build_services(app_config)


@pytest.fixture
def app(app_config):
    app = create_app(app_config)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def meeting_payload(**overrides):
    payload = {
        "projectId": "p1",
        "facilitatorId": "m1",
        "customAgenda": "Review",
        "date": "2024-03-15",
        "startTime": "09:30",
    }
    payload.update(overrides)
    return payload
