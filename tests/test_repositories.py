"""Tests for JSON storage and the project repositories."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from infrastructure import (
    JsonFileStore, RedmineRepository, CustomDataRepository, AgendaTemplateRepository
)
from monitoring import PersistenceError, RemoteSourceError, ErrorCode


def _response(data=None, ok=True, status_code=200, text=""):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.text = text
    response.json.return_value = data
    return response


class TestJsonFileStore:

    def test_missing_file_returns_copy_of_default(self, tmp_path):
        store = JsonFileStore(tmp_path / "missing.json", default={"projects": []})
        data = store.load()
        data["projects"].append("x")
        assert store.load() == {"projects": []}

    def test_save_writes_readable_utf8(self, tmp_path):
        store = JsonFileStore(tmp_path / "nested" / "data.json", default=[])
        store.save([{"name": "佐藤"}])

        text = (tmp_path / "nested" / "data.json").read_text(encoding="utf-8")
        assert "佐藤" in text
        assert text.endswith("\n")
        assert store.load() == [{"name": "佐藤"}]
        assert list((tmp_path / "nested").iterdir()) == [tmp_path / "nested" / "data.json"]

    def test_malformed_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(PersistenceError):
            JsonFileStore(path).load()


class TestCustomDataRepository:

    def test_normalizes_loaded_entries(self, tmp_path):
        path = tmp_path / "custom_data.json"
        path.write_text(json.dumps({
            "projects": [
                {"name": "No Id", "members": [{"name": "Ann"}, {"id": "x"}, "junk"]},
                {"id": "custom-2"},
                "junk",
            ],
            "memberOverrides": {"p1": [{"id": "o1", "name": "Olga"}, {"name": ""}]}
        }), encoding="utf-8")

        repo = CustomDataRepository(JsonFileStore(path, default={}))

        assert len(repo.projects) == 1
        project = repo.projects[0]
        assert project.id.startswith("custom-")
        assert [m.name for m in project.members] == ["Ann"]
        assert project.members[0].id.startswith(f"{project.id}-member-")
        assert [m.id for m in repo.member_overrides["p1"]] == ["o1"]
        assert repo.count_custom_members() == 2

    def test_save_uses_stored_keys(self, tmp_path):
        path = tmp_path / "custom_data.json"
        repo = CustomDataRepository(JsonFileStore(path, default={}))
        repo.save()
        assert json.loads(path.read_text(encoding="utf-8")) == {"projects": [], "memberOverrides": {}}


class TestAgendaTemplateRepository:

    def test_loads_templates(self, data_dir):
        templates = AgendaTemplateRepository(data_dir / "agenda_templates.json").get_all_templates()
        assert [t.id for t in templates] == ["t1", "t2"]
        assert templates[0].to_dict()["body"] == "- 進捗\n- 課題"


class TestRedmineRepository:

    @pytest.fixture
    def repo(self):
        repo = RedmineRepository("https://redmine.example.com/", api_key="secret", timeout=5, page_size=2)
        repo.session = MagicMock()
        return repo

    def test_api_key_header(self):
        repo = RedmineRepository("https://redmine.example.com", api_key="secret")
        assert repo.session.headers["X-Redmine-API-Key"] == "secret"
        assert "X-Redmine-API-Key" not in RedmineRepository("https://redmine.example.com").session.headers

    def test_fetches_all_pages_and_members(self, repo):
        pages = {
            0: {"projects": [{"id": 1, "name": "One"}, {"id": 2, "name": "Two"}], "total_count": 3},
            2: {"projects": [{"id": 3, "name": "Three"}], "total_count": 3},
        }
        memberships = {
            "1": [
                {"user": {"id": 10, "name": "Alice"}},
                {"group": {"id": 5, "name": "Devs"}},
                {"user": {"id": 10, "name": "Alice"}},
            ],
            "2": [],
        }

        def fake_get(url, params=None, timeout=None):
            assert timeout == 5
            if url == "https://redmine.example.com/projects.json":
                assert params["status"] == "*"
                return _response(pages[params["offset"]])
            project_id = url.rsplit("/", 1)[-1].replace(".json", "")
            if project_id == "3":
                return _response(ok=False, status_code=403, text="Forbidden")
            return _response({"project": {"memberships": memberships[project_id]}})

        repo.session.get.side_effect = fake_get

        projects = repo.get_all_projects()

        assert [(p.id, p.name) for p in projects] == [("1", "One"), ("2", "Two"), ("3", "Three")]
        assert [(m.id, m.name) for m in projects[0].members] == [
            ("10", "Alice"), ("group-5", "Devs (グループ)")
        ]
        assert projects[1].members == []
        assert projects[2].members == []

    def test_api_error(self, repo):
        repo.session.get.return_value = _response(ok=False, status_code=500, text="boom")
        with pytest.raises(RemoteSourceError) as exc_info:
            repo.get_all_projects()
        assert exc_info.value.error_code == ErrorCode.REMOTE_API_ERROR
        assert "500" in exc_info.value.message

    def test_connection_error(self, repo):
        repo.session.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(RemoteSourceError) as exc_info:
            repo.get_all_projects()
        assert exc_info.value.error_code == ErrorCode.REMOTE_CONNECTION_ERROR

    def test_timeout(self, repo):
        repo.session.get.side_effect = requests.Timeout()
        with pytest.raises(RemoteSourceError) as exc_info:
            repo.fetch_project_list()
        assert exc_info.value.error_code == ErrorCode.REMOTE_TIMEOUT

    def test_invalid_json(self, repo):
        response = _response()
        response.json.side_effect = ValueError("bad json")
        repo.session.get.return_value = response
        with pytest.raises(RemoteSourceError):
            repo.fetch_project_list()
