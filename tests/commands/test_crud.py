"""Tests for the services, find, get, create, update, patch and remove commands."""

from __future__ import annotations

import json
from typing import Any

import pytest
from click.testing import CliRunner

from kblog.cli import cli


def _wire(result: Any) -> dict[str, Any]:
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


@pytest.fixture
def admin_id(cli_runner: CliRunner, _isolated_project: None) -> str:
    result = cli_runner.invoke(cli, ["--json", "init", "--admin-email", "admin@example.com"])
    return _wire(result)["payload"]["admin"]


def _as_admin(admin_id: str, *args: str) -> list[str]:
    return ["--json", "--user", admin_id, *args]


class TestServicesCommand:
    def test_lists_mounts(self, cli_runner: CliRunner, admin_id: str) -> None:
        mounts = _wire(cli_runner.invoke(cli, ["--json", "services"]))["payload"]
        assert [m["id"] for m in mounts] == [
            "/api/users",
            "/api/posts",
            "/api/headlines",
            "/api/tags",
            "/api/options",
        ]
        posts = mounts[1]
        assert posts["incremental"] is True
        assert posts["cacheable"] is True


class TestCrudCommands:
    def test_create_find_get(self, cli_runner: CliRunner, admin_id: str) -> None:
        created = _wire(
            cli_runner.invoke(
                cli, _as_admin(admin_id, "create", "posts", '{"title": "Hello World"}')
            )
        )["payload"]
        assert created["id"] == "0"
        assert created["slug"] == "hello-world"
        assert created["status"] == "publish"

        found = _wire(cli_runner.invoke(cli, ["--json", "find", "posts"]))["payload"]
        assert [p["title"] for p in found] == ["Hello World"]

        got = _wire(cli_runner.invoke(cli, ["--json", "get", "/api/posts", "0"]))["payload"]
        assert got["slug"] == "hello-world"

    def test_find_query_sort_limit(self, cli_runner: CliRunner, admin_id: str) -> None:
        for title in ("Beta", "Alpha", "Gamma"):
            body = json.dumps({"title": title})
            cli_runner.invoke(cli, _as_admin(admin_id, "create", "tags", body))
        result = cli_runner.invoke(
            cli, ["--json", "find", "tags", "--sort", "title:desc", "--limit", "2"]
        )
        assert [t["title"] for t in _wire(result)["payload"]] == ["Gamma", "Beta"]

        result = cli_runner.invoke(cli, ["--json", "find", "tags", "--query", '{"slug": "alpha"}'])
        assert [t["title"] for t in _wire(result)["payload"]] == ["Alpha"]

    def test_update_patch_remove(self, cli_runner: CliRunner, admin_id: str) -> None:
        cli_runner.invoke(cli, _as_admin(admin_id, "create", "headlines", '{"content": "Hi"}'))

        patched = cli_runner.invoke(
            cli, _as_admin(admin_id, "patch", "headlines", "0", '{"content": "Hey"}')
        )
        assert _wire(patched)["payload"]["content"] == "Hey"

        updated = cli_runner.invoke(
            cli, _as_admin(admin_id, "update", "headlines", "0", '{"content": "Hello"}')
        )
        assert _wire(updated)["payload"]["content"] == "Hello"

        removed = cli_runner.invoke(cli, _as_admin(admin_id, "remove", "headlines", "0"))
        assert _wire(removed)["payload"]["id"] == "0"

        missing = cli_runner.invoke(cli, ["--json", "get", "headlines", "0"])
        assert missing.exit_code == 1
        assert json.loads(missing.output)["resultCode"] == "Error"

    def test_human_output(self, cli_runner: CliRunner, admin_id: str) -> None:
        cli_runner.invoke(cli, _as_admin(admin_id, "create", "tags", '{"title": "Python"}'))
        result = cli_runner.invoke(cli, ["find", "tags"])
        assert result.exit_code == 0
        assert result.output.startswith("OK  find tags")
        assert "Python" in result.output
        assert "1 document\n" in result.output


class TestCommandErrors:
    def test_anonymous_create_rejected(self, cli_runner: CliRunner, admin_id: str) -> None:
        result = cli_runner.invoke(cli, ["create", "posts", '{"title": "Nope"}'])
        assert result.exit_code == 1
        assert "ERROR  create posts" in result.output

    def test_unknown_service(self, cli_runner: CliRunner, admin_id: str) -> None:
        result = cli_runner.invoke(cli, ["find", "comments"])
        assert result.exit_code == 1
        assert "No service mounted at /api/comments" in result.output

    def test_unknown_user(self, cli_runner: CliRunner, admin_id: str) -> None:
        result = cli_runner.invoke(cli, ["--user", "ghost", "find", "posts"])
        assert result.exit_code == 1
        assert "Unknown user 'ghost'" in result.output

    def test_invalid_json_body(self, cli_runner: CliRunner, admin_id: str) -> None:
        result = cli_runner.invoke(cli, ["create", "tags", "{not json"])
        assert result.exit_code == 2
        assert "invalid JSON" in result.output

    def test_json_body_must_be_object(self, cli_runner: CliRunner, admin_id: str) -> None:
        result = cli_runner.invoke(cli, ["create", "tags", "[1, 2]"])
        assert result.exit_code == 2
        assert "expected a JSON object" in result.output

    def test_bad_sort_spec(self, cli_runner: CliRunner, admin_id: str) -> None:
        result = cli_runner.invoke(cli, ["find", "tags", "--sort", "title:sideways"])
        assert result.exit_code == 2
