"""Shared pytest fixtures and test helpers for kblog tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from kblog.config.settings import KblogSettings
from kblog.infrastructure.store import DocumentStore
from kblog.services.registry import Application, create_application

ADMIN_USER: dict[str, Any] = {"id": "admin-1", "email": "admin@example.com", "role": "admin"}
READER_USER: dict[str, Any] = {"id": "reader-1", "email": "reader@example.com", "role": "reader"}


def as_admin(**extra: Any) -> dict[str, Any]:
    """Params for an external call made by an admin."""
    return {"provider": "rest", "user": dict(ADMIN_USER), **extra}


def as_reader(**extra: Any) -> dict[str, Any]:
    """Params for an external call made by a non-admin."""
    return {"provider": "rest", "user": dict(READER_USER), **extra}


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's KBLOG_* environment out of the tests."""
    for name in ("KBLOG_CONFIG", "KBLOG_USER", "KBLOG_STORE__ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path) -> KblogSettings:
    """Settings rooted at a temp project directory with no kblog.toml."""
    return KblogSettings.from_cli(project_root=tmp_path)


@pytest.fixture
def store(tmp_path: Path) -> Iterator[DocumentStore]:
    """A standalone collection store."""
    s = DocumentStore("things", tmp_path / "things.db")
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def app(settings: KblogSettings) -> Iterator[Application]:
    """Fully wired application: all services, plugins, event log."""
    application = create_application(settings)
    try:
        yield application
    finally:
        application.close()


@pytest.fixture
def _isolated_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp project root so the CLI uses an isolated data dir.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes.
    """
    monkeypatch.chdir(tmp_path)
