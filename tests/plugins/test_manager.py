"""Tests for PluginManager: loading, registration and hook collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pluggy
import pytest

from kblog.plugins import manager as manager_module
from kblog.plugins.builtins.excerpt import ExcerptPlugin
from kblog.plugins.manager import ENTRY_POINT_GROUP, PluginManager
from kblog.services.hooks import HookContext

hookimpl = pluggy.HookimplMarker("kblog")


class _DummyPlugin:
    @hookimpl
    def post_create(self, service_name: str, document: dict[str, Any]) -> None:
        pass


def _noop(ctx: HookContext) -> None:
    return None


class _HooksPlugin:
    @hookimpl
    def register_service_hooks(self, service_name: str) -> dict[str, Any] | None:
        if service_name == "posts":
            return {"before.create": [_noop]}
        return None


class _BrokenHooksPlugin:
    @hookimpl
    def register_service_hooks(self, service_name: str) -> dict[str, Any] | None:
        raise RuntimeError("broken")


class _WrongTypePlugin:
    @hookimpl
    def register_service_hooks(self, service_name: str) -> Any:
        return ["before.create"]


@dataclass
class _FakeEntryPoint:
    name: str
    target: Any
    value: str = "fake.module:target"

    def load(self) -> Any:
        if isinstance(self.target, Exception):
            raise self.target
        return self.target


def _fake_entry_points(monkeypatch: pytest.MonkeyPatch, *eps: _FakeEntryPoint) -> None:
    def entry_points(group: str) -> list[_FakeEntryPoint]:
        assert group == ENTRY_POINT_GROUP
        return list(eps)

    monkeypatch.setattr(manager_module, "entry_points", entry_points)


class TestRegistration:
    def test_hook_relay_accessible(self) -> None:
        pm = PluginManager()
        for name in ("post_create", "post_update", "post_patch", "post_remove"):
            assert hasattr(pm.hook, name)
        assert hasattr(pm.hook, "register_service_hooks")

    def test_register_returns_name(self) -> None:
        pm = PluginManager()
        assert pm.register(_DummyPlugin(), name="dummy") == "dummy"
        assert pm.names == ["dummy"]

    def test_default_name_is_class_name(self) -> None:
        pm = PluginManager()
        assert pm.register(_DummyPlugin()) == "_DummyPlugin"

    def test_unregister(self) -> None:
        pm = PluginManager()
        plugin = _DummyPlugin()
        pm.register(plugin, name="dummy")
        pm.unregister(plugin)
        assert pm.names == []


class TestLoad:
    def test_builtins_loaded(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _fake_entry_points(monkeypatch)
        pm = PluginManager()
        assert pm.load() == ["excerpt-builtin"]
        assert pm.names == ["excerpt-builtin"]

    def test_builtins_can_be_skipped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _fake_entry_points(monkeypatch)
        pm = PluginManager()
        assert pm.load(builtins=False) == []
        assert pm.names == []

    def test_entry_point_class_is_instantiated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _fake_entry_points(monkeypatch, _FakeEntryPoint("dummy", _DummyPlugin))
        pm = PluginManager()
        assert pm.load(builtins=False) == ["dummy"]
        assert isinstance(pm._pm.get_plugin("dummy"), _DummyPlugin)

    def test_entry_point_instance_is_registered(self, monkeypatch: pytest.MonkeyPatch) -> None:
        plugin = ExcerptPlugin(max_chars=5)
        _fake_entry_points(monkeypatch, _FakeEntryPoint("short-excerpt", plugin))
        pm = PluginManager()
        pm.load(builtins=False)
        assert pm._pm.get_plugin("short-excerpt") is plugin

    def test_failing_entry_point_is_skipped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _fake_entry_points(
            monkeypatch,
            _FakeEntryPoint("broken", ImportError("no module named fake")),
            _FakeEntryPoint("dummy", _DummyPlugin),
        )
        pm = PluginManager()
        assert pm.load(builtins=False) == ["dummy"]

    def test_already_registered_name_is_skipped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        _fake_entry_points(monkeypatch, _FakeEntryPoint("dummy", _DummyPlugin))
        pm = PluginManager()
        pm.register(_DummyPlugin(), name="dummy")
        assert pm.load(builtins=False) == []


class TestCollectServiceHooks:
    def test_collects_fragments_for_service(self) -> None:
        pm = PluginManager()
        pm.register(_HooksPlugin(), name="hooks")
        assert pm.collect_service_hooks("posts") == [{"before.create": [_noop]}]
        assert pm.collect_service_hooks("tags") == []

    def test_broken_plugin_is_skipped(self) -> None:
        pm = PluginManager()
        pm.register(_BrokenHooksPlugin(), name="broken")
        pm.register(_HooksPlugin(), name="hooks")
        assert pm.collect_service_hooks("posts") == [{"before.create": [_noop]}]

    def test_non_mapping_is_skipped(self) -> None:
        pm = PluginManager()
        pm.register(_WrongTypePlugin(), name="wrong")
        assert pm.collect_service_hooks("posts") == []
