"""Tests for the built-in hook factories."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest

from kblog.services.builtin_hooks import associate_user, create_slug, restrict_to_admin
from kblog.services.errors import NotAuthorizedError, ValidationError
from kblog.services.hooks import HookContext, run_hooks
from tests.conftest import as_admin, as_reader


def make_ctx(method: str = "create", **kwargs: Any) -> HookContext:
    service = SimpleNamespace(name="posts", app=None)
    return HookContext(service=service, method=method, **kwargs)  # type: ignore[arg-type]


async def run_fragment(fragment: dict[str, Any], ctx: HookContext) -> None:
    await run_hooks(fragment.get(f"before.{ctx.method}", []), ctx)


class TestRestrictToAdmin:
    def test_default_methods(self) -> None:
        assert set(restrict_to_admin()) == {
            "before.create",
            "before.update",
            "before.patch",
            "before.remove",
        }

    def test_unknown_method(self) -> None:
        with pytest.raises(ValueError, match="upsert"):
            restrict_to_admin(("create", "upsert"))

    async def test_admin_passes(self) -> None:
        await run_fragment(restrict_to_admin(), make_ctx(params=as_admin()))

    async def test_reader_rejected(self) -> None:
        with pytest.raises(NotAuthorizedError, match="You do not have permission to create posts"):
            await run_fragment(restrict_to_admin(), make_ctx(params=as_reader()))

    async def test_anonymous_external_rejected(self) -> None:
        with pytest.raises(NotAuthorizedError):
            await run_fragment(restrict_to_admin(), make_ctx(params={"provider": "rest"}))

    async def test_internal_call_trusted(self) -> None:
        await run_fragment(restrict_to_admin(), make_ctx(params={}))


class TestCreateSlug:
    async def test_derives_slug(self) -> None:
        ctx = make_ctx(data={"title": "Hello World"})
        await run_fragment(create_slug(), ctx)
        assert ctx.data == {"title": "Hello World", "slug": "hello-world"}

    async def test_keeps_explicit_slug(self) -> None:
        ctx = make_ctx(data={"title": "Hello World", "slug": "custom"})
        await run_fragment(create_slug(), ctx)
        assert ctx.data["slug"] == "custom"

    @pytest.mark.parametrize("data", [{}, {"title": ""}, {"title": "   "}, {"title": 3}])
    async def test_missing_title(self, data: dict[str, Any]) -> None:
        with pytest.raises(ValidationError, match="title is required"):
            await run_fragment(create_slug(), make_ctx(data=data))

    async def test_custom_fields(self) -> None:
        ctx = make_ctx(data={"name": "Python Tips"})
        await run_fragment(create_slug(source="name", target="path"), ctx)
        assert ctx.data["path"] == "python-tips"

    def test_only_on_create(self) -> None:
        assert list(create_slug()) == ["before.create"]


class TestAssociateUser:
    async def test_stamps_user_id(self) -> None:
        ctx = make_ctx(data={"title": "x"}, params=as_admin())
        await run_fragment(associate_user(), ctx)
        assert ctx.data["user_id"] == "admin-1"

    async def test_no_user_is_noop(self) -> None:
        ctx = make_ctx(data={"title": "x"})
        await run_fragment(associate_user(), ctx)
        assert "user_id" not in ctx.data

    async def test_custom_target(self) -> None:
        ctx = make_ctx(data={}, params=as_reader())
        await run_fragment(associate_user(target="author"), ctx)
        assert ctx.data == {"author": "reader-1"}
