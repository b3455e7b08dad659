"""Built-in hook factories: authorization, slugs, and user association.

Each factory returns a hook fragment ready for
:func:`~kblog.services.hooks.combine_hooks`.

Authorization trusts internal calls: a call without ``params["provider"]``
comes from server code (for example the id allocator reading its counter
through the options service), not from a client.
"""

from __future__ import annotations

from collections.abc import Sequence

from kblog.domain.slugs import slugify
from kblog.services.errors import NotAuthorizedError, ValidationError
from kblog.services.hooks import METHODS, HookContext, HookFragment

ADMIN_ROLE = "admin"
MUTATING_METHODS = ("create", "update", "patch", "remove")


def is_admin(ctx: HookContext) -> bool:
    user = ctx.user
    return user is not None and user.get("role") == ADMIN_ROLE


def restrict_to_admin(methods: Sequence[str] = MUTATING_METHODS) -> HookFragment:
    """Reject external callers whose role is not ``admin``."""

    def check_admin(ctx: HookContext) -> None:
        if ctx.is_internal or is_admin(ctx):
            return
        msg = f"You do not have permission to {ctx.method} {ctx.service.name}"
        raise NotAuthorizedError(msg)

    unknown = set(methods) - set(METHODS)
    if unknown:
        msg = f"Unknown methods for restrict_to_admin: {sorted(unknown)}"
        raise ValueError(msg)
    return {f"before.{method}": [check_admin] for method in methods}


def create_slug(source: str = "title", target: str = "slug") -> HookFragment:
    """Derive ``data[target]`` from ``data[source]`` on create."""

    def derive_slug(ctx: HookContext) -> None:
        data = ctx.data if ctx.data is not None else {}
        title = data.get(source)
        if not isinstance(title, str) or not title.strip():
            msg = f"A {source} is required to create a {ctx.service.name} slug"
            raise ValidationError(msg)
        if not data.get(target):
            data[target] = slugify(title)
        ctx.data = data

    return {"before.create": [derive_slug]}


def associate_user(target: str = "user_id") -> HookFragment:
    """Stamp the authenticated caller's id onto created documents."""

    def stamp_user(ctx: HookContext) -> None:
        user = ctx.user
        if user is None or ctx.data is None:
            return
        user_id = user.get("id")
        if user_id is not None:
            ctx.data[target] = str(user_id)

    return {"before.create": [stamp_user]}
