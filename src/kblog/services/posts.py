"""Posts: incremental collection of blog entries.

Creating a post derives its slug from the title, requires an admin
caller, and records the author. Missing ``format`` / ``status`` /
``type`` / ``tags`` fall back to ``standard`` / ``publish`` / ``post`` /
``[]``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kblog.domain.documents import Post
from kblog.services.base import Proceed, Service, ServiceConfig
from kblog.services.builtin_hooks import associate_user, create_slug, restrict_to_admin
from kblog.services.hooks import HookContext, combine_hooks
from kblog.services.validators import document_validator

if TYPE_CHECKING:
    from kblog.infrastructure.store import DocumentStore
    from kblog.services.result import ResultEnvelope

POSTS_SERVICE_NAME = "posts"

POST_DEFAULTS: dict[str, str] = {
    "format": "standard",
    "status": "publish",
    "type": "post",
}


async def apply_post_defaults(ctx: HookContext, proceed: Proceed) -> ResultEnvelope:
    """Fill in empty post fields before the create goes through."""
    data = ctx.data if ctx.data is not None else {}
    for key, default in POST_DEFAULTS.items():
        if not data.get(key):
            data[key] = default
    if data.get("tags") is None:
        data["tags"] = []
    ctx.data = data
    return await proceed(ctx)


POSTS_CONFIG = ServiceConfig(
    name=POSTS_SERVICE_NAME,
    validator=document_validator(Post),
    hooks=combine_hooks(
        create_slug(),
        restrict_to_admin(),
        associate_user(),
    ),
    incremental=True,
    overrides={"create": apply_post_defaults},
)


def posts_service(store: DocumentStore, **options: Any) -> Service:
    return Service(POSTS_CONFIG.with_options(**options), store)
