"""Options: site settings keyed by name, admin-only.

Also home to the internal counter documents of incremental services
(see :mod:`kblog.services.allocator`). Those are flagged ``internal``
and never listed by ``find``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kblog.domain.documents import Option
from kblog.services.allocator import OPTIONS_SERVICE_NAME
from kblog.services.base import Proceed, Service, ServiceConfig
from kblog.services.builtin_hooks import restrict_to_admin
from kblog.services.hooks import METHODS
from kblog.services.validators import document_validator

if TYPE_CHECKING:
    from kblog.infrastructure.store import DocumentStore
    from kblog.services.hooks import HookContext
    from kblog.services.result import ResultEnvelope


async def hide_internal_options(ctx: HookContext, proceed: Proceed) -> ResultEnvelope:
    ctx.query = {**(ctx.query or {}), "internal": {"$ne": True}}
    return await proceed(ctx)


OPTIONS_CONFIG = ServiceConfig(
    name=OPTIONS_SERVICE_NAME,
    validator=document_validator(Option),
    hooks=restrict_to_admin(METHODS),
    overrides={"find": hide_internal_options},
)


def options_service(store: DocumentStore, **options: Any) -> Service:
    return Service(OPTIONS_CONFIG.with_options(**options), store)
