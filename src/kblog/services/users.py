"""Users: accounts and roles.

Anyone may register, but only an admin may create another admin or
change and delete accounts. Credentials are handled by the
authentication layer, not here.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kblog.domain.documents import User
from kblog.services.base import IndexSpec, Service, ServiceConfig
from kblog.services.builtin_hooks import ADMIN_ROLE, is_admin, restrict_to_admin
from kblog.services.errors import NotAuthorizedError
from kblog.services.hooks import HookContext, combine_hooks
from kblog.services.validators import document_validator

if TYPE_CHECKING:
    from kblog.infrastructure.store import DocumentStore

USERS_SERVICE_NAME = "users"


def protect_admin_role(ctx: HookContext) -> None:
    if ctx.is_internal or is_admin(ctx):
        return
    if (ctx.data or {}).get("role") == ADMIN_ROLE:
        msg = "Only an admin can create admin users"
        raise NotAuthorizedError(msg)


USERS_CONFIG = ServiceConfig(
    name=USERS_SERVICE_NAME,
    validator=document_validator(User),
    hooks=combine_hooks(
        {"before.create": [protect_admin_role]},
        restrict_to_admin(("update", "patch", "remove")),
    ),
    indexes=(IndexSpec("email", unique=True),),
)


def users_service(store: DocumentStore, **options: Any) -> Service:
    return Service(USERS_CONFIG.with_options(**options), store)
