"""Tags: post categories, unique by slug."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kblog.domain.documents import Tag
from kblog.services.base import IndexSpec, Service, ServiceConfig
from kblog.services.builtin_hooks import create_slug, restrict_to_admin
from kblog.services.hooks import combine_hooks
from kblog.services.validators import document_validator

if TYPE_CHECKING:
    from kblog.infrastructure.store import DocumentStore

TAGS_SERVICE_NAME = "tags"

TAGS_CONFIG = ServiceConfig(
    name=TAGS_SERVICE_NAME,
    validator=document_validator(Tag),
    hooks=combine_hooks(create_slug(), restrict_to_admin()),
    indexes=(IndexSpec("slug", unique=True),),
)


def tags_service(store: DocumentStore, **options: Any) -> Service:
    return Service(TAGS_CONFIG.with_options(**options), store)
