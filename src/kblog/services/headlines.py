"""Headlines: incremental collection of header taglines."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kblog.domain.documents import Headline
from kblog.services.base import Service, ServiceConfig
from kblog.services.builtin_hooks import restrict_to_admin
from kblog.services.validators import document_validator

if TYPE_CHECKING:
    from kblog.infrastructure.store import DocumentStore

HEADLINES_SERVICE_NAME = "headlines"

HEADLINES_CONFIG = ServiceConfig(
    name=HEADLINES_SERVICE_NAME,
    validator=document_validator(Headline),
    hooks=restrict_to_admin(),
    incremental=True,
)


def headlines_service(store: DocumentStore, **options: Any) -> Service:
    return Service(HEADLINES_CONFIG.with_options(**options), store)
