"""Bridge from pydantic document models to service validators."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pydantic

from kblog.domain.documents import Document, validate_document
from kblog.services.errors import ValidationError

Validator = Callable[..., dict[str, Any]]


def _summarize(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error["loc"]) or "document"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def document_validator(model: type[Document]) -> Validator:
    """Build a ``validate(data, *, partial=False) -> dict`` for *model*.

    Raises :class:`~kblog.services.errors.ValidationError` with a
    one-line summary of every failing field.
    """

    def validate(data: dict[str, Any], *, partial: bool = False) -> dict[str, Any]:
        try:
            return validate_document(model, data, partial=partial)
        except pydantic.ValidationError as exc:
            msg = f"Invalid {model.__name__.lower()}: {_summarize(exc)}"
            raise ValidationError(msg) from exc

    return validate
