"""Document schemas for the blog collections.

Each model validates the fields a caller *supplied*; it never injects
defaults into stored documents (``exclude_unset`` on dump). Defaults that
belong to a collection, like a post's ``format``, are applied by the
owning service before validation.

Unknown fields are allowed and passed through untouched so that
timestamps and plugin-provided attributes survive validation.
"""

from __future__ import annotations

from functools import cache
from typing import Any, Literal

from pydantic import BaseModel, Field, create_model

PostFormat = Literal[
    "standard",
    "aside",
    "quote",
    "link",
    "image",
    "gallery",
    "video",
    "audio",
]
PostStatus = Literal["publish", "draft", "private", "trash"]
PostType = Literal["post", "page"]
UserRole = Literal["admin", "author", "reader"]


class Document(BaseModel):
    """Common base: a string identifier plus lifecycle timestamps."""

    model_config = {"extra": "allow"}

    id: str | None = None
    created: str | None = None
    updated: str | None = None


class Post(Document):
    title: str = Field(min_length=1)
    slug: str | None = None
    content: str | None = None
    excerpt: str | None = None
    format: PostFormat | None = None
    status: PostStatus | None = None
    type: PostType | None = None
    tags: list[str] | None = None
    user_id: str | None = None


class Tag(Document):
    title: str = Field(min_length=1)
    slug: str | None = None
    description: str | None = None


class Headline(Document):
    """A tagline shown in the blog header."""

    content: str = Field(min_length=1)


class Option(Document):
    """A named site setting. The option name is its ``id``."""

    id: str = Field(min_length=1)
    value: Any = None
    internal: bool | None = None


class User(Document):
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    name: str | None = None
    role: UserRole | None = None


@cache
def _partial_model(model: type[Document]) -> type[Document]:
    """Variant of *model* with every field optional (for patches)."""
    fields: dict[str, Any] = {
        name: (info.annotation | None, None) for name, info in model.model_fields.items()
    }
    return create_model(f"Partial{model.__name__}", __base__=Document, **fields)


def validate_document(
    model: type[Document],
    data: dict[str, Any],
    *,
    partial: bool = False,
) -> dict[str, Any]:
    """Validate *data* against *model* and return the cleaned mapping.

    With ``partial=True`` only the supplied fields are checked, which is
    what a patch needs.

    Raises:
        pydantic.ValidationError: If a supplied field is invalid or a
            required field is missing (non-partial only).
    """
    target = _partial_model(model) if partial else model
    return target.model_validate(data).model_dump(mode="json", exclude_unset=True)
