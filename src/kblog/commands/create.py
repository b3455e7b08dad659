"""Command: create a document."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from kblog.commands._base import JSON_OBJECT, KblogCommand

if TYPE_CHECKING:
    from kblog.commands._context import AppContext


@click.command(
    cls=KblogCommand,
    examples="""\
  kblog --user 1a2b3c create posts '{"title": "Hello", "content": "First post"}'
  kblog --user 1a2b3c create tags '{"title": "Python"}'
  kblog create users '{"email": "reader@example.com", "role": "reader"}'""",
)
@click.argument("service")
@click.argument("data", type=JSON_OBJECT)
@click.pass_obj
def create(app: AppContext, service: str, data: dict[str, Any]) -> None:
    """Create a document in SERVICE from a JSON object."""
    app.emit(app.call(service, "create", data), op=f"create {service}")
