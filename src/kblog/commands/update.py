"""Commands: change documents (update, patch, remove)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from kblog.commands._base import JSON_OBJECT, KblogCommand

if TYPE_CHECKING:
    from kblog.commands._context import AppContext


@click.command(
    cls=KblogCommand,
    examples="""\
  kblog --user 1a2b3c update posts 0 '{"title": "Hello again", "status": "draft"}'""",
)
@click.argument("service")
@click.argument("doc_id")
@click.argument("data", type=JSON_OBJECT)
@click.pass_obj
def update(app: AppContext, service: str, doc_id: str, data: dict[str, Any]) -> None:
    """Replace document DOC_ID in SERVICE (``created`` is kept)."""
    app.emit(app.call(service, "update", doc_id, data), op=f"update {service}")


@click.command(
    cls=KblogCommand,
    examples="""\
  kblog --user 1a2b3c patch posts 0 '{"status": "publish"}'
  kblog --user 1a2b3c patch options site_title '{"value": "My Blog"}'""",
)
@click.argument("service")
@click.argument("doc_id")
@click.argument("data", type=JSON_OBJECT)
@click.pass_obj
def patch(app: AppContext, service: str, doc_id: str, data: dict[str, Any]) -> None:
    """Merge fields into document DOC_ID in SERVICE."""
    app.emit(app.call(service, "patch", doc_id, data), op=f"patch {service}")


@click.command(
    cls=KblogCommand,
    examples="""\
  kblog --user 1a2b3c remove posts 3""",
)
@click.argument("service")
@click.argument("doc_id")
@click.pass_obj
def remove(app: AppContext, service: str, doc_id: str) -> None:
    """Delete document DOC_ID from SERVICE."""
    app.emit(app.call(service, "remove", doc_id), op=f"remove {service}")
