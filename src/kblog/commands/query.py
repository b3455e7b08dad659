"""Commands: read documents (find, get)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from kblog.commands._base import JSON_OBJECT, SORT_SPEC, KblogCommand

if TYPE_CHECKING:
    from kblog.commands._context import AppContext


@click.command(
    cls=KblogCommand,
    examples="""\
  kblog find posts
  kblog find posts --query '{"status": "publish"}' --limit 10
  kblog find posts --sort title:asc --skip 20
  kblog find tags --query '{"slug": {"$in": ["python", "sqlite"]}}'
  kblog --json find headlines""",
)
@click.argument("service")
@click.option("--query", type=JSON_OBJECT, default=None, help="Filter as a JSON object.")
@click.option("--sort", type=SORT_SPEC, multiple=True, help="FIELD[:asc|desc] (repeatable).")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Max documents.")
@click.option("--skip", type=click.IntRange(min=0), default=None, help="Documents to skip.")
@click.pass_obj
def find(
    app: AppContext,
    service: str,
    query: dict[str, Any] | None,
    sort: tuple[tuple[str, int], ...],
    limit: int | None,
    skip: int | None,
) -> None:
    """Find documents in SERVICE."""
    request: dict[str, Any] = dict(query or {})
    if sort:
        request["$sort"] = dict(sort)
    if limit is not None:
        request["$limit"] = limit
    if skip is not None:
        request["$skip"] = skip
    app.emit(app.call(service, "find", request), op=f"find {service}")


@click.command(
    cls=KblogCommand,
    examples="""\
  kblog get posts 0
  kblog get options site_title""",
)
@click.argument("service")
@click.argument("doc_id")
@click.pass_obj
def get(app: AppContext, service: str, doc_id: str) -> None:
    """Get one document from SERVICE by id."""
    app.emit(app.call(service, "get", doc_id), op=f"get {service}")
