"""Command: list mounted services."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from kblog.commands._base import KblogCommand
from kblog.services.result import ResultEnvelope

if TYPE_CHECKING:
    from kblog.commands._context import AppContext


@click.command(
    cls=KblogCommand,
    examples="""\
  kblog services
  kblog --json services""",
)
@click.pass_obj
def services(app: AppContext) -> None:
    """List the services mounted under /api."""
    mounted = [
        {
            "id": path,
            "name": service.name,
            "incremental": service.incremental,
            "cacheable": service.cacheable,
        }
        for path, service in app.app.services.items()
    ]
    app.emit(ResultEnvelope.success(mounted), op="services")
