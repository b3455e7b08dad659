"""Command: project initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import click

from kblog.commands._base import KblogCommand

if TYPE_CHECKING:
    from kblog.commands._context import AppContext

_INIT_EXAMPLES = """\
  kblog init
  kblog init /srv/blog --environment prod
  kblog init . --admin-email me@example.com --admin-name Me"""


@click.command("init", cls=KblogCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option(
    "--environment",
    type=click.Choice(["dev", "prod"]),
    default="dev",
    show_default=True,
    help="Data subdirectory written to a new kblog.toml.",
)
@click.option("--admin-email", default=None, help="Register the first admin account.")
@click.option("--admin-name", default=None, help="Display name for the admin account.")
@click.pass_obj
def init_cmd(
    app: AppContext,
    path: str,
    environment: str,
    admin_email: str | None,
    admin_name: str | None,
) -> None:
    """Initialize a kblog project: config, collections, first admin."""
    from kblog.services.init import init_project

    result = asyncio.run(
        init_project(
            Path(path).resolve(),
            environment=environment,
            admin_email=admin_email,
            admin_name=admin_name,
            json_output=app.settings.json_output,
            verbose=app.settings.verbose,
            log_json=app.settings.log_json,
        )
    )
    app.emit(result, op="init")
