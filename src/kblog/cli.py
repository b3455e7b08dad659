"""Root CLI group for kblog with global flags and command registration."""

from __future__ import annotations

import click

from kblog import __version__
from kblog.commands import register_commands
from kblog.commands._context import AppContext
from kblog.config.discovery import ConfigFileError
from kblog.config.settings import KblogSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="kblog")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug logs.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.option("--user", "user", default=None, help="Act as the user with this id.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    user: str | None,
) -> None:
    """kblog: blog data services from the command line."""
    flags: dict[str, object] = {
        "json_output": json_output,
        "verbose": verbose,
        "log_json": log_json,
    }
    if user is not None:
        flags["user"] = user
    try:
        settings = KblogSettings.from_cli(config_path=config_path, **flags)
    except ConfigFileError as exc:
        raise click.ClickException(str(exc)) from exc
    ctx.obj = AppContext(settings)
    ctx.call_on_close(ctx.obj.close)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
