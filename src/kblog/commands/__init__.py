"""Subcommand modules for kblog.

Provides register_commands() which uses deferred imports to keep
``kblog --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from kblog.commands.create import create
    from kblog.commands.init_cmd import init_cmd
    from kblog.commands.query import find, get
    from kblog.commands.services import services
    from kblog.commands.update import patch, remove, update

    cli.add_command(init_cmd)
    cli.add_command(services)
    cli.add_command(find)
    cli.add_command(get)
    cli.add_command(create)
    cli.add_command(update)
    cli.add_command(patch)
    cli.add_command(remove)
