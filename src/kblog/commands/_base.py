"""Custom Click base classes and parameter types shared by the commands.

KblogCommand and KblogGroup accept an ``examples`` parameter: passing
``--examples`` prints usage examples and exits, which keeps ``--help``
concise. ``JSON_OBJECT`` and ``SORT_SPEC`` parse the document bodies and
sort flags the CRUD commands take.
"""

from __future__ import annotations

import json
from typing import Any

import click


class ExamplesOption(click.Option):
    """Eager ``--examples`` flag that prints *text* and exits 0."""

    def __init__(self, text: str) -> None:
        self.examples_text = text
        super().__init__(
            ["--examples"],
            is_flag=True,
            is_eager=True,
            expose_value=False,
            callback=self._print_examples,
            help="Show usage examples and exit.",
        )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if value:
            click.echo(f"Examples for '{ctx.command_path}':\n\n{self.examples_text}")
            ctx.exit(0)


class _ExamplesMixin:
    params: list[click.Parameter]

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(ExamplesOption(examples))


class KblogCommand(_ExamplesMixin, click.Command):
    """A command taking ``examples=`` alongside the usual Click arguments."""


class KblogGroup(_ExamplesMixin, click.Group):
    """A group whose ``@group.command()`` subcommands default to KblogCommand."""

    command_class = KblogCommand


class JsonObjectType(click.ParamType):
    """A JSON object literal, e.g. ``'{"title": "Hello"}'``."""

    name = "json"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        if isinstance(value, dict):
            return value
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            self.fail(f"invalid JSON: {exc.msg}", param, ctx)
        if not isinstance(parsed, dict):
            self.fail("expected a JSON object", param, ctx)
        return parsed


class SortSpecType(click.ParamType):
    """``FIELD`` or ``FIELD:asc|desc`` mapped to ``(field, 1 | -1)``."""

    name = "field[:asc|desc]"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Any:
        if isinstance(value, tuple):
            return value
        field, _, direction = value.partition(":")
        direction = (direction or "asc").lower()
        if not field or direction not in ("asc", "desc", "1", "-1"):
            self.fail(f"{value!r} is not FIELD[:asc|desc]", param, ctx)
        return field, -1 if direction in ("desc", "-1") else 1


JSON_OBJECT = JsonObjectType()
SORT_SPEC = SortSpecType()
