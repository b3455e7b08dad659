"""AppContext: shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``. Provides lazy Application initialization, the
bridge from synchronous Click callbacks to the async services, and
centralized envelope emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

import click

from kblog.output.formatters import format_result
from kblog.services.errors import KblogError
from kblog.services.result import ResultEnvelope

if TYPE_CHECKING:
    from kblog.config.settings import KblogSettings
    from kblog.services.registry import Application

CLI_PROVIDER = "cli"
USERS_PATH = "users"


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    The application is created on first use so ``--help`` and
    ``--version`` never touch the data directory.
    """

    def __init__(self, settings: KblogSettings) -> None:
        self.settings = settings
        self._app: Application | None = None

        from kblog.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def app(self) -> Application:
        """The application (created lazily on first access)."""
        if self._app is None:
            from kblog.services.registry import create_application

            self._app = create_application(self.settings)
        return self._app

    def close(self) -> None:
        if self._app is not None:
            self._app.close()
            self._app = None

    def call(self, path: str, method: str, *args: Any) -> ResultEnvelope:
        """Run ``service.<method>(*args, params)`` on the service at *path*.

        Params carry ``provider="cli"`` and, with ``--user``, the caller's
        user document. An unknown service or user yields an Error envelope.
        """
        return asyncio.run(self._call(path, method, *args))

    async def _call(self, path: str, method: str, *args: Any) -> ResultEnvelope:
        try:
            service = self.app.service(path)
            params = await self.request_params()
        except KblogError as exc:
            return ResultEnvelope.failure(str(exc))
        return await getattr(service, method)(*args, params)

    async def request_params(self) -> dict[str, Any]:
        """Params for a CLI request. Raises KblogError for an unknown ``--user``."""
        params: dict[str, Any] = {"provider": CLI_PROVIDER}
        if self.settings.user is None:
            return params
        found = await self.app.service(USERS_PATH).get(self.settings.user)
        if not found.ok:
            msg = f"Unknown user '{self.settings.user}'"
            raise KblogError(msg)
        params["user"] = found.payload
        return params

    def emit(self, result: ResultEnvelope, *, op: str) -> None:
        """Format and output an envelope with correct exit semantics.

        * OK: writes to stdout, returns normally.
        * Error: writes to stderr, exits with code 1.
        """
        output = format_result(
            result,
            op=op,
            json_output=self.settings.json_output,
            verbose=self.settings.verbose,
        )
        if result.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
