"""Project initialization: config file, data directory, first admin.

``kblog init`` lays down a sparse ``kblog.toml`` (only the environment),
creates one empty collection file per service, and can register the
first admin account. That account is created as an internal call, since
no admin exists yet to authorize it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from kblog.config.discovery import CONFIG_FILENAME
from kblog.config.settings import KblogSettings
from kblog.services.builtin_hooks import ADMIN_ROLE
from kblog.services.registry import create_application
from kblog.services.result import ResultEnvelope
from kblog.services.users import USERS_SERVICE_NAME


def render_config(environment: str) -> str:
    """Sparse ``kblog.toml`` text: everything else keeps code defaults."""
    return f'[store]\nenvironment = "{environment}"\n'


async def init_project(
    root: Path,
    *,
    environment: str = "dev",
    admin_email: str | None = None,
    admin_name: str | None = None,
    **cli_flags: Any,
) -> ResultEnvelope:
    """Initialize a kblog project at *root*.

    An existing ``kblog.toml`` is kept as is and *environment* ignored.
    Re-running is safe; a second admin with the same email fails with the
    users service's uniqueness error.
    """
    root.mkdir(parents=True, exist_ok=True)
    config_path = root / CONFIG_FILENAME
    created_config = not config_path.exists()
    if created_config:
        config_path.write_text(render_config(environment), encoding="utf-8")

    settings = KblogSettings.from_cli(
        config_path=str(config_path),
        project_root=root,
        **cli_flags,
    )
    app = create_application(settings)
    try:
        report: dict[str, Any] = {
            "path": str(root),
            "config": str(config_path),
            "config_created": created_config,
            "data_root": str(settings.data_root),
            "services": sorted(app.services),
        }
        if admin_email is not None:
            admin: dict[str, Any] = {"email": admin_email, "role": ADMIN_ROLE}
            if admin_name:
                admin["name"] = admin_name
            created = await app.service(USERS_SERVICE_NAME).create(admin)
            if not created.ok:
                return created
            report["admin"] = created.payload["id"]
        return ResultEnvelope.success(report)
    finally:
        app.close()
