"""Application: the registry that mounts services under ``/api/<name>``.

Services find each other through the application: an incremental
service resolves ``options`` at setup to allocate its ids. The
application also owns the plugin manager and the event bus, and closes
every store on shutdown.

Usage::

    app = create_application(KblogSettings.from_cli())
    posts = app.service("posts")
    result = await posts.find({"status": "publish"})
    app.close()
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from kblog.config.settings import KblogSettings
from kblog.infrastructure.database.engine import init_event_log
from kblog.infrastructure.store import DocumentStore
from kblog.plugins.event_bus import EventBus, EventStatus
from kblog.plugins.manager import PluginManager
from kblog.services.errors import ServiceNotFoundError
from kblog.services.headlines import HEADLINES_SERVICE_NAME, headlines_service
from kblog.services.options import OPTIONS_SERVICE_NAME, options_service
from kblog.services.posts import POSTS_SERVICE_NAME, posts_service
from kblog.services.tags import TAGS_SERVICE_NAME, tags_service
from kblog.services.users import USERS_SERVICE_NAME, users_service

if TYPE_CHECKING:
    from collections.abc import Callable

    from kblog.services.base import Service
    from kblog.services.hooks import HookFragment

logger = logging.getLogger(__name__)

API_PREFIX = "/api"
EVENT_LOG_FILE = "_events.db"

# Mount order. Allocators bind to options in setup(), after every mount.
SERVICE_FACTORIES: tuple[tuple[str, Callable[..., Service]], ...] = (
    (USERS_SERVICE_NAME, users_service),
    (POSTS_SERVICE_NAME, posts_service),
    (HEADLINES_SERVICE_NAME, headlines_service),
    (TAGS_SERVICE_NAME, tags_service),
    (OPTIONS_SERVICE_NAME, options_service),
)


def api_endpoint(name: str) -> str:
    """Mount path for the *name* collection (``posts`` -> ``/api/posts``)."""
    return f"{API_PREFIX}/{name}"


def _normalize(path: str) -> str:
    """Accept ``posts``, ``/posts``, ``api/posts`` or ``/api/posts``."""
    cleaned = "/" + path.strip().strip("/")
    if cleaned == API_PREFIX or cleaned.startswith(f"{API_PREFIX}/"):
        return cleaned
    return f"{API_PREFIX}{cleaned}"


class Application:
    """Service registry plus the shared plugin machinery."""

    def __init__(
        self,
        settings: KblogSettings | None = None,
        *,
        plugin_manager: PluginManager | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self._settings = settings
        self._pm = plugin_manager
        self._event_bus = event_bus
        self._services: dict[str, Service] = {}
        self._ready = False

    @property
    def settings(self) -> KblogSettings | None:
        return self._settings

    @property
    def plugin_manager(self) -> PluginManager | None:
        return self._pm

    @property
    def event_bus(self) -> EventBus | None:
        return self._event_bus

    @property
    def services(self) -> dict[str, Service]:
        """Mounted services keyed by mount path."""
        return dict(self._services)

    def use(self, path: str, service: Service) -> Service:
        """Mount *service* at *path*. Late mounts are set up immediately."""
        mount = _normalize(path)
        if mount in self._services:
            msg = f"A service is already mounted at {mount}"
            raise ValueError(msg)
        self._services[mount] = service
        logger.debug("Mounted %s at %s", service.name, mount)
        if self._ready:
            service.setup(self)
        return service

    def service(self, path: str) -> Service:
        """The service mounted at *path*.

        Raises:
            ServiceNotFoundError: If nothing is mounted there.
        """
        mount = _normalize(path)
        try:
            return self._services[mount]
        except KeyError:
            msg = f"No service mounted at {mount}"
            raise ServiceNotFoundError(msg) from None

    def setup(self) -> Application:
        """Run every mounted service's setup. Idempotent."""
        if not self._ready:
            self._ready = True
            for service in self._services.values():
                service.setup(self)
        return self

    def plugin_hooks(self, service_name: str) -> list[HookFragment]:
        """Hook fragments contributed by plugins for *service_name*."""
        if self._pm is None:
            return []
        return self._pm.collect_service_hooks(service_name)

    def close(self) -> None:
        """Flush pending events and release every store."""
        if self._event_bus is not None:
            try:
                redelivered = self._event_bus.drain()
            except Exception:
                logger.warning("Draining the event log failed", exc_info=True)
            else:
                dead = [e["id"] for e in redelivered if e["status"] == EventStatus.DEAD_LETTER]
                if dead:
                    logger.warning("Events dead-lettered on close: %s", dead)
            self._event_bus.close()
            self._event_bus.engine.dispose()
        for service in self._services.values():
            service.close()


def create_application(
    settings: KblogSettings,
    *,
    plugin_manager: PluginManager | None = None,
) -> Application:
    """Build the application for *settings*: stores, services, plugins.

    When plugins are enabled and no manager is given, entry-point plugins
    and the built-ins are loaded.
    """
    options = {
        "cacheable": settings.cache.enabled,
        "default_limit": settings.pagination.default_limit,
        "max_limit": settings.pagination.max_limit,
    }

    event_bus: EventBus | None = None
    if settings.plugins.enabled:
        if plugin_manager is None:
            plugin_manager = PluginManager()
            plugin_manager.load()
        event_bus = EventBus(
            init_event_log(settings.data_root / EVENT_LOG_FILE),
            plugin_manager,
            sync=settings.plugins.sync_events,
            max_retries=settings.plugins.max_retries,
        )
    else:
        plugin_manager = None

    app = Application(settings, plugin_manager=plugin_manager, event_bus=event_bus)
    for name, factory in SERVICE_FACTORIES:
        store = DocumentStore(name, settings.collection_path(name))
        app.use(api_endpoint(name), factory(store, **options))
    return app.setup()
