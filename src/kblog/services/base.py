"""Service: the generic CRUD service every collection is built from.

A service is configured, not subclassed: :class:`ServiceConfig` carries
the collection name, validator, hook set, ``incremental`` / ``cacheable``
flags, and *overrides*: functions that wrap one public operation, the
way ``posts`` fills in defaults before ``create``.

Call flow for every public operation::

    before hooks -> override (optional) -> core -> after hooks

The core is the envelope/cache layer:

- reads (``find``, ``get``) are memoized per service in a
  :class:`~kblog.services.cache.QueryCache`; only OK envelopes are kept.
- ``create`` runs through a :class:`~kblog.services.queue.CreationQueue`
  (one in flight, FIFO) and, for incremental services, takes its id from
  a :class:`~kblog.services.allocator.SequentialIdAllocator`.
- every mutation clears both caches, whether it succeeded or not.

INVARIANT: public operations never raise. Store, allocator, hook and
validation failures all come back as Error envelopes.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from kblog.config.logging import get_logger
from kblog.services._helpers import error_message, now_iso
from kblog.services.allocator import OPTIONS_SERVICE_NAME, SequentialIdAllocator
from kblog.services.cache import QueryCache
from kblog.services.errors import KblogError
from kblog.services.hooks import HookContext, HookSet, combine_hooks, run_hooks, steps_for
from kblog.services.queue import CreationQueue
from kblog.services.result import ResultEnvelope

if TYPE_CHECKING:
    from kblog.infrastructure.store import DocumentStore
    from kblog.services.registry import Application
    from kblog.services.validators import Validator

MUTATING_METHODS = frozenset({"create", "update", "patch", "remove"})

Proceed = Callable[[HookContext], Awaitable[ResultEnvelope]]
Override = Callable[[HookContext, Proceed], Awaitable[ResultEnvelope]]


@dataclass(frozen=True)
class IndexSpec:
    """A field index declared on the service's store at construction."""

    field: str
    unique: bool = False
    sparse: bool = True


@dataclass(frozen=True)
class ServiceConfig:
    """Everything that distinguishes one collection's service from another.

    Attributes:
        name: Collection name; also the mount path suffix (``/api/<name>``).
        validator: ``validate(data, *, partial=False) -> dict``, or None.
        hooks: Combined hook set (see :mod:`kblog.services.hooks`).
        incremental: Allocate sequential ids and default-sort by ``id`` desc.
        cacheable: Memoize ``find`` / ``get`` envelopes.
        overrides: ``{method: override}`` wrappers around public operations.
        indexes: Extra field indexes to declare on the store.
        default_limit: ``$limit`` applied to ``find`` when none is given.
        max_limit: Upper bound for any ``$limit``.
    """

    name: str
    validator: Validator | None = None
    hooks: HookSet = field(default_factory=dict)
    incremental: bool = False
    cacheable: bool = True
    overrides: Mapping[str, Override] = field(default_factory=dict)
    indexes: tuple[IndexSpec, ...] = ()
    default_limit: int | None = None
    max_limit: int | None = None

    def with_options(self, **options: Any) -> ServiceConfig:
        """Copy with deployment options (cacheable, limits) applied."""
        return replace(self, **options)


class Service:
    """Generic CRUD service over one :class:`DocumentStore` collection."""

    def __init__(self, config: ServiceConfig, store: DocumentStore) -> None:
        self._config = config
        self._store = store
        self._hooks: HookSet = combine_hooks(config.hooks)
        self._find_cache = QueryCache()
        self._get_cache = QueryCache()
        self._creation = CreationQueue()
        self._allocator = SequentialIdAllocator(config.name) if config.incremental else None
        self._app: Application | None = None
        self._log = get_logger(f"kblog.db.{config.name}", service=config.name)

        indexes = list(config.indexes)
        if config.incremental:
            indexes.insert(0, IndexSpec("id", unique=True, sparse=True))
        for spec in indexes:
            store.ensure_index(spec.field, unique=spec.unique, sparse=spec.sparse)

        self._operations: dict[str, Proceed] = {
            "find": self._find,
            "get": self._get,
            "create": self._create,
            "update": self._update,
            "patch": self._patch,
            "remove": self._remove,
        }

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def store(self) -> DocumentStore:
        return self._store

    @property
    def app(self) -> Application | None:
        return self._app

    @property
    def incremental(self) -> bool:
        return self._config.incremental

    @property
    def cacheable(self) -> bool:
        return self._config.cacheable

    @property
    def hooks(self) -> HookSet:
        return self._hooks

    @property
    def find_cache(self) -> QueryCache:
        return self._find_cache

    @property
    def get_cache(self) -> QueryCache:
        return self._get_cache

    @property
    def pending_creates(self) -> int:
        """Creates waiting behind the one in flight."""
        return len(self._creation)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def setup(self, app: Application) -> None:
        """Attach to *app*: plugin hooks and, if incremental, the options service."""
        self._app = app
        self._hooks = combine_hooks(self._config.hooks, *app.plugin_hooks(self.name))
        if self._allocator is not None:
            self._allocator.bind(app.service(OPTIONS_SERVICE_NAME))

    def close(self) -> None:
        self._store.close()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def find(
        self,
        query: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> ResultEnvelope:
        return await self._call("find", params, query=dict(query or {}))

    async def get(self, id: Any, params: Mapping[str, Any] | None = None) -> ResultEnvelope:
        return await self._call("get", params, id=str(id))

    async def create(
        self,
        data: Mapping[str, Any],
        params: Mapping[str, Any] | None = None,
    ) -> ResultEnvelope:
        return await self._call("create", params, data=dict(data))

    async def update(
        self,
        id: Any,
        data: Mapping[str, Any],
        params: Mapping[str, Any] | None = None,
    ) -> ResultEnvelope:
        return await self._call("update", params, id=str(id), data=dict(data))

    async def patch(
        self,
        id: Any,
        data: Mapping[str, Any],
        params: Mapping[str, Any] | None = None,
    ) -> ResultEnvelope:
        return await self._call("patch", params, id=str(id), data=dict(data))

    async def remove(self, id: Any, params: Mapping[str, Any] | None = None) -> ResultEnvelope:
        return await self._call("remove", params, id=str(id))

    # ------------------------------------------------------------------
    # Pipeline host
    # ------------------------------------------------------------------

    async def _call(
        self,
        method: str,
        params: Mapping[str, Any] | None,
        **request: Any,
    ) -> ResultEnvelope:
        ctx = HookContext(service=self, method=method, params=dict(params or {}), **request)
        try:
            await run_hooks(steps_for(self._hooks, "before", method), ctx)
            proceed = self._operations[method]
            override = self._config.overrides.get(method)
            result = await (override(ctx, proceed) if override else proceed(ctx))
            after = steps_for(self._hooks, "after", method)
            if result.ok and after:
                ctx.phase = "after"
                # Reads may hand back a cached envelope; hooks work on a copy.
                shared = method not in MUTATING_METHODS and self.cacheable
                ctx.result = result.model_copy(deep=True) if shared else result
                await run_hooks(after, ctx)
                if ctx.result is not None:
                    result = ctx.result
        except KblogError as exc:
            self._log.warning("request_rejected", method=method, error=error_message(exc))
            return ResultEnvelope.failure(error_message(exc))
        except Exception as exc:
            self._log.exception("request_failed", method=method)
            return ResultEnvelope.failure(error_message(exc))
        finally:
            if method in MUTATING_METHODS:
                self._invalidate()

        if result.ok and method in MUTATING_METHODS:
            await self._dispatch_event(f"post_{method}", result.payload)
        return result

    async def _wrap(self, operation: Awaitable[Any]) -> ResultEnvelope:
        """Await *operation* and wrap its outcome in an envelope."""
        try:
            payload = await operation
        except Exception as exc:
            self._log.error("operation_failed", error=error_message(exc))
            return ResultEnvelope.failure(error_message(exc))
        return ResultEnvelope.success(payload)

    def _invalidate(self) -> None:
        dropped = self._find_cache.invalidate_all() + self._get_cache.invalidate_all()
        if dropped:
            self._log.debug("cache_cleared", entries=dropped)

    def _validate(self, data: dict[str, Any], *, partial: bool = False) -> dict[str, Any]:
        if self._config.validator is None:
            return data
        return self._config.validator(data, partial=partial)

    def _limited(self, query: dict[str, Any]) -> dict[str, Any]:
        limit = query.get("$limit", self._config.default_limit)
        max_limit = self._config.max_limit
        if limit is not None and max_limit is not None:
            limit = min(int(limit), max_limit)
        if limit is not None:
            query["$limit"] = int(limit)
        return query

    async def _dispatch_event(self, hook_name: str, document: Any) -> None:
        """Dispatch a lifecycle event. No-op without an event bus.

        INVARIANT: Plugin failures are warnings, never errors.
        """
        bus = self._app.event_bus if self._app is not None else None
        if bus is None:
            return
        try:
            await asyncio.to_thread(bus.publish, hook_name, self.name, document)
        except Exception:
            self._log.warning("event_dispatch_failed", hook=hook_name, exc_info=True)

    # ------------------------------------------------------------------
    # Core operations (envelope + cache layer)
    # ------------------------------------------------------------------

    async def _find(self, ctx: HookContext) -> ResultEnvelope:
        query = dict(ctx.query or {})
        if self.incremental and not query.get("$sort"):
            query["$sort"] = {"id": -1}
        query = self._limited(query)

        key = QueryCache.key(query, ctx.params)
        if self.cacheable:
            cached = self._find_cache.get(key)
            if cached is not None:
                self._log.info("cache_hit", method="find", query=query, params=ctx.params)
                return cached

        self._log.info("find", query=query, params=ctx.params)
        result = await self._wrap(self._store.find(query))
        if self.cacheable:
            self._find_cache.put(key, result)
        return result

    async def _get(self, ctx: HookContext) -> ResultEnvelope:
        doc_id = str(ctx.id)
        key = QueryCache.key(doc_id, ctx.params)
        if self.cacheable:
            cached = self._get_cache.get(key)
            if cached is not None:
                self._log.info("cache_hit", method="get", id=doc_id, params=ctx.params)
                return cached

        self._log.info("get", id=doc_id, params=ctx.params)
        result = await self._wrap(self._store.find_by_id(doc_id))
        if self.cacheable:
            self._get_cache.put(key, result)
        return result

    async def _create(self, ctx: HookContext) -> ResultEnvelope:
        data = self._validate(dict(ctx.data or {}))
        data["created"] = now_iso()

        if self._creation.busy:
            self._log.info("create_queued", pending=self.pending_creates + 1)
        async with self._creation.slot():
            try:
                return await self._wrap(self._insert(data, ctx.params))
            finally:
                self._invalidate()

    async def _insert(self, data: dict[str, Any], params: dict[str, Any]) -> dict[str, Any]:
        if self._allocator is not None:
            data["id"] = await self._allocator.allocate()
        self._log.info("create", data=data, params=params)
        return await self._store.insert(data)

    async def _update(self, ctx: HookContext) -> ResultEnvelope:
        doc_id = str(ctx.id)
        data = self._validate({**(ctx.data or {}), "id": doc_id})
        data["updated"] = now_iso()
        self._log.info("update", id=doc_id, data=data, params=ctx.params)
        return await self._wrap(self._store.update(doc_id, data))

    async def _patch(self, ctx: HookContext) -> ResultEnvelope:
        doc_id = str(ctx.id)
        data = self._validate(dict(ctx.data or {}), partial=True)
        data["updated"] = now_iso()
        self._log.info("patch", id=doc_id, data=data, params=ctx.params)
        return await self._wrap(self._store.patch(doc_id, data))

    async def _remove(self, ctx: HookContext) -> ResultEnvelope:
        doc_id = str(ctx.id)
        self._log.info("remove", id=doc_id, params=ctx.params)
        return await self._wrap(self._store.remove(doc_id))
