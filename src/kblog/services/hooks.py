"""Hook pipeline: ordered before/after steps around service operations.

A *hook set* maps ``"<phase>.<method>"`` keys (``before.create``,
``after.find``, ``before.all`` ...) to ordered lists of steps. Fragments
written independently are merged with :func:`combine_hooks`; steps from
earlier fragments run first.

A step receives the mutable :class:`HookContext` and either returns
(the pipeline continues) or raises, which aborts the remaining steps and
the operation itself. Steps may be plain functions or coroutines.

Usage::

    hooks = combine_hooks(
        {"before.create": [create_slug()]},
        restrict_to_admin(),
        associate_user(),
    )
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from kblog.services.base import Service
    from kblog.services.registry import Application
    from kblog.services.result import ResultEnvelope

Phase = Literal["before", "after"]
METHODS = ("find", "get", "create", "update", "patch", "remove")
ALL = "all"


@dataclass
class HookContext:
    """Mutable request state shared by the steps of one service call.

    Attributes:
        service: The service being called.
        method: Operation name (``"create"``, ``"find"`` ...).
        phase: ``"before"`` or ``"after"``.
        params: Caller parameters (``user``, ``provider`` ...).
        id: Target document id (get/update/patch/remove).
        data: Request body (create/update/patch).
        query: Filter/sort/paging mapping (find).
        result: The envelope produced by the operation (after phase).
    """

    service: Service
    method: str
    phase: Phase = "before"
    params: dict[str, Any] = field(default_factory=dict)
    id: str | None = None
    data: dict[str, Any] | None = None
    query: dict[str, Any] | None = None
    result: ResultEnvelope | None = None

    @property
    def app(self) -> Application | None:
        return self.service.app

    @property
    def user(self) -> dict[str, Any] | None:
        """The authenticated caller, if any."""
        user = self.params.get("user")
        return user if isinstance(user, dict) else None

    @property
    def is_internal(self) -> bool:
        """Calls made by server code carry no ``provider``."""
        return not self.params.get("provider")


HookStep = Callable[[HookContext], Awaitable[None] | None]
HookSet = dict[str, list[HookStep]]
HookFragment = Mapping[str, HookStep | Sequence[HookStep]]


def _validate_key(key: str) -> None:
    phase, _, method = key.partition(".")
    if phase not in ("before", "after") or method not in (*METHODS, ALL):
        msg = f"Invalid hook key: {key!r} (expected '<before|after>.<method|all>')"
        raise ValueError(msg)


def combine_hooks(*fragments: HookFragment | None) -> HookSet:
    """Merge hook fragments, concatenating steps per key in argument order."""
    combined: HookSet = {}
    for fragment in fragments:
        if not fragment:
            continue
        for key, steps in fragment.items():
            _validate_key(key)
            bucket = combined.setdefault(key, [])
            if callable(steps):
                bucket.append(steps)
            else:
                bucket.extend(steps)
    return combined


def steps_for(hooks: Mapping[str, Sequence[HookStep]], phase: Phase, method: str) -> list[HookStep]:
    """Steps to run for *method* in *phase*: ``all`` steps, then method steps."""
    return [*hooks.get(f"{phase}.{ALL}", ()), *hooks.get(f"{phase}.{method}", ())]


async def run_hooks(steps: Sequence[HookStep], ctx: HookContext) -> None:
    """Run *steps* in order. An exception from any step propagates."""
    for step in steps:
        outcome = step(ctx)
        if inspect.isawaitable(outcome):
            await outcome
