"""Pluggy hook specifications for kblog lifecycle events and service hooks.

Four lifecycle events fire after successful mutations. One setup-time hook
lets plugins contribute steps to a service's hook pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    from kblog.services.hooks import HookFragment

hookspec = pluggy.HookspecMarker("kblog")


class KblogHookSpec:
    """Hook specifications for the kblog plugin system."""

    @hookspec
    def post_create(self, service_name: str, document: dict[str, Any]) -> None:
        """Called after a document is created."""

    @hookspec
    def post_update(self, service_name: str, document: dict[str, Any]) -> None:
        """Called after a document is replaced."""

    @hookspec
    def post_patch(self, service_name: str, document: dict[str, Any]) -> None:
        """Called after a document is patched."""

    @hookspec
    def post_remove(self, service_name: str, document: dict[str, Any]) -> None:
        """Called after a document is removed."""

    @hookspec
    def register_service_hooks(self, service_name: str) -> HookFragment | None:
        """Return a hook fragment to append to *service_name*'s pipeline."""
