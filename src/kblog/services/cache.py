"""QueryCache: per-service memo of successful read envelopes.

Keys are canonical JSON of the call arguments, with ``$sort`` field order
kept. Invalidation is coarse: any mutation on the owning service clears
every entry. Entries are returned by identity, so two hits for the same
key yield the same envelope object. Hits are shared: callers treat the
payload as read-only, and the service hands after-hooks a deep copy of a
cached read.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from kblog.services._helpers import canonical_json

if TYPE_CHECKING:
    from kblog.services.result import ResultEnvelope


class QueryCache:
    """``get`` / ``put`` / ``invalidate_all`` over OK envelopes only."""

    def __init__(self) -> None:
        self._entries: dict[str, ResultEnvelope] = {}

    @staticmethod
    def key(*parts: Any) -> str:
        """Canonical key for a call's arguments."""
        return canonical_json(list(parts))

    def get(self, key: str) -> ResultEnvelope | None:
        return self._entries.get(key)

    def put(self, key: str, envelope: ResultEnvelope) -> bool:
        """Store *envelope* under *key*. Error envelopes are never stored."""
        if not envelope.ok:
            return False
        self._entries[key] = envelope
        return True

    def invalidate_all(self) -> int:
        """Drop every entry. Returns how many were dropped."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
