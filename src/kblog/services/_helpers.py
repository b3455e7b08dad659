"""Shared service-layer helper functions."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

ORDERED_KEYS = frozenset({"$sort"})


def now_iso() -> str:
    """Current UTC time as standard ISO 8601 (document timestamps)."""
    return datetime.now(UTC).isoformat()


def _keep_order(value: Any) -> Any:
    """Turn mappings under ``ORDERED_KEYS`` into ``[key, value]`` pair lists."""
    if isinstance(value, Mapping):
        return {
            k: [[f, _keep_order(v)] for f, v in sub.items()]
            if k in ORDERED_KEYS and isinstance(sub, Mapping)
            else _keep_order(sub)
            for k, sub in value.items()
        }
    if isinstance(value, list | tuple):
        return [_keep_order(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    """Deterministic JSON text for *value* (sorted keys, compact).

    Key order is ignored except inside ``$sort``, where earlier fields take
    precedence. Non-JSON values fall back to ``str()`` so any params mapping
    can be turned into a cache key.
    """
    return json.dumps(_keep_order(value), sort_keys=True, separators=(",", ":"), default=str)


def error_message(exc: BaseException) -> str:
    """Human-readable message for *exc*, never empty."""
    return str(exc) or exc.__class__.__name__
