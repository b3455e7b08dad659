"""Query matching for the document store.

Queries are plain mappings in the MongoDB operator style::

    {"status": "publish", "tags": "python", "id": {"$gt": "10"},
     "$sort": {"id": -1}, "$limit": 10, "$skip": 0, "$select": ["title"]}

Field entries filter documents; ``$``-prefixed top-level keys control
ordering, paging and projection. Matching happens in Python after the
collection is loaded, so every operator works on any field.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from typing import Any

CONTROL_KEYS = frozenset({"$sort", "$limit", "$skip", "$select"})


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        if actual is None:
            return False
        try:
            return op(_sort_key(actual), _sort_key(expected))
        except TypeError:
            return False

    return check


def _equals(actual: Any, expected: Any) -> bool:
    # Array fields match when any element equals the expected scalar.
    if isinstance(actual, list) and not isinstance(expected, list):
        return expected in actual
    return bool(actual == expected)


def _is_in(actual: Any, expected: Any) -> bool:
    if isinstance(actual, list):
        return any(item in expected for item in actual)
    return actual in expected


OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$ne": lambda actual, expected: not _equals(actual, expected),
    "$in": _is_in,
    "$nin": lambda actual, expected: not _is_in(actual, expected),
    "$lt": _compare(lambda a, b: a < b),
    "$lte": _compare(lambda a, b: a <= b),
    "$gt": _compare(lambda a, b: a > b),
    "$gte": _compare(lambda a, b: a >= b),
    "$exists": lambda actual, expected: (actual is not None) is bool(expected),
}


class QueryError(ValueError):
    """Raised for malformed queries (unknown operator, bad sort direction)."""


def split_query(query: Mapping[str, Any] | None) -> tuple[dict[str, Any], dict[str, Any]]:
    """Split *query* into ``(filters, controls)``."""
    filters: dict[str, Any] = {}
    controls: dict[str, Any] = {}
    for key, value in (query or {}).items():
        if key in CONTROL_KEYS:
            controls[key] = value
        elif key.startswith("$"):
            msg = f"Unsupported query key: {key!r}"
            raise QueryError(msg)
        else:
            filters[key] = value
    return filters, controls


def _matches_field(actual: Any, condition: Any) -> bool:
    if isinstance(condition, Mapping) and condition and all(k.startswith("$") for k in condition):
        for op_name, expected in condition.items():
            op = OPERATORS.get(op_name)
            if op is None:
                msg = f"Unsupported query operator: {op_name!r}"
                raise QueryError(msg)
            if not op(actual, expected):
                return False
        return True
    return _equals(actual, condition)


def matches(document: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    """Return True when *document* satisfies every entry of *filters*."""
    return all(_matches_field(document.get(field), cond) for field, cond in filters.items())


def _sort_key(value: Any) -> tuple[int, Any]:
    """Total ordering across JSON types; ASCII digit strings sort as integers."""
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, int | float):
        return (2, value)
    if isinstance(value, str):
        if value.isascii() and value.isdigit():
            return (2, int(value))
        return (3, value)
    return (4, json.dumps(value, sort_keys=True))


def sort_documents(
    documents: list[dict[str, Any]],
    spec: Mapping[str, Any],
) -> list[dict[str, Any]]:
    """Sort by a ``{field: 1 | -1}`` spec; earlier fields take precedence."""
    ordered = list(documents)
    for field, direction in reversed(list(spec.items())):
        try:
            descending = int(direction) < 0
        except (TypeError, ValueError) as exc:
            msg = f"Invalid sort direction for {field!r}: {direction!r}"
            raise QueryError(msg) from exc
        ordered.sort(key=lambda doc, f=field: _sort_key(doc.get(f)), reverse=descending)
    return ordered


def _project(document: dict[str, Any], fields: list[str]) -> dict[str, Any]:
    keep = {"id", *fields}
    return {k: v for k, v in document.items() if k in keep}


def apply_query(
    documents: list[dict[str, Any]],
    query: Mapping[str, Any] | None,
) -> list[dict[str, Any]]:
    """Filter, sort, page and project *documents* according to *query*."""
    filters, controls = split_query(query)
    selected = [doc for doc in documents if matches(doc, filters)]

    sort_spec = controls.get("$sort")
    if sort_spec:
        selected = sort_documents(selected, sort_spec)

    skip = int(controls.get("$skip") or 0)
    if skip:
        selected = selected[skip:]

    limit = controls.get("$limit")
    if limit is not None:
        selected = selected[: max(int(limit), 0)]

    fields = controls.get("$select")
    if fields:
        selected = [_project(doc, list(fields)) for doc in selected]

    return selected
