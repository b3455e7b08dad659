"""Rich renderers for ResultEnvelope.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

A list payload (``find``) renders as a table, a single document as
indented key-value fields, and an Error envelope as one ``ERROR`` line.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from kblog.output.console import create_console, get_output, style_for_field

if TYPE_CHECKING:
    from rich.console import Console

    from kblog.services.result import ResultEnvelope

# Preferred table columns, in display order, when documents carry them.
_TABLE_COLUMNS = ("id", "title", "name", "email", "slug", "status", "role", "value", "content")
_MAX_COLUMNS = 5
_MAX_CELL = 60


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ResultEnvelope, *, op: str, verbose: bool = False) -> str:
    """Render an envelope to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if not result.ok:
        _render_error(result, console, op=op)
    elif isinstance(result.payload, list):
        _render_table(result.payload, console, op=op, verbose=verbose)
    elif isinstance(result.payload, dict):
        _render_document(result.payload, console, op=op)
    else:
        _status_line(console, op)
        console.print(Text(f"  {result.payload}"))

    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _cell(value: Any, *, limit: int | None = _MAX_CELL) -> str:
    if value is None:
        return ""
    text = value if isinstance(value, str) else json.dumps(value, separators=(",", ":"))
    text = " ".join(text.split())
    if limit is not None and len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def _status_line(console: Console, op: str) -> None:
    console.print(Text.assemble(("OK", "kblog.ok"), f"  {op}"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="kblog.key")
    v = Text(_cell(value, limit=None), style=style_for_field(key, value))
    console.print(Text.assemble(k, v))


def _columns_for(documents: list[dict[str, Any]], *, verbose: bool) -> list[str]:
    present: set[str] = set()
    for doc in documents:
        present.update(doc)
    columns = [c for c in _TABLE_COLUMNS if c in present][:_MAX_COLUMNS]
    if verbose:
        columns += [c for c in ("created", "updated") if c in present]
    return columns or sorted(present)[:_MAX_COLUMNS]


# ── Renderers ─────────────────────────────────────────────────────────


def _render_error(result: ResultEnvelope, console: Console, *, op: str) -> None:
    message = result.error_message or "Unknown error"
    console.print(Text.assemble(("ERROR", "kblog.error"), f"  {op}: ", message))


def _render_document(document: dict[str, Any], console: Console, *, op: str) -> None:
    _status_line(console, op)
    for key, value in document.items():
        _field(console, key, value)


def _render_table(
    documents: list[Any],
    console: Console,
    *,
    op: str,
    verbose: bool = False,
) -> None:
    _status_line(console, op)
    rows = [d for d in documents if isinstance(d, dict)]
    if not rows:
        console.print("  (no documents)")
        return

    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    columns = _columns_for(rows, verbose=verbose)
    for column in columns:
        table.add_column(column.replace("_", " ").title(), style=style_for_field(column, None))
    for doc in rows:
        table.add_row(*(_cell(doc.get(column)) for column in columns))

    console.print(table)
    noun = "document" if len(rows) == 1 else "documents"
    console.print(f"\n{len(rows)} {noun}")
