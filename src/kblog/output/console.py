"""Rich consoles for human-readable output.

Renderers draw into an in-memory console and hand back the text, so the
commands decide where it goes. Rich drops colour by itself when the
buffer is not a terminal.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DEFAULT_WIDTH = 120

KBLOG_THEME = Theme(
    {
        "kblog.ok": "bold green",
        "kblog.error": "bold red",
        "kblog.key": "dim",
        "kblog.id": "bold blue",
        "kblog.title": "bold",
        "kblog.date": "dim",
        "kblog.status.publish": "green",
        "kblog.status.draft": "yellow",
        "kblog.status.private": "magenta",
        "kblog.status.trash": "red",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "publish": "kblog.status.publish",
    "draft": "kblog.status.draft",
    "private": "kblog.status.private",
    "trash": "kblog.status.trash",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """A themed console writing to a fresh buffer; *width* pins wrapping in tests."""
    return Console(
        file=StringIO(),
        theme=KBLOG_THEME,
        width=width or DEFAULT_WIDTH,
        no_color=no_color,
        highlight=False,
    )


def get_output(console: Console) -> str:
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError("console was not created by create_console()")
    return buffer.getvalue()


def style_for_field(key: str, value: object) -> str:
    """Return the Rich style name for a document field."""
    if key == "id" or key.endswith("_id"):
        return "kblog.id"
    if key in ("title", "name"):
        return "kblog.title"
    if key in ("created", "updated"):
        return "kblog.date"
    if key == "status" and isinstance(value, str):
        return _STATUS_STYLES.get(value, "")
    return ""
