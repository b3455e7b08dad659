"""Log routing for kblog: structlog events rendered by stdlib handlers.

structlog loggers and plain ``logging.getLogger`` loggers end up on the
same stderr handler, so ``--verbose`` and ``--log-json`` apply to both.
Before :func:`configure_logging` runs, service loggers still go through
stdlib ``logging`` and obey whatever level the ``kblog`` logger has.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Loggers that stay at WARNING even under --verbose.
QUIET_LOGGERS = ("sqlalchemy", "asyncio")

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def _bind_structlog_to_stdlib() -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_PRE_CHAIN,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _stderr_handler(renderer: structlog.types.Processor) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    return handler


def get_logger(name: str, **initial_values: Any) -> Any:
    """structlog logger for the stdlib logger *name*, with *initial_values* bound."""
    if not structlog.is_configured():
        _bind_structlog_to_stdlib()
    return structlog.get_logger(name, **initial_values)


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install the single stderr handler for this process.

    ``verbose`` lowers the ``kblog`` logger to DEBUG; everything else stays
    at WARNING. ``log_json`` emits one JSON object per line instead of the
    console renderer's aligned columns.
    """
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    _bind_structlog_to_stdlib()

    root = logging.getLogger()
    root.handlers[:] = [_stderr_handler(renderer)]
    root.setLevel(logging.WARNING)

    logging.getLogger("kblog").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
