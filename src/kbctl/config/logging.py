"""structlog over stdlib logging, rendered on stderr.

Library code logs with ``structlog.get_logger(__name__)``; everything lands
on a single root handler whose formatter renders either a console line or,
with ``--log-json``, one JSON object per event. stdout is reserved for
command results.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import structlog

# Third-party loggers held at WARNING regardless of --verbose.
QUIET_LOGGERS = ("sqlalchemy", "sqlalchemy.engine", "asyncio")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _formatter(log_json: bool) -> logging.Formatter:
    renderer: structlog.types.Processor
    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_pre_chain(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route kbctl and library logging to stderr.

    ``kbctl.*`` loggers emit DEBUG under *verbose* and WARNING otherwise.
    Calling this again replaces the previous handler.
    """
    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_formatter(log_json))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(logging.WARNING)

    logging.getLogger("kbctl").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_kb_context(root: Path) -> None:
    """Attach the knowledge-base root to every event logged from here on."""
    structlog.contextvars.bind_contextvars(kb_root=str(root))


def clear_kb_context() -> None:
    structlog.contextvars.unbind_contextvars("kb_root")
