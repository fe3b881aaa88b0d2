"""structlog setup for the snapvalidate CLI.

The library never configures logging; modules only call
``logging.getLogger(__name__)``. The CLI routes those stdlib records through
one structlog ProcessorFormatter on stderr:

- console (default): ``ConsoleRenderer``, colored on a TTY
- ``--log-json``: one JSON object per line; exceptions captured by rule
  failures are rendered as structured tracebacks
"""

from __future__ import annotations

import logging
import sys

import structlog

PACKAGE_LOGGER = "snapvalidate"

# Loggers that stay at WARNING even under --verbose.
QUIET_LOGGERS = ("asyncio",)


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _render_chain(log_json: bool) -> list[structlog.types.Processor]:
    if log_json:
        return [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install a single stderr handler on the root logger.

    Safe to call repeatedly: existing root handlers are replaced.

    Args:
        verbose: Show DEBUG records from ``snapvalidate.*`` (rule exceptions,
            setup failures, timeouts). Otherwise WARNING and above.
        log_json: Emit JSON lines instead of console text.
    """
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *_render_chain(log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
