"""Structured logging for betledger, rendered through structlog.

Events carry counts and aggregate figures (accounts, bets placed, net P/L),
never ledger contents. Any event key named in ``_REDACTED_FIELDS`` is
masked before rendering: bet and transaction ``description`` fields hold
free-text notes and ticket ids, and snapshots exported from the backend may
still carry its auth fields.

Library modules call ``get_logger`` at import time, which installs an
env-driven default (``LOG_LEVEL`` / ``LOG_FORMAT``). The CLI then calls
``configure_logging(..., force=True)`` with the loaded config, replacing
the handlers this module installed and leaving any others alone.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import structlog


_CONFIGURED = False
_HANDLERS: list[logging.Handler] = []

_REDACTED_FIELDS = frozenset({
    "password", "token", "auth_token", "api_key", "secret", "description",
})


def _redact_ledger_fields(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    for key in list(event_dict.keys()):
        if key.lower() in _REDACTED_FIELDS:
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_logging(
    level: str = "INFO",
    fmt: str = "json",
    log_file: str | None = None,
    force: bool = False,
) -> None:
    """Configure structured logging for the application.

    Only the first call takes effect unless ``force`` is set; library code
    calls ``get_logger`` at import, before the CLI has read its config.
    """
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    log_level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(log_level)
    for old in _HANDLERS:
        root.removeHandler(old)
        old.close()
    _HANDLERS.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(log_level)
    root.addHandler(console)
    _HANDLERS.append(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_path))
        fh.setLevel(log_level)
        root.addHandler(fh)
        _HANDLERS.append(fh)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _redact_ledger_fields,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if fmt == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )
    for handler in _HANDLERS:
        handler.setFormatter(formatter)

    _CONFIGURED = True


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog bound logger."""
    if not _CONFIGURED:
        configure_logging(
            level=os.environ.get("LOG_LEVEL", "INFO"),
            fmt=os.environ.get("LOG_FORMAT", "console"),
        )
    return structlog.get_logger(name)
