"""structlog setup for crossfade.

One processor chain feeds two renderers: coloured console output while
developing and JSON lines when ``APP_ENV=production`` (or when the caller
forces it).  The stdlib root logger is routed through the same chain so
httpx request logs line up with crossfade's own events.

Batch operations (track resolution, concert ranking) wrap their work in
:func:`batch_context`, which binds an ``operation`` name and a short
``batch_id`` to every line logged by the batch and all of its units.
Provider credentials never reach the output: :func:`_redact_credentials`
masks them before rendering.

Importing crossfade configures nothing: a host application keeps its own
logging setup unless it calls :func:`configure_logging` (``build_core``
does so).
"""

import logging
import os
import sys
import uuid
from typing import Any

import structlog

_REDACTED = "***"
_CREDENTIAL_KEYS = frozenset({
    "access_token",
    "apikey",
    "api_key",
    "developer_token",
    "user_token",
    "authorization",
})
# httpx logs every request at INFO, which drowns batch output.
_CHATTY_LIBRARIES = ("httpx", "httpcore")


def _redact_credentials(
    _logger: Any, _method: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    for key in event_dict:
        if key.lower() in _CREDENTIAL_KEYS and event_dict[key]:
            event_dict[key] = _REDACTED
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and the stdlib root logger.

    Args:
        log_level: Minimum level for crossfade events (DEBUG, INFO, WARNING, ...).
        json_output: Render JSON regardless of ``APP_ENV``.

    Returns:
        A logger bound to the new configuration.
    """
    level = log_level.upper()
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"

    # contextvars first so batch bindings are visible to every later processor.
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        _redact_credentials,
    ]
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(max(logging.WARNING, root_logger.level))

    return structlog.get_logger()


def new_batch_id() -> str:
    """Short random id that correlates the log lines of one batch."""
    return uuid.uuid4().hex[:12]


def batch_context(operation: str, batch_id: str | None = None) -> Any:
    """Bind ``operation`` and ``batch_id`` to every log line emitted inside the block.

    Units spawned inside the block inherit the bindings, since asyncio
    tasks copy the current contextvars when they are created.
    """
    return structlog.contextvars.bound_contextvars(
        operation=operation,
        batch_id=batch_id or new_batch_id(),
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Named logger.  Configuration is left to :func:`configure_logging`."""
    return structlog.get_logger(logger_name=name)
