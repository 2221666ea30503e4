"""Structured logging for estimation runs.

Every record of a run carries the run identifier minted by the command-line
entry point. Strategies log through :class:`RunLoggerAdapter` so their
records also name the strategy that produced them.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
from collections.abc import Iterable, MutableMapping
from datetime import datetime, timezone
from queue import Full, Queue
from typing import Any, TextIO, override
from uuid import uuid4

LOGGER = logging.getLogger(__name__)

_STRUCTURED_RESERVED_KEYS: tuple[str, ...] = (
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
)


def new_run_id(model: str) -> str:
    """Return a fresh run identifier prefixed with the strategy name."""

    return f"{model}-{uuid4().hex[:12]}"


class RunLoggerAdapter(logging.LoggerAdapter[logging.Logger]):
    """Stamp the bound run context on every record.

    Unlike :class:`logging.LoggerAdapter`, keys passed through ``extra`` at the
    call site are merged with the bound context instead of replacing it.
    """

    def bind(self, **context: object) -> None:
        """Add ``context`` to every subsequent record."""

        self.extra = {**(self.extra or {}), **context}

    @override
    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


class JsonFormatter(logging.Formatter):
    """Render log records as JSON with contextual metadata."""

    def __init__(self, *, default_run_id: str | None = None) -> None:
        super().__init__()
        self._default_run_id = default_run_id

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited
        run_id = getattr(record, "run_id", None) or self._default_run_id

        exception_text: str | None = None
        if record.exc_info:
            exception_text = self.formatException(record.exc_info)
        elif record.exc_text:
            exception_text = record.exc_text

        context: dict[str, object] = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _STRUCTURED_RESERVED_KEYS and key != "run_id"
        }

        payload: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "run_id": run_id,
            "context": context,
        }
        if exception_text:
            payload["exception"] = exception_text

        return json.dumps(payload, default=str)


class BoundedQueueHandler(logging.handlers.QueueHandler):
    """Queue handler that drops records when the queue is full."""

    @override
    def enqueue(self, record: logging.LogRecord) -> None:
        try:
            self.queue.put_nowait(record)
        except Full:
            self.handleError(record)

    @override
    def handleError(self, record: logging.LogRecord) -> None:
        return


def configure_structured_logging(
    logger: logging.Logger,
    *,
    run_id: str | None = None,
    level: int = logging.INFO,
    stream: TextIO | None = None,
) -> logging.handlers.QueueListener:
    """Configure the provided logger with structured JSON output.

    Args:
        logger: Target logger to configure.
        run_id: Identifier stamped on records that do not carry their own
            ``run_id``. A fresh one is minted when omitted.
        level: Logging verbosity level.
        stream: Destination of the JSON lines. Defaults to ``sys.stderr``.

    Returns:
        The queue listener responsible for draining log records. Stop it with
        :func:`shutdown_listeners` once the run is over.
    """

    logger.setLevel(level)

    record_queue: Queue[logging.LogRecord] = Queue(maxsize=1024)
    logger.addHandler(BoundedQueueHandler(record_queue))

    stream_handler = logging.StreamHandler(stream)
    formatter = JsonFormatter(default_run_id=run_id or new_run_id("carbon-curves"))
    stream_handler.setFormatter(formatter)

    listener = logging.handlers.QueueListener(record_queue, stream_handler)
    listener.start()
    return listener


def shutdown_listeners(listeners: Iterable[logging.handlers.QueueListener]) -> None:
    """Stop all queue listeners while logging shutdown errors."""

    for listener in listeners:
        try:
            listener.stop()
        except Exception as exc:  # pragma: no cover - defensive logging cleanup
            LOGGER.warning("Failed to stop logging listener", exc_info=exc)
