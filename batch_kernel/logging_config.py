"""
Structured JSON logging for sliced batch jobs.

Every record under the ``sliced_batch`` logger namespace is written as one
JSON object per line:

    {"ts": ..., "level": "INFO", "logger": "sliced_batch.batch.upload",
     "message": "upload_dispatched", "job_id": ..., "record_count": 250}

Job-scoped fields (``correlation_id``, ``job_id``, ``job_class_name``,
``worker_name``) live in ``LogContext`` and are attached to every record
emitted while they are set.  Fields passed through ``extra=`` follow; a
context field takes precedence over an ``extra`` of the same name.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping
from uuid import UUID

_CONTEXT_FIELDS = ("correlation_id", "job_id", "job_class_name", "worker_name")

_EMPTY: Mapping[str, str] = MappingProxyType({})

_context: ContextVar[Mapping[str, str]] = ContextVar("sliced_batch_log_context", default=_EMPTY)


def _merged(updates: Mapping[str, str | None]) -> Mapping[str, str]:
    unknown = set(updates) - set(_CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown log context field(s): {sorted(unknown)}")
    fields = dict(_context.get())
    fields.update({k: v for k, v in updates.items() if v is not None})
    return MappingProxyType(fields)


class LogContext:
    """Job-scoped log fields, isolated per thread and per asyncio task."""

    @staticmethod
    def set(
        *,
        correlation_id: str | None = None,
        job_id: str | None = None,
        job_class_name: str | None = None,
        worker_name: str | None = None,
    ) -> None:
        """Set context fields.  None leaves a field unchanged."""
        _context.set(_merged({
            "correlation_id": correlation_id,
            "job_id": job_id,
            "job_class_name": job_class_name,
            "worker_name": worker_name,
        }))

    @staticmethod
    def get_all() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @staticmethod
    def bind(**fields: str | None) -> "_BoundContext":
        """Set fields for the duration of a ``with`` block."""
        return _BoundContext(fields)


class _BoundContext:
    def __init__(self, fields: Mapping[str, str | None]):
        self._fields = fields
        self._token = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set(_merged(self._fields))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        _context.reset(self._token)
        self._token = None


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else came in through extra=.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(obj: Any) -> Any:
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (UUID, Decimal)):
        return str(obj)
    return repr(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # Typed errors carry their data as public attributes
    for name, value in vars(exc).items():
        if not name.startswith("_"):
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }
        for name, value in vars(record).items():
            if name not in _RECORD_ATTRS:
                payload.setdefault(name, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_json_default)


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_NAMESPACE = "sliced_batch"

_setup_lock = threading.Lock()
_handler: logging.Handler | None = None


def get_logger(name: str) -> logging.Logger:
    """Return ``sliced_batch.<name>``."""
    return logging.getLogger(f"{_NAMESPACE}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Install the JSON handler on the ``sliced_batch`` logger.

    Only the first call has an effect until ``reset_logging()``.
    """
    global _handler
    with _setup_lock:
        if _handler is not None:
            return
        _handler = handler or logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())

        root = logging.getLogger(_NAMESPACE)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(_handler)


def reset_logging() -> None:
    """Undo ``configure_logging()``.  Test helper."""
    global _handler
    with _setup_lock:
        _handler = None
        root = logging.getLogger(_NAMESPACE)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
        root.propagate = True
