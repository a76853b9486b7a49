"""Context management for structured logging.

Provides automatic context injection into log records using contextvars,
so fields such as the operation name or subscription topic appear on every
record emitted while an operation runs, without explicit passing.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

# Each async task gets its own copy automatically
_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        ```python
        set_log_context(operation_name="GetPerson", operation_kind="query")
        logger.info("Executing operation")  # Includes both fields
        ```
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Get a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Clear all logging context for the current task."""
    _log_context.set({})


def remove_from_log_context(*keys: str) -> None:
    """Remove specific keys from the logging context."""
    current = _log_context.get().copy()
    for key in keys:
        current.pop(key, None)
    _log_context.set(current)


class ContextInjectingFilter(logging.Filter):
    """Logging filter that injects the contextvar log context into each LogRecord.

    Attach it to a handler on the root logger so records from every child
    logger pass through it:

        handler.addFilter(ContextInjectingFilter())
    """

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject context into log record. Always allows the record."""
        context = _log_context.get()

        for key, value in context.items():
            # Don't overwrite existing attributes
            if not hasattr(record, key):
                setattr(record, key, value)

        return True
