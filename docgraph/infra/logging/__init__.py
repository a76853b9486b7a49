"""Logging infrastructure.

Structured logging on top of the standard library:
- JSONL format with OpenTelemetry trace correlation
- Automatic context injection (operation name, topic, ...)
- QueueHandler + QueueListener for non-blocking I/O

Basic usage:
    from docgraph.infra.logging import set_log_context
    import logging

    logger = logging.getLogger(__name__)

    set_log_context(operation_name="GetPerson")
    logger.info("Executing operation")  # Includes operation_name
"""

from docgraph.infra.logging.config import configure_logging, setup_logging, shutdown
from docgraph.infra.logging.context import (
    ContextInjectingFilter,
    clear_log_context,
    get_log_context,
    remove_from_log_context,
    set_log_context,
)
from docgraph.infra.logging.formatters import JSONFormatter

__all__ = [
    "ContextInjectingFilter",
    "JSONFormatter",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "remove_from_log_context",
    "set_log_context",
    "setup_logging",
    "shutdown",
]
