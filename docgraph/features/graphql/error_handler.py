"""GraphQL error handling and production error masking.

This module turns execution errors into client payloads: engine exceptions
contribute their ``code`` to ``extensions``, internal failures are masked in
production, and every error is logged server-side with full details.

Usage:
    result = await execute(schema, source, context=StoreContext(store=store))
    payload = format_result(result)
"""

from __future__ import annotations

import logging
import traceback
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from docgraph.core.exceptions import DocGraphError
from docgraph.core.settings import get_settings

if TYPE_CHECKING:
    from graphql import ExecutionResult, GraphQLError, GraphQLFormattedError

    from docgraph.features.graphql.context import StoreContext

logger = logging.getLogger(__name__)

__all__ = [
    "ErrorCategory",
    "error_code",
    "format_result",
    "is_user_facing_error",
    "mask_internal_error",
    "process_graphql_errors",
]


# ============================================================================
# Error Categories
# ============================================================================


class ErrorCategory:
    """Error categories for classification."""

    VALIDATION = "VALIDATION_ERROR"
    GRAPHQL_VALIDATION = "GRAPHQL_VALIDATION_FAILED"
    DECLARATION = "DECLARATION_ERROR"
    STORE = "STORE_ERROR"
    INTERNAL = "INTERNAL_ERROR"


USER_FACING_CODES = frozenset({ErrorCategory.VALIDATION, ErrorCategory.GRAPHQL_VALIDATION})


# ============================================================================
# Main Error Processing
# ============================================================================


def process_graphql_errors(
    errors: list[GraphQLError],
    *,
    mask_internal: bool | None = None,
    context: StoreContext | None = None,
) -> list[GraphQLFormattedError]:
    """Process GraphQL errors before returning to client.

    This function:
    1. Logs all errors with full details server-side
    2. Masks internal errors when ``mask_internal`` (production by default)
    3. Preserves user-facing errors (argument and document validation)
    4. Adds structured error codes to extensions

    Args:
        errors: List of GraphQL errors from execution
        mask_internal: Hide internal details; defaults to the environment check
        context: Operation context, used for log correlation

    Returns:
        List of formatted errors safe to return to client
    """
    if mask_internal is None:
        mask_internal = get_settings().environment == "production"

    processed_errors = []
    for error in errors:
        log_error(error, context)

        if is_user_facing_error(error) or not mask_internal:
            formatted = error.formatted
            extensions = {**_engine_extensions(error), **formatted.get("extensions", {})}
            extensions.setdefault("code", error_code(error))
            # Development responses carry the underlying exception
            if not mask_internal and _is_unexpected(error):
                extensions["debug"] = {
                    "exception_type": type(error.original_error).__name__,
                    "exception_message": str(error.original_error),
                }
            formatted["extensions"] = extensions
            processed_errors.append(formatted)
        else:
            processed_errors.append(mask_internal_error(error))

    return processed_errors


def format_result(
    result: ExecutionResult,
    *,
    mask_internal: bool | None = None,
    context: StoreContext | None = None,
) -> dict[str, Any]:
    """Serialize an execution result into a response payload.

    ``errors`` is only present when there is at least one error.
    """
    payload: dict[str, Any] = {"data": result.data}
    if result.errors:
        payload["errors"] = process_graphql_errors(
            result.errors,
            mask_internal=mask_internal,
            context=context,
        )
    return payload


# ============================================================================
# Error Classification
# ============================================================================


def error_code(error: GraphQLError) -> str:
    """Machine-readable code of an error.

    Engine exceptions carry their own code; errors raised before execution
    (syntax, unknown fields, bad variables) have no path and count as
    document validation failures.
    """
    extensions = error.extensions or {}
    if "code" in extensions:
        return extensions["code"]
    if isinstance(error.original_error, DocGraphError):
        return error.original_error.code
    if error.original_error is None and not error.path:
        return ErrorCategory.GRAPHQL_VALIDATION
    return ErrorCategory.INTERNAL


def is_user_facing_error(error: GraphQLError) -> bool:
    """Determine if error should be shown to user as-is.

    Args:
        error: GraphQL error to check

    Returns:
        True if error is safe to show to user, False if it should be masked
    """
    return error_code(error) in USER_FACING_CODES


def _is_unexpected(error: GraphQLError) -> bool:
    return error.original_error is not None and not is_user_facing_error(error)


def _engine_extensions(error: GraphQLError) -> dict[str, Any]:
    if isinstance(error.original_error, DocGraphError):
        return error.original_error.to_extensions()
    return {}


# ============================================================================
# Error Masking
# ============================================================================


def mask_internal_error(error: GraphQLError) -> GraphQLFormattedError:
    """Mask internal error details for production.

    Replaces internal error details with a generic message while preserving
    the error location and path for debugging.
    """
    masked: dict[str, Any] = {
        "message": "An internal error occurred. Please try again later.",
        "extensions": {
            "code": ErrorCategory.INTERNAL,
            "timestamp": _get_timestamp(),
        },
    }
    if error.locations:
        masked["locations"] = [location.formatted for location in error.locations]
    if error.path:
        masked["path"] = error.path
    return masked


def _get_timestamp() -> str:
    return datetime.now(UTC).isoformat()


# ============================================================================
# Error Logging
# ============================================================================


def log_error(error: GraphQLError, context: StoreContext | None) -> None:
    """Log error with full details for server-side debugging."""
    log_context: dict[str, Any] = {
        "error_message": error.message,
        "error_path": error.path,
        "error_code": error_code(error),
    }
    if context is not None and context.correlation_id:
        log_context["correlation_id"] = context.correlation_id

    if error.original_error:
        log_context["exception_type"] = type(error.original_error).__name__
        log_context["exception_message"] = str(error.original_error)

        if not is_user_facing_error(error):
            log_context["stack_trace"] = "".join(
                traceback.format_exception(
                    type(error.original_error),
                    error.original_error,
                    error.original_error.__traceback__,
                )
            )

    if is_user_facing_error(error):
        # Expected, caused by the request
        logger.info("GraphQL user-facing error", extra=log_context)
    else:
        logger.error("GraphQL internal error", extra=log_context)
