"""Operation execution against a generated schema.

``execute`` is the engine boundary: queries and mutations resolve to one
ExecutionResult, subscriptions to an async iterator of ExecutionResult that
stays open until the caller closes it.
"""

from __future__ import annotations

import asyncio
import logging
from inspect import isawaitable
from typing import TYPE_CHECKING, Any, Literal

from graphql import (
    DocumentNode,
    ExecutionResult,
    GraphQLError,
    get_operation_ast,
    parse,
    subscribe,
    validate,
)
from graphql import execute as graphql_execute

from docgraph.infra.logging import set_log_context

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

    from docgraph.features.graphql.schema import StoreSchema

logger = logging.getLogger(__name__)

__all__ = ["OperationKind", "SubscriptionStream", "execute", "prepare_document"]

OperationKind = Literal["query", "mutation", "subscription"]


def prepare_document(
    schema: StoreSchema,
    source: str | DocumentNode,
) -> tuple[DocumentNode | None, list[GraphQLError]]:
    """Parse (when needed) and validate an operation document.

    Returns:
        The document and an empty list, or None and the errors found.
    """
    if isinstance(source, DocumentNode):
        document = source
    else:
        try:
            document = parse(source)
        except GraphQLError as e:
            return None, [e]

    errors = validate(schema.graphql_schema, document)
    if errors:
        return None, list(errors)
    return document, []


async def execute(
    schema: StoreSchema,
    source: str | DocumentNode,
    *,
    variables: Mapping[str, Any] | None = None,
    operation_name: str | None = None,
    context: Any = None,
    root_value: Any = None,
    operation_kind: OperationKind | None = None,
) -> ExecutionResult | SubscriptionStream:
    """Execute one operation.

    Args:
        schema: Schema built by ``build_schema``.
        source: Operation text or an already parsed document.
        variables: Variable values.
        operation_name: Operation to run when the document holds several.
        context: Context value handed to resolvers, normally a StoreContext.
        root_value: Root value for top-level resolvers.
        operation_kind: Expected kind; a mismatch is reported as an error.

    Returns:
        An ExecutionResult for queries and mutations, or for any request
        error. For subscriptions, an async iterator of ExecutionResult.
    """
    document, errors = prepare_document(schema, source)
    if document is None:
        logger.debug("Operation rejected", extra={"errors": [e.message for e in errors]})
        return ExecutionResult(data=None, errors=errors)

    operation = get_operation_ast(document, operation_name)
    if operation is None:
        message = (
            f"Unknown operation named '{operation_name}'."
            if operation_name
            else "Must provide operation name if query contains multiple operations."
        )
        return ExecutionResult(data=None, errors=[GraphQLError(message)])

    kind = operation.operation.value
    if operation_kind is not None and operation_kind != kind:
        return ExecutionResult(
            data=None,
            errors=[GraphQLError(f"Expected a {operation_kind} operation, got {kind}.")],
        )

    set_log_context(operation_kind=kind, operation_name=operation_name)

    if kind == "subscription":
        result = subscribe(
            schema.graphql_schema,
            document,
            root_value=root_value,
            context_value=context,
            variable_values=variables,
            operation_name=operation_name,
        )
        if isawaitable(result):
            result = await result
        if isinstance(result, ExecutionResult):
            return result
        logger.debug("Subscription started", extra={"operation_name": operation_name})
        return SubscriptionStream(result)

    result = graphql_execute(
        schema.graphql_schema,
        document,
        root_value=root_value,
        context_value=context,
        variable_values=variables,
        operation_name=operation_name,
    )
    if isawaitable(result):
        result = await result
    return result


class SubscriptionStream:
    """Async iterator over subscription results.

    ``aclose`` releases the underlying source even when nothing was pulled.
    """

    def __init__(self, results: AsyncIterator[ExecutionResult]) -> None:
        self._results = results
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> SubscriptionStream:
        return self

    async def __anext__(self) -> ExecutionResult:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await self._results.__anext__()
        except StopAsyncIteration:
            await self.aclose()
            raise
        except asyncio.CancelledError:
            logger.debug("Subscription stream cancelled")
            raise

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        aclose = getattr(self._results, "aclose", None)
        if aclose is not None:
            await aclose()
