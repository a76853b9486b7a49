"""Request-pipeline stage that routes marked operations to the store schema.

An operation carrying the marker directive (``@store`` by default) anywhere
in its document is executed locally against the generated schema. Anything
else is handed to the next stage untouched.

Usage:
    ```python
    link = StoreLink(schema, store)
    payload = await link.request(Operation('query @store { person(id: "1") { name } }'))
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from inspect import isawaitable
from typing import TYPE_CHECKING, Any

from graphql import BREAK, DocumentNode, ExecutionResult, GraphQLError, Visitor, parse, visit

from docgraph.features.graphql.context import StoreContext
from docgraph.features.graphql.error_handler import format_result
from docgraph.features.graphql.executor import SubscriptionStream, execute

if TYPE_CHECKING:
    from collections.abc import Callable, Collection

    from graphql import DirectiveNode

    from docgraph.features.graphql.schema import StoreSchema
    from docgraph.infra.store.protocol import DocumentStore

logger = logging.getLogger(__name__)

__all__ = ["Operation", "PayloadStream", "StoreLink", "has_directive"]


@dataclass
class Operation:
    """One request flowing through the pipeline."""

    query: str | DocumentNode
    variables: dict[str, Any] | None = None
    operation_name: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def document(self) -> DocumentNode:
        if isinstance(self.query, DocumentNode):
            return self.query
        return parse(self.query)


class _DirectiveFinder(Visitor):
    def __init__(self, names: Collection[str]) -> None:
        super().__init__()
        self.names = names
        self.found = False

    def enter_directive(self, node: DirectiveNode, *_args: Any) -> Any:
        if node.name.value in self.names:
            self.found = True
            return BREAK
        return None


def has_directive(document: DocumentNode, names: Collection[str]) -> bool:
    """Whether any directive in ``document`` is named in ``names``."""
    finder = _DirectiveFinder(names)
    visit(document, finder)
    return finder.found


class StoreLink:
    """Executes marked operations against a schema bound to one store.

    Args:
        schema: Generated schema.
        store: Store handed to resolvers through the context.
        mask_errors: Mask internal error details; defaults to the environment check.
    """

    def __init__(
        self,
        schema: StoreSchema,
        store: DocumentStore,
        *,
        mask_errors: bool | None = None,
    ) -> None:
        self.schema = schema
        self.store = store
        self.mask_errors = mask_errors

    def handles(self, operation: Operation) -> bool:
        return has_directive(operation.document(), (self.schema.directive_name,))

    async def request(
        self,
        operation: Operation,
        forward: Callable[[Operation], Any] | None = None,
    ) -> dict[str, Any] | PayloadStream | Any:
        """Run ``operation`` locally, or pass it to ``forward``.

        Returns:
            A response payload for queries and mutations, an async iterator of
            payloads for subscriptions, whatever ``forward`` returns for
            unmarked operations, or None when there is no next stage.
        """
        try:
            document = operation.document()
        except GraphQLError as e:
            return format_result(
                ExecutionResult(data=None, errors=[e]),
                mask_internal=self.mask_errors,
            )

        if not has_directive(document, (self.schema.directive_name,)):
            if forward is None:
                logger.debug(
                    "Unmarked operation with no next stage",
                    extra={"operation_name": operation.operation_name},
                )
                return None
            forwarded = forward(operation)
            if isawaitable(forwarded):
                forwarded = await forwarded
            return forwarded

        context = StoreContext(
            store=self.store,
            correlation_id=operation.context.get("correlation_id"),
            extra=dict(operation.context),
        )
        result = await execute(
            self.schema,
            document,
            variables=operation.variables,
            operation_name=operation.operation_name,
            context=context,
        )
        if isinstance(result, ExecutionResult):
            return format_result(result, mask_internal=self.mask_errors, context=context)
        return PayloadStream(result, mask_errors=self.mask_errors, context=context)


class PayloadStream:
    """Formats each subscription result into a response payload."""

    def __init__(
        self,
        results: SubscriptionStream,
        *,
        mask_errors: bool | None,
        context: StoreContext,
    ) -> None:
        self._results = results
        self._mask_errors = mask_errors
        self._context = context

    def __aiter__(self) -> PayloadStream:
        return self

    async def __anext__(self) -> dict[str, Any]:
        result = await self._results.__anext__()
        return format_result(result, mask_internal=self._mask_errors, context=self._context)

    async def aclose(self) -> None:
        await self._results.aclose()
