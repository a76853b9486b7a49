"""GraphQL router for FastAPI integration.

Provides:
- POST {path}: queries and mutations answer with JSON; subscriptions answer
  with a Server-Sent Events stream, one ``data:`` frame per result
- GET {path}/schema: the generated schema as SDL (when introspection is enabled)

The schema and store are created by the application lifespan and read from
``app.state``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from graphql import ExecutionResult
from pydantic import BaseModel, ConfigDict, Field

from docgraph.core.settings import get_app_settings, get_graphql_settings
from docgraph.features.graphql.context import StoreContext
from docgraph.features.graphql.error_handler import ErrorCategory, format_result
from docgraph.features.graphql.executor import execute
from docgraph.features.graphql.schema import StoreSchema
from docgraph.infra.store.protocol import DocumentStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from docgraph.core.settings import GraphQLSettings

logger = logging.getLogger(__name__)

__all__ = ["GraphQLRequest", "create_graphql_router", "get_document_store", "get_store_schema"]


class GraphQLRequest(BaseModel):
    """Standard GraphQL-over-HTTP request body."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(min_length=1, description="Operation document")
    variables: dict[str, Any] | None = Field(default=None, description="Variable values")
    operation_name: str | None = Field(
        default=None,
        alias="operationName",
        description="Operation to run when the document holds several",
    )


def get_store_schema(request: Request) -> StoreSchema:
    """Schema built at startup."""
    schema = getattr(request.app.state, "store_schema", None)
    if schema is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No GraphQL schema is loaded",
        )
    return schema


def get_document_store(request: Request) -> DocumentStore:
    """Store created at startup."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="No document store is configured",
        )
    return store


async def _event_stream(
    results: AsyncIterator[ExecutionResult],
    request: Request,
    *,
    keepalive: float,
    mask_internal: bool,
    context: StoreContext,
) -> AsyncIterator[str]:
    pending: asyncio.Future[ExecutionResult] | None = None
    try:
        while True:
            if pending is None:
                pending = asyncio.ensure_future(anext(results))
            done, _ = await asyncio.wait({pending}, timeout=keepalive)
            if await request.is_disconnected():
                logger.info("Client disconnected from subscription stream")
                break
            if not done:
                yield ": keep-alive\n\n"
                continue

            finished, pending = pending, None
            try:
                result = finished.result()
            except StopAsyncIteration:
                break
            payload = format_result(result, mask_internal=mask_internal, context=context)
            yield f"data: {json.dumps(payload)}\n\n"
    finally:
        if pending is not None and not pending.done():
            pending.cancel()
            await asyncio.wait({pending})
        await results.aclose()
        logger.debug("Subscription stream closed")


def create_graphql_router(settings: GraphQLSettings | None = None) -> APIRouter:
    """Create GraphQL router with settings-based configuration."""
    settings = settings or get_graphql_settings()
    router = APIRouter(tags=["graphql"])

    async def graphql_endpoint(
        payload: GraphQLRequest,
        request: Request,
        schema: Annotated[StoreSchema, Depends(get_store_schema)],
        store: Annotated[DocumentStore, Depends(get_document_store)],
    ) -> Any:
        context = StoreContext(
            store=store,
            request=request,
            correlation_id=request.headers.get("x-correlation-id"),
        )
        mask_internal = get_app_settings().is_production
        result = await execute(
            schema,
            payload.query,
            variables=payload.variables,
            operation_name=payload.operation_name,
            context=context,
        )
        if isinstance(result, ExecutionResult):
            return JSONResponse(format_result(result, mask_internal=mask_internal, context=context))

        if not settings.subscriptions_enabled:
            await result.aclose()
            return JSONResponse(
                {
                    "data": None,
                    "errors": [
                        {
                            "message": "Subscriptions are disabled",
                            "extensions": {"code": ErrorCategory.GRAPHQL_VALIDATION},
                        }
                    ],
                },
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        return StreamingResponse(
            _event_stream(
                result,
                request,
                keepalive=settings.subscription_keepalive_interval,
                mask_internal=mask_internal,
                context=context,
            ),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache"},
        )

    router.add_api_route(
        settings.path,
        graphql_endpoint,
        methods=["POST"],
        summary="Execute a GraphQL operation",
    )

    if settings.introspection_enabled:

        async def schema_sdl(
            schema: Annotated[StoreSchema, Depends(get_store_schema)],
        ) -> PlainTextResponse:
            return PlainTextResponse(schema.print_sdl())

        router.add_api_route(
            f"{settings.path.rstrip('/')}/schema",
            schema_sdl,
            methods=["GET"],
            summary="Generated schema in SDL form",
            response_class=PlainTextResponse,
        )

    return router
