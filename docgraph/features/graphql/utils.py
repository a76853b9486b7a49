"""Helpers shared by the generated resolvers.

Key Functions:
    - store_errors(): Translate store failures into StoreOperationError
    - merge_id(): Build the ``{id, ...attributes}`` record returned to clients

Example:
    ```python
    with store_errors("get_document", "Person", "1"):
        document = await store.get_document("Person", "1")
    ```
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from docgraph.core.exceptions import DocGraphError, StoreOperationError

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

logger = logging.getLogger(__name__)


@contextmanager
def store_errors(
    operation: str,
    collection: str,
    document_id: str | None = None,
) -> Iterator[None]:
    """Wrap a store call so failures surface as StoreOperationError.

    Errors that already belong to the engine pass through unchanged.
    Cancellation is not an Exception and is never wrapped.

    Raises:
        StoreOperationError: If the wrapped block raises any other exception.
    """
    try:
        yield
    except DocGraphError:
        raise
    except Exception as e:
        logger.error(
            "Store operation failed",
            exc_info=True,
            extra={
                "operation": operation,
                "collection": collection,
                "document_id": document_id,
            },
        )
        raise StoreOperationError(operation, collection, document_id, cause=e) from e


def merge_id(document_id: str, attributes: Mapping[str, Any]) -> dict[str, Any]:
    """Record returned for a document: its id followed by its attributes."""
    return {"id": document_id, **attributes}


__all__ = ["merge_id", "store_errors"]
