"""In-process document store.

Keeps documents in nested dicts and notifies watchers synchronously on every
write. Used by tests, the CLI, and the ``memory`` backend for local runs.
"""

from __future__ import annotations

import copy
import logging
from collections import defaultdict
from collections.abc import Callable, Mapping
from typing import Any
from uuid import uuid4

from docgraph.infra.store.protocol import (
    Attributes,
    ChangeCallback,
    DocumentNotFoundError,
    Unsubscribe,
    apply_patch,
)

logger = logging.getLogger(__name__)


class InMemoryDocumentStore:
    """Dict-backed DocumentStore implementation.

    Example:
        store = InMemoryDocumentStore()
        person_id = await store.add_document("Person", {"name": "Bob"})
        await store.update_document("Person", person_id, {"name": "Bill"})
    """

    def __init__(self, id_factory: Callable[[], str] | None = None) -> None:
        """Initialize the store.

        Args:
            id_factory: Callable producing new document ids. Defaults to uuid4 hex.
        """
        self._id_factory = id_factory or (lambda: uuid4().hex)
        # collection -> document_id -> attributes
        self._collections: dict[str, dict[str, Attributes]] = defaultdict(dict)
        # (collection, document_id) -> listener_id -> callback
        self._watchers: dict[tuple[str, str], dict[str, ChangeCallback]] = defaultdict(dict)

    async def get_document(self, collection: str, document_id: str) -> Attributes | None:
        document = self._collections.get(collection, {}).get(document_id)
        return copy.deepcopy(document) if document is not None else None

    async def add_document(self, collection: str, attributes: Mapping[str, Any]) -> str:
        document_id = self._id_factory()
        self._collections[collection][document_id] = copy.deepcopy(dict(attributes))
        logger.debug(
            "Document added",
            extra={"collection": collection, "document_id": document_id},
        )
        self._notify(collection, document_id)
        return document_id

    async def update_document(
        self,
        collection: str,
        document_id: str,
        patch: Mapping[str, Any],
    ) -> None:
        documents = self._collections.get(collection, {})
        if document_id not in documents:
            raise DocumentNotFoundError(f"{collection}/{document_id}")
        documents[document_id] = apply_patch(documents[document_id], patch)
        self._notify(collection, document_id)

    async def set_document(
        self,
        collection: str,
        document_id: str,
        attributes: Mapping[str, Any],
    ) -> None:
        """Create or replace a document under a caller-chosen id."""
        self._collections[collection][document_id] = copy.deepcopy(dict(attributes))
        self._notify(collection, document_id)

    async def delete_document(self, collection: str, document_id: str) -> None:
        """Remove a document; watchers receive a not-found notification."""
        if self._collections.get(collection, {}).pop(document_id, None) is not None:
            self._notify(collection, document_id)

    async def watch_document(
        self,
        collection: str,
        document_id: str,
        on_change: ChangeCallback,
    ) -> Unsubscribe:
        key = (collection, document_id)
        listener_id = uuid4().hex
        self._watchers[key][listener_id] = on_change

        async def unsubscribe() -> None:
            listeners = self._watchers.get(key)
            if listeners is None:
                return
            listeners.pop(listener_id, None)
            if not listeners:
                del self._watchers[key]

        return unsubscribe

    def watcher_count(self, collection: str, document_id: str) -> int:
        """Number of listeners registered for one document."""
        return len(self._watchers.get((collection, document_id), {}))

    def _notify(self, collection: str, document_id: str) -> None:
        listeners = list(self._watchers.get((collection, document_id), {}).values())
        if not listeners:
            return
        document = self._collections.get(collection, {}).get(document_id)
        for callback in listeners:
            callback(copy.deepcopy(document) if document is not None else None)
