"""Document store protocol and shared helpers.

This module defines:
- The DocumentStore protocol every backend implements
- Callback and disposer types used for change notifications
- Patch application with dotted-path semantics shared by backends

Resolvers only ever talk to a store through this protocol, so the engine can
be bound to any backend that offers get/add/update/watch on documents.
"""

from __future__ import annotations

import copy
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol, runtime_checkable

Attributes = dict[str, Any]

# Called once per change with the document's full attribute set, or None when
# the document no longer exists.
ChangeCallback = Callable[[Attributes | None], None]

# Async disposer returned by watch_document.
Unsubscribe = Callable[[], Awaitable[None]]

PATH_SEPARATOR = "."


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol for document store backends.

    Documents live in named collections and are addressed by a string id
    assigned by the store on creation.

    Example:
        >>> class MyStore:
        ...     async def get_document(self, collection, document_id):
        ...         ...
        ...     async def add_document(self, collection, attributes):
        ...         ...
        ...     async def update_document(self, collection, document_id, patch):
        ...         ...
        ...     async def watch_document(self, collection, document_id, on_change):
        ...         ...
    """

    async def get_document(self, collection: str, document_id: str) -> Attributes | None:
        """Fetch a document's attributes, or None when it does not exist."""
        ...

    async def add_document(self, collection: str, attributes: Mapping[str, Any]) -> str:
        """Insert a document and return the id the store assigned to it."""
        ...

    async def update_document(
        self,
        collection: str,
        document_id: str,
        patch: Mapping[str, Any],
    ) -> None:
        """Merge ``patch`` into an existing document.

        Only patched keys change. Dotted keys address nested attributes.
        """
        ...

    async def watch_document(
        self,
        collection: str,
        document_id: str,
        on_change: ChangeCallback,
    ) -> Unsubscribe:
        """Register ``on_change`` for every later change of one document.

        Returns:
            Async disposer that removes the listener.
        """
        ...


def apply_patch(document: Mapping[str, Any] | None, patch: Mapping[str, Any]) -> Attributes:
    """Return a copy of ``document`` with ``patch`` merged in.

    Keys containing dots are treated as paths into nested mappings, creating
    intermediate mappings as needed:

        >>> apply_patch({"name": "Bob"}, {"__relations.Person.friends": "1"})
        {'name': 'Bob', '__relations': {'Person': {'friends': '1'}}}
    """
    result: Attributes = copy.deepcopy(dict(document or {}))
    for key, value in patch.items():
        *parents, leaf = key.split(PATH_SEPARATOR)
        target = result
        for part in parents:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[leaf] = copy.deepcopy(value)
    return result


class DocumentNotFoundError(KeyError):
    """Raised when updating a document that does not exist."""


__all__ = [
    "Attributes",
    "DocumentNotFoundError",
    "ChangeCallback",
    "DocumentStore",
    "Unsubscribe",
    "apply_patch",
]
