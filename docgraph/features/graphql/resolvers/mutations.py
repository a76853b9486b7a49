"""Mutation resolvers for generated write operations.

Provides per-entity write operations:
- create{Entity}(input): Insert a document; the store assigns its id
- add{Field}To{Entity}(ownerId, targetId): Record a relation marker on the
  referenced document pointing back at the owning document
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from docgraph.core.exceptions import OperationValidationError
from docgraph.features.graphql.context import get_store
from docgraph.features.graphql.utils import merge_id, store_errors

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Mapping

    from graphql import GraphQLResolveInfo

logger = logging.getLogger(__name__)

RELATIONS_KEY = "__relations"


@dataclass(frozen=True)
class RelationSpec:
    """One relation mutation: ``owner.field`` points at documents of ``target``.

    Attributes:
        owner: Entity declaring the object-valued field.
        field: Name of that field.
        target: Entity the field references.
        owner_argument: Argument carrying the owning document's id.
        target_argument: Argument carrying the referenced document's id.
    """

    owner: str
    field: str
    target: str
    owner_argument: str
    target_argument: str

    @property
    def relation_key(self) -> str:
        """Dotted patch key written on the referenced document."""
        return f"{RELATIONS_KEY}.{self.owner}.{self.field}"


def make_create_resolver(collection: str) -> Callable[..., Awaitable[dict[str, Any]]]:
    """Build the creation resolver for one collection."""

    async def resolve_create(
        _root: Any,
        info: GraphQLResolveInfo,
        input: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        attributes = dict(input or {})
        store = get_store(info)
        with store_errors("add_document", collection):
            document_id = await store.add_document(collection, attributes)

        logger.info(
            "Document created",
            extra={"collection": collection, "document_id": document_id},
        )
        return merge_id(document_id, attributes)

    resolve_create.__name__ = f"resolve_create_{collection.lower()}"
    return resolve_create


def make_relation_resolver(spec: RelationSpec) -> Callable[..., Awaitable[str]]:
    """Build the resolver of one relation mutation.

    The write is a single-document patch on the referenced document; the
    owning document is neither read nor checked for existence.
    """

    async def resolve_relation(
        _root: Any,
        info: GraphQLResolveInfo,
        **arguments: Any,
    ) -> str:
        owner_id = arguments.get(spec.owner_argument)
        target_id = arguments.get(spec.target_argument)
        missing = [
            name
            for name, value in ((spec.owner_argument, owner_id), (spec.target_argument, target_id))
            if value is None
        ]
        if missing:
            raise OperationValidationError(
                detail=f"Missing required argument(s): {', '.join(missing)}",
                extra={"arguments": missing},
            )

        store = get_store(info)
        with store_errors("update_document", spec.target, target_id):
            await store.update_document(spec.target, target_id, {spec.relation_key: owner_id})

        logger.info(
            "Relation recorded",
            extra={
                "relation": f"{spec.owner}.{spec.field}",
                "owner_id": owner_id,
                "target_id": target_id,
            },
        )
        return owner_id

    resolve_relation.__name__ = f"resolve_add_{spec.field}_to_{spec.owner.lower()}"
    return resolve_relation


__all__ = ["RELATIONS_KEY", "RelationSpec", "make_create_resolver", "make_relation_resolver"]
