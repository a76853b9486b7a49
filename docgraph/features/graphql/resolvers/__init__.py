"""GraphQL resolvers for queries, mutations, and subscriptions.

This package contains resolver factories, one resolver per generated field:
- queries.py: By-id lookups
- mutations.py: Creation and relation-linking writes
- subscriptions.py: Per-document change streams
"""

from __future__ import annotations

from docgraph.features.graphql.resolvers.mutations import (
    RelationSpec,
    make_create_resolver,
    make_relation_resolver,
)
from docgraph.features.graphql.resolvers.queries import make_get_resolver
from docgraph.features.graphql.resolvers.subscriptions import make_subscribe, resolve_payload

__all__ = [
    "RelationSpec",
    "make_create_resolver",
    "make_get_resolver",
    "make_relation_resolver",
    "make_subscribe",
    "resolve_payload",
]
