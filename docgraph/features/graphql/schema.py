"""GraphQL schema assembly.

Combines the generated Query, Mutation, and Subscription types into one
graphql-core schema bound to its own topic table and marker directive.

Usage:
    ```python
    from docgraph import build_schema_from_sdl

    schema = build_schema_from_sdl('''
        type Person {
            id: ID!
            name: String!
        }
    ''')
    print(schema.print_sdl())
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from graphql import (
    DirectiveLocation,
    GraphQLDirective,
    GraphQLSchema,
    print_schema,
    specified_directives,
    validate_schema,
)

from docgraph.core.exceptions import DeclarationError
from docgraph.features.graphql.declarations import parse_declarations
from docgraph.features.graphql.events import TopicPubSub
from docgraph.features.graphql.inputs import InputTypeSynthesizer
from docgraph.features.graphql.registry import TypeRegistry
from docgraph.features.graphql.schema_composer import (
    build_bindings,
    compose_mutation,
    compose_query,
    compose_subscription,
)

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from graphql import GraphQLObjectType

    from docgraph.features.graphql.declarations import EntityDeclaration
    from docgraph.features.graphql.schema_composer import EntityBinding

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_MARKER_DIRECTIVE", "StoreSchema", "build_schema", "build_schema_from_sdl"]

DEFAULT_MARKER_DIRECTIVE = "store"


@dataclass(frozen=True)
class StoreSchema:
    """A generated schema and the engine state bound to it.

    Attributes:
        graphql_schema: Executable graphql-core schema.
        registry: Type table the schema was built from.
        bindings: Per-entity root fields, keyed by entity name.
        pubsub: Topic table serving this schema's subscriptions.
        directive: Marker directive routing operations to the store.
    """

    graphql_schema: GraphQLSchema
    registry: TypeRegistry
    bindings: Mapping[str, EntityBinding]
    pubsub: TopicPubSub
    directive: GraphQLDirective

    @property
    def query_type(self) -> GraphQLObjectType:
        return self.graphql_schema.query_type

    @property
    def mutation_type(self) -> GraphQLObjectType:
        return self.graphql_schema.mutation_type

    @property
    def subscription_type(self) -> GraphQLObjectType:
        return self.graphql_schema.subscription_type

    @property
    def directive_name(self) -> str:
        return self.directive.name

    def print_sdl(self) -> str:
        """Return the schema in SDL form."""
        return print_schema(self.graphql_schema)


def marker_directive(name: str = DEFAULT_MARKER_DIRECTIVE) -> GraphQLDirective:
    """Directive marking operations that the store link executes locally."""
    return GraphQLDirective(
        name=name,
        locations=[
            DirectiveLocation.QUERY,
            DirectiveLocation.MUTATION,
            DirectiveLocation.SUBSCRIPTION,
            DirectiveLocation.FIELD,
        ],
        description="Resolve this operation against the document store.",
    )


def build_schema(
    declarations: Iterable[EntityDeclaration],
    *,
    directive_name: str | None = None,
) -> StoreSchema:
    """Build an executable schema from entity declarations.

    Every type reference is resolved and every field map is evaluated here,
    so a schema is only returned when it is fully valid.

    Args:
        declarations: Entity declarations, in the order their fields appear.
        directive_name: Marker directive name; defaults to ``store``.

    Returns:
        The built schema with its own topic table.

    Raises:
        DeclarationError: If the declarations cannot produce a valid schema.
    """
    declarations = tuple(declarations)
    try:
        schema = _build(declarations, directive_name or DEFAULT_MARKER_DIRECTIVE)
    except DeclarationError as e:
        logger.error(
            "Schema build failed",
            extra={"error": e.detail, "code": e.code, **e.extra},
        )
        raise

    relation_count = sum(len(binding.relations) for binding in schema.bindings.values())
    logger.info(
        "GraphQL schema created successfully",
        extra={
            "entities": len(schema.bindings),
            "query_fields": len(schema.query_type.fields),
            "mutation_fields": len(schema.mutation_type.fields),
            "subscription_fields": len(schema.subscription_type.fields),
            "relations": relation_count,
        },
    )
    return schema


def build_schema_from_sdl(source: str, *, directive_name: str | None = None) -> StoreSchema:
    """Parse SDL object type definitions and build a schema from them."""
    return build_schema(parse_declarations(source), directive_name=directive_name)


def _build(declarations: tuple[EntityDeclaration, ...], directive_name: str) -> StoreSchema:
    if not declarations:
        raise DeclarationError(detail="At least one entity must be declared")

    registry = TypeRegistry()
    registry.register_all(declarations)
    pubsub = TopicPubSub()
    bindings = build_bindings(registry, InputTypeSynthesizer(registry), pubsub)
    directive = marker_directive(directive_name)

    graphql_schema = GraphQLSchema(
        query=compose_query(bindings),
        mutation=compose_mutation(bindings),
        subscription=compose_subscription(bindings),
        types=[binding.object_type for binding in bindings.values()],
        directives=[*specified_directives, directive],
    )
    # Forces every field thunk, so nothing is left to fail lazily per request
    errors = validate_schema(graphql_schema)
    if errors:
        raise DeclarationError(
            detail=f"Generated schema is invalid: {errors[0].message}",
            extra={"errors": [error.message for error in errors]},
        )

    return StoreSchema(
        graphql_schema=graphql_schema,
        registry=registry,
        bindings=bindings,
        pubsub=pubsub,
        directive=directive,
    )
