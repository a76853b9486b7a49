"""Root type composer for generated schemas.

Builds the per-entity binding table in one explicit pass, then composes the
Query, Mutation, and Subscription types from it. Every root field is built
and checked before the schema object exists, so malformed declarations fail
the build instead of leaking into request handling.

For an entity ``Person`` with an object-valued field ``friends: [Person]``:
- Query.person(id)
- Mutation.createPerson(input), Mutation.addFriendsToPerson(personId, friendsPersonId)
- Subscription.personUpdated(id)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from graphql import GraphQLArgument, GraphQLField, GraphQLID, GraphQLObjectType

from docgraph.core.exceptions import DeclarationError
from docgraph.features.graphql.field_types import base_name, is_leaf
from docgraph.features.graphql.naming import (
    create_field_name,
    query_field_name,
    relation_argument_names,
    relation_field_name,
    subscription_field_name,
)
from docgraph.features.graphql.resolvers import (
    RelationSpec,
    make_create_resolver,
    make_get_resolver,
    make_relation_resolver,
    make_subscribe,
    resolve_payload,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from graphql import GraphQLInputObjectType

    from docgraph.features.graphql.declarations import EntityDeclaration
    from docgraph.features.graphql.events import TopicPubSub
    from docgraph.features.graphql.inputs import InputTypeSynthesizer
    from docgraph.features.graphql.registry import TypeRegistry

logger = logging.getLogger(__name__)

__all__ = [
    "EntityBinding",
    "bind_entity",
    "build_bindings",
    "compose_mutation",
    "compose_query",
    "compose_subscription",
]


@dataclass(frozen=True)
class EntityBinding:
    """Everything generated for one entity.

    Attributes:
        entity: Source declaration.
        object_type: The entity's output type.
        input_type: ``Create{Entity}Input``, or None when nothing is creatable.
        query_fields: Query root fields keyed by field name.
        mutation_fields: Creation and relation root fields keyed by field name.
        subscription_fields: Subscription root fields keyed by field name.
        relations: One spec per object-valued field, in declaration order.
    """

    entity: EntityDeclaration
    object_type: GraphQLObjectType
    input_type: GraphQLInputObjectType | None
    query_fields: Mapping[str, GraphQLField]
    mutation_fields: Mapping[str, GraphQLField]
    subscription_fields: Mapping[str, GraphQLField]
    relations: tuple[RelationSpec, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.entity.name


def _id_argument(entity_name: str) -> GraphQLArgument:
    return GraphQLArgument(GraphQLID, description=f"Id of the {entity_name} document.")


def _relations(registry: TypeRegistry, entity: EntityDeclaration) -> tuple[RelationSpec, ...]:
    specs = []
    for declared in entity.fields:
        if is_leaf(registry, declared.type_ref):
            continue
        target = base_name(declared.type_ref)
        owner_argument, target_argument = relation_argument_names(
            entity.name, declared.name, target
        )
        specs.append(
            RelationSpec(
                owner=entity.name,
                field=declared.name,
                target=target,
                owner_argument=owner_argument,
                target_argument=target_argument,
            )
        )
    return tuple(specs)


def _relation_field(spec: RelationSpec) -> GraphQLField:
    return GraphQLField(
        GraphQLID,
        args={
            spec.owner_argument: GraphQLArgument(
                GraphQLID,
                description=f"Id of the owning {spec.owner} document.",
            ),
            spec.target_argument: GraphQLArgument(
                GraphQLID,
                description=f"Id of the referenced {spec.target} document.",
            ),
        },
        resolve=make_relation_resolver(spec),
        description=(
            f"Link a {spec.target} to a {spec.owner} through {spec.owner}.{spec.field}. "
            "Returns the owning id."
        ),
    )


def bind_entity(
    registry: TypeRegistry,
    inputs: InputTypeSynthesizer,
    pubsub: TopicPubSub,
    entity: EntityDeclaration,
) -> EntityBinding:
    """Generate every root field for one registered entity."""
    object_type = registry.object_type(entity.name)
    input_type = inputs.create_input(entity)

    get_name = query_field_name(entity.name)
    query_fields = {
        get_name: GraphQLField(
            object_type,
            args={"id": _id_argument(entity.name)},
            resolve=make_get_resolver(entity.name),
            description=f"Fetch a {entity.name} by id. Null when it does not exist.",
        ),
    }

    create_args = {}
    if input_type is not None:
        create_args["input"] = GraphQLArgument(
            input_type,
            description=f"Attributes of the new {entity.name}.",
        )
    relations = _relations(registry, entity)
    mutation_fields = {
        create_field_name(entity.name): GraphQLField(
            object_type,
            args=create_args,
            resolve=make_create_resolver(entity.name),
            description=f"Create a {entity.name}. The store assigns its id.",
        ),
    }
    for spec in relations:
        name = relation_field_name(entity.name, spec.field)
        if name in mutation_fields:
            raise DeclarationError(
                detail=f"Fields of '{entity.name}' generate Mutation.{name} more than once",
                extra={"entity": entity.name, "field": spec.field},
            )
        mutation_fields[name] = _relation_field(spec)

    updated_name = subscription_field_name(entity.name)
    subscription_fields = {
        updated_name: GraphQLField(
            object_type,
            args={"id": _id_argument(entity.name)},
            subscribe=make_subscribe(entity.name, updated_name, pubsub),
            resolve=resolve_payload,
            description=f"Stream the state of a {entity.name} after each change.",
        ),
    }

    return EntityBinding(
        entity=entity,
        object_type=object_type,
        input_type=input_type,
        query_fields=query_fields,
        mutation_fields=mutation_fields,
        subscription_fields=subscription_fields,
        relations=relations,
    )


def build_bindings(
    registry: TypeRegistry,
    inputs: InputTypeSynthesizer,
    pubsub: TopicPubSub,
) -> dict[str, EntityBinding]:
    """Bind every registered entity, in declaration order.

    Raises:
        DeclarationError: If two entities generate the same root field name.
    """
    bindings: dict[str, EntityBinding] = {}
    owners: dict[tuple[str, str], str] = {}
    for entity in registry.entities:
        binding = bind_entity(registry, inputs, pubsub, entity)
        for root, fields in (
            ("Query", binding.query_fields),
            ("Mutation", binding.mutation_fields),
            ("Subscription", binding.subscription_fields),
        ):
            for name in fields:
                previous = owners.setdefault((root, name), entity.name)
                if previous != entity.name:
                    raise DeclarationError(
                        detail=(
                            f"Entities '{previous}' and '{entity.name}' both generate "
                            f"{root}.{name}"
                        ),
                        extra={"root": root, "field": name, "entities": [previous, entity.name]},
                    )
        bindings[entity.name] = binding
    return bindings


def _compose(
    name: str,
    description: str,
    bindings: Mapping[str, EntityBinding],
    attribute: str,
) -> GraphQLObjectType:
    fields: dict[str, GraphQLField] = {}
    for binding in bindings.values():
        fields.update(getattr(binding, attribute))
    logger.debug("Composed root type", extra={"root": name, "fields": list(fields)})
    return GraphQLObjectType(name=name, fields=fields, description=description)


def compose_query(bindings: Mapping[str, EntityBinding]) -> GraphQLObjectType:
    """Compose the Query type: one by-id lookup per entity.

    Example:
        >>> query = compose_query(bindings)
        >>> sorted(query.fields)
        ['person']
    """
    return _compose("Query", "By-id lookups for every declared entity.", bindings, "query_fields")


def compose_mutation(bindings: Mapping[str, EntityBinding]) -> GraphQLObjectType:
    """Compose the Mutation type: creation plus one relation mutation per object-valued field."""
    return _compose(
        "Mutation",
        "Creation and relation-linking writes for every declared entity.",
        bindings,
        "mutation_fields",
    )


def compose_subscription(bindings: Mapping[str, EntityBinding]) -> GraphQLObjectType:
    """Compose the Subscription type: one change stream per entity."""
    return _compose(
        "Subscription",
        "Change streams for individual documents.",
        bindings,
        "subscription_fields",
    )
