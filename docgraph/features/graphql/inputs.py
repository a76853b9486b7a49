"""Creation input types derived from entity declarations.

``Create{Entity}Input`` holds the fields a client may supply when creating a
document: scalar-valued fields other than identifiers. Identifiers are assigned
by the store, and relationships are set through the relation mutations, so
object-valued fields never appear in a creation input.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from graphql import GraphQLInputField, GraphQLInputObjectType, is_leaf_type

from docgraph.features.graphql.field_types import base_name, is_identifier, is_leaf, wrap_named

if TYPE_CHECKING:
    from graphql import GraphQLInputType

    from docgraph.features.graphql.declarations import EntityDeclaration, FieldDeclaration
    from docgraph.features.graphql.registry import TypeRegistry

logger = logging.getLogger(__name__)

__all__ = ["InputTypeSynthesizer", "create_input_name"]


def create_input_name(entity_name: str) -> str:
    return f"Create{entity_name}Input"


class InputTypeSynthesizer:
    """Builds and memoizes creation input types for one registry.

    Input types are cached by name so each appears once in the schema, and
    field maps are thunks so a nested input could refer back to its parent.
    """

    def __init__(self, registry: TypeRegistry) -> None:
        self._registry = registry
        self._inputs: dict[str, GraphQLInputObjectType | None] = {}

    def accepts(self, declared: FieldDeclaration) -> bool:
        """Whether a field belongs in the creation input."""
        ref = declared.type_ref
        return is_leaf(self._registry, ref) and not is_identifier(self._registry, ref)

    def create_input(self, entity: EntityDeclaration) -> GraphQLInputObjectType | None:
        """Return ``Create{Entity}Input``, or None when no field qualifies.

        GraphQL input objects need at least one field, so an entity holding
        only identifiers and relations gets no input type.
        """
        name = create_input_name(entity.name)
        if name in self._inputs:
            return self._inputs[name]

        selected = tuple(declared for declared in entity.fields if self.accepts(declared))
        if not selected:
            logger.debug("No creation input fields", extra={"entity": entity.name})
            self._inputs[name] = None
            return None

        input_type = GraphQLInputObjectType(
            name=name,
            fields=lambda: {
                declared.name: GraphQLInputField(self._input_field_type(declared))
                for declared in selected
            },
            description=f"Attributes for a new {entity.name}.",
        )
        self._inputs[name] = input_type
        return input_type

    def _input_field_type(self, declared: FieldDeclaration) -> GraphQLInputType:
        named = self._registry.resolve(base_name(declared.type_ref))
        if not is_leaf_type(named):
            # Nested creation rows; unreachable while accepts() admits leaves only
            nested = self.create_input(self._registry.entity(named.name))
            if nested is None:
                msg = f"Entity '{named.name}' has no creatable fields to nest"
                raise TypeError(msg)
            named = nested
        return wrap_named(
            named,
            required=declared.required,
            list=declared.list,
            item_required=declared.item_required,
        )
