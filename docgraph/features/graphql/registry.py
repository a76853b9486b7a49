"""Type registry: memoized mapping from type name to graphql-core type.

Built-in scalar names resolve to graphql-core's scalars. Each declared entity
gets exactly one GraphQLObjectType whose field map is a thunk, so entities that
reference themselves or each other can all be registered before any field map
is evaluated.

Usage:
    ```python
    registry = TypeRegistry()
    registry.register_all(declarations)  # registers, then checks references
    person = registry.resolve("Person")
    assert registry.resolve("Person") is person
    ```
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from graphql import (
    GraphQLBoolean,
    GraphQLField,
    GraphQLFloat,
    GraphQLID,
    GraphQLInt,
    GraphQLObjectType,
    GraphQLString,
)

from docgraph.core.exceptions import DeclarationError, UndeclaredTypeError
from docgraph.features.graphql.field_types import base_name, field_type

if TYPE_CHECKING:
    from collections.abc import Iterable

    from graphql import GraphQLNamedType, GraphQLScalarType

    from docgraph.features.graphql.declarations import EntityDeclaration

logger = logging.getLogger(__name__)

__all__ = ["BUILTIN_SCALARS", "ROOT_TYPE_NAMES", "TypeRegistry"]

BUILTIN_SCALARS: dict[str, GraphQLScalarType] = {
    "String": GraphQLString,
    "Int": GraphQLInt,
    "Float": GraphQLFloat,
    "Boolean": GraphQLBoolean,
    "ID": GraphQLID,
}

ROOT_TYPE_NAMES = frozenset({"Query", "Mutation", "Subscription"})


class TypeRegistry:
    """Memoized type table for one schema build.

    A registry is populated once, in a single pass over the declaration set,
    and is read-only afterwards.
    """

    def __init__(self) -> None:
        self._types: dict[str, GraphQLNamedType] = dict(BUILTIN_SCALARS)
        self._entities: dict[str, EntityDeclaration] = {}

    @property
    def entities(self) -> tuple[EntityDeclaration, ...]:
        """Registered entities in declaration order."""
        return tuple(self._entities.values())

    def is_entity(self, name: str) -> bool:
        return name in self._entities

    def entity(self, name: str) -> EntityDeclaration:
        try:
            return self._entities[name]
        except KeyError:
            raise UndeclaredTypeError(name) from None

    def resolve(self, name: str) -> GraphQLNamedType:
        """Return the type registered under ``name``.

        Raises:
            UndeclaredTypeError: If ``name`` is neither a scalar nor a registered entity.
        """
        try:
            return self._types[name]
        except KeyError:
            raise UndeclaredTypeError(name) from None

    def object_type(self, name: str) -> GraphQLObjectType:
        """Return the object type of a registered entity."""
        resolved = self.resolve(name)
        if not isinstance(resolved, GraphQLObjectType):
            raise DeclarationError(
                detail=f"Type '{name}' is a scalar, not an entity",
                extra={"type": name},
            )
        return resolved

    def register(self, entity: EntityDeclaration) -> GraphQLObjectType:
        """Create and memoize the object type for ``entity``.

        Registering the same declaration again returns the existing type.

        Raises:
            DeclarationError: If the name is taken by a scalar, a root type or
                a different declaration.
        """
        existing = self._entities.get(entity.name)
        if existing is not None:
            if existing == entity:
                return self.object_type(entity.name)
            raise DeclarationError(
                detail=f"Entity '{entity.name}' is declared more than once",
                extra={"entity": entity.name},
            )
        if entity.name in self._types:
            raise DeclarationError(
                detail=f"Entity '{entity.name}' shadows the built-in scalar of the same name",
                extra={"entity": entity.name},
            )
        if entity.name in ROOT_TYPE_NAMES:
            raise DeclarationError(
                detail=f"Entity name '{entity.name}' is reserved for a root type",
                extra={"entity": entity.name},
            )
        _check_fields(entity)

        object_type = GraphQLObjectType(
            name=entity.name,
            fields=lambda: self._object_fields(entity),
        )
        self._entities[entity.name] = entity
        self._types[entity.name] = object_type
        return object_type

    def register_all(self, entities: Iterable[EntityDeclaration]) -> None:
        """Register every entity, then check all field references.

        Raises:
            DeclarationError: On duplicate or reserved names, empty entities,
                or references to undeclared types.
        """
        for entity in entities:
            self.register(entity)
        self.validate_references()
        logger.debug(
            "Registered entities",
            extra={"entities": list(self._entities)},
        )

    def validate_references(self) -> None:
        """Check that every field's base type resolves.

        Raises:
            UndeclaredTypeError: For the first field referencing an unknown name.
        """
        for entity in self._entities.values():
            for declared in entity.fields:
                name = base_name(declared.type_ref)
                if name not in self._types:
                    raise UndeclaredTypeError(name, entity=entity.name, field=declared.name)

    def _object_fields(self, entity: EntityDeclaration) -> dict[str, GraphQLField]:
        return {
            declared.name: GraphQLField(field_type(self, declared)) for declared in entity.fields
        }


def _check_fields(entity: EntityDeclaration) -> None:
    if not entity.fields:
        raise DeclarationError(
            detail=f"Entity '{entity.name}' must declare at least one field",
            extra={"entity": entity.name},
        )
    seen: set[str] = set()
    for declared in entity.fields:
        if declared.name in seen:
            raise DeclarationError(
                detail=f"Field '{declared.name}' is declared more than once on '{entity.name}'",
                extra={"entity": entity.name, "field": declared.name},
            )
        seen.add(declared.name)
