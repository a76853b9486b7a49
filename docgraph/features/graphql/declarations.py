"""Entity declarations that drive schema generation.

A declaration set is a tuple of EntityDeclaration, each a name plus an ordered
tuple of FieldDeclaration. Declarations are plain frozen dataclasses so they
can be built directly in code, or converted from SDL parsed by graphql-core:

    ```python
    declarations = parse_declarations('''
        type Person {
            id: ID!
            name: String!
            friends: [Person!]
        }
    ''')
    ```
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from graphql import (
    GraphQLSyntaxError,
    ListTypeNode,
    NamedTypeNode,
    NonNullTypeNode,
    ObjectTypeDefinitionNode,
    parse,
)

from docgraph.core.exceptions import DeclarationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from graphql import DocumentNode, TypeNode

logger = logging.getLogger(__name__)

__all__ = [
    "SCALAR_KINDS",
    "EntityDeclaration",
    "FieldDeclaration",
    "ObjectRef",
    "ScalarRef",
    "TypeRef",
    "declarations_from_document",
    "parse_declarations",
    "type_ref",
]

SCALAR_KINDS = frozenset({"String", "Int", "Float", "Boolean", "ID"})


@dataclass(frozen=True)
class ScalarRef:
    """Reference to one of the built-in scalar types."""

    kind: str

    def __post_init__(self) -> None:
        if self.kind not in SCALAR_KINDS:
            raise DeclarationError(
                detail=f"Unknown scalar kind '{self.kind}'",
                extra={"kind": self.kind, "allowed": sorted(SCALAR_KINDS)},
            )

    @property
    def name(self) -> str:
        return self.kind


@dataclass(frozen=True)
class ObjectRef:
    """Reference to a type by name, resolved against the declaration set."""

    target_name: str

    @property
    def name(self) -> str:
        return self.target_name


TypeRef = ScalarRef | ObjectRef


def type_ref(name: str) -> TypeRef:
    """Build the TypeRef for a type name."""
    if name in SCALAR_KINDS:
        return ScalarRef(name)
    return ObjectRef(name)


@dataclass(frozen=True)
class FieldDeclaration:
    """One field of an entity.

    Attributes:
        name: Field name as exposed in the API.
        type_ref: Referenced base type.
        list: Field holds a list of ``type_ref`` values.
        required: Field (or the list itself) is non-null.
        item_required: List items are non-null; ignored unless ``list``.
    """

    name: str
    type_ref: TypeRef
    list: bool = False
    required: bool = False
    item_required: bool = False


@dataclass(frozen=True)
class EntityDeclaration:
    """A named record type with an ordered field list."""

    name: str
    fields: tuple[FieldDeclaration, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable of fields but store an immutable tuple
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))

    def field_named(self, name: str) -> FieldDeclaration | None:
        for declared in self.fields:
            if declared.name == name:
                return declared
        return None


def parse_declarations(source: str) -> tuple[EntityDeclaration, ...]:
    """Parse SDL text into entity declarations.

    Raises:
        DeclarationError: If the text is not valid SDL or uses unsupported shapes.
    """
    try:
        document = parse(source)
    except GraphQLSyntaxError as e:
        raise DeclarationError(
            detail=f"Invalid declaration syntax: {e.message}",
            extra={"locations": [loc.formatted for loc in e.locations or []]},
        ) from e
    return declarations_from_document(document)


def declarations_from_document(document: DocumentNode) -> tuple[EntityDeclaration, ...]:
    """Convert the object type definitions of a parsed document into declarations.

    Definitions other than object types (scalars, enums, directives, ...) are
    skipped.
    """
    declarations: list[EntityDeclaration] = []
    for definition in document.definitions:
        if not isinstance(definition, ObjectTypeDefinitionNode):
            logger.debug(
                "Skipping non-object definition",
                extra={"kind": definition.kind},
            )
            continue
        entity_name = definition.name.value
        declarations.append(
            EntityDeclaration(
                name=entity_name,
                fields=_fields_from_nodes(entity_name, definition.fields or ()),
            )
        )
    return tuple(declarations)


def _fields_from_nodes(entity_name: str, nodes: Iterable) -> tuple[FieldDeclaration, ...]:
    return tuple(_field_from_type_node(entity_name, node.name.value, node.type) for node in nodes)


def _field_from_type_node(entity_name: str, field_name: str, node: TypeNode) -> FieldDeclaration:
    required = isinstance(node, NonNullTypeNode)
    if required:
        node = node.type

    if isinstance(node, NamedTypeNode):
        return FieldDeclaration(
            name=field_name,
            type_ref=type_ref(node.name.value),
            required=required,
        )

    if isinstance(node, ListTypeNode):
        item = node.type
        item_required = isinstance(item, NonNullTypeNode)
        if item_required:
            item = item.type
        if isinstance(item, NamedTypeNode):
            return FieldDeclaration(
                name=field_name,
                type_ref=type_ref(item.name.value),
                list=True,
                required=required,
                item_required=item_required,
            )

    raise DeclarationError(
        detail=f"Field {entity_name}.{field_name} uses a nested list type, which is not supported",
        extra={"entity": entity_name, "field": field_name},
    )
