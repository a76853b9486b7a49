"""Field type wrapping and base-type classification.

Declarations carry a base type reference plus list/required flags; this module
turns them into wrapped graphql-core types and exposes the unwrapped base name
used to tell scalar-valued fields from object-valued ones.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from graphql import GraphQLID, GraphQLList, GraphQLNonNull, is_leaf_type

if TYPE_CHECKING:
    from graphql import GraphQLNamedType, GraphQLType

    from docgraph.features.graphql.declarations import FieldDeclaration, TypeRef
    from docgraph.features.graphql.registry import TypeRegistry

__all__ = [
    "base_name",
    "field_type",
    "is_identifier",
    "is_leaf",
    "wrap",
    "wrap_named",
]


def base_name(ref: TypeRef) -> str:
    """Name of the type a reference points at, with all wrapping removed."""
    return ref.name


def wrap_named(
    named: GraphQLNamedType,
    *,
    required: bool = False,
    list: bool = False,
    item_required: bool = False,
) -> GraphQLType:
    """Apply List/NonNull wrappers to a named type, inside-out.

    A required list of required items becomes ``NonNull(List(NonNull(named)))``.
    """
    wrapped: GraphQLType = named
    if list:
        if item_required:
            wrapped = GraphQLNonNull(wrapped)
        wrapped = GraphQLList(wrapped)
    if required:
        wrapped = GraphQLNonNull(wrapped)
    return wrapped


def wrap(
    registry: TypeRegistry,
    ref: TypeRef,
    *,
    required: bool = False,
    list: bool = False,
    item_required: bool = False,
) -> GraphQLType:
    """Resolve ``ref`` through the registry and wrap it.

    Raises:
        UndeclaredTypeError: If the base name is not registered.
    """
    return wrap_named(
        registry.resolve(base_name(ref)),
        required=required,
        list=list,
        item_required=item_required,
    )


def field_type(registry: TypeRegistry, declared: FieldDeclaration) -> GraphQLType:
    """Output type of a declared field."""
    return wrap(
        registry,
        declared.type_ref,
        required=declared.required,
        list=declared.list,
        item_required=declared.item_required,
    )


def is_leaf(registry: TypeRegistry, ref: TypeRef) -> bool:
    """True when the reference resolves to a scalar (leaf) type."""
    return is_leaf_type(registry.resolve(base_name(ref)))


def is_identifier(registry: TypeRegistry, ref: TypeRef) -> bool:
    """True when the reference resolves to the identifier scalar."""
    return registry.resolve(base_name(ref)) is GraphQLID
