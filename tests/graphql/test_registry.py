"""Tests for declarations, the type registry and field type wrapping."""

from __future__ import annotations

import pytest
from graphql import (
    GraphQLID,
    GraphQLList,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLString,
)

from docgraph.core.exceptions import DeclarationError, UndeclaredTypeError
from docgraph.features.graphql.declarations import (
    EntityDeclaration,
    FieldDeclaration,
    ObjectRef,
    ScalarRef,
    parse_declarations,
    type_ref,
)
from docgraph.features.graphql.field_types import is_identifier, is_leaf, wrap_named
from docgraph.features.graphql.registry import TypeRegistry


def _person() -> EntityDeclaration:
    return EntityDeclaration(
        name="Person",
        fields=[
            FieldDeclaration("id", ScalarRef("ID"), required=True),
            FieldDeclaration("name", ScalarRef("String"), required=True),
            FieldDeclaration("friends", ObjectRef("Person"), list=True),
        ],
    )


class TestDeclarations:
    """Tests for declaration types and SDL parsing."""

    def test_type_ref_picks_scalar_or_object(self):
        """Built-in scalar names become ScalarRef, anything else ObjectRef."""
        assert type_ref("Int") == ScalarRef("Int")
        assert type_ref("Person") == ObjectRef("Person")

    def test_unknown_scalar_kind_rejected(self):
        """ScalarRef only accepts the built-in scalar kinds."""
        with pytest.raises(DeclarationError):
            ScalarRef("Date")

    def test_fields_stored_as_tuple(self):
        """Field lists are frozen into tuples."""
        entity = _person()
        assert isinstance(entity.fields, tuple)
        assert entity.field_named("name").required is True
        assert entity.field_named("missing") is None

    def test_parse_wrapping_flags(self):
        """SDL wrappers map onto required/list/item_required."""
        (entity,) = parse_declarations(
            """
            type Person {
                id: ID!
                tags: [String!]!
                friends: [Person]
            }
            """
        )

        tags = entity.field_named("tags")
        assert tags.list and tags.required and tags.item_required
        friends = entity.field_named("friends")
        assert friends.list and not friends.required and not friends.item_required
        assert friends.type_ref == ObjectRef("Person")

    def test_parse_skips_non_object_definitions(self):
        """Enums and scalars are ignored; only object types are entities."""
        entities = parse_declarations(
            """
            enum Color { RED }
            type Person { id: ID! }
            """
        )
        assert [entity.name for entity in entities] == ["Person"]

    def test_parse_rejects_nested_lists(self):
        """Lists of lists cannot be declared."""
        with pytest.raises(DeclarationError, match="nested list"):
            parse_declarations("type Grid { cells: [[Int]] }")

    def test_parse_syntax_error(self):
        """Invalid SDL surfaces as a DeclarationError."""
        with pytest.raises(DeclarationError, match="Invalid declaration syntax"):
            parse_declarations("type Person {")


class TestTypeRegistry:
    """Tests for TypeRegistry."""

    def test_resolves_builtin_scalars(self):
        """Scalar names resolve to graphql-core's scalars."""
        registry = TypeRegistry()
        assert registry.resolve("ID") is GraphQLID
        assert registry.resolve("String") is GraphQLString

    def test_register_memoizes_object_type(self):
        """Each entity maps to exactly one object type."""
        registry = TypeRegistry()
        object_type = registry.register(_person())

        assert isinstance(object_type, GraphQLObjectType)
        assert registry.resolve("Person") is object_type
        assert registry.register(_person()) is object_type

    def test_self_reference_resolves_lazily(self):
        """A self-referencing entity builds and its field points back at itself."""
        registry = TypeRegistry()
        registry.register_all([_person()])
        person = registry.object_type("Person")

        friends = person.fields["friends"].type
        assert isinstance(friends, GraphQLList)
        assert friends.of_type is person

    def test_mutual_references(self):
        """Entities referencing each other resolve in any declaration order."""
        registry = TypeRegistry()
        registry.register_all(
            [
                EntityDeclaration("A", [FieldDeclaration("b", ObjectRef("B"))]),
                EntityDeclaration("B", [FieldDeclaration("a", ObjectRef("A"))]),
            ]
        )

        a, b = registry.object_type("A"), registry.object_type("B")
        assert a.fields["b"].type is b
        assert b.fields["a"].type is a

    def test_undeclared_reference_fails_at_registration(self):
        """References to unknown types are reported with their location."""
        registry = TypeRegistry()
        with pytest.raises(UndeclaredTypeError) as exc_info:
            registry.register_all(
                [EntityDeclaration("Person", [FieldDeclaration("pet", ObjectRef("Dog"))])]
            )

        assert exc_info.value.type_name == "Dog"
        assert exc_info.value.extra == {"type": "Dog", "entity": "Person", "field": "pet"}

    def test_conflicting_redeclaration(self):
        """A second, different declaration of a name is rejected."""
        registry = TypeRegistry()
        registry.register(_person())
        with pytest.raises(DeclarationError, match="more than once"):
            registry.register(
                EntityDeclaration("Person", [FieldDeclaration("id", ScalarRef("ID"))])
            )

    @pytest.mark.parametrize("name", ["String", "Query", "Subscription"])
    def test_reserved_names(self, name):
        """Entities cannot take scalar or root type names."""
        registry = TypeRegistry()
        with pytest.raises(DeclarationError):
            registry.register(EntityDeclaration(name, [FieldDeclaration("id", ScalarRef("ID"))]))

    def test_empty_entity_rejected(self):
        """An entity needs at least one field."""
        with pytest.raises(DeclarationError, match="at least one field"):
            TypeRegistry().register(EntityDeclaration("Empty", []))

    def test_duplicate_field_rejected(self):
        """Field names are unique within an entity."""
        entity = EntityDeclaration(
            "Person",
            [
                FieldDeclaration("name", ScalarRef("String")),
                FieldDeclaration("name", ScalarRef("Int")),
            ],
        )
        with pytest.raises(DeclarationError, match="'name'"):
            TypeRegistry().register(entity)


class TestFieldTypes:
    """Tests for wrapping and classification helpers."""

    def test_wrap_required_list_of_required(self):
        """Wrappers are applied inside-out."""
        wrapped = wrap_named(GraphQLString, required=True, list=True, item_required=True)

        assert isinstance(wrapped, GraphQLNonNull)
        assert isinstance(wrapped.of_type, GraphQLList)
        assert isinstance(wrapped.of_type.of_type, GraphQLNonNull)
        assert wrapped.of_type.of_type.of_type is GraphQLString

    def test_item_required_ignored_without_list(self):
        """item_required has no effect on a non-list field."""
        assert wrap_named(GraphQLString, item_required=True) is GraphQLString

    def test_classification(self):
        """Leaf and identifier checks look through the registry."""
        registry = TypeRegistry()
        registry.register_all([_person()])

        assert is_leaf(registry, ScalarRef("String"))
        assert not is_leaf(registry, ObjectRef("Person"))
        assert is_identifier(registry, ScalarRef("ID"))
        assert not is_identifier(registry, ScalarRef("String"))
