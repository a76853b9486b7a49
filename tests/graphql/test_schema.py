"""Tests for generated schema structure."""

from __future__ import annotations

import pytest
from graphql import GraphQLID, GraphQLNonNull, GraphQLString, get_named_type, is_leaf_type

from docgraph.core.exceptions import DeclarationError
from docgraph.features.graphql.declarations import (
    EntityDeclaration,
    FieldDeclaration,
    ObjectRef,
    ScalarRef,
)
from docgraph.features.graphql.naming import relation_argument_names
from docgraph.features.graphql.schema import build_schema, build_schema_from_sdl


def _entities(count: int) -> list[EntityDeclaration]:
    return [
        EntityDeclaration(
            f"Thing{i}",
            [
                FieldDeclaration("id", ScalarRef("ID"), required=True),
                FieldDeclaration("label", ScalarRef("String")),
            ],
        )
        for i in range(count)
    ]


def _shape(field_map) -> dict:
    """Field names, argument names and printed types of a root type."""
    return {
        name: (str(field.type), {arg: str(a.type) for arg, a in field.args.items()})
        for name, field in field_map.items()
    }


class TestRootTypes:
    """Root field generation."""

    @pytest.mark.parametrize("count", [1, 2, 5])
    def test_one_field_per_entity(self, count):
        """N entities give N query, N create and N subscription fields."""
        schema = build_schema(_entities(count))

        assert len(schema.query_type.fields) == count
        assert len(schema.mutation_type.fields) == count
        assert len(schema.subscription_type.fields) == count
        assert set(schema.registry.entities) == set(_entities(count))

    def test_relation_mutation_per_object_field(self, people_schema):
        """Object-valued fields add one relation mutation each."""
        mutations = people_schema.mutation_type.fields

        assert set(mutations) == {
            "createPerson",
            "createCompany",
            "addFriendsToPerson",
            "addEmployerToPerson",
            "addEmployeesToCompany",
        }

    def test_field_names(self, people_schema):
        """Query and subscription fields use the lowercased entity name."""
        assert set(people_schema.query_type.fields) == {"person", "company"}
        assert set(people_schema.subscription_type.fields) == {"personUpdated", "companyUpdated"}

    def test_lowercases_whole_name(self):
        """Multi-word entity names are lowercased entirely."""
        schema = build_schema_from_sdl("type BlogPost { id: ID! title: String }")

        assert "blogpost" in schema.query_type.fields
        assert "blogpostUpdated" in schema.subscription_type.fields

    def test_query_signature(self, people_schema):
        """Lookups take a nullable ID and return a nullable entity."""
        field = people_schema.query_type.fields["person"]

        assert field.args["id"].type is GraphQLID
        assert field.type is people_schema.registry.object_type("Person")

    def test_relation_arguments(self, people_schema):
        """Relation mutations take owner and target ids and return ID."""
        field = people_schema.mutation_type.fields["addEmployerToPerson"]

        assert field.type is GraphQLID
        assert set(field.args) == {"personId", "companyId"}

    def test_self_relation_arguments_are_distinct(self, people_schema):
        """A self-referencing field gets a distinct target argument."""
        field = people_schema.mutation_type.fields["addFriendsToPerson"]

        assert set(field.args) == {"personId", "friendsPersonId"}
        assert relation_argument_names("Person", "friends", "Person") == (
            "personId",
            "friendsPersonId",
        )

    def test_descriptions(self, people_schema):
        """Every generated root field and argument is described."""
        for root in (
            people_schema.query_type,
            people_schema.mutation_type,
            people_schema.subscription_type,
        ):
            assert root.description
            for field in root.fields.values():
                assert field.description
                for argument in field.args.values():
                    assert argument.description


class TestCreateInputs:
    """Creation input synthesis."""

    def test_excludes_identifiers_and_relations(self, people_schema):
        """Create inputs hold scalar, non-ID fields only."""
        input_type = people_schema.bindings["Person"].input_type

        assert input_type.name == "CreatePersonInput"
        assert set(input_type.fields) == {"name", "age"}
        for field in input_type.fields.values():
            named = get_named_type(field.type)
            assert is_leaf_type(named)
            assert named is not GraphQLID

    def test_keeps_wrapping(self, people_schema):
        """Required attributes stay required in the input."""
        fields = people_schema.bindings["Person"].input_type.fields

        assert isinstance(fields["name"].type, GraphQLNonNull)
        assert fields["name"].type.of_type is GraphQLString
        assert fields["age"].type.name == "Int"

    def test_entity_without_creatable_fields(self):
        """No input type or argument when only ids and relations are declared."""
        schema = build_schema_from_sdl(
            """
            type Tag { id: ID! }
            type Link { id: ID! tag: Tag }
            """
        )

        assert schema.bindings["Tag"].input_type is None
        assert schema.mutation_type.fields["createTag"].args == {}
        assert "CreateTagInput" not in schema.graphql_schema.type_map

    def test_input_named_once(self, people_schema):
        """Each input type appears in the schema exactly once."""
        type_map = people_schema.graphql_schema.type_map

        assert type_map["CreatePersonInput"] is people_schema.bindings["Person"].input_type
        assert type_map["CreateCompanyInput"] is people_schema.bindings["Company"].input_type


class TestBuild:
    """Build-time behavior."""

    def test_idempotent(self, people_sdl):
        """Two builds from the same declarations have the same roots."""
        first = build_schema_from_sdl(people_sdl)
        second = build_schema_from_sdl(people_sdl)

        assert _shape(first.query_type.fields) == _shape(second.query_type.fields)
        assert _shape(first.mutation_type.fields) == _shape(second.mutation_type.fields)
        assert _shape(first.subscription_type.fields) == _shape(second.subscription_type.fields)
        assert first.print_sdl() == second.print_sdl()

    def test_builds_own_topic_table(self, people_sdl):
        """Schemas never share subscription state."""
        first = build_schema_from_sdl(people_sdl)
        second = build_schema_from_sdl(people_sdl)

        assert first.pubsub is not second.pubsub

    def test_undeclared_type_is_fatal(self):
        """A dangling reference prevents schema construction."""
        with pytest.raises(DeclarationError, match="undeclared type 'Dog'"):
            build_schema_from_sdl("type Person { id: ID! pet: Dog }")

    def test_empty_declarations_rejected(self):
        """At least one entity is needed for a root Query."""
        with pytest.raises(DeclarationError):
            build_schema([])

    def test_generated_name_collision(self):
        """Entities whose names only differ in case cannot coexist."""
        with pytest.raises(DeclarationError, match="both generate"):
            build_schema_from_sdl(
                """
                type BlogPost { id: ID! title: String }
                type Blogpost { id: ID! title: String }
                """
            )

    def test_marker_directive_in_schema(self, people_schema):
        """The marker directive is declared so marked documents validate."""
        assert people_schema.directive_name == "store"
        assert people_schema.graphql_schema.get_directive("store") is people_schema.directive
        assert "directive @store" in people_schema.print_sdl()

    def test_custom_marker_directive(self, people_sdl):
        """The marker directive name is configurable."""
        schema = build_schema_from_sdl(people_sdl, directive_name="docs")

        assert schema.graphql_schema.get_directive("docs") is not None
        assert schema.graphql_schema.get_directive("store") is None
