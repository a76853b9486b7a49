"""Tests for docgraph exception classes."""

from __future__ import annotations

from docgraph.core.exceptions import (
    DeclarationError,
    DocGraphError,
    OperationValidationError,
    StoreOperationError,
    UndeclaredTypeError,
)


def test_base_error_defaults():
    error = DocGraphError("boom")

    assert str(error) == "boom"
    assert error.code == "INTERNAL_ERROR"
    assert error.to_extensions() == {"code": "INTERNAL_ERROR"}


def test_explicit_code_and_extra():
    error = DocGraphError("no context", code="CONTEXT_ERROR", extra={"field": "person"})

    assert error.to_extensions() == {"code": "CONTEXT_ERROR", "context": {"field": "person"}}


def test_class_codes():
    assert DeclarationError("x").code == "DECLARATION_ERROR"
    assert OperationValidationError("x").code == "VALIDATION_ERROR"


def test_undeclared_type_with_location():
    error = UndeclaredTypeError("Dog", entity="Person", field="pet")

    assert isinstance(error, DeclarationError)
    assert error.detail == "Field Person.pet references undeclared type 'Dog'"
    assert error.extra == {"type": "Dog", "entity": "Person", "field": "pet"}


def test_undeclared_type_without_location():
    assert UndeclaredTypeError("Dog").detail == "Type 'Dog' is not declared"


def test_store_operation_error_message():
    error = StoreOperationError(
        "get_document", "Person", "1", cause=ConnectionError("refused")
    )

    assert error.detail == "Store get_document failed for Person/1: refused"
    assert error.to_extensions() == {
        "code": "STORE_ERROR",
        "context": {"operation": "get_document", "collection": "Person", "document_id": "1"},
    }


def test_store_operation_error_without_id():
    error = StoreOperationError("add_document", "Person")

    assert error.detail == "Store add_document failed for Person"
    assert "document_id" not in error.extra
