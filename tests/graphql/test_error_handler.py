"""Tests for error classification and masking."""

from __future__ import annotations

import pytest
from graphql import ExecutionResult, GraphQLError

from docgraph.core.exceptions import OperationValidationError, StoreOperationError
from docgraph.features.graphql.error_handler import (
    ErrorCategory,
    error_code,
    format_result,
    is_user_facing_error,
    process_graphql_errors,
)


def _field_error(original: Exception) -> GraphQLError:
    return GraphQLError(str(original), path=["person"], original_error=original)


class TestErrorCode:
    """Code assignment."""

    def test_document_error(self):
        assert error_code(GraphQLError("Cannot query field")) == ErrorCategory.GRAPHQL_VALIDATION

    def test_engine_error(self):
        error = _field_error(OperationValidationError("Missing required argument(s): id"))

        assert error_code(error) == ErrorCategory.VALIDATION
        assert is_user_facing_error(error)

    def test_store_error(self):
        error = _field_error(StoreOperationError("get_document", "Person", "1"))

        assert error_code(error) == ErrorCategory.STORE
        assert not is_user_facing_error(error)

    def test_unexpected_error(self):
        assert error_code(_field_error(KeyError("x"))) == ErrorCategory.INTERNAL

    def test_explicit_extension_wins(self):
        error = GraphQLError("custom", extensions={"code": "CUSTOM"})

        assert error_code(error) == "CUSTOM"


class TestProcessErrors:
    """Client-facing formatting."""

    def test_user_facing_kept_when_masked(self):
        error = _field_error(OperationValidationError("Missing required argument(s): id"))

        (formatted,) = process_graphql_errors([error], mask_internal=True)

        assert formatted["message"] == "Missing required argument(s): id"
        assert formatted["extensions"]["code"] == "VALIDATION_ERROR"
        assert formatted["path"] == ["person"]

    def test_internal_masked(self):
        error = _field_error(StoreOperationError("get_document", "Person", "1"))

        (formatted,) = process_graphql_errors([error], mask_internal=True)

        assert formatted["message"] == "An internal error occurred. Please try again later."
        assert formatted["extensions"]["code"] == ErrorCategory.INTERNAL
        assert "timestamp" in formatted["extensions"]
        assert formatted["path"] == ["person"]

    def test_internal_unmasked_includes_debug(self):
        error = _field_error(
            StoreOperationError("get_document", "Person", "1", cause=ConnectionError("down"))
        )

        (formatted,) = process_graphql_errors([error], mask_internal=False)

        extensions = formatted["extensions"]
        assert extensions["code"] == "STORE_ERROR"
        assert extensions["context"]["collection"] == "Person"
        assert extensions["debug"]["exception_type"] == "StoreOperationError"

    @pytest.mark.parametrize(
        ("environment", "masked"),
        [("production", True), ("development", False)],
    )
    def test_masking_follows_environment(self, monkeypatch, environment, masked):
        monkeypatch.setenv("APP_ENVIRONMENT", environment)
        error = _field_error(RuntimeError("secret"))

        (formatted,) = process_graphql_errors([error])

        assert ("secret" in formatted["message"]) is not masked


class TestFormatResult:
    """Response payload shape."""

    def test_without_errors(self):
        assert format_result(ExecutionResult(data={"person": None})) == {
            "data": {"person": None}
        }

    def test_with_errors(self):
        result = ExecutionResult(data=None, errors=[GraphQLError("Syntax Error")])

        payload = format_result(result, mask_internal=True)

        assert payload["data"] is None
        assert payload["errors"][0]["message"] == "Syntax Error"
