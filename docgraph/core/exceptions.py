"""Custom exception classes for the schema engine and its store bindings."""

from __future__ import annotations

from typing import Any


class DocGraphError(Exception):
    """Base exception for docgraph.

    All custom exceptions should inherit from this class. Each error carries a
    stable ``code`` that is copied into the ``extensions`` of GraphQL errors so
    clients can branch on it without parsing messages.

    Attributes:
        code: Machine-readable error code (e.g. ``STORE_ERROR``).
        detail: Human-readable error message.
        extra: Additional context-specific information about the error.

    Example:
        raise DocGraphError(
            detail="Something went wrong",
            code="INTERNAL_ERROR",
            extra={"collection": "Person"},
        )
    """

    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        detail: str,
        code: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            detail: Human-readable error message.
            code: Error code; defaults to the class-level code.
            extra: Additional context about the error.
        """
        self.detail = detail
        if code is not None:
            self.code = code
        self.extra = extra or {}
        super().__init__(detail)

    def to_extensions(self) -> dict[str, Any]:
        """Return the GraphQL ``extensions`` payload for this error."""
        extensions: dict[str, Any] = {"code": self.code}
        if self.extra:
            extensions["context"] = dict(self.extra)
        return extensions


class DeclarationError(DocGraphError):
    """Raised when an entity declaration set cannot be turned into a schema.

    Declaration errors are fatal at build time; a schema is never produced
    from an invalid declaration set.

    Example:
        raise DeclarationError(
            detail="Entity 'Person' is declared more than once",
            extra={"entity": "Person"},
        )
    """

    code = "DECLARATION_ERROR"


class UndeclaredTypeError(DeclarationError):
    """Raised when a field references a type name that is neither a scalar nor a declared entity."""

    def __init__(
        self,
        type_name: str,
        entity: str | None = None,
        field: str | None = None,
    ) -> None:
        """Initialize undeclared type error.

        Args:
            type_name: The unresolvable type name.
            entity: Entity owning the offending field, when known.
            field: Name of the offending field, when known.
        """
        self.type_name = type_name
        extra: dict[str, Any] = {"type": type_name}
        if entity is not None:
            extra["entity"] = entity
            location = f"{entity}.{field}" if field else entity
            detail = f"Field {location} references undeclared type '{type_name}'"
        else:
            detail = f"Type '{type_name}' is not declared"
        if field is not None:
            extra["field"] = field
        super().__init__(detail=detail, extra=extra)


class OperationValidationError(DocGraphError):
    """Raised by a resolver when its arguments are unusable.

    Example:
        raise OperationValidationError(
            detail="Argument 'personId' is required",
            extra={"argument": "personId"},
        )
    """

    code = "VALIDATION_ERROR"


class StoreOperationError(DocGraphError):
    """Raised when the document store rejects a read, write or listen call.

    Surfaces as a field-level GraphQL error on the path that issued the call.
    """

    code = "STORE_ERROR"

    def __init__(
        self,
        operation: str,
        collection: str,
        document_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize store operation error.

        Args:
            operation: Store operation name (e.g. ``get_document``).
            collection: Collection the call targeted.
            document_id: Document identifier, when the call had one.
            cause: Underlying exception raised by the store.
        """
        self.operation = operation
        self.collection = collection
        self.document_id = document_id
        target = f"{collection}/{document_id}" if document_id else collection
        detail = f"Store {operation} failed for {target}"
        if cause is not None:
            detail = f"{detail}: {cause}"
        extra: dict[str, Any] = {"operation": operation, "collection": collection}
        if document_id is not None:
            extra["document_id"] = document_id
        super().__init__(detail=detail, extra=extra)


__all__ = [
    "DeclarationError",
    "DocGraphError",
    "OperationValidationError",
    "StoreOperationError",
    "UndeclaredTypeError",
]
