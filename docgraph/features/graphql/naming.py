"""Names of the generated root fields and arguments."""

from __future__ import annotations

__all__ = [
    "create_field_name",
    "query_field_name",
    "relation_argument_names",
    "relation_field_name",
    "subscription_field_name",
    "title_case",
]


def title_case(name: str) -> str:
    """Uppercase the first character, leaving the rest untouched."""
    return name[:1].upper() + name[1:]


def query_field_name(entity_name: str) -> str:
    return entity_name.lower()


def create_field_name(entity_name: str) -> str:
    return f"create{entity_name}"


def relation_field_name(entity_name: str, field_name: str) -> str:
    return f"add{title_case(field_name)}To{entity_name}"


def subscription_field_name(entity_name: str) -> str:
    return f"{entity_name.lower()}Updated"


def relation_argument_names(entity_name: str, field_name: str, target_name: str) -> tuple[str, str]:
    """Argument names (owner, target) of a relation mutation.

    The owner argument is ``{entity}Id`` and the target argument
    ``{target}Id``; when the field points back at its own entity the target
    argument becomes ``{field}{Target}Id`` so the two stay distinct.
    """
    owner = f"{entity_name.lower()}Id"
    target = f"{target_name.lower()}Id"
    if target == owner:
        target = f"{field_name}{target_name}Id"
    return owner, target
