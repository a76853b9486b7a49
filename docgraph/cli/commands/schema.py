"""Schema generation commands."""

import json
import sys
from pathlib import Path

import click
from graphql import ExecutionResult

from docgraph.cli.utils import coro, error, header, info, success
from docgraph.core.exceptions import DeclarationError
from docgraph.core.settings import get_graphql_settings
from docgraph.features.graphql.context import StoreContext
from docgraph.features.graphql.error_handler import format_result
from docgraph.features.graphql.executor import execute
from docgraph.features.graphql.schema import StoreSchema, build_schema_from_sdl
from docgraph.infra.store.memory import InMemoryDocumentStore

declarations_argument = click.argument(
    "declarations",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
directive_option = click.option(
    "--directive",
    default=None,
    help="Marker directive name (default: from settings or 'store')",
)


def _load(declarations: Path, directive: str | None) -> StoreSchema:
    directive = directive or get_graphql_settings().marker_directive
    try:
        return build_schema_from_sdl(
            declarations.read_text(encoding="utf-8"),
            directive_name=directive,
        )
    except DeclarationError as e:
        error(f"Invalid declarations in {declarations}: {e.detail}")
        sys.exit(1)


@click.group(name="schema")
def schema() -> None:
    """Schema generation commands."""


@schema.command(name="print")
@declarations_argument
@directive_option
def print_schema(declarations: Path, directive: str | None) -> None:
    """Print the schema generated from DECLARATIONS as SDL."""
    click.echo(_load(declarations, directive).print_sdl())


@schema.command()
@declarations_argument
@directive_option
def check(declarations: Path, directive: str | None) -> None:
    """Check that DECLARATIONS produce a valid schema."""
    store_schema = _load(declarations, directive)

    header("Generated root fields")
    info(f"Entities: {len(store_schema.bindings)}")
    info(f"Query fields: {len(store_schema.query_type.fields)}")
    info(f"Mutation fields: {len(store_schema.mutation_type.fields)}")
    info(f"Subscription fields: {len(store_schema.subscription_type.fields)}")
    success(f"{declarations} is valid")


@schema.command(name="execute")
@declarations_argument
@click.argument("operation")
@click.option("--variables", default=None, help="Variable values as a JSON object")
@click.option("--operation-name", default=None, help="Operation to run")
@directive_option
@coro
async def execute_operation(
    declarations: Path,
    operation: str,
    variables: str | None,
    operation_name: str | None,
    directive: str | None,
) -> None:
    """Run OPERATION against a fresh in-memory store and print the result.

    \b
    Example:
      docgraph schema execute people.graphql \\
        'mutation { createPerson(input: {name: "Bob"}) { id name } }'
    """
    store_schema = _load(declarations, directive)
    try:
        variable_values = json.loads(variables) if variables else None
    except json.JSONDecodeError as e:
        error(f"--variables is not valid JSON: {e}")
        sys.exit(1)

    result = await execute(
        store_schema,
        operation,
        variables=variable_values,
        operation_name=operation_name,
        context=StoreContext(store=InMemoryDocumentStore()),
    )
    if not isinstance(result, ExecutionResult):
        await result.aclose()
        error("Subscriptions need a running server: use 'docgraph server run'")
        sys.exit(1)

    payload = format_result(result, mask_internal=False)
    click.echo(json.dumps(payload, indent=2))
    if result.errors:
        sys.exit(1)
