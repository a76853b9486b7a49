"""Main CLI entry point for docgraph commands."""

import click

from docgraph import __version__
from docgraph.cli.commands import schema, server
from docgraph.infra.logging.config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="docgraph")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """docgraph CLI - GraphQL schemas generated from entity declarations.

    \b
    Command Groups:
      schema     Print, check and try out generated schemas
      server     Serve the GraphQL endpoint

    \b
    Quick Start:
      docgraph schema check people.graphql    # Validate declarations
      docgraph schema print people.graphql    # Show the generated SDL
      GRAPHQL_DECLARATIONS_PATH=people.graphql docgraph server run
    """
    ctx.ensure_object(dict)


cli.add_command(schema.schema)
cli.add_command(server.server)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
