"""Server management commands."""

import subprocess
import sys

import click

from docgraph.cli.utils import error, info, success, warning
from docgraph.core.settings import get_settings


@click.group(name="server")
def server() -> None:
    """Server management commands."""


@server.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind (default: from settings or 0.0.0.0)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind (default: from settings or 8000)",
)
@click.option(
    "--reload/--no-reload",
    default=False,
    help="Enable auto-reload on code changes",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug", "trace"]),
    help="Log level",
)
def run(
    host: str | None,
    port: int | None,
    reload: bool,
    log_level: str,
) -> None:
    """Serve the GraphQL endpoint with uvicorn."""
    settings = get_settings()
    host = host or settings.app.host
    port = port or settings.app.port

    if not settings.graphql.is_configured:
        warning("GRAPHQL_DECLARATIONS_PATH is not set; the endpoint will answer 503.")

    info(f"Server will run at: http://{host}:{port}{settings.graphql.path}")
    info(f"Environment: {settings.app.environment}")
    info(f"Store backend: {settings.store.backend}")

    cmd = [
        "uvicorn",
        "docgraph.app.main:create_app",
        "--factory",
        "--host",
        host,
        "--port",
        str(port),
        "--log-level",
        log_level,
    ]
    if reload:
        cmd.append("--reload")

    try:
        success("Starting uvicorn...")
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        info("\nShutting down server...")
    except (OSError, subprocess.CalledProcessError) as e:
        error(f"Failed to start server: {e}")
        sys.exit(1)
