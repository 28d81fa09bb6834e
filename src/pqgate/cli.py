#!/usr/bin/env python3
"""
Main CLI entry point for pqgate.
"""

import importlib
import sys
from pathlib import Path

import click
import strawberry
import uvicorn

from pqgate import __version__
from pqgate.hashing import compute_hash
from pqgate.logging import configure_logging, get_logger
from pqgate.stores.config import dump_prepared_queries

logger = get_logger(__name__)


def load_schema(import_path: str) -> strawberry.Schema:
    """Import a Strawberry schema from a ``module:attribute`` path."""
    module_name, _, attribute = import_path.partition(":")
    if not module_name or not attribute:
        raise click.BadParameter(f"Expected 'module:attribute', got '{import_path}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"Cannot import module '{module_name}': {e}") from e

    schema = getattr(module, attribute, None)
    if not isinstance(schema, strawberry.Schema):
        raise click.BadParameter(f"'{import_path}' is not a strawberry.Schema")
    return schema


@click.group()
@click.version_option(version=__version__, prog_name="pqgate")
def cli() -> None:
    """pqgate CLI - serve GraphQL with persisted queries and build query manifests."""
    pass


@cli.command()
@click.option(
    "--schema",
    "schema_path",
    required=True,
    help="Strawberry schema to serve, as module:attribute",
)
@click.option(
    "--host",
    default="0.0.0.0",
    help="Host to bind to (default: 0.0.0.0)",
)
@click.option(
    "--port",
    default=8080,
    type=int,
    help="Port to bind to (default: 8080)",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(schema_path: str, host: str, port: int, log_level: str) -> None:
    """Start the GraphQL server.

    Persisted query mode and store are read from PQGATE_* environment variables.
    """
    from pqgate.api.app import create_app
    from pqgate.config import Settings

    configure_logging(log_level=log_level, debug=(log_level == "debug"))

    schema = load_schema(schema_path)
    settings = Settings(debug=(log_level == "debug"), log_level=log_level.upper())

    logger.info(
        "Starting pqgate server",
        host=host,
        port=port,
        schema=schema_path,
        persisted_query_mode=settings.mode,
    )

    try:
        app = create_app(schema, settings=settings)
        uvicorn.run(app, host=host, port=port, log_level=log_level, access_log=True)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.command("hash")
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
def hash_queries(files: tuple[str, ...]) -> None:
    """Print the persisted query hash of each query file."""
    for file in files:
        query = Path(file).read_text(encoding="utf-8")
        click.echo(f"{compute_hash(query)}  {file}")


@cli.command()
@click.argument("files", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    help="Write the manifest to this file instead of stdout",
)
def manifest(files: tuple[str, ...], output: str | None) -> None:
    """Build a prepared query manifest from query files."""
    queries = {}
    for file in files:
        query = Path(file).read_text(encoding="utf-8")
        queries[compute_hash(query)] = query

    rendered = dump_prepared_queries(queries)
    if output:
        Path(output).write_text(rendered, encoding="utf-8")
        click.echo(f"✓ Wrote {len(queries)} queries to {output}")
    else:
        click.echo(rendered, nl=False)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
