#!/usr/bin/env python3
"""
Main CLI entry point for the socialgraph server.
"""

import os
import sys
from pathlib import Path

import click
import uvicorn
from graphql import GraphQLSyntaxError, parse

from socialgraph import __version__
from socialgraph.config import settings
from socialgraph.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="socialgraph")
def cli() -> None:
    """socialgraph CLI - run the API server and inspect queries."""
    pass


@cli.command()
@click.option(
    "--host",
    default=settings.api_host,
    help=f"Host to bind to (default: {settings.api_host})",
)
@click.option(
    "--port",
    default=settings.api_port,
    type=int,
    help=f"Port to bind to (default: {settings.api_port})",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
@click.option(
    "--workers",
    default=1,
    type=int,
    help="Number of worker processes (default: 1)",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(host: str, port: int, reload: bool, workers: int, log_level: str) -> None:
    """Start the socialgraph API server."""
    configure_logging(debug=(log_level == "debug"))

    logger.info(
        "Starting socialgraph API server",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )

    # Worker processes import the app fresh and read these
    if log_level == "debug":
        os.environ["SOCIALGRAPH_DEBUG"] = "true"
        os.environ["SOCIALGRAPH_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("SOCIALGRAPH_DEBUG", "false")
        os.environ.setdefault("SOCIALGRAPH_LOG_LEVEL", log_level)

    try:
        if reload or workers > 1:
            uvicorn.run(
                "socialgraph.api.app:app",
                host=host,
                port=port,
                reload=reload,
                workers=(workers if not reload else 1),
                log_level=log_level,
                access_log=True,
            )
        else:
            from socialgraph.api.app import app

            uvicorn.run(app, host=host, port=port, log_level=log_level, access_log=True)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.command("check-depth")
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--max-depth",
    default=settings.max_query_depth,
    type=click.IntRange(min=0),
    help=f"Depth ceiling to check against (default: {settings.max_query_depth})",
)
def check_depth(document: Path, max_depth: int) -> None:
    """Report the depth of every operation in a GraphQL DOCUMENT."""
    from socialgraph.graphql.depth import check_document_depth
    from socialgraph.graphql.schema import schema

    try:
        ast = parse(document.read_text())
    except GraphQLSyntaxError as e:
        click.echo(f"✗ Syntax error: {e.message}", err=True)
        sys.exit(2)

    depths, errors = check_document_depth(schema._schema, ast, max_depth)
    if not depths:
        click.echo("No operations found.")
        return

    for name, depth in depths.items():
        if depth > max_depth:
            click.echo(f"✗ {name}: deeper than {max_depth}")
        else:
            click.echo(f"✓ {name}: depth {depth}")

    if errors:
        sys.exit(1)


if __name__ == "__main__":
    cli()
