#!/usr/bin/env python3
"""
CLI entry point for socialgraph database migrations.
"""

import asyncio
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from alembic import command
from alembic.config import Config
from socialgraph import __version__
from socialgraph.logging import configure_logging, get_logger

logger = get_logger(__name__)


def get_alembic_config() -> Config:
    """Get Alembic configuration."""
    # alembic.ini sits at the project root, next to src/
    project_dir = Path(__file__).parent.parent.parent.parent
    alembic_ini = project_dir / "alembic.ini"

    if not alembic_ini.exists():
        raise FileNotFoundError(f"alembic.ini not found at {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(project_dir / "alembic"))
    return config


@click.group()
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
@click.version_option(version=__version__, prog_name="socialgraph-db")
def main(log_level: str) -> None:
    """socialgraph database migration management."""
    configure_logging(debug=(log_level == "debug"))


def run_alembic(step: str, action: Callable[..., Any], **kwargs: Any) -> None:
    """Run one alembic command against the project config; exit 1 on failure."""
    logger.info("Migration step started", step=step, **kwargs)
    try:
        action(get_alembic_config(), **kwargs)
    except Exception as e:
        logger.error("Migration step failed", step=step, error=str(e))
        sys.exit(1)
    logger.info("Migration step finished", step=step)


@main.command()
@click.argument("revision", default="head")
def upgrade(revision: str) -> None:
    """Upgrade database to a revision (default: head)."""
    run_alembic("upgrade", command.upgrade, revision=revision)


@main.command()
@click.argument("revision", default="-1")
def downgrade(revision: str) -> None:
    """Downgrade database to a revision (default: -1)."""
    run_alembic("downgrade", command.downgrade, revision=revision)


@main.command()
@click.option("-m", "--message", required=True, help="Revision message")
@click.option("--autogenerate/--no-autogenerate", default=True, help="Auto-generate migration")
def revision(message: str, autogenerate: bool) -> None:
    """Create a new migration revision from the ORM models."""
    run_alembic("revision", command.revision, message=message, autogenerate=autogenerate)


@main.command()
def current() -> None:
    """Show current database revision."""
    run_alembic("current", command.current)


@main.command()
@click.option(
    "--sample-data",
    is_flag=True,
    default=False,
    help="Also create a few users with profiles, posts and subscriptions",
)
def seed(sample_data: bool) -> None:
    """Seed the membership tiers (and optionally sample data)."""
    from .connection import get_async_session
    from .seed_data import ensure_member_types, seed_sample_data

    async def do_seed():
        async with get_async_session() as db:
            created = await ensure_member_types(db)
            if sample_data:
                await seed_sample_data(db)
        return created

    try:
        created = asyncio.run(do_seed())
    except Exception as e:
        logger.error("Failed to seed database", error=str(e))
        click.echo(f"✗ Error seeding database: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Database seeded ({created} member type(s) added)")
    if sample_data:
        click.echo("  Sample data: included")


if __name__ == "__main__":
    main()
