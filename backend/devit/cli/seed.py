"""``flask seed``: demo accounts, a repository and a few threads for local work."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from devit.core.extensions import db
from devit.seeds import seed_data
from devit.services._shared.errors import ServiceError

LOGGER = logging.getLogger(__name__)


def _is_production() -> bool:
    config = current_app.config
    return str(config.get("APP_ENV", "")).strip().lower() == "production" and not (
        config.get("DEBUG") or config.get("TESTING")
    )


def _seed(verbose: bool) -> None:
    try:
        summary = seed_data.run_all(verbose=verbose)
    except ServiceError as exc:
        raise click.ClickException(f"Seeding stopped: {exc}") from exc
    click.echo("Seed summary:")
    for table in sorted(summary):
        counts = summary[table]
        click.echo(f"  {table:<14} +{counts['created']} new, {counts['existing']} kept")


@click.group("seed")
@click.option("--verbose", is_flag=True, help="Log every seeded row.")
@click.pass_context
def seed_cli(ctx: click.Context, verbose: bool) -> None:
    """Demo data commands."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@seed_cli.command("run")
@click.pass_context
@with_appcontext
def run_command(ctx: click.Context) -> None:
    """Create alice, bob and ``alice/proj`` with its threads, unless present."""
    _seed(ctx.obj["verbose"])


@seed_cli.command("fresh")
@click.option("--yes", is_flag=True, help="Do not ask before dropping tables.")
@click.pass_context
@with_appcontext
def fresh_command(ctx: click.Context, yes: bool) -> None:
    """Drop and recreate every table, then seed."""
    if _is_production():
        raise click.UsageError("'flask seed fresh' only runs in non-production environments.")
    if not yes:
        click.confirm("Drop all devit tables and recreate them?", abort=True)
    LOGGER.warning("Recreating database schema")
    db.session.remove()
    db.drop_all()
    db.create_all()
    _seed(ctx.obj["verbose"])
