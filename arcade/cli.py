import os

import click
from flask.cli import FlaskGroup

from app import create_app
from arcade.commands.db_seed import db_seed
from arcade.commands.games_purge import games_purge
from arcade.commands.uploads_reconcile import uploads_reconcile


def _create_app():
    return create_app(os.getenv("FLASK_ENV", "development"))


@click.group(cls=FlaskGroup, create_app=_create_app, add_default_commands=False)
def cli():
    """Maintenance commands for the indie games hub."""


cli.add_command(db_seed)
cli.add_command(uploads_reconcile)
cli.add_command(games_purge)


if __name__ == "__main__":
    cli()
