import click
from flask import current_app
from flask.cli import with_appcontext

from app import db
from core.managers.module_manager import ModuleManager


@click.command("db:seed", help="Populate the database using the seeders of every module.")
@click.option("--reset", is_flag=True, help="Drop and recreate every table before seeding.")
@click.option("-y", "--yes", is_flag=True, help="Confirm --reset without prompting.")
@click.argument("module", required=False)
@with_appcontext
def db_seed(reset, yes, module):
    if reset:
        if not yes:
            click.confirm(click.style("This will delete ALL data in the database. Continue?", fg="red"), abort=True)
        db.drop_all()
        db.create_all()
        click.echo(click.style("Database reset.", fg="yellow"))

    seeders = ModuleManager(current_app).seeders()
    if module:
        seeders = [s for s in seeders if type(s).__module__ == f"app.modules.{module}.seeders"]
        if not seeders:
            raise click.ClickException(f"Module '{module}' has no seeders.")

    for seeder in seeders:
        name = type(seeder).__name__
        try:
            seeder.run()
        except Exception as exc:
            click.echo(click.style(f"{name} failed: {exc}", fg="red"), err=True)
            raise click.Abort()
        click.echo(click.style(f"{name} done.", fg="green"))

    click.echo(click.style(f"Seeded {len(seeders)} module(s).", fg="green"))
