import click
from flask.cli import with_appcontext

from app import db
from app.modules.build.models import BuildRecord
from app.modules.build.services import BuildService
from app.modules.game.models import GamePlatform, GameRecord, GameTag
from app.modules.library.models import LibraryEntry


@click.command(
    "games:purge",
    help="Delete ALL games with their builds, library entries and stored build files.",
)
@click.option(
    "-y",
    "--yes",
    is_flag=True,
    help="Confirm the operation without prompting.",
)
@with_appcontext
def games_purge(yes):
    if not yes:
        click.confirm(click.style("This will delete ALL games and their builds. Continue?", fg="red"), abort=True)

    storage_keys = [build.storage_key for build in BuildRecord.query.all()]

    # Children first; bulk deletes skip ORM cascades.
    library_deleted = db.session.query(LibraryEntry).delete(synchronize_session=False)
    builds_deleted = db.session.query(BuildRecord).delete(synchronize_session=False)
    db.session.query(GamePlatform).delete(synchronize_session=False)
    db.session.query(GameTag).delete(synchronize_session=False)
    games_deleted = db.session.query(GameRecord).delete(synchronize_session=False)
    db.session.commit()

    files_deleted = BuildService().delete_stored_files(storage_keys)

    click.echo(
        click.style(
            f"Purge summary: games={games_deleted}, builds={builds_deleted}, "
            f"library_entries={library_deleted}, stored_files={files_deleted}.",
            fg="green",
        )
    )
