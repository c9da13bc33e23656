from datetime import datetime, timedelta, timezone

import click
from flask.cli import with_appcontext

from app.modules.build.repositories import BuildRepository
from core.storage import StorageService, storage_service


def find_orphans(min_age_hours=24, now=None):
    """Stored build objects that no BuildRecord points to and that are old enough to be abandoned."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=min_age_hours)
    linked = set(BuildRepository().all_file_ids())

    orphans = []
    for key, modified in storage_service.list_objects(StorageService.BUILDS_DIR):
        file_id = StorageService.file_id_from_key(key)
        if file_id is None or file_id in linked:
            continue
        if modified.tzinfo is None:
            modified = modified.replace(tzinfo=timezone.utc)
        if modified <= cutoff:
            orphans.append(key)
    return orphans


@click.command(
    "uploads:reconcile",
    help="Delete stored builds that were uploaded but never linked to a game.",
)
@click.option(
    "--min-age-hours",
    default=24,
    show_default=True,
    type=click.IntRange(min=0),
    help="Only touch objects older than this, so running uploads are left alone.",
)
@click.option("--dry-run", is_flag=True, help="List the orphaned objects without deleting them.")
@with_appcontext
def uploads_reconcile(min_age_hours, dry_run):
    orphans = find_orphans(min_age_hours)
    if not orphans:
        click.echo(click.style("No orphaned builds found.", fg="green"))
        return

    for key in orphans:
        if dry_run:
            click.echo(f"would delete {key}")
        else:
            storage_service.delete_file(key)
            click.echo(f"deleted {key}")

    verb = "Found" if dry_run else "Deleted"
    click.echo(click.style(f"{verb} {len(orphans)} orphaned build(s).", fg="yellow" if dry_run else "green"))
