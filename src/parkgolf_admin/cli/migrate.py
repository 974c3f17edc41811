import json
import logging
import click

from parkgolf_admin.permissions.migration import migrate_admin_record

logger = logging.getLogger(__name__)


def _load_records(data):
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("admins"), list):
        return data["admins"]
    if isinstance(data, dict):
        return [data]
    raise click.ClickException("Expected an admin record, a list of records or {\"admins\": [...]}")


@click.command()
@click.argument("input_file", type=click.File("r"))
@click.option("--output", "-o", "output_file", type=click.File("w"), default="-",
              help="Where to write the migrated records (default: stdout)")
@click.option("--strict/--no-strict", default=True,
              help="Abort on records with unknown role codes instead of skipping them")
def migrate_records(input_file, output_file, strict):
    """Rewrite legacy admin records to canonical role and permission codes."""
    try:
        records = _load_records(json.load(input_file))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON: {e}")

    migrated = []
    skipped = 0
    for record in records:
        try:
            migrated.append(migrate_admin_record(record))
        except ValueError as e:
            if strict:
                raise click.ClickException(str(e))
            logger.warning(f"Skipping admin record: {e}")
            skipped += 1

    json.dump(migrated, output_file, indent=2, ensure_ascii=False)
    output_file.write("\n")

    click.echo(f"Migrated {len(migrated)} admin records, skipped {skipped}", err=True)
