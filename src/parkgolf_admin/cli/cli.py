import logging
import click

from .roles import list_roles, show_permissions, check_permission
from .migrate import migrate_records
from .lookup import lookup_admin

@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

cli.add_command(list_roles,"roles")
cli.add_command(show_permissions,"permissions")
cli.add_command(check_permission,"check")
cli.add_command(migrate_records,"migrate")
cli.add_command(lookup_admin,"lookup")

if __name__ == '__main__':
    cli()
