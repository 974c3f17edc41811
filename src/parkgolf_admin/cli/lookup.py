import asyncio
import click
from fastapi import HTTPException

from parkgolf_admin.permissions.core import effective_permissions, get_display_info
from parkgolf_admin.session.directory import GatewayAdminDirectory


async def _fetch_admin(url, admin_id):
    directory = GatewayAdminDirectory(url_base=url)
    try:
        return await directory.get_admin(admin_id)
    finally:
        await directory.aclose()


@click.command()
@click.argument("admin_id", type=int)
@click.option("--url", "-u", "url", envvar="ADMIN_GATEWAY_URL", default=None, help="Admin gateway base url")
def lookup_admin(admin_id, url):
    """Fetch an admin from the gateway and print its effective access."""
    try:
        admin = asyncio.run(_fetch_admin(url, admin_id))
    except HTTPException as e:
        click.echo(f"[{click.style(e.status_code, fg='red')}] {e.detail}")
        raise SystemExit(1)

    info = get_display_info(admin)
    click.echo(f"{info['name']} [{click.style(admin.role.value, fg='green')}] scope {info['scope']}"
               f"{' company ' + info['company_id'] if info['company_id'] else ''}"
               f"{'' if admin.is_active else click.style(' (inactive)', fg='red')}")
    for permission in sorted(effective_permissions(admin), key=lambda p: p.value):
        click.echo(f"  {permission.value}")
