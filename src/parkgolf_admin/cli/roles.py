import click

from parkgolf_admin.permissions.catalog import expand_wildcards
from parkgolf_admin.permissions.migration import migrate_permission_code, migrate_role_code
from parkgolf_admin.permissions.roles import ROLE_REGISTRY, RoleTier, roles_for_tier


def _resolve_role(value: str):
    try:
        return migrate_role_code(value)
    except ValueError as e:
        raise click.BadParameter(str(e))


@click.command()
def list_roles():
    """Print the role matrix."""
    for tier in RoleTier:
        click.echo(click.style(f"{tier.value} tier", bold=True))
        for role in roles_for_tier(tier):
            definition = ROLE_REGISTRY[role]
            click.echo(
                f"  {definition.rank}  {click.style(role.value, fg='green'):<30} "
                f"{definition.scope.value:<9} {definition.label} "
                f"({len(definition.default_permissions)} permissions)"
            )


@click.command()
@click.argument("role")
@click.option("--expand", is_flag=True, help="Expand PLATFORM_ALL/COMPANY_ALL wildcards")
def show_permissions(role, expand):
    """Print the default permissions of ROLE."""
    role = _resolve_role(role)
    permissions = ROLE_REGISTRY[role].default_permissions
    if expand:
        permissions = expand_wildcards(permissions)

    click.echo(f"Default permissions of [{click.style(role.value, fg='green')}]:\n")
    for permission in sorted(permissions, key=lambda p: p.value):
        click.echo(f"{permission.value:<26} {permission.label}")


@click.command()
@click.argument("role")
@click.argument("permission")
@click.pass_context
def check_permission(ctx, role, permission):
    """Check whether ROLE holds PERMISSION by default. Exits with 1 when it does not."""
    role = _resolve_role(role)
    resolved = migrate_permission_code(permission)
    if resolved is None:
        raise click.BadParameter(f"Unknown permission code: {permission!r}")

    if resolved in expand_wildcards(ROLE_REGISTRY[role].default_permissions):
        click.echo(f"{role.value} {click.style('has', fg='green')} {resolved.value}")
    else:
        click.echo(f"{role.value} {click.style('lacks', fg='red')} {resolved.value}")
        ctx.exit(1)
