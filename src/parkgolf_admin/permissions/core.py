"""
Authorization decision engine.

Every check takes the admin explicitly and answers with a plain boolean.
A missing or inactive admin has no permissions; "not authenticated" and
"not permitted" are the same observable outcome here, callers that need to
tell them apart look at the session separately.
"""

import logging
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Optional

from parkgolf_admin.permissions.catalog import Permission, expand_wildcards
from parkgolf_admin.permissions.principal import Admin
from parkgolf_admin.permissions.roles import Role, RoleTier, Scope, get_default_permissions
from parkgolf_admin.permissions.scope import can_access_company, can_access_course
from parkgolf_admin.settings import settings

logger = logging.getLogger(__name__)


class PermissionGrantPolicy(str, Enum):
    # Explicit permission lists are bounded by the role's default set
    RESTRICT = "restrict"
    # Explicit permission lists are honoured as stored
    SUPER_GRANT = "super_grant"


def default_grant_policy() -> PermissionGrantPolicy:
    try:
        return PermissionGrantPolicy(settings.PERMISSION_GRANT_POLICY)
    except ValueError:
        logger.warning(f"Unknown PERMISSION_GRANT_POLICY {settings.PERMISSION_GRANT_POLICY!r}, using restrict")
        return PermissionGrantPolicy.RESTRICT


def effective_permissions(admin: Optional[Admin],
                          policy: Optional[PermissionGrantPolicy] = None) -> FrozenSet[Permission]:
    """
    Permissions actually used for checks.

    The explicit list when non-empty, otherwise the role defaults. Under the
    RESTRICT policy an explicit list is intersected with the role defaults.
    Wildcards are expanded last.
    """
    if admin is None or not admin.is_active:
        return frozenset()

    defaults = get_default_permissions(admin.role)

    if not admin.permissions:
        granted = defaults
    elif (policy or default_grant_policy()) == PermissionGrantPolicy.SUPER_GRANT:
        granted = admin.permissions
    else:
        granted = admin.permissions & defaults
        if granted != admin.permissions:
            logger.debug(f"Ignoring permissions beyond role {admin.role.value} for admin {admin.id}: "
                         f"{sorted(p.value for p in admin.permissions - defaults)}")

    return expand_wildcards(granted)


def has_permission(admin: Optional[Admin], permission: Permission,
                   policy: Optional[PermissionGrantPolicy] = None) -> bool:
    return permission in effective_permissions(admin, policy)


def has_any_permission(admin: Optional[Admin], permissions: Iterable[Permission],
                       policy: Optional[PermissionGrantPolicy] = None) -> bool:
    granted = effective_permissions(admin, policy)
    return any(p in granted for p in permissions)


def has_all_permissions(admin: Optional[Admin], permissions: Iterable[Permission],
                        policy: Optional[PermissionGrantPolicy] = None) -> bool:
    if admin is None or not admin.is_active:
        return False
    granted = effective_permissions(admin, policy)
    return all(p in granted for p in permissions)


# Role predicates

def is_role(admin: Optional[Admin], role: Role) -> bool:
    return admin is not None and admin.is_active and admin.role == role


def is_any_role(admin: Optional[Admin], roles: Iterable[Role]) -> bool:
    return admin is not None and admin.is_active and admin.role in set(roles)


def is_platform_level(admin: Optional[Admin]) -> bool:
    return admin is not None and admin.is_active and admin.tier == RoleTier.PLATFORM


def is_company_level(admin: Optional[Admin]) -> bool:
    return admin is not None and admin.is_active and admin.scope == Scope.COMPANY


def is_course_level(admin: Optional[Admin]) -> bool:
    return admin is not None and admin.is_active and admin.scope == Scope.COURSE


# Named capabilities used by navigation and feature gates

def can_view_dashboard(admin: Optional[Admin]) -> bool:
    return has_permission(admin, Permission.VIEW_DASHBOARD)


def can_manage_companies(admin: Optional[Admin]) -> bool:
    return has_permission(admin, Permission.MANAGE_COMPANIES)


def can_manage_courses(admin: Optional[Admin]) -> bool:
    return has_permission(admin, Permission.MANAGE_COURSES)


def can_manage_timeslots(admin: Optional[Admin]) -> bool:
    return has_permission(admin, Permission.MANAGE_TIMESLOTS)


def can_manage_bookings(admin: Optional[Admin]) -> bool:
    return has_permission(admin, Permission.MANAGE_BOOKINGS)


def can_manage_users(admin: Optional[Admin]) -> bool:
    return has_permission(admin, Permission.MANAGE_USERS)


def can_manage_admins(admin: Optional[Admin]) -> bool:
    return has_any_permission(admin, [Permission.MANAGE_ADMINS, Permission.COMPANY_ADMIN_MANAGE])


def can_view_analytics(admin: Optional[Admin]) -> bool:
    return has_permission(admin, Permission.VIEW_ANALYTICS)


def can_manage_system(admin: Optional[Admin]) -> bool:
    return has_permission(admin, Permission.PLATFORM_SYSTEM_CONFIG)


def get_display_info(admin: Optional[Admin]) -> Dict[str, Optional[str]]:
    if admin is None:
        return {"name": None, "role": None, "scope": None, "company_id": None}
    return {
        "name": admin.name or admin.email or f"Admin {admin.id}",
        "role": admin.definition.label,
        "scope": admin.scope.value,
        "company_id": str(admin.company_id) if admin.company_id is not None else None,
    }

