"""
One-time migration from the legacy role taxonomies to the canonical registry.

Two older models are still found in stored admin records: the flat
VIEWER/MODERATOR/ADMIN/SUPER_ADMIN model with coarse permission groups
(ALL, COMPANIES, BOOKINGS, ...) and the interim v3 codes (COMPANY_ADMIN,
COMPANY_STAFF, PLATFORM_VIEWER, ...). Both are mapped onto `Role` and
`Permission` here. Nothing else in the package interprets legacy codes.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from parkgolf_admin.permissions.catalog import Permission
from parkgolf_admin.permissions.roles import Role

logger = logging.getLogger(__name__)


LEGACY_ROLE_MAPPING: Dict[str, Role] = {
    # Flat model
    "SUPER_ADMIN": Role.PLATFORM_OWNER,
    "ADMIN": Role.PLATFORM_ADMIN,
    "SYSTEM_ADMIN": Role.PLATFORM_ADMIN,
    "MODERATOR": Role.PLATFORM_SUPPORT,
    "SUPPORT": Role.PLATFORM_SUPPORT,
    "CUSTOMER_SUPPORT": Role.PLATFORM_SUPPORT,
    "VIEWER": Role.PLATFORM_ANALYST,
    "MANAGER": Role.COMPANY_MANAGER,
    "OPERATION_MANAGER": Role.COMPANY_MANAGER,
    "COURSE_STAFF": Role.STAFF,
    "OPERATOR": Role.STAFF,
    # v3 codes
    "PLATFORM_VIEWER": Role.PLATFORM_ANALYST,
    "COMPANY_ADMIN": Role.COMPANY_OWNER,
    "COMPANY_STAFF": Role.STAFF,
    "COMPANY_VIEWER": Role.READONLY_STAFF,
}

LEGACY_PERMISSION_MAPPING: Dict[str, Permission] = {
    "ALL": Permission.PLATFORM_ALL,
    "COMPANIES": Permission.MANAGE_COMPANIES,
    "COURSES": Permission.MANAGE_COURSES,
    "TIMESLOTS": Permission.MANAGE_TIMESLOTS,
    "BOOKINGS": Permission.MANAGE_BOOKINGS,
    "USERS": Permission.MANAGE_USERS,
    "ADMINS": Permission.MANAGE_ADMINS,
    "ANALYTICS": Permission.VIEW_ANALYTICS,
    "SUPPORT": Permission.CUSTOMER_SUPPORT,
    "VIEW": Permission.READ_ONLY,
    "SYSTEM": Permission.PLATFORM_SYSTEM_CONFIG,
}


def migrate_role_code(code: str) -> Role:
    """Map a canonical or legacy role code to a Role. Unknown codes raise ValueError."""
    normalized = (code or "").strip().upper()
    try:
        return Role(normalized)
    except ValueError:
        pass
    if normalized in LEGACY_ROLE_MAPPING:
        return LEGACY_ROLE_MAPPING[normalized]
    raise ValueError(f"Unknown admin role code: {code!r}")


def migrate_permission_code(code: str) -> Optional[Permission]:
    normalized = (code or "").strip().upper()
    try:
        return Permission(normalized)
    except ValueError:
        return LEGACY_PERMISSION_MAPPING.get(normalized)


def migrate_permission_codes(codes: Iterable[Any]) -> Tuple[List[Permission], List[str]]:
    """
    Map permission entries to Permissions.

    Entries may be plain strings or `{"permission": code}` objects as sent by
    the identity service. Returns the mapped permissions (deduplicated, in
    order of first appearance) and the codes that could not be mapped. Unmapped
    codes are dropped, never widened into something else.
    """
    migrated: List[Permission] = []
    unknown: List[str] = []

    for entry in codes or []:
        code = entry.get("permission") if isinstance(entry, dict) else entry
        permission = migrate_permission_code(str(code)) if code is not None else None
        if permission is None:
            unknown.append(str(code))
        elif permission not in migrated:
            migrated.append(permission)

    if unknown:
        logger.warning(f"Dropping unknown permission codes: {unknown}")

    return migrated, unknown


def migrate_admin_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Rewrite one stored admin record into the canonical wire shape.

    The role is read from `roleCode`, `role`, or the first of `roles`;
    permissions are mapped with `migrate_permission_codes`. Scope is dropped,
    it is always derived from the role. Other fields are kept unchanged.
    """
    migrated = {k: v for k, v in record.items() if k not in ("role", "roles", "roleCode", "scope", "permissions")}

    raw_role = record.get("roleCode") or record.get("role") or next(iter(record.get("roles") or []), None)
    if raw_role is None:
        raise ValueError(f"Admin record {record.get('id')!r} has no role")

    role = migrate_role_code(raw_role)
    permissions, _ = migrate_permission_codes(record.get("permissions") or [])

    migrated["roleCode"] = role.value
    migrated["permissions"] = [p.value for p in permissions]

    if str(raw_role).upper() != role.value:
        logger.info(f"Migrated admin {record.get('id')!r} role {raw_role!r} -> {role.value}")

    return migrated
