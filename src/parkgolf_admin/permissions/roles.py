"""
Role registry.

The single place where policy is encoded: every role maps to one scope, one
rank inside its tier (lower is more senior) and one default permission set.
Everything else in the package treats this table as ground truth.
"""

from enum import Enum
from functools import lru_cache
from typing import Dict, FrozenSet, List, Tuple
from pydantic import BaseModel, ConfigDict

from parkgolf_admin.permissions.catalog import Permission


class Scope(str, Enum):
    PLATFORM = "PLATFORM"
    COMPANY = "COMPANY"
    COURSE = "COURSE"


class RoleTier(str, Enum):
    PLATFORM = "PLATFORM"
    COMPANY = "COMPANY"


class Role(str, Enum):
    PLATFORM_OWNER = "PLATFORM_OWNER"
    PLATFORM_ADMIN = "PLATFORM_ADMIN"
    PLATFORM_SUPPORT = "PLATFORM_SUPPORT"
    PLATFORM_ANALYST = "PLATFORM_ANALYST"
    COMPANY_OWNER = "COMPANY_OWNER"
    COMPANY_MANAGER = "COMPANY_MANAGER"
    COURSE_MANAGER = "COURSE_MANAGER"
    STAFF = "STAFF"
    READONLY_STAFF = "READONLY_STAFF"


# Cross-tier ordering: PLATFORM > COMPANY > COURSE
SCOPE_PRECEDENCE: Dict[Scope, int] = {
    Scope.PLATFORM: 0,
    Scope.COMPANY: 1,
    Scope.COURSE: 2,
}


class RoleDefinition(BaseModel):
    role: Role
    tier: RoleTier
    scope: Scope
    rank: int
    label: str
    default_permissions: FrozenSet[Permission]

    model_config = ConfigDict(frozen=True)


def _definition(role: Role, tier: RoleTier, scope: Scope, rank: int, label: str, permissions: List[Permission]) -> RoleDefinition:
    return RoleDefinition(
        role=role,
        tier=tier,
        scope=scope,
        rank=rank,
        label=label,
        default_permissions=frozenset(permissions),
    )


P = Permission

ROLE_REGISTRY: Dict[Role, RoleDefinition] = {
    # === Platform tier ===
    Role.PLATFORM_OWNER: _definition(
        Role.PLATFORM_OWNER, RoleTier.PLATFORM, Scope.PLATFORM, 0, "Platform owner",
        [
            P.PLATFORM_ALL, P.PLATFORM_COMPANY_MANAGE, P.PLATFORM_USER_MANAGE,
            P.PLATFORM_SYSTEM_CONFIG, P.PLATFORM_ANALYTICS, P.PLATFORM_SUPPORT,
            P.COMPANY_ALL, P.COMPANY_ADMIN_MANAGE, P.COMPANY_COURSE_MANAGE,
            P.COMPANY_BOOKING_MANAGE, P.COMPANY_USER_MANAGE, P.COMPANY_ANALYTICS,
            P.COURSE_TIMESLOT_MANAGE, P.COURSE_BOOKING_MANAGE, P.COURSE_CUSTOMER_VIEW,
            P.COURSE_ANALYTICS_VIEW,
            P.MANAGE_COMPANIES, P.MANAGE_COURSES, P.MANAGE_TIMESLOTS, P.MANAGE_BOOKINGS,
            P.MANAGE_USERS, P.MANAGE_ADMINS, P.MANAGE_GAMES, P.MANAGE_GOLF_CLUBS,
            P.MANAGE_PAYMENTS, P.VIEW_DASHBOARD, P.VIEW_ANALYTICS,
        ],
    ),
    Role.PLATFORM_ADMIN: _definition(
        Role.PLATFORM_ADMIN, RoleTier.PLATFORM, Scope.PLATFORM, 1, "Platform administrator",
        [
            P.PLATFORM_COMPANY_MANAGE, P.PLATFORM_USER_MANAGE, P.PLATFORM_ANALYTICS,
            P.PLATFORM_SUPPORT,
            P.COMPANY_ALL, P.COMPANY_ADMIN_MANAGE, P.COMPANY_COURSE_MANAGE,
            P.COMPANY_BOOKING_MANAGE, P.COMPANY_USER_MANAGE, P.COMPANY_ANALYTICS,
            P.MANAGE_COMPANIES, P.MANAGE_COURSES, P.MANAGE_TIMESLOTS, P.MANAGE_BOOKINGS,
            P.MANAGE_USERS, P.MANAGE_ADMINS, P.MANAGE_GAMES, P.MANAGE_GOLF_CLUBS,
            P.MANAGE_PAYMENTS, P.VIEW_DASHBOARD, P.VIEW_ANALYTICS,
        ],
    ),
    Role.PLATFORM_SUPPORT: _definition(
        Role.PLATFORM_SUPPORT, RoleTier.PLATFORM, Scope.PLATFORM, 2, "Platform support",
        [
            P.PLATFORM_SUPPORT, P.COMPANY_USER_MANAGE, P.COMPANY_BOOKING_MANAGE,
            P.COURSE_BOOKING_MANAGE, P.COURSE_CUSTOMER_VIEW, P.CUSTOMER_SUPPORT,
            P.BOOKING_RECEPTION, P.VIEW_DASHBOARD, P.MANAGE_BOOKINGS, P.MANAGE_USERS,
        ],
    ),
    Role.PLATFORM_ANALYST: _definition(
        Role.PLATFORM_ANALYST, RoleTier.PLATFORM, Scope.PLATFORM, 3, "Platform analyst",
        [
            P.PLATFORM_ANALYTICS, P.COMPANY_ANALYTICS, P.COURSE_ANALYTICS_VIEW,
            P.READ_ONLY, P.VIEW_DASHBOARD, P.VIEW_ANALYTICS,
        ],
    ),

    # === Company tier ===
    Role.COMPANY_OWNER: _definition(
        Role.COMPANY_OWNER, RoleTier.COMPANY, Scope.COMPANY, 0, "Company owner",
        [
            P.COMPANY_ALL, P.COMPANY_ADMIN_MANAGE, P.COMPANY_COURSE_MANAGE,
            P.COMPANY_BOOKING_MANAGE, P.COMPANY_USER_MANAGE, P.COMPANY_ANALYTICS,
            P.COURSE_TIMESLOT_MANAGE, P.COURSE_BOOKING_MANAGE, P.COURSE_CUSTOMER_VIEW,
            P.COURSE_ANALYTICS_VIEW,
            P.MANAGE_COURSES, P.MANAGE_TIMESLOTS, P.MANAGE_BOOKINGS, P.MANAGE_USERS,
            P.MANAGE_ADMINS, P.MANAGE_GAMES, P.MANAGE_GOLF_CLUBS, P.MANAGE_PAYMENTS,
            P.VIEW_DASHBOARD, P.VIEW_ANALYTICS,
        ],
    ),
    Role.COMPANY_MANAGER: _definition(
        Role.COMPANY_MANAGER, RoleTier.COMPANY, Scope.COMPANY, 1, "Company manager",
        [
            P.COMPANY_COURSE_MANAGE, P.COMPANY_BOOKING_MANAGE, P.COMPANY_USER_MANAGE,
            P.COMPANY_ANALYTICS,
            P.COURSE_TIMESLOT_MANAGE, P.COURSE_BOOKING_MANAGE, P.COURSE_CUSTOMER_VIEW,
            P.COURSE_ANALYTICS_VIEW,
            P.MANAGE_COURSES, P.MANAGE_TIMESLOTS, P.MANAGE_BOOKINGS, P.MANAGE_USERS,
            P.MANAGE_ADMINS, P.MANAGE_GAMES, P.VIEW_DASHBOARD, P.VIEW_ANALYTICS,
        ],
    ),
    Role.COURSE_MANAGER: _definition(
        Role.COURSE_MANAGER, RoleTier.COMPANY, Scope.COURSE, 2, "Course manager",
        [
            P.COURSE_TIMESLOT_MANAGE, P.COURSE_BOOKING_MANAGE, P.COURSE_CUSTOMER_VIEW,
            P.COURSE_ANALYTICS_VIEW, P.BOOKING_RECEPTION, P.CUSTOMER_SUPPORT,
            P.VIEW_DASHBOARD, P.MANAGE_TIMESLOTS, P.MANAGE_BOOKINGS, P.MANAGE_GAMES,
        ],
    ),
    Role.STAFF: _definition(
        Role.STAFF, RoleTier.COMPANY, Scope.COURSE, 3, "Staff",
        [
            P.COURSE_BOOKING_MANAGE, P.COURSE_CUSTOMER_VIEW, P.BOOKING_RECEPTION,
            P.CUSTOMER_SUPPORT, P.VIEW_DASHBOARD, P.MANAGE_BOOKINGS,
        ],
    ),
    Role.READONLY_STAFF: _definition(
        Role.READONLY_STAFF, RoleTier.COMPANY, Scope.COURSE, 4, "Read-only staff",
        [
            P.COURSE_CUSTOMER_VIEW, P.COURSE_ANALYTICS_VIEW, P.READ_ONLY, P.VIEW_DASHBOARD,
        ],
    ),
}


def get_role_definition(role: Role) -> RoleDefinition:
    return ROLE_REGISTRY[Role(role)]


def get_role_scope(role: Role) -> Scope:
    return get_role_definition(role).scope


def get_role_rank(role: Role) -> int:
    return get_role_definition(role).rank


def get_role_tier(role: Role) -> RoleTier:
    return get_role_definition(role).tier


def get_default_permissions(role: Role) -> FrozenSet[Permission]:
    return get_role_definition(role).default_permissions


def is_platform_role(role: Role) -> bool:
    return get_role_tier(role) == RoleTier.PLATFORM


def is_company_role(role: Role) -> bool:
    return get_role_tier(role) == RoleTier.COMPANY


@lru_cache(maxsize=None)
def roles_for_scope(scope: Scope) -> Tuple[Role, ...]:
    """Roles entitled to a scope, most senior first"""
    return tuple(sorted(
        (d.role for d in ROLE_REGISTRY.values() if d.scope == scope),
        key=get_role_rank,
    ))


@lru_cache(maxsize=None)
def roles_for_tier(tier: RoleTier) -> Tuple[Role, ...]:
    """Roles of a tier, most senior first"""
    return tuple(sorted(
        (d.role for d in ROLE_REGISTRY.values() if d.tier == tier),
        key=get_role_rank,
    ))


def compare_seniority(role_a: Role, role_b: Role) -> int:
    """
    Total order over all roles.

    Returns a negative number when role_a is more senior than role_b, zero when
    they are the same role and a positive number otherwise. Roles of different
    tiers are ordered by tier (platform first); inside a tier rank decides.
    """
    a = get_role_definition(role_a)
    b = get_role_definition(role_b)
    if a.tier != b.tier:
        return -1 if a.tier == RoleTier.PLATFORM else 1
    return a.rank - b.rank


def is_senior_to(role_a: Role, role_b: Role) -> bool:
    return compare_seniority(role_a, role_b) < 0
