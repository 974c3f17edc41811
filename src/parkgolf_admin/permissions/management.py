"""
Admin-management authorizer.

Decides whether one admin may manage another, add admins to a company or
hand out a role. Pure and total: any missing or inactive party yields False.
"""

import logging
from typing import FrozenSet, Optional, Tuple

from parkgolf_admin.permissions.catalog import Permission
from parkgolf_admin.permissions.principal import Admin, RoleAssignment
from parkgolf_admin.permissions.roles import (
    Role,
    RoleTier,
    Scope,
    get_default_permissions,
    get_role_definition,
    roles_for_tier,
)

logger = logging.getLogger(__name__)

# Company-scoped roles allowed to add admins to their own company
COMPANY_ADMIN_CREATORS: FrozenSet[Role] = frozenset({Role.COMPANY_OWNER, Role.COMPANY_MANAGER})


def _is_effective(admin: Optional[Admin]) -> bool:
    return admin is not None and admin.is_active


def _outranks_in_company(actor: RoleAssignment, target: RoleAssignment) -> bool:
    """Strict seniority inside the company tier, same company only"""
    if actor.tier != RoleTier.COMPANY or target.tier != RoleTier.COMPANY:
        return False
    if actor.company_id is None or actor.company_id != target.company_id:
        return False
    return actor.rank < target.rank


def can_manage_admin(actor: Optional[Admin], target: Optional[Admin]) -> bool:
    """
    Whether `actor` may edit, deactivate or reassign `target`.

    - PLATFORM actors manage anyone.
    - PLATFORM targets are managed only by PLATFORM actors.
    - COURSE actors manage nobody.
    - COMPANY actors manage strictly junior company-tier admins of their own
      company; never peers or seniors.
    """
    if not _is_effective(actor) or not _is_effective(target):
        return False

    if actor.scope == Scope.PLATFORM:
        return True

    if target.scope == Scope.PLATFORM:
        return False

    if actor.scope == Scope.COURSE:
        return False

    return _outranks_in_company(actor, target)


def can_add_admin_to_company(actor: Optional[Admin], company_id: Optional[int]) -> bool:
    if not _is_effective(actor) or company_id is None:
        return False

    if actor.scope == Scope.PLATFORM:
        return True

    return (
        actor.scope == Scope.COMPANY
        and actor.company_id == company_id
        and actor.role in COMPANY_ADMIN_CREATORS
    )


def can_assign_role(actor: Optional[Admin], role: Role, company_id: Optional[int] = None) -> bool:
    """
    Whether `actor` may give `role` to an admin of `company_id`.

    Platform roles carry no company; only PLATFORM actors hand them out.
    """
    if not _is_effective(actor):
        return False

    definition = get_role_definition(role)

    if actor.scope == Scope.PLATFORM:
        return definition.scope == Scope.PLATFORM or company_id is not None

    if definition.tier == RoleTier.PLATFORM:
        return False

    return (
        can_add_admin_to_company(actor, company_id)
        and actor.tier == RoleTier.COMPANY
        and actor.rank < definition.rank
    )


def assignable_roles(actor: Optional[Admin], company_id: Optional[int] = None) -> Tuple[Role, ...]:
    """Roles the actor may hand out, most senior first"""
    if not _is_effective(actor):
        return ()
    candidates = roles_for_tier(RoleTier.PLATFORM) + roles_for_tier(RoleTier.COMPANY)
    return tuple(role for role in candidates if can_assign_role(actor, role, company_id))


def assignable_permissions(role: Role) -> FrozenSet[Permission]:
    """Permissions the permission editor offers for a role: its default set"""
    return get_default_permissions(role)


def can_assign(actor: Optional[Admin], assignment: RoleAssignment) -> bool:
    """Whether an admin with `assignment` may be created or produced by the actor"""
    if not can_assign_role(actor, assignment.role, assignment.company_id):
        logger.debug(f"Role {assignment.role.value} in company {assignment.company_id} not assignable")
        return False
    extra = assignment.permissions - assignable_permissions(assignment.role)
    if extra:
        logger.debug(f"Permissions beyond role {assignment.role.value}: {sorted(p.value for p in extra)}")
        return False
    return True
