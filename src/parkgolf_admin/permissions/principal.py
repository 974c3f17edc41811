import logging
from typing import Any, Dict, FrozenSet, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from parkgolf_admin.api.exceptions import BadRequestException
from parkgolf_admin.permissions.catalog import Permission
from parkgolf_admin.permissions.migration import migrate_permission_codes, migrate_role_code
from parkgolf_admin.permissions.roles import (
    Role,
    RoleDefinition,
    RoleTier,
    Scope,
    get_role_definition,
)

logger = logging.getLogger(__name__)


class RoleAssignment(BaseModel):
    """
    Role, scope and resource bindings of an administrator.

    Used on its own for drafts (an admin about to be created or reassigned)
    and as the base of `Admin`. Scope may be omitted and is then derived from
    the role; a scope that disagrees with the role is rejected.
    """

    role: Role
    scope: Scope
    permissions: FrozenSet[Permission] = Field(default_factory=frozenset)
    company_id: Optional[int] = None
    course_ids: FrozenSet[int] = Field(default_factory=frozenset)

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    @model_validator(mode="before")
    @classmethod
    def derive_scope_from_role(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("scope") is not None:
            return data
        try:
            role = Role(data.get("role"))
        except ValueError:
            # Field validation reports the invalid role
            return data
        return {**data, "scope": get_role_definition(role).scope}

    @model_validator(mode="after")
    def check_scope_bindings(self):
        expected = get_role_definition(self.role).scope
        if self.scope != expected:
            raise ValueError(f"Role {self.role.value} requires scope {expected.value}, got {self.scope.value}")
        if self.scope != Scope.PLATFORM and self.company_id is None:
            raise ValueError(f"Scope {self.scope.value} requires a company id")
        if self.scope == Scope.COURSE and not self.course_ids:
            raise ValueError("Scope COURSE requires at least one course id")
        return self

    @property
    def definition(self) -> RoleDefinition:
        return get_role_definition(self.role)

    @property
    def tier(self) -> RoleTier:
        return self.definition.tier

    @property
    def rank(self) -> int:
        return self.definition.rank


class Admin(RoleAssignment):
    """An administrator as seen by the authorization core. Immutable."""

    id: int
    is_active: bool = True
    email: Optional[str] = None
    name: Optional[str] = None

    def reassigned(self, role: Optional[Role] = None, company_id: Optional[int] = None,
                   course_ids: Optional[FrozenSet[int]] = None,
                   permissions: Optional[FrozenSet[Permission]] = None) -> "Admin":
        """Return this admin with new bindings. Scope is re-derived from the role."""
        data = self.model_dump(exclude={"scope"})
        if role is not None:
            data["role"] = role
        if company_id is not None:
            data["company_id"] = company_id
        if course_ids is not None:
            data["course_ids"] = course_ids
        if permissions is not None:
            data["permissions"] = permissions
        if get_role_definition(Role(data["role"])).scope == Scope.PLATFORM:
            data["company_id"] = None
            data["course_ids"] = frozenset()
        return Admin.model_validate(data)

    def as_assignment(self) -> RoleAssignment:
        return RoleAssignment.model_validate(self.model_dump(include={"role", "scope", "permissions", "company_id", "course_ids"}))


def parse_admin_record(record: Dict[str, Any]) -> Admin:
    """
    Build an Admin from an identity-service record.

    Accepts the camelCase wire shape, legacy role codes and permission entries
    given as strings or `{"permission": code}` objects. Raises
    BadRequestException when the record can not describe a valid admin.
    """
    if not isinstance(record, dict):
        raise BadRequestException(f"Admin record must be an object, got {type(record).__name__}")

    raw_role = record.get("roleCode") or record.get("role") or next(iter(record.get("roles") or []), None)

    try:
        role = migrate_role_code(raw_role)
    except ValueError as e:
        raise BadRequestException(str(e))

    permissions, _ = migrate_permission_codes(record.get("permissions") or [])

    # Missing means active; anything else goes through bool validation
    is_active = record.get("isActive")
    if is_active is None:
        is_active = True

    data = {
        "id": record.get("id"),
        "role": role,
        "permissions": permissions,
        "companyId": record.get("companyId"),
        "courseIds": record.get("courseIds") or [],
        "isActive": is_active,
        "email": record.get("email"),
        "name": record.get("name"),
    }

    try:
        return Admin.model_validate(data)
    except ValidationError as e:
        logger.error(f"Rejected admin record {record.get('id')!r}: {e}")
        raise BadRequestException(f"Invalid admin record {record.get('id')!r}")
