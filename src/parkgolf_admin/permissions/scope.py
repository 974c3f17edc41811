"""
Scope resolver: which companies and courses an admin may touch.

All functions are pure and total. A missing or inactive admin resolves to
"nothing", never to an error.
"""

from typing import FrozenSet, Iterable, Optional
from pydantic import BaseModel, ConfigDict

from parkgolf_admin.permissions.principal import Admin
from parkgolf_admin.permissions.roles import Scope


class AccessibleIds(frozenset):
    """
    Set of resource ids an admin may access.

    An empty set is ambiguous on its own, so instances carry `unrestricted`:
    empty and unrestricted means "all" (the sentinel for broader scopes),
    empty and restricted means "none".
    """

    unrestricted: bool

    def __new__(cls, ids: Iterable[int] = (), unrestricted: bool = False):
        instance = super().__new__(cls, ids)
        instance.unrestricted = unrestricted and not instance
        return instance

    @classmethod
    def everything(cls) -> "AccessibleIds":
        return cls(unrestricted=True)

    @classmethod
    def nothing(cls) -> "AccessibleIds":
        return cls()

    def allows(self, resource_id: Optional[int]) -> bool:
        if resource_id is None:
            return False
        return self.unrestricted or resource_id in self

    def __repr__(self) -> str:
        if self.unrestricted:
            return "AccessibleIds(<all>)"
        return f"AccessibleIds({sorted(self)!r})"


class ScopeFilter(BaseModel):
    """Filter forwarded to list calls so that listings are narrowed at the source"""

    company_id: Optional[int] = None
    course_ids: Optional[FrozenSet[int]] = None

    model_config = ConfigDict(frozen=True)

    def to_params(self) -> dict:
        params = {}
        if self.company_id is not None:
            params["companyId"] = self.company_id
        if self.course_ids:
            params["courseIds"] = ",".join(str(c) for c in sorted(self.course_ids))
        return params


def _is_effective(admin: Optional[Admin]) -> bool:
    return admin is not None and admin.is_active


def get_accessible_companies(admin: Optional[Admin]) -> AccessibleIds:
    if not _is_effective(admin):
        return AccessibleIds.nothing()
    if admin.scope == Scope.PLATFORM:
        return AccessibleIds.everything()
    return AccessibleIds([admin.company_id])


def get_accessible_courses(admin: Optional[Admin]) -> AccessibleIds:
    """
    Courses an admin may access.

    PLATFORM and COMPANY scopes get the "all" sentinel. For COMPANY scope
    this means all courses of the admin's company; callers pair it with the
    company filter from `get_accessible_companies`.
    """
    if not _is_effective(admin):
        return AccessibleIds.nothing()
    if admin.scope in (Scope.PLATFORM, Scope.COMPANY):
        return AccessibleIds.everything()
    return AccessibleIds(admin.course_ids)


def can_access_company(admin: Optional[Admin], company_id: Optional[int]) -> bool:
    if not _is_effective(admin) or company_id is None:
        return False
    if admin.scope == Scope.PLATFORM:
        return True
    return admin.company_id == company_id


def can_access_course(admin: Optional[Admin], course_id: Optional[int]) -> bool:
    if not _is_effective(admin) or course_id is None:
        return False
    if admin.scope == Scope.PLATFORM:
        return True
    if admin.scope == Scope.COMPANY:
        # Course-to-company membership is checked by the caller's company filter
        return True
    return course_id in admin.course_ids


def build_scope_filter(admin: Optional[Admin]) -> Optional[ScopeFilter]:
    """Filter for list calls; None means the admin may not list anything"""
    if not _is_effective(admin):
        return None
    if admin.scope == Scope.PLATFORM:
        return ScopeFilter()
    if admin.scope == Scope.COMPANY:
        return ScopeFilter(company_id=admin.company_id)
    return ScopeFilter(company_id=admin.company_id, course_ids=admin.course_ids)
