"""
Permission catalog.

The closed set of permissions an administrator can hold, grouped by the
subject they govern. Two values are wildcards: PLATFORM_ALL stands for every
permission and COMPANY_ALL for every company-subject permission.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable


class PermissionSubject(str, Enum):
    PLATFORM = "PLATFORM"
    COMPANY = "COMPANY"
    COURSE = "COURSE"
    GENERIC = "GENERIC"


class Permission(str, Enum):
    # Platform-wide
    PLATFORM_ALL = "PLATFORM_ALL"
    PLATFORM_COMPANY_MANAGE = "PLATFORM_COMPANY_MANAGE"
    PLATFORM_USER_MANAGE = "PLATFORM_USER_MANAGE"
    PLATFORM_SYSTEM_CONFIG = "PLATFORM_SYSTEM_CONFIG"
    PLATFORM_ANALYTICS = "PLATFORM_ANALYTICS"
    PLATFORM_SUPPORT = "PLATFORM_SUPPORT"

    # Company-wide
    COMPANY_ALL = "COMPANY_ALL"
    COMPANY_ADMIN_MANAGE = "COMPANY_ADMIN_MANAGE"
    COMPANY_COURSE_MANAGE = "COMPANY_COURSE_MANAGE"
    COMPANY_BOOKING_MANAGE = "COMPANY_BOOKING_MANAGE"
    COMPANY_USER_MANAGE = "COMPANY_USER_MANAGE"
    COMPANY_ANALYTICS = "COMPANY_ANALYTICS"

    # Course-wide
    COURSE_TIMESLOT_MANAGE = "COURSE_TIMESLOT_MANAGE"
    COURSE_BOOKING_MANAGE = "COURSE_BOOKING_MANAGE"
    COURSE_CUSTOMER_VIEW = "COURSE_CUSTOMER_VIEW"
    COURSE_ANALYTICS_VIEW = "COURSE_ANALYTICS_VIEW"

    # Generic feature gates
    MANAGE_COMPANIES = "MANAGE_COMPANIES"
    MANAGE_COURSES = "MANAGE_COURSES"
    MANAGE_TIMESLOTS = "MANAGE_TIMESLOTS"
    MANAGE_BOOKINGS = "MANAGE_BOOKINGS"
    MANAGE_USERS = "MANAGE_USERS"
    MANAGE_ADMINS = "MANAGE_ADMINS"
    MANAGE_GAMES = "MANAGE_GAMES"
    MANAGE_GOLF_CLUBS = "MANAGE_GOLF_CLUBS"
    MANAGE_PAYMENTS = "MANAGE_PAYMENTS"
    VIEW_DASHBOARD = "VIEW_DASHBOARD"
    VIEW_ANALYTICS = "VIEW_ANALYTICS"
    READ_ONLY = "READ_ONLY"
    BOOKING_RECEPTION = "BOOKING_RECEPTION"
    CUSTOMER_SUPPORT = "CUSTOMER_SUPPORT"

    @property
    def subject(self) -> PermissionSubject:
        prefix = self.value.split("_", 1)[0]
        if prefix in ("PLATFORM", "COMPANY", "COURSE"):
            return PermissionSubject(prefix)
        return PermissionSubject.GENERIC

    @property
    def label(self) -> str:
        return PERMISSION_LABELS[self]


PERMISSION_LABELS: Dict[Permission, str] = {
    Permission.PLATFORM_ALL: "Full platform access",
    Permission.PLATFORM_COMPANY_MANAGE: "Manage companies",
    Permission.PLATFORM_USER_MANAGE: "Manage all users",
    Permission.PLATFORM_SYSTEM_CONFIG: "System configuration",
    Permission.PLATFORM_ANALYTICS: "Platform analytics",
    Permission.PLATFORM_SUPPORT: "Platform customer support",
    Permission.COMPANY_ALL: "Full company access",
    Permission.COMPANY_ADMIN_MANAGE: "Manage company admins",
    Permission.COMPANY_COURSE_MANAGE: "Manage company courses",
    Permission.COMPANY_BOOKING_MANAGE: "Manage company bookings",
    Permission.COMPANY_USER_MANAGE: "Manage company customers",
    Permission.COMPANY_ANALYTICS: "Company analytics",
    Permission.COURSE_TIMESLOT_MANAGE: "Manage time slots",
    Permission.COURSE_BOOKING_MANAGE: "Manage bookings",
    Permission.COURSE_CUSTOMER_VIEW: "View customers",
    Permission.COURSE_ANALYTICS_VIEW: "View course analytics",
    Permission.MANAGE_COMPANIES: "Companies",
    Permission.MANAGE_COURSES: "Courses",
    Permission.MANAGE_TIMESLOTS: "Time slots",
    Permission.MANAGE_BOOKINGS: "Bookings",
    Permission.MANAGE_USERS: "Users",
    Permission.MANAGE_ADMINS: "Administrators",
    Permission.MANAGE_GAMES: "Games",
    Permission.MANAGE_GOLF_CLUBS: "Golf clubs",
    Permission.MANAGE_PAYMENTS: "Payments",
    Permission.VIEW_DASHBOARD: "Dashboard",
    Permission.VIEW_ANALYTICS: "Analytics and reports",
    Permission.READ_ONLY: "Read only",
    Permission.BOOKING_RECEPTION: "Booking reception",
    Permission.CUSTOMER_SUPPORT: "Customer support",
}

ALL_PERMISSIONS: FrozenSet[Permission] = frozenset(Permission)


def permissions_for_subject(subject: PermissionSubject) -> FrozenSet[Permission]:
    return frozenset(p for p in Permission if p.subject == subject)


def expand_wildcards(permissions: Iterable[Permission]) -> FrozenSet[Permission]:
    """Replace PLATFORM_ALL/COMPANY_ALL by the permissions they stand for."""
    granted = set(permissions)
    if Permission.PLATFORM_ALL in granted:
        return ALL_PERMISSIONS
    if Permission.COMPANY_ALL in granted:
        granted |= permissions_for_subject(PermissionSubject.COMPANY)
    return frozenset(granted)
