"""
Authorization core for the park-golf admin console

Main components:
- catalog: Permission catalog and wildcard expansion
- roles: Role registry with scope, tier, seniority and default permissions
- principal: Admin and RoleAssignment models, wire record parsing
- scope: Scope resolver for company and course access
- core: Decision engine (effective permissions, capability checks)
- management: Admin-management authorizer
- handlers: Commit-time checks for admin-management actions
- migration: Legacy role and permission code mapping
"""

from .catalog import (
    Permission,
    PermissionSubject,
    ALL_PERMISSIONS,
    PERMISSION_LABELS,
    permissions_for_subject,
    expand_wildcards,
)

from .roles import (
    Role,
    RoleTier,
    Scope,
    RoleDefinition,
    ROLE_REGISTRY,
    get_role_definition,
    get_role_scope,
    get_role_rank,
    get_role_tier,
    get_default_permissions,
    is_platform_role,
    is_company_role,
    roles_for_scope,
    roles_for_tier,
    compare_seniority,
    is_senior_to,
)

from .principal import (
    Admin,
    RoleAssignment,
    parse_admin_record,
)

from .scope import (
    AccessibleIds,
    ScopeFilter,
    get_accessible_companies,
    get_accessible_courses,
    can_access_company,
    can_access_course,
    build_scope_filter,
)

from .core import (
    PermissionGrantPolicy,
    effective_permissions,
    has_permission,
    has_any_permission,
    has_all_permissions,
    is_role,
    is_any_role,
    is_platform_level,
    is_company_level,
    is_course_level,
    can_view_dashboard,
    can_manage_companies,
    can_manage_courses,
    can_manage_timeslots,
    can_manage_bookings,
    can_manage_users,
    can_manage_admins,
    can_view_analytics,
    can_manage_system,
    get_display_info,
)

from .management import (
    can_manage_admin,
    can_add_admin_to_company,
    can_assign_role,
    can_assign,
    assignable_roles,
    assignable_permissions,
)

from .handlers import (
    AdminAction,
    AdminActionHandler,
    AdminActionRegistry,
    admin_action_registry,
    can_perform_admin_action,
    check_admin_action,
)

from .migration import (
    LEGACY_ROLE_MAPPING,
    LEGACY_PERMISSION_MAPPING,
    migrate_role_code,
    migrate_permission_code,
    migrate_permission_codes,
    migrate_admin_record,
)
