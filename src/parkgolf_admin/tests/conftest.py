"""
Pytest configuration and fixtures for all tests.
"""

import os
import sys
import pytest

# Ensure parkgolf_admin is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from parkgolf_admin.permissions.principal import Admin
from parkgolf_admin.permissions.roles import Role


def build_admin(admin_id: int, role: Role, company_id=None, course_ids=(), permissions=(), is_active=True, **extra):
    """Build an Admin with scope derived from the role."""
    return Admin(
        id=admin_id,
        role=role,
        company_id=company_id,
        course_ids=frozenset(course_ids),
        permissions=frozenset(permissions),
        is_active=is_active,
        **extra,
    )


@pytest.fixture
def make_admin():
    return build_admin


@pytest.fixture
def platform_owner():
    return build_admin(1, Role.PLATFORM_OWNER, email="owner@parkgolf.test", name="Platform Owner")


@pytest.fixture
def platform_admin():
    return build_admin(2, Role.PLATFORM_ADMIN)


@pytest.fixture
def platform_support():
    return build_admin(3, Role.PLATFORM_SUPPORT)


@pytest.fixture
def company_owner():
    return build_admin(10, Role.COMPANY_OWNER, company_id=1, email="owner@company1.test")


@pytest.fixture
def company_manager():
    return build_admin(11, Role.COMPANY_MANAGER, company_id=1)


@pytest.fixture
def course_manager():
    return build_admin(12, Role.COURSE_MANAGER, company_id=1, course_ids=[100, 101])


@pytest.fixture
def staff():
    return build_admin(13, Role.STAFF, company_id=1, course_ids=[100])


@pytest.fixture
def other_company_owner():
    return build_admin(20, Role.COMPANY_OWNER, company_id=2)


@pytest.fixture(autouse=True)
def default_grant_policy(monkeypatch):
    """Pin the grant policy so that the environment does not leak into tests."""
    from parkgolf_admin.settings import settings
    monkeypatch.setattr(settings, "PERMISSION_GRANT_POLICY", "restrict")
