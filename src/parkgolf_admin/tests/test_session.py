"""
Session context tests

Login, restore and logout transitions against an in-memory directory and an
in-memory aiocache store, including superseded transitions.
"""

import asyncio
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from aiocache import Cache

from parkgolf_admin.api.exceptions import (
    AuthFailureReason,
    ForbiddenException,
    InvalidCredentialsException,
    LoginSupersededException,
    ServiceUnavailableException,
)
from parkgolf_admin.permissions.catalog import Permission
from parkgolf_admin.permissions.handlers import AdminAction
from parkgolf_admin.permissions.roles import Role
from parkgolf_admin.session.context import SessionContext, SessionState
from parkgolf_admin.session.directory import InMemoryAdminDirectory, SessionTokens
from parkgolf_admin.session.storage import SessionStore


class GatedDirectory(InMemoryAdminDirectory):
    """Lookups wait until the test opens the gate."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()

    async def get_admin(self, admin_id):
        self.entered.set()
        await self.gate.wait()
        return await super().get_admin(admin_id)


class GatedStore(SessionStore):
    """Writes of the admin id wait until the test opens the gate."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()

    async def save_admin_id(self, admin_id):
        self.entered.set()
        await self.gate.wait()
        await super().save_admin_id(admin_id)


@pytest.fixture
def store():
    return SessionStore(cache=Cache(Cache.MEMORY, namespace=f"test-{uuid4().hex}"))


@pytest.fixture
def admins(make_admin, company_owner, company_manager, staff):
    inactive_support = make_admin(3, Role.PLATFORM_SUPPORT, is_active=False)
    return [company_owner, company_manager, staff, inactive_support]


@pytest.fixture
def directory(admins, company_owner):
    return InMemoryAdminDirectory(admins, passwords={company_owner.email: "pw"})


@pytest.fixture
def session(directory, store):
    return SessionContext(directory, store)


@pytest.mark.asyncio
class TestLogin:
    async def test_starts_anonymous(self, session):
        assert session.state == SessionState.ANONYMOUS
        assert session.current_admin is None
        assert not session.has_permission(Permission.VIEW_DASHBOARD)
        assert session.scope_filter() is None

    async def test_login_and_logout(self, session, store, company_owner):
        admin = await session.login(company_owner.id)

        assert admin is company_owner
        assert session.state == SessionState.AUTHENTICATED
        assert session.is_authenticated
        assert await store.load_admin_id() == company_owner.id

        await session.logout()

        assert session.state == SessionState.ANONYMOUS
        assert session.current_admin is None
        assert await store.load_admin_id() is None

    @pytest.mark.parametrize("admin_id,reason", [
        (404, AuthFailureReason.NOT_FOUND),
        (3, AuthFailureReason.INACTIVE),
    ])
    async def test_failed_login_stays_anonymous(self, session, store, admin_id, reason):
        with pytest.raises(InvalidCredentialsException) as exc_info:
            await session.login(admin_id)

        assert exc_info.value.reason == reason
        assert exc_info.value.status_code == 401
        assert session.state == SessionState.ANONYMOUS
        assert await store.load_admin_id() is None

    async def test_not_found_and_inactive_look_the_same(self, session):
        details = []
        for admin_id in (404, 3):
            with pytest.raises(InvalidCredentialsException) as exc_info:
                await session.login(admin_id)
            details.append(exc_info.value.detail)
        assert details[0] == details[1]

    async def test_failed_login_keeps_current_admin(self, session, company_owner):
        await session.login(company_owner.id)
        with pytest.raises(InvalidCredentialsException):
            await session.login(3)
        assert session.current_admin is company_owner

    async def test_login_replaces_current_admin(self, session, company_owner, staff):
        await session.login(company_owner.id)
        await session.login(staff.id)
        assert session.current_admin is staff

    async def test_lookup_unavailable_propagates(self, session, directory):
        directory.get_admin = AsyncMock(side_effect=ServiceUnavailableException(detail="unavailable"))
        with pytest.raises(ServiceUnavailableException):
            await session.login(10)
        assert session.state == SessionState.ANONYMOUS

    async def test_generation_increases(self, session, company_owner):
        before = session.generation
        await session.login(company_owner.id)
        await session.logout()
        assert session.generation == before + 2


@pytest.mark.asyncio
class TestCredentialsLogin:
    async def test_tokens_are_persisted(self, session, store, company_owner):
        await session.login_with_credentials(company_owner.email, "pw")

        assert session.current_admin is company_owner
        tokens = await store.load_tokens()
        assert tokens.access_token.startswith("access-10-")
        assert tokens.refresh_token.startswith("refresh-10-")

    async def test_wrong_password(self, session, store, company_owner):
        with pytest.raises(InvalidCredentialsException) as exc_info:
            await session.login_with_credentials(company_owner.email, "wrong")
        assert exc_info.value.reason == AuthFailureReason.CREDENTIALS
        assert session.state == SessionState.ANONYMOUS
        assert (await store.load_tokens()).access_token is None

    async def test_logout_revokes_tokens(self, session, directory, store, company_owner):
        await session.login_with_credentials(company_owner.email, "pw")
        await session.logout()

        assert len(directory.revoked) == 1
        assert directory.revoked[0].access_token.startswith("access-10-")
        assert await store.load_tokens() == SessionTokens()


@pytest.mark.asyncio
class TestLogout:
    async def test_revocation_failure_still_logs_out(self, session, directory, store, company_owner):
        await session.login_with_credentials(company_owner.email, "pw")
        directory.revoke = AsyncMock(side_effect=ServiceUnavailableException())

        await session.logout()

        directory.revoke.assert_awaited_once()
        assert session.state == SessionState.ANONYMOUS
        assert await store.load_admin_id() is None

    async def test_storage_failure_still_logs_out(self, session, store, company_owner):
        await session.login(company_owner.id)
        store.clear = AsyncMock(side_effect=RuntimeError("storage down"))

        await session.logout()

        assert session.state == SessionState.ANONYMOUS

    async def test_logout_while_anonymous(self, session):
        await session.logout()
        assert session.state == SessionState.ANONYMOUS


@pytest.mark.asyncio
class TestRestore:
    async def test_nothing_stored(self, session):
        assert await session.restore() is None
        assert session.state == SessionState.ANONYMOUS

    async def test_restore_active_admin(self, session, store, company_owner):
        await store.save_admin_id(company_owner.id)
        assert await session.restore() is company_owner
        assert session.state == SessionState.AUTHENTICATED

    async def test_restore_inactive_admin_clears_storage(self, session, store):
        await store.save_admin_id(3)
        assert await session.restore() is None
        assert session.state == SessionState.ANONYMOUS
        assert await store.load_admin_id() is None

    async def test_restore_unknown_admin_clears_storage(self, session, store):
        await store.save_admin_id(404)
        assert await session.restore() is None
        assert await store.load_admin_id() is None

    async def test_restore_unavailable_keeps_storage(self, session, directory, store, company_owner):
        await store.save_admin_id(company_owner.id)
        directory.get_admin = AsyncMock(side_effect=ServiceUnavailableException(detail="unavailable"))

        with pytest.raises(ServiceUnavailableException):
            await session.restore()

        assert session.state == SessionState.ANONYMOUS
        assert await store.load_admin_id() == company_owner.id

    async def test_malformed_stored_id(self, session, store):
        await store.cache.set(store._key("admin_id"), "not-a-number")
        assert await session.restore() is None


@pytest.mark.asyncio
class TestSupersededTransitions:
    async def test_logout_discards_pending_login(self, admins, store, company_owner):
        directory = GatedDirectory(admins)
        session = SessionContext(directory, store)

        login = asyncio.create_task(session.login(company_owner.id))
        await directory.entered.wait()
        logout = asyncio.create_task(session.logout())
        await asyncio.sleep(0)
        assert session.state == SessionState.ANONYMOUS

        directory.gate.set()
        with pytest.raises(LoginSupersededException):
            await login
        await logout

        assert session.state == SessionState.ANONYMOUS
        assert await store.load_admin_id() is None

    async def test_later_login_wins(self, admins, store, company_owner, staff):
        directory = GatedDirectory(admins)
        session = SessionContext(directory, store)

        first = asyncio.create_task(session.login(company_owner.id))
        await directory.entered.wait()
        second = asyncio.create_task(session.login(staff.id))
        await asyncio.sleep(0)

        directory.gate.set()
        with pytest.raises(LoginSupersededException):
            await first
        assert await second is staff

        assert session.current_admin is staff
        assert await store.load_admin_id() == staff.id

    async def test_login_discards_pending_restore(self, admins, store, company_owner, staff):
        directory = GatedDirectory(admins)
        session = SessionContext(directory, store)
        await store.save_admin_id(company_owner.id)

        restore = asyncio.create_task(session.restore())
        await directory.entered.wait()
        login = asyncio.create_task(session.login(staff.id))
        await asyncio.sleep(0)

        directory.gate.set()
        with pytest.raises(LoginSupersededException):
            await restore
        await login

        assert session.current_admin is staff

    async def test_superseded_login_leaves_nothing_stored(self, directory):
        store = GatedStore(cache=Cache(Cache.MEMORY, namespace=f"test-{uuid4().hex}"))
        session = SessionContext(directory, store)

        first = asyncio.create_task(session.login(10))
        await store.entered.wait()
        second = asyncio.create_task(session.login(3))
        await asyncio.sleep(0)

        store.gate.set()
        with pytest.raises(LoginSupersededException):
            await first
        with pytest.raises(InvalidCredentialsException):
            await second

        assert session.current_admin is None
        assert await store.load_admin_id() is None
        assert await SessionContext(directory, store).restore() is None

    async def test_superseded_login_keeps_previous_session(self, directory, staff):
        store = GatedStore(cache=Cache(Cache.MEMORY, namespace=f"test-{uuid4().hex}"))
        session = SessionContext(directory, store)
        store.gate.set()
        await session.login(staff.id)
        store.gate.clear()
        store.entered.clear()

        first = asyncio.create_task(session.login(10))
        await store.entered.wait()
        second = asyncio.create_task(session.login(3))
        await asyncio.sleep(0)

        store.gate.set()
        with pytest.raises(LoginSupersededException):
            await first
        with pytest.raises(InvalidCredentialsException):
            await second

        assert session.current_admin is staff
        assert await store.load_admin_id() == staff.id
        assert await SessionContext(directory, store).restore() is staff


@pytest.mark.asyncio
class TestBoundChecks:
    async def test_checks_follow_current_admin(self, session, company_owner, company_manager, other_company_owner):
        await session.login(company_owner.id)

        assert session.has_permission(Permission.MANAGE_ADMINS)
        assert session.has_any_permission([Permission.MANAGE_COMPANIES, Permission.MANAGE_COURSES])
        assert not session.has_all_permissions([Permission.MANAGE_COMPANIES, Permission.MANAGE_COURSES])
        assert session.can_access_company(1)
        assert not session.can_access_company(2)
        assert session.can_access_course(100)
        assert set(session.accessible_companies()) == {1}
        assert session.accessible_courses().unrestricted
        assert session.can_manage_admin(company_manager)
        assert not session.can_manage_admin(other_company_owner)
        assert session.can_add_admin_to_company(1)

    async def test_check_admin_action(self, session, company_manager, company_owner):
        await session.login(company_manager.id)
        with pytest.raises(ForbiddenException):
            session.check_admin_action(AdminAction.DEACTIVATE, target=company_owner)
        assert session.current_admin is company_manager

    async def test_can_perform_admin_action(self, session, company_owner, staff):
        assert not session.can_perform_admin_action(AdminAction.UPDATE, target=staff)
        await session.login(company_owner.id)
        assert session.can_perform_admin_action(AdminAction.UPDATE, target=staff)
        assert not session.can_perform_admin_action(AdminAction.DEACTIVATE, target=company_owner)

    async def test_anonymous_checks_are_denied(self, session, company_manager):
        assert not session.can_manage_admin(company_manager)
        with pytest.raises(ForbiddenException):
            session.check_admin_action(AdminAction.UPDATE, target=company_manager)

    async def test_list_admins_is_scoped(self, session, staff):
        assert await session.list_admins() == []
        await session.login(staff.id)
        listed = await session.list_admins()
        assert [a.id for a in listed] == [13]
