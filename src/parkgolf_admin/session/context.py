import asyncio
import logging
from enum import Enum
from typing import Iterable, List, Optional

from parkgolf_admin.api.exceptions import (
    AuthFailureReason,
    InvalidCredentialsException,
    LoginSupersededException,
    NotFoundException,
    UnauthorizedException,
)
from parkgolf_admin.permissions import core, management, scope
from parkgolf_admin.permissions.catalog import Permission
from parkgolf_admin.permissions.core import PermissionGrantPolicy
from parkgolf_admin.permissions.handlers import AdminAction, can_perform_admin_action, check_admin_action
from parkgolf_admin.permissions.principal import Admin, RoleAssignment
from parkgolf_admin.permissions.scope import AccessibleIds, ScopeFilter
from parkgolf_admin.session.directory import AdminDirectory, SessionTokens
from parkgolf_admin.session.storage import SessionStore

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


class SessionContext:
    """
    The signed-in admin of one console session.

    This is the only mutable state of the package; all decision functions get
    the admin passed in. Login and restore are single-flight: they run one at
    a time under a lock, and each takes a generation number on entry. A
    transition that finds the generation moved on when its lookup resolves
    was superseded by a later login or a logout and is discarded with
    LoginSupersededException.
    """

    def __init__(self, directory: AdminDirectory, store: Optional[SessionStore] = None,
                 policy: Optional[PermissionGrantPolicy] = None):
        self.directory = directory
        self.store = store if store is not None else SessionStore()
        self.policy = policy
        self._lock = asyncio.Lock()
        self._generation = 0
        self._admin: Optional[Admin] = None
        self._tokens: Optional[SessionTokens] = None

    @property
    def current_admin(self) -> Optional[Admin]:
        return self._admin

    @property
    def state(self) -> SessionState:
        return SessionState.AUTHENTICATED if self._admin is not None else SessionState.ANONYMOUS

    @property
    def is_authenticated(self) -> bool:
        return self._admin is not None

    @property
    def generation(self) -> int:
        return self._generation

    def _advance(self) -> int:
        self._generation += 1
        return self._generation

    def _ensure_current(self, generation: int):
        if generation != self._generation:
            logger.info(f"Discarding session transition {generation}, current is {self._generation}")
            raise LoginSupersededException()

    async def _lookup(self, admin_id: int) -> Admin:
        try:
            admin = await self.directory.get_admin(admin_id)
        except NotFoundException:
            raise InvalidCredentialsException(AuthFailureReason.NOT_FOUND)
        if not admin.is_active:
            raise InvalidCredentialsException(AuthFailureReason.INACTIVE)
        return admin

    async def _commit(self, generation: int, admin: Admin, tokens: Optional[SessionTokens] = None) -> Admin:
        self._ensure_current(generation)
        previous_id = await self.store.load_admin_id()
        previous_tokens = await self.store.load_tokens()
        self._ensure_current(generation)

        if tokens is not None:
            await self.store.save_tokens(tokens)
        await self.store.save_admin_id(admin.id)

        if generation != self._generation:
            # Superseded while writing: put back what the slot held before
            await self._restore_persisted(previous_id, previous_tokens)
            self._ensure_current(generation)

        self._admin = admin
        if tokens is not None:
            self._tokens = tokens
        logger.info(f"Admin {admin.id} signed in as {admin.role.value}")
        return admin

    async def _restore_persisted(self, admin_id: Optional[int], tokens: SessionTokens):
        if admin_id is None:
            await self.store.clear()
            return
        await self.store.save_tokens(tokens)
        await self.store.save_admin_id(admin_id)

    async def restore(self) -> Optional[Admin]:
        """
        Resume a persisted session.

        Returns the admin when the stored id still names an active admin.
        A stale id (unknown or inactive admin) is cleared from storage and None
        is returned. Lookup failures propagate and leave storage untouched.
        """
        generation = self._advance()
        async with self._lock:
            admin_id = await self.store.load_admin_id()
            if admin_id is None:
                self._ensure_current(generation)
                return None

            try:
                admin = await self._lookup(admin_id)
            except InvalidCredentialsException as e:
                self._ensure_current(generation)
                logger.info(f"Dropping stored session of admin {admin_id}: {e.reason.value}")
                self._admin = None
                self._tokens = None
                await self.store.clear()
                return None

            tokens = await self.store.load_tokens()
            self._ensure_current(generation)
            self._admin = admin
            self._tokens = tokens
            logger.info(f"Restored session of admin {admin.id}")
            return admin

    async def login(self, admin_id: int) -> Admin:
        """Sign in by admin id. On failure the previous state is kept."""
        generation = self._advance()
        async with self._lock:
            admin = await self._lookup(admin_id)
            return await self._commit(generation, admin)

    async def login_with_credentials(self, email: str, password: str) -> Admin:
        generation = self._advance()
        async with self._lock:
            try:
                result = await self.directory.authenticate(email, password)
            except UnauthorizedException:
                raise InvalidCredentialsException(AuthFailureReason.CREDENTIALS)
            admin = await self._lookup(result.admin_id)
            tokens = SessionTokens(access_token=result.access_token, refresh_token=result.refresh_token)
            return await self._commit(generation, admin, tokens)

    async def logout(self) -> None:
        """
        Sign out. Local state is cleared first and unconditionally; remote
        revocation and storage cleanup are best effort.
        """
        self._advance()
        admin, tokens = self._admin, self._tokens
        self._admin = None
        self._tokens = None
        logger.info(f"Admin {admin.id if admin else None} signed out")

        try:
            if tokens is None:
                tokens = await self.store.load_tokens()
            if tokens.access_token or tokens.refresh_token:
                await self.directory.revoke(tokens)
        except Exception as e:
            logger.warning(f"Token revocation failed: {e}")

        async with self._lock:
            try:
                await self.store.clear()
            except Exception as e:
                logger.warning(f"Clearing stored session failed: {e}")

    # Checks bound to the current admin

    def has_permission(self, permission: Permission) -> bool:
        return core.has_permission(self._admin, permission, self.policy)

    def has_any_permission(self, permissions: Iterable[Permission]) -> bool:
        return core.has_any_permission(self._admin, permissions, self.policy)

    def has_all_permissions(self, permissions: Iterable[Permission]) -> bool:
        return core.has_all_permissions(self._admin, permissions, self.policy)

    def can_access_company(self, company_id: Optional[int]) -> bool:
        return scope.can_access_company(self._admin, company_id)

    def can_access_course(self, course_id: Optional[int]) -> bool:
        return scope.can_access_course(self._admin, course_id)

    def accessible_companies(self) -> AccessibleIds:
        return scope.get_accessible_companies(self._admin)

    def accessible_courses(self) -> AccessibleIds:
        return scope.get_accessible_courses(self._admin)

    def scope_filter(self) -> Optional[ScopeFilter]:
        return scope.build_scope_filter(self._admin)

    def can_manage_admin(self, target: Optional[Admin]) -> bool:
        return management.can_manage_admin(self._admin, target)

    def can_add_admin_to_company(self, company_id: Optional[int]) -> bool:
        return management.can_add_admin_to_company(self._admin, company_id)

    def can_perform_admin_action(self, action: AdminAction, target: Optional[Admin] = None,
                                 draft: Optional[RoleAssignment] = None) -> bool:
        """Whether the action would pass right now, for showing or hiding it"""
        return can_perform_admin_action(self._admin, action, target, draft)

    def check_admin_action(self, action: AdminAction, target: Optional[Admin] = None,
                           draft: Optional[RoleAssignment] = None) -> None:
        check_admin_action(self._admin, action, target, draft)

    async def list_admins(self) -> List[Admin]:
        """Admins visible to the current admin, filtered at the directory"""
        scope_filter = self.scope_filter()
        if scope_filter is None:
            return []
        return await self.directory.list_admins(scope_filter)
