from abc import ABC, abstractmethod
from enum import Enum
import logging
from typing import Dict, Optional

from parkgolf_admin.api.exceptions import BadRequestException, ForbiddenException, InactiveAdminException
from parkgolf_admin.permissions.management import (
    can_add_admin_to_company,
    can_assign,
    can_manage_admin,
)
from parkgolf_admin.permissions.principal import Admin, RoleAssignment

logger = logging.getLogger(__name__)


class AdminAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DEACTIVATE = "deactivate"
    REASSIGN = "reassign"


class AdminActionHandler(ABC):
    """Base class for commit-time checks of one admin-management action"""

    action: AdminAction

    @abstractmethod
    def can_perform_action(self, actor: Optional[Admin], target: Optional[Admin] = None,
                           draft: Optional[RoleAssignment] = None) -> bool:
        """Check if actor may perform the action.

        Args:
            actor: Admin issuing the command
            target: Existing admin the command applies to (absent for CREATE)
            draft: Resulting role bindings (required for CREATE and REASSIGN)
        """
        pass

    def require_target(self, target: Optional[Admin]) -> Admin:
        if target is None:
            raise BadRequestException(f"Action {self.action.value} requires a target admin")
        return target

    def require_draft(self, draft: Optional[RoleAssignment]) -> RoleAssignment:
        if draft is None:
            raise BadRequestException(f"Action {self.action.value} requires the resulting role assignment")
        return draft


class CreateAdminHandler(AdminActionHandler):
    action = AdminAction.CREATE

    def can_perform_action(self, actor, target=None, draft=None) -> bool:
        draft = self.require_draft(draft)
        if draft.company_id is not None and not can_add_admin_to_company(actor, draft.company_id):
            return False
        return can_assign(actor, draft)


class UpdateAdminHandler(AdminActionHandler):
    """Profile and permission edits; role, company and courses stay as they are"""

    action = AdminAction.UPDATE

    def can_perform_action(self, actor, target=None, draft=None) -> bool:
        target = self.require_target(target)
        if not can_manage_admin(actor, target):
            return False
        if draft is None:
            return True
        if (draft.role != target.role or draft.company_id != target.company_id
                or draft.course_ids != target.course_ids):
            # role, company or course changes go through REASSIGN
            return False
        return can_assign(actor, draft)


class DeactivateAdminHandler(AdminActionHandler):
    action = AdminAction.DEACTIVATE

    def can_perform_action(self, actor, target=None, draft=None) -> bool:
        target = self.require_target(target)
        if actor is not None and actor.id == target.id:
            return False
        return can_manage_admin(actor, target)


class ReassignAdminHandler(AdminActionHandler):
    """Role, company or course changes: the actor must manage the admin before and after"""

    action = AdminAction.REASSIGN

    def can_perform_action(self, actor, target=None, draft=None) -> bool:
        target = self.require_target(target)
        draft = self.require_draft(draft)
        if not can_manage_admin(actor, target):
            return False
        if not can_assign(actor, draft):
            return False
        resulting = target.reassigned(
            role=draft.role,
            company_id=draft.company_id,
            course_ids=draft.course_ids,
            permissions=draft.permissions,
        )
        return can_manage_admin(actor, resulting)


class AdminActionRegistry:
    """Registry of admin-management action handlers"""

    _instance = None
    _handlers: Dict[AdminAction, AdminActionHandler] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def register(self, handler: AdminActionHandler):
        self._handlers[handler.action] = handler

    def get_handler(self, action: AdminAction) -> Optional[AdminActionHandler]:
        return self._handlers.get(AdminAction(action))

    def is_allowed(self, actor: Optional[Admin], action: AdminAction, target: Optional[Admin] = None,
                   draft: Optional[RoleAssignment] = None) -> bool:
        handler = self.get_handler(action)
        if handler is None:
            logger.warning(f"No handler registered for admin action {action}")
            return False
        return handler.can_perform_action(actor, target, draft)

    def check(self, actor: Optional[Admin], action: AdminAction, target: Optional[Admin] = None,
              draft: Optional[RoleAssignment] = None) -> None:
        """
        Raise ForbiddenException unless the action is allowed right now.

        An active actor refused because the target is inactive gets
        InactiveAdminException, a ForbiddenException carrying that reason.
        """
        if not self.is_allowed(actor, action, target, draft):
            logger.info(
                f"Refused {AdminAction(action).value} by admin {getattr(actor, 'id', None)} "
                f"on admin {getattr(target, 'id', None)}"
            )
            detail = {
                "action": AdminAction(action).value,
                "target_id": getattr(target, "id", None),
            }
            if actor is not None and actor.is_active and target is not None and not target.is_active:
                raise InactiveAdminException(detail=detail)
            raise ForbiddenException(detail=detail)


# Global registry instance
admin_action_registry = AdminActionRegistry()


def initialize_admin_action_handlers():
    admin_action_registry.register(CreateAdminHandler())
    admin_action_registry.register(UpdateAdminHandler())
    admin_action_registry.register(DeactivateAdminHandler())
    admin_action_registry.register(ReassignAdminHandler())


def can_perform_admin_action(actor: Optional[Admin], action: AdminAction, target: Optional[Admin] = None,
                             draft: Optional[RoleAssignment] = None) -> bool:
    return admin_action_registry.is_allowed(actor, action, target, draft)


def check_admin_action(actor: Optional[Admin], action: AdminAction, target: Optional[Admin] = None,
                       draft: Optional[RoleAssignment] = None) -> None:
    """
    Commit-time gate for admin-management commands.

    Command handlers call this right before applying a change, regardless of
    what a UI decided earlier.
    """
    admin_action_registry.check(actor, action, target, draft)


initialize_admin_action_handlers()
