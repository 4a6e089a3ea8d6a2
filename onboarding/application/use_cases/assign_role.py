"""
One-time role assignment.

The role moves from unset to a self-service role exactly once. The write is a
single conditional update on "role is currently unset", so two concurrent
submissions for the same user can never both win.
"""
from typing import Callable

import structlog

from ...domain.entities import Role, SELF_SERVICE_ROLES, SessionSnapshot
from ...domain.errors import RoleAlreadySet, Unauthenticated
from ...domain.routing import setup_url_for
from .register_user import IUserRepository

logger = structlog.get_logger()

Invalidate = Callable[[int], object]


def invalidate_quietly(invalidate: Invalidate, user_id: int) -> None:
    """Fire the cache invalidation signal; a failure only widens the staleness window."""
    try:
        invalidate(user_id)
    except Exception as e:
        logger.warning("session_invalidate_failed", user_id=user_id, error=str(e))


class AssignRole:
    def __init__(self, repo: IUserRepository, invalidate: Invalidate):
        self.repo = repo
        self.invalidate = invalidate

    def execute(self, session: SessionSnapshot | None, user_id: int, role: Role) -> str:
        if session is None or not session.authenticated or session.user_id is None:
            raise Unauthenticated("No active session")
        if session.user_id != user_id:
            raise Unauthenticated("Cannot assign a role for another user")

        role = Role(role)
        if role not in SELF_SERVICE_ROLES:
            raise ValueError(f"Role {role.value} cannot be self-assigned")

        if not self.repo.set_role_if_unset(user_id, role):
            if self.repo.get(user_id) is None:
                raise Unauthenticated("User not found")
            logger.info("role_assignment_conflict", user_id=user_id, requested=role.value)
            # закэшированный снимок мог устареть, иначе пользователь застрянет на выборе роли
            invalidate_quietly(self.invalidate, user_id)
            raise RoleAlreadySet(f"User {user_id} already has a role")

        logger.info("role_assigned", user_id=user_id, role=role.value)
        invalidate_quietly(self.invalidate, user_id)
        return setup_url_for(role, origin_page="/select-role")
