import structlog

from ...domain.entities import Role, SessionSnapshot
from ...domain.errors import (
    ProfileAlreadyExists,
    ProfileCreateFailed,
    RoleMismatch,
    StoreUnavailable,
    Unauthenticated,
)
from ...domain.routing import dashboard_url_for
from .assign_role import Invalidate, invalidate_quietly

logger = structlog.get_logger()


class IProfileRepository:
    def exists(self, role: Role, user_id: int) -> bool: ...
    def create(self, role: Role, user_id: int, data: dict) -> int: ...


class CompleteProfile:
    """Store the setup form of a TEACHER or RECRUITER and open the dashboard."""

    def __init__(self, profiles: IProfileRepository, invalidate: Invalidate):
        self.profiles = profiles
        self.invalidate = invalidate

    def execute(self, session: SessionSnapshot | None, role: Role, data: dict) -> str:
        if session is None or not session.authenticated or session.user_id is None:
            raise Unauthenticated("No active session")
        if session.role != role:
            raise RoleMismatch(f"Profile setup for {role.value} requires the same role")

        try:
            self.profiles.create(role, session.user_id, data)
        except ProfileAlreadyExists:
            # профиль уже есть, а снимок в кэше говорит обратное
            logger.info("profile_already_exists", user_id=session.user_id, role=role.value)
            invalidate_quietly(self.invalidate, session.user_id)
            raise
        except StoreUnavailable as e:
            raise ProfileCreateFailed(str(e)) from e

        logger.info("profile_completed", user_id=session.user_id, role=role.value)
        # сбрасываем кэш сессии после любого создания профиля
        invalidate_quietly(self.invalidate, session.user_id)
        return dashboard_url_for(role)
