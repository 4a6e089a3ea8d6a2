from datetime import datetime, timezone

import structlog

from ...config import settings
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
from .complete_profile import IProfileRepository

logger = structlog.get_logger()


def school_profile_defaults(display_name: str | None) -> dict:
    return {
        "school_name": display_name or "School",
        "country": settings.DEFAULT_SCHOOL_COUNTRY,
        "city": settings.DEFAULT_SCHOOL_CITY,
        "school_type": settings.DEFAULT_SCHOOL_TYPE,
        "is_verified": True,
        "verified_at": datetime.now(timezone.utc),
    }


class ProvisionSchoolProfile:
    """
    Create a placeholder SchoolProfile on the first visit to the school setup page.

    Schools skip the setup form entirely; the placeholder values are editable
    later. The session cache is invalidated right after the insert, otherwise
    the next navigation would still see has_profile=False and bounce the user
    back to setup.
    """

    def __init__(self, profiles: IProfileRepository, invalidate: Invalidate):
        self.profiles = profiles
        self.invalidate = invalidate

    def execute(self, session: SessionSnapshot | None) -> str:
        if session is None or not session.authenticated or session.user_id is None:
            raise Unauthenticated("No active session")
        if session.role != Role.SCHOOL:
            raise RoleMismatch("School setup requires the SCHOOL role")

        try:
            if not self.profiles.exists(Role.SCHOOL, session.user_id):
                self.profiles.create(
                    Role.SCHOOL, session.user_id, school_profile_defaults(session.name)
                )
                logger.info("school_profile_provisioned", user_id=session.user_id)
        except ProfileAlreadyExists:
            # параллельный запрос успел создать профиль раньше
            logger.info("school_profile_exists", user_id=session.user_id)
        except StoreUnavailable as e:
            raise ProfileCreateFailed(str(e)) from e

        invalidate_quietly(self.invalidate, session.user_id)
        return dashboard_url_for(Role.SCHOOL)
