"""
Session snapshots.

A snapshot is computed from the user row and the profile table matching the
user's role, then cached for SESSION_CACHE_TTL seconds. Until the cached
entry is invalidated it may report a role or profile state that is already
outdated; every page re-checks on navigation, so a stale entry costs at most
one extra redirect.
"""
import structlog
from sqlalchemy.orm import Session

from ..config import settings
from ..domain.entities import SessionSnapshot
from .metrics import session_cache_hits_total, session_cache_misses_total
from .repositories import ProfileRepository, UserRepository

logger = structlog.get_logger()


def session_key(user_id: int) -> str:
    return f"session:{user_id}"


class SessionProvider:
    def __init__(self, db: Session, cache):
        self.db = db
        self.cache = cache

    def current_session(self, user_id: int | None) -> SessionSnapshot | None:
        if user_id is None:
            return None

        cached = self.cache.get(session_key(user_id))
        if cached:
            session_cache_hits_total.inc()
            return SessionSnapshot.from_dict(cached)

        session_cache_misses_total.inc()
        # ошибки хранилища репозитории уже превращают в StoreUnavailable
        user = UserRepository(self.db).get(user_id)
        if user is None:
            return None
        has_profile = False
        if user.role is not None:
            has_profile = ProfileRepository(self.db).exists(user.role, user.id)

        snapshot = SessionSnapshot(
            authenticated=True,
            user_id=user.id,
            role=user.role,
            has_profile=has_profile,
            name=user.name,
        )
        self.cache.set(session_key(user_id), snapshot.to_dict(), settings.SESSION_CACHE_TTL)
        return snapshot

    def invalidate(self, scope: int) -> bool:
        """Сбросить закэшированный снимок сессии пользователя `scope`."""
        ok = self.cache.delete(session_key(scope))
        if not ok:
            logger.warning("session_invalidate_failed", user_id=scope)
        return ok
