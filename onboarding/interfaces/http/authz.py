from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session

from ...domain.entities import SessionSnapshot
from ...infrastructure.cache import get_session_cache
from ...infrastructure.db import get_db
from ...infrastructure.security import decode_token
from ...infrastructure.sessions import SessionProvider

# без auto_error: отсутствие токена = анонимная сессия, а не 403
bearer = HTTPBearer(auto_error=False)

def get_user_id(creds: HTTPAuthorizationCredentials | None = Depends(bearer)) -> int | None:
    if creds is None:
        return None
    try:
        return decode_token(creds.credentials)
    except JWTError:
        return None

def get_session_provider(db: Session = Depends(get_db), cache=Depends(get_session_cache)) -> SessionProvider:
    return SessionProvider(db, cache)

def get_session(
    user_id: int | None = Depends(get_user_id),
    provider: SessionProvider = Depends(get_session_provider),
) -> SessionSnapshot | None:
    return provider.current_session(user_id)
