from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ....domain.errors import StoreUnavailable
from ....infrastructure.db import get_db
from ....infrastructure.rate_limit import limiter
from ....infrastructure.repositories import UserRepository
from ....infrastructure.security import PasswordHasher, create_access_token, decode_token
from ....infrastructure.sessions import SessionProvider
from ....application.use_cases.register_user import RegisterUser
from ....interfaces.http.schemas import RegisterReq, LoginReq, UserResp, TokenResp
from ....infrastructure.models import UserORM
from ....config import settings
from ..authz import get_session_provider

router = APIRouter(prefix="/api/auth", tags=["auth"])
bearer = HTTPBearer()

@router.post("/register", response_model=UserResp, status_code=status.HTTP_201_CREATED)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
def register(
    request: Request,
    payload: RegisterReq,
    db: Session = Depends(get_db),
):
    uc = RegisterUser(repo=UserRepository(db), hasher=PasswordHasher())
    try:
        user = uc.execute(payload.email, payload.password, name=payload.name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return UserResp(id=user.id, email=user.email, name=user.name, role=None, has_profile=False)

@router.post("/login", response_model=TokenResp)
@limiter.limit("10/minute")  # Более строгий лимит для логина (защита от брутфорса)
def login(
    request: Request,
    payload: LoginReq,
    db: Session = Depends(get_db),
):
    try:
        row = db.query(UserORM).filter(UserORM.email == payload.email).first()
    except SQLAlchemyError as e:
        raise StoreUnavailable(str(e)) from e
    if not row or not row.is_active or not PasswordHasher().verify(payload.password, row.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    token = create_access_token(user_id=row.id)
    return TokenResp(access_token=token)


@router.get("/me", response_model=UserResp)
def me(
    creds: HTTPAuthorizationCredentials = Depends(bearer),
    db: Session = Depends(get_db),
    provider: SessionProvider = Depends(get_session_provider),
):
    try:
        user_id = decode_token(creds.credentials)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    user = UserRepository(db).get(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    session = provider.current_session(user_id)
    return UserResp(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role.value if user.role else None,
        has_profile=bool(session and session.has_profile),
    )
