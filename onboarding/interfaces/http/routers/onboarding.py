from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
import structlog

from ....application.dto import AssignRoleResult
from ....application.resolver import PAGES, Redirect, guard
from ....application.use_cases.assign_role import AssignRole
from ....config import settings
from ....domain.entities import Role
from ....domain.errors import OnboardingError, RoleAlreadySet, StoreUnavailable, Unauthenticated
from ....infrastructure.db import get_db
from ....infrastructure.metrics import guard_decisions_total, role_assignments_total
from ....infrastructure.rate_limit import limiter
from ....infrastructure.repositories import UserRepository
from ....infrastructure.sessions import SessionProvider
from ..authz import get_session_provider, get_user_id
from ..schemas import AssignRoleReq, AssignRoleResp, DecisionResp

router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])
logger = structlog.get_logger()

# сообщения для формы выбора роли
FAILURE_MESSAGES = {
    Unauthenticated: "You must be signed in to set your role",
    RoleAlreadySet: "Role already set",
    StoreUnavailable: "Failed to set role. Please try again.",
}


def _failure(e: OnboardingError) -> JSONResponse:
    result = AssignRoleResult(
        success=False,
        message=FAILURE_MESSAGES.get(type(e), e.user_message),
        error=e.code,
        retryable=e.retryable,
    )
    body = AssignRoleResp(**result.__dict__).model_dump(by_alias=True, exclude_none=True)
    return JSONResponse(status_code=e.http_status, content=body)


@router.post("/role", response_model=AssignRoleResp, response_model_exclude_none=True)
@limiter.limit(f"{settings.RATE_LIMIT_PER_MINUTE}/minute")
def assign_role(
    request: Request,
    payload: AssignRoleReq,
    user_id: int | None = Depends(get_user_id),
    provider: SessionProvider = Depends(get_session_provider),
    db: Session = Depends(get_db),
):
    uc = AssignRole(repo=UserRepository(db), invalidate=provider.invalidate)
    try:
        session = provider.current_session(user_id)
        redirect_url = uc.execute(session, user_id, Role(payload.role))
    except OnboardingError as e:
        role_assignments_total.labels(result=e.code).inc()
        logger.info("role_assignment_failed", user_id=user_id, error=e.code)
        return _failure(e)

    role_assignments_total.labels(result="ok").inc()
    return AssignRoleResp(
        success=True,
        message=f"Role set to {payload.role}",
        redirect_url=redirect_url,
    )


@router.get("/resolve", response_model=DecisionResp, response_model_exclude_none=True)
def resolve_page(
    path: str = Query(...),
    callback_url: str | None = Query(None, alias="callbackUrl"),
    user_id: int | None = Depends(get_user_id),
    provider: SessionProvider = Depends(get_session_provider),
):
    page = PAGES.get(path)
    if page is None:
        raise HTTPException(404, "page not found")
    decision = guard(page, lambda: provider.current_session(user_id), callback_url)
    guard_decisions_total.labels(page=page.name, kind=decision.kind).inc()
    if isinstance(decision, Redirect):
        return DecisionResp(kind=decision.kind, page=page.name, target=decision.target)
    return DecisionResp(kind=decision.kind, page=page.name)
