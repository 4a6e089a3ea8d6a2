"""
Guarded entry pages.

A page either redirects (303 See Other) or answers
{"kind": "allow", "page": <name>} so the front end can render it.
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session
import structlog

from ....application.resolver import (
    PAGES,
    RECRUITER_SETUP,
    SCHOOL_SETUP,
    TEACHER_SETUP,
    Page,
    Redirect,
    guard,
    resolve,
)
from ....application.use_cases.complete_profile import CompleteProfile
from ....application.use_cases.provision_school import ProvisionSchoolProfile
from ....domain.entities import Role
from ....domain.errors import ProfileCreateFailed, StoreUnavailable
from ....domain.routing import login_url
from ....infrastructure.db import get_db
from ....infrastructure.metrics import guard_decisions_total
from ....infrastructure.repositories import ProfileRepository
from ....infrastructure.sessions import SessionProvider
from ..authz import get_session_provider, get_user_id
from ..schemas import ProfileSetupResp, RecruiterSetupReq, TeacherSetupReq

router = APIRouter(tags=["pages"])
logger = structlog.get_logger()


def _respond(page: Page, decision):
    guard_decisions_total.labels(page=page.name, kind=decision.kind).inc()
    if isinstance(decision, Redirect):
        return RedirectResponse(decision.target, status_code=303)
    return {"kind": decision.kind, "page": page.name}


def _make_page_handler(page: Page):
    def handler(
        request: Request,
        user_id: int | None = Depends(get_user_id),
        provider: SessionProvider = Depends(get_session_provider),
    ):
        decision = guard(
            page,
            lambda: provider.current_session(user_id),
            request.query_params.get("callbackUrl"),
        )
        return _respond(page, decision)

    handler.__name__ = f"page_{page.name.replace('-', '_')}"
    return handler


for _page in PAGES.values():
    if _page is SCHOOL_SETUP:
        continue
    router.add_api_route(_page.path, _make_page_handler(_page), methods=["GET"], name=_page.name)


@router.get("/school/setup", name=SCHOOL_SETUP.name)
def school_setup(
    user_id: int | None = Depends(get_user_id),
    provider: SessionProvider = Depends(get_session_provider),
    db: Session = Depends(get_db),
):
    try:
        session = provider.current_session(user_id)
    except StoreUnavailable:
        return RedirectResponse(login_url(), status_code=303)

    decision = resolve(session, SCHOOL_SETUP)
    if isinstance(decision, Redirect):
        return _respond(SCHOOL_SETUP, decision)

    # форма не показывается: профиль школы создаётся автоматически
    uc = ProvisionSchoolProfile(profiles=ProfileRepository(db), invalidate=provider.invalidate)
    try:
        target = uc.execute(session)
    except ProfileCreateFailed as e:
        logger.error("school_profile_provision_failed", user_id=user_id, error=e.message)
        return JSONResponse(status_code=e.http_status, content=e.to_dict())
    return _respond(SCHOOL_SETUP, Redirect(target))


def _complete_profile(role: Role, data: dict, user_id, provider: SessionProvider, db: Session):
    session = provider.current_session(user_id)
    uc = CompleteProfile(profiles=ProfileRepository(db), invalidate=provider.invalidate)
    target = uc.execute(session, role, data)
    return ProfileSetupResp(redirect_url=target)


@router.post(TEACHER_SETUP.path, response_model=ProfileSetupResp, name="teacher-setup-submit")
def submit_teacher_setup(
    payload: TeacherSetupReq,
    user_id: int | None = Depends(get_user_id),
    provider: SessionProvider = Depends(get_session_provider),
    db: Session = Depends(get_db),
):
    return _complete_profile(Role.TEACHER, payload.to_profile(), user_id, provider, db)


@router.post(RECRUITER_SETUP.path, response_model=ProfileSetupResp, name="recruiter-setup-submit")
def submit_recruiter_setup(
    payload: RecruiterSetupReq,
    user_id: int | None = Depends(get_user_id),
    provider: SessionProvider = Depends(get_session_provider),
    db: Session = Depends(get_db),
):
    return _complete_profile(Role.RECRUITER, payload.to_profile(), user_id, provider, db)
