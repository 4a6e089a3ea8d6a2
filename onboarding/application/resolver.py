"""
Onboarding state resolver.

Every guarded page is resolved from the session snapshot alone:

    Anonymous          -> /login?callbackUrl=<page>
    RoleUnset          -> /select-role
    ProfileIncomplete  -> setup page of the role
    Ready              -> allow

Public pages (login, signup) invert the table, setup pages are scoped to a
single role, and the role selection page is the one place a RoleUnset
session is allowed to stay.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Literal

import structlog

from ..domain.entities import Role, SessionSnapshot
from ..domain.errors import StoreUnavailable
from ..domain.routing import (
    DEFAULT_DASHBOARD_URL,
    SELECT_ROLE_URL,
    dashboard_url_for,
    login_url,
    needs_profile_setup,
    safe_callback_url,
    setup_url_for,
)

logger = structlog.get_logger()


class PageKind(str, Enum):
    PUBLIC = "public"
    ROLE_SELECTION = "role_selection"
    SETUP = "setup"
    PROTECTED = "protected"


@dataclass(frozen=True)
class Page:
    name: str
    path: str
    kind: PageKind
    role: Role | None = None


@dataclass(frozen=True)
class Allow:
    kind: Literal["allow"] = "allow"


@dataclass(frozen=True)
class Redirect:
    target: str
    kind: Literal["redirect"] = "redirect"


Decision = Allow | Redirect


LOGIN = Page("login", "/login", PageKind.PUBLIC)
SIGNUP = Page("signup", "/signup", PageKind.PUBLIC)
SELECT_ROLE = Page("select-role", "/select-role", PageKind.ROLE_SELECTION)
TEACHER_SETUP = Page("teacher-setup", "/profile/setup", PageKind.SETUP, Role.TEACHER)
RECRUITER_SETUP = Page("recruiter-setup", "/recruiter/setup", PageKind.SETUP, Role.RECRUITER)
SCHOOL_SETUP = Page("school-setup", "/school/setup", PageKind.SETUP, Role.SCHOOL)
DASHBOARD = Page("dashboard", "/dashboard", PageKind.PROTECTED)
RECRUITER_DASHBOARD = Page("recruiter-dashboard", "/recruiter/dashboard", PageKind.PROTECTED, Role.RECRUITER)
SCHOOL_DASHBOARD = Page("school-dashboard", "/school/dashboard", PageKind.PROTECTED, Role.SCHOOL)
ADMIN_DASHBOARD = Page("admin-dashboard", "/admin/dashboard", PageKind.PROTECTED, Role.ADMIN)

PAGES = {
    page.path: page
    for page in (
        LOGIN,
        SIGNUP,
        SELECT_ROLE,
        TEACHER_SETUP,
        RECRUITER_SETUP,
        SCHOOL_SETUP,
        DASHBOARD,
        RECRUITER_DASHBOARD,
        SCHOOL_DASHBOARD,
        ADMIN_DASHBOARD,
    )
}


def _profile_incomplete(session: SessionSnapshot) -> bool:
    return needs_profile_setup(session.role, session.has_profile)


def _resolve_public(session: SessionSnapshot, callback_url: str | None) -> Decision:
    if not session.authenticated:
        return Allow()
    if session.role is None:
        return Redirect(SELECT_ROLE_URL)
    if _profile_incomplete(session):
        return Redirect(setup_url_for(session.role))
    return Redirect(safe_callback_url(callback_url) or dashboard_url_for(session.role))


def _resolve_role_selection(session: SessionSnapshot) -> Decision:
    if session.role is None:
        return Allow()
    if _profile_incomplete(session):
        return Redirect(setup_url_for(session.role))
    return Redirect(dashboard_url_for(session.role))


def _resolve_setup(session: SessionSnapshot, page: Page) -> Decision:
    if session.role is None:
        return Redirect(SELECT_ROLE_URL)
    if session.role != page.role:
        return Redirect(DEFAULT_DASHBOARD_URL)
    if session.has_profile:
        # школа сразу попадает в свой дашборд, как после автосоздания профиля
        if page.role == Role.SCHOOL:
            return Redirect(dashboard_url_for(Role.SCHOOL))
        return Redirect(DEFAULT_DASHBOARD_URL)
    return Allow()


def _resolve_protected(session: SessionSnapshot, page: Page) -> Decision:
    if session.role is None:
        return Redirect(SELECT_ROLE_URL)
    if _profile_incomplete(session):
        return Redirect(setup_url_for(session.role, origin_page=page.path))
    if page.role is not None and session.role not in (page.role, Role.ADMIN):
        return Redirect(DEFAULT_DASHBOARD_URL)
    return Allow()


def resolve(
    session: SessionSnapshot | None,
    page: Page,
    callback_url: str | None = None,
) -> Decision:
    """Decide whether `page` may render for `session` or where to send the user."""
    session = session or SessionSnapshot.anonymous()

    if page.kind == PageKind.PUBLIC:
        return _resolve_public(session, callback_url)

    if not session.authenticated:
        return Redirect(login_url(page.path))

    if page.kind == PageKind.ROLE_SELECTION:
        return _resolve_role_selection(session)
    if page.kind == PageKind.SETUP:
        return _resolve_setup(session, page)
    return _resolve_protected(session, page)


def guard(
    page: Page,
    load_session: Callable[[], SessionSnapshot | None],
    callback_url: str | None = None,
) -> Decision:
    """
    Load the session through `load_session` and resolve `page`.

    A storage outage on a protected page fails closed to the login page.
    On a public page there is nowhere safer to go, so StoreUnavailable is
    re-raised and the caller shows a retry message.
    """
    try:
        session = load_session()
    except StoreUnavailable:
        logger.warning("guard_store_unavailable", page=page.name)
        if page.kind == PageKind.PUBLIC:
            raise
        return Redirect(login_url())
    return resolve(session, page, callback_url)
