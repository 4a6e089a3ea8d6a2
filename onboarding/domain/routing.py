"""
Canonical URLs for each role.

All functions here are pure: the same role always maps to the same path,
no matter which page asks.
"""
from urllib.parse import urlencode

from .entities import Role, SELF_SERVICE_ROLES

LOGIN_URL = "/login"
SIGNUP_URL = "/signup"
SELECT_ROLE_URL = "/select-role"
DEFAULT_DASHBOARD_URL = "/dashboard"

ROLE_ROUTES = {
    Role.TEACHER: {
        "setup": "/profile/setup",
        "dashboard": "/dashboard",
        "profile": "/profile",
        "jobs": "/jobs",
    },
    Role.RECRUITER: {
        "setup": "/recruiter/setup",
        "dashboard": "/recruiter/dashboard",
        "jobs": "/recruiter/jobs",
        "candidates": "/recruiter/candidates",
    },
    Role.SCHOOL: {
        "setup": "/school/setup",
        "dashboard": "/school/dashboard",
        "jobs": "/school/jobs",
        "candidates": "/school/candidates",
    },
    Role.ADMIN: {
        "dashboard": "/admin/dashboard",
        "users": "/admin/users",
        "analytics": "/admin/analytics",
    },
}


def setup_url_for(role: Role | str | None, origin_page: str | None = None) -> str:
    # origin_page нужен только для логов и на результат не влияет
    routes = ROLE_ROUTES.get(_as_role(role), {})
    return routes.get("setup", DEFAULT_DASHBOARD_URL)


def dashboard_url_for(role: Role | str | None) -> str:
    routes = ROLE_ROUTES.get(_as_role(role), {})
    return routes.get("dashboard", DEFAULT_DASHBOARD_URL)


def needs_profile_setup(role: Role | str | None, has_profile: bool | None) -> bool:
    if has_profile:
        return False
    return _as_role(role) in SELF_SERVICE_ROLES


def safe_callback_url(url: str | None) -> str | None:
    """Return url only if it is a local absolute path, otherwise None."""
    if not url or not url.startswith("/") or url.startswith("//"):
        return None
    if "\\" in url or "://" in url:
        return None
    return url


def login_url(callback_url: str | None = None) -> str:
    callback = safe_callback_url(callback_url)
    if not callback:
        return LOGIN_URL
    return f"{LOGIN_URL}?{urlencode({'callbackUrl': callback}, safe='/')}"


def _as_role(role: Role | str | None) -> Role | None:
    if role is None or isinstance(role, Role):
        return role
    try:
        return Role(role)
    except ValueError:
        return None
