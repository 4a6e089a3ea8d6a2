import pytest

from onboarding.domain.entities import Role
from onboarding.domain.routing import (
    dashboard_url_for,
    login_url,
    needs_profile_setup,
    safe_callback_url,
    setup_url_for,
)


@pytest.mark.parametrize("role,expected", [
    (Role.TEACHER, "/profile/setup"),
    (Role.RECRUITER, "/recruiter/setup"),
    (Role.SCHOOL, "/school/setup"),
    ("TEACHER", "/profile/setup"),
])
def test_setup_url_for(role, expected):
    assert setup_url_for(role) == expected


def test_setup_url_ignores_origin_page():
    """URL настройки зависит только от роли"""
    for origin in (None, "/login", "/select-role", "/dashboard", "/anything"):
        assert setup_url_for(Role.RECRUITER, origin_page=origin) == "/recruiter/setup"


def test_setup_url_for_admin_and_unknown_falls_back_to_dashboard():
    assert setup_url_for(Role.ADMIN) == "/dashboard"
    assert setup_url_for("UNKNOWN") == "/dashboard"
    assert setup_url_for(None) == "/dashboard"


@pytest.mark.parametrize("role,expected", [
    (Role.TEACHER, "/dashboard"),
    (Role.RECRUITER, "/recruiter/dashboard"),
    (Role.SCHOOL, "/school/dashboard"),
    (Role.ADMIN, "/admin/dashboard"),
    ("UNKNOWN", "/dashboard"),
])
def test_dashboard_url_for(role, expected):
    assert dashboard_url_for(role) == expected


def test_needs_profile_setup():
    assert needs_profile_setup(Role.TEACHER, False) is True
    assert needs_profile_setup(Role.SCHOOL, None) is True
    assert needs_profile_setup(Role.TEACHER, True) is False
    assert needs_profile_setup(None, False) is False
    # ADMIN профиль не заполняет
    assert needs_profile_setup(Role.ADMIN, False) is False


@pytest.mark.parametrize("url,expected", [
    ("/jobs/42", "/jobs/42"),
    ("/recruiter/setup?step=2", "/recruiter/setup?step=2"),
    ("//evil.example.com", None),
    ("https://evil.example.com", None),
    ("jobs", None),
    ("/\\evil.example.com", None),
    ("", None),
    (None, None),
])
def test_safe_callback_url(url, expected):
    assert safe_callback_url(url) == expected


def test_login_url():
    assert login_url() == "/login"
    assert login_url("/school/setup") == "/login?callbackUrl=/school/setup"
    assert login_url("https://evil.example.com") == "/login"
