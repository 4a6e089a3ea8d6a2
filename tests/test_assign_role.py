import threading

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker
from unittest.mock import MagicMock

from onboarding.application.use_cases.assign_role import AssignRole
from onboarding.domain.entities import Role, SessionSnapshot
from onboarding.domain.errors import RoleAlreadySet, StoreUnavailable, Unauthenticated
from onboarding.infrastructure.models import Base, UserORM
from onboarding.infrastructure.repositories import UserRepository


def signed_in(user_id, role=None):
    return SessionSnapshot(authenticated=True, user_id=user_id, role=role)


def stored_role(db, user_id):
    db.expire_all()
    return db.get(UserORM, user_id).role


def test_assign_role_success(db, make_user):
    user_id, _ = make_user()
    invalidate = MagicMock()

    url = AssignRole(UserRepository(db), invalidate).execute(signed_in(user_id), user_id, Role.RECRUITER)

    assert url == "/recruiter/setup"
    assert stored_role(db, user_id) == "RECRUITER"
    invalidate.assert_called_once_with(user_id)


@pytest.mark.parametrize("role,url", [
    (Role.TEACHER, "/profile/setup"),
    (Role.SCHOOL, "/school/setup"),
])
def test_assign_role_returns_setup_url(db, make_user, role, url):
    user_id, _ = make_user()
    assert AssignRole(UserRepository(db), MagicMock()).execute(signed_in(user_id), user_id, role) == url


def test_assign_role_twice_fails_and_keeps_role(db, make_user):
    """Повторное назначение роли всегда RoleAlreadySet, роль не меняется"""
    user_id, _ = make_user()
    invalidate = MagicMock()
    uc = AssignRole(UserRepository(db), invalidate)
    uc.execute(signed_in(user_id), user_id, Role.TEACHER)

    for role in (Role.TEACHER, Role.RECRUITER, Role.SCHOOL):
        with pytest.raises(RoleAlreadySet):
            uc.execute(signed_in(user_id), user_id, role)

    assert stored_role(db, user_id) == "TEACHER"
    # кэш сбрасывается и после успешной записи, и после каждого конфликта
    assert invalidate.call_count == 4
    invalidate.assert_called_with(user_id)


def test_assign_role_on_preexisting_role(db, make_user):
    user_id, _ = make_user(role=Role.SCHOOL)
    with pytest.raises(RoleAlreadySet):
        AssignRole(UserRepository(db), MagicMock()).execute(signed_in(user_id), user_id, Role.TEACHER)
    assert stored_role(db, user_id) == "SCHOOL"


def test_assign_role_requires_session(db, make_user):
    user_id, _ = make_user()
    uc = AssignRole(UserRepository(db), MagicMock())
    with pytest.raises(Unauthenticated):
        uc.execute(None, user_id, Role.TEACHER)
    with pytest.raises(Unauthenticated):
        uc.execute(SessionSnapshot.anonymous(), user_id, Role.TEACHER)
    assert stored_role(db, user_id) is None


def test_assign_role_for_another_user_is_rejected(db, make_user):
    user_id, _ = make_user()
    other_id, _ = make_user()
    with pytest.raises(Unauthenticated):
        AssignRole(UserRepository(db), MagicMock()).execute(signed_in(user_id), other_id, Role.TEACHER)
    assert stored_role(db, other_id) is None


def test_assign_role_unknown_user(db):
    with pytest.raises(Unauthenticated):
        AssignRole(UserRepository(db), MagicMock()).execute(signed_in(999), 999, Role.TEACHER)


def test_conflict_on_stale_session_invalidates_cache(db, make_user):
    """Снимок без роли при уже записанной роли: конфликт сбрасывает кэш"""
    user_id, _ = make_user(role=Role.RECRUITER)
    invalidate = MagicMock()

    with pytest.raises(RoleAlreadySet):
        AssignRole(UserRepository(db), invalidate).execute(signed_in(user_id), user_id, Role.TEACHER)

    invalidate.assert_called_once_with(user_id)


def test_admin_cannot_be_self_assigned(db, make_user):
    user_id, _ = make_user()
    with pytest.raises(ValueError):
        AssignRole(UserRepository(db), MagicMock()).execute(signed_in(user_id), user_id, Role.ADMIN)
    assert stored_role(db, user_id) is None


def test_invalidate_failure_does_not_fail_assignment(db, make_user):
    user_id, _ = make_user()
    invalidate = MagicMock(side_effect=ConnectionError("redis down"))

    url = AssignRole(UserRepository(db), invalidate).execute(signed_in(user_id), user_id, Role.SCHOOL)

    assert url == "/school/setup"
    assert stored_role(db, user_id) == "SCHOOL"


def test_store_error_is_reported_as_unavailable():
    db = MagicMock()
    db.execute.side_effect = OperationalError("UPDATE users", {}, Exception("database is locked"))
    invalidate = MagicMock()

    with pytest.raises(StoreUnavailable) as exc:
        AssignRole(UserRepository(db), invalidate).execute(signed_in(1), 1, Role.TEACHER)

    assert exc.value.retryable is True
    db.rollback.assert_called_once()
    invalidate.assert_not_called()


def test_concurrent_assignments_only_one_wins(tmp_path):
    """Две одновременные отправки формы: ровно одна успешна, другая RoleAlreadySet"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    with Session() as s:
        row = UserORM(email="race@example.com", password_hash="x", role=None)
        s.add(row); s.commit()
        user_id = row.id

    barrier = threading.Barrier(2)
    results = {}

    def submit(role):
        with Session() as s:
            uc = AssignRole(UserRepository(s), lambda _: None)
            barrier.wait()
            try:
                results[role] = uc.execute(signed_in(user_id), user_id, role)
            except RoleAlreadySet as e:
                results[role] = e

    threads = [threading.Thread(target=submit, args=(r,)) for r in (Role.TEACHER, Role.RECRUITER)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    winners = [r for r, v in results.items() if isinstance(v, str)]
    losers = [r for r, v in results.items() if isinstance(v, RoleAlreadySet)]
    assert len(winners) == 1
    assert len(losers) == 1

    with Session() as s:
        assert s.get(UserORM, user_id).role == winners[0].value
    engine.dispose()
