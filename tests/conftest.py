import os
import sys
import pytest

CURRENT_DIR = os.path.dirname(__file__)
SERVICE_ROOT = os.path.dirname(CURRENT_DIR)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from onboarding.domain.entities import Role
from onboarding.infrastructure.cache import get_session_cache
from onboarding.infrastructure.db import get_db
from onboarding.infrastructure.models import Base, UserORM, RecruiterProfileORM, SchoolProfileORM, TeacherProfileORM
from onboarding.infrastructure.rate_limit import limiter
from onboarding.infrastructure.security import create_access_token
from onboarding.main import app

# Тестовая БД в памяти, одно соединение на все потоки TestClient
test_engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

PROFILE_ROWS = {
    Role.TEACHER: lambda uid: TeacherProfileORM(
        user_id=uid, first_name="Ann", last_name="Lee", current_country="Canada",
        citizenship="Canada", years_experience=3, subjects=["English"],
        degree_level="BA", degree_major="English",
    ),
    Role.RECRUITER: lambda uid: RecruiterProfileORM(
        user_id=uid, company_name="Acme", position="HR", bio="x" * 60,
    ),
    Role.SCHOOL: lambda uid: SchoolProfileORM(
        user_id=uid, school_name="Seoul Academy", country="South Korea", city="Seoul",
    ),
}


class FakeSessionCache:
    """Кэш сессий в памяти вместо Redis"""

    def __init__(self):
        self.store = {}
        self.deleted = []

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ttl=None):
        self.store[key] = value
        return True

    def delete(self, key):
        self.deleted.append(key)
        self.store.pop(key, None)
        return True


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Настройка тестового окружения"""
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/99")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./test_onboarding.db")
    # Отключаем rate limiting в тестах
    limiter.enabled = False
    yield
    limiter.enabled = True


@pytest.fixture
def db():
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def session_cache():
    return FakeSessionCache()


@pytest.fixture
def client(db, session_cache):
    """Фикстура для тестового клиента"""
    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_cache] = lambda: session_cache
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Создаёт пользователя (и при необходимости профиль), возвращает (id, token)"""
    counter = {"n": 0}

    def _make(role=None, with_profile=False, name="Test User"):
        counter["n"] += 1
        row = UserORM(
            email=f"user{counter['n']}@example.com",
            password_hash="not-a-real-hash",
            name=name,
            role=role.value if role else None,
        )
        db.add(row); db.commit(); db.refresh(row)
        if with_profile:
            db.add(PROFILE_ROWS[role](row.id)); db.commit()
        return row.id, create_access_token(row.id)

    return _make
