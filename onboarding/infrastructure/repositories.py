from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .models import UserORM, TeacherProfileORM, RecruiterProfileORM, SchoolProfileORM
from ..domain.entities import Role, User
from ..domain.errors import ProfileAlreadyExists, StoreUnavailable
from ..application.use_cases.register_user import IUserRepository
from ..application.use_cases.complete_profile import IProfileRepository

PROFILE_MODELS = {
    Role.TEACHER: TeacherProfileORM,
    Role.RECRUITER: RecruiterProfileORM,
    Role.SCHOOL: SchoolProfileORM,
}


def to_domain(u: UserORM) -> User:
    return User(id=u.id, email=u.email, name=u.name, role=Role(u.role) if u.role else None)


class UserRepository(IUserRepository):
    def __init__(self, db: Session): self.db = db

    def get(self, user_id: int) -> User | None:
        try:
            row = self.db.get(UserORM, user_id)
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e
        return to_domain(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        try:
            row = self.db.query(UserORM).filter(UserORM.email == email).first()
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e
        return to_domain(row) if row else None

    def create(self, email: str, password_hash: str, name: str | None = None) -> User:
        row = UserORM(email=email, password_hash=password_hash, name=name, role=None)
        try:
            self.db.add(row); self.db.commit(); self.db.refresh(row)
        except IntegrityError as e:
            # параллельная регистрация с тем же email
            self.db.rollback()
            raise ValueError("Email already registered") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(str(e)) from e
        return to_domain(row)

    def set_role_if_unset(self, user_id: int, role: Role) -> bool:
        # атомарный compare-and-set: UPDATE ... WHERE role IS NULL
        stmt = (
            update(UserORM)
            .where(UserORM.id == user_id, UserORM.role.is_(None))
            .values(role=role.value)
            .execution_options(synchronize_session=False)
        )
        try:
            result = self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(str(e)) from e
        return result.rowcount == 1


class ProfileRepository(IProfileRepository):
    def __init__(self, db: Session): self.db = db

    def exists(self, role: Role, user_id: int) -> bool:
        model = PROFILE_MODELS.get(role)
        if model is None:
            return False
        try:
            row = self.db.query(model.id).filter(model.user_id == user_id).first()
        except SQLAlchemyError as e:
            raise StoreUnavailable(str(e)) from e
        return row is not None

    def create(self, role: Role, user_id: int, data: dict) -> int:
        model = PROFILE_MODELS[role]
        row = model(user_id=user_id, **data)
        try:
            self.db.add(row); self.db.commit(); self.db.refresh(row)
        except IntegrityError as e:
            self.db.rollback()
            raise ProfileAlreadyExists(f"{role.value} profile exists for user {user_id}") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StoreUnavailable(str(e)) from e
        return row.id
