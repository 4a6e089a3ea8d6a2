from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Роль пользователя. Отсутствие роли (unset) хранится как None."""

    TEACHER = "TEACHER"
    RECRUITER = "RECRUITER"
    SCHOOL = "SCHOOL"
    # ADMIN выдаётся только вручную, через мутацию выбора роли недоступен
    ADMIN = "ADMIN"


SELF_SERVICE_ROLES = frozenset({Role.TEACHER, Role.RECRUITER, Role.SCHOOL})


@dataclass(frozen=True)
class User:
    id: int | None
    email: str
    name: str | None = None
    role: Role | None = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Снимок сессии на время одного запроса."""

    authenticated: bool
    user_id: int | None = None
    role: Role | None = None
    has_profile: bool = False
    name: str | None = None

    @classmethod
    def anonymous(cls) -> "SessionSnapshot":
        return cls(authenticated=False)

    def to_dict(self) -> dict:
        return {
            "authenticated": self.authenticated,
            "user_id": self.user_id,
            "role": self.role.value if self.role else None,
            "has_profile": self.has_profile,
            "name": self.name,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionSnapshot":
        role = data.get("role")
        return cls(
            authenticated=bool(data.get("authenticated")),
            user_id=data.get("user_id"),
            role=Role(role) if role else None,
            has_profile=bool(data.get("has_profile")),
            name=data.get("name"),
        )
