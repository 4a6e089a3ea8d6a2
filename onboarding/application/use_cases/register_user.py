from ...domain.entities import Role, User


class IUserRepository:
    def get(self, user_id: int) -> User | None: ...
    def get_by_email(self, email: str) -> User | None: ...
    def create(self, email: str, password_hash: str, name: str | None = None) -> User: ...
    def set_role_if_unset(self, user_id: int, role: Role) -> bool: ...


class IPasswordHasher:
    def hash(self, plain: str) -> str: ...


class RegisterUser:
    def __init__(self, repo: IUserRepository, hasher: IPasswordHasher):
        self.repo = repo
        self.hasher = hasher

    def execute(self, email: str, password: str, name: str | None = None) -> User:
        if "@" not in email:
            raise ValueError("Invalid email")
        if len(password) < 8:
            raise ValueError("Password must be at least 8 characters")
        if self.repo.get_by_email(email):
            raise ValueError("Email already registered")
        pwd_hash = self.hasher.hash(password)
        # роль не назначается при регистрации: пользователь выберет её сам
        return self.repo.create(email, pwd_hash, name=name)
