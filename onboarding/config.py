from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./onboarding.db"
    REDIS_URL: str = "redis://localhost:6379/2"
    SECRET_KEY: str = "dev-secret-onboarding"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_MINUTES: int = 60
    LOG_LEVEL: str = "INFO"
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    SESSION_CACHE_TTL: int = 300  # 5 minutes
    DB_TIMEOUT_SECONDS: int = 5

    # значения по умолчанию для автосоздания профиля школы
    DEFAULT_SCHOOL_COUNTRY: str = "South Korea"
    DEFAULT_SCHOOL_CITY: str = "Seoul"
    DEFAULT_SCHOOL_TYPE: str = "International School"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
