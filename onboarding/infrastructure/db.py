from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from ..config import settings

# таймауты хранилища: запрос не должен висеть бесконечно
connect_args = {}
engine_kwargs = {}
if settings.DATABASE_URL.startswith("postgresql"):
    timeout_ms = settings.DB_TIMEOUT_SECONDS * 1000
    connect_args = {
        "client_encoding": "utf8",
        "connect_timeout": settings.DB_TIMEOUT_SECONDS,
        "options": f"-c statement_timeout={timeout_ms}",
    }
    engine_kwargs = {"pool_size": 10, "max_overflow": 20, "pool_timeout": settings.DB_TIMEOUT_SECONDS}
elif settings.DATABASE_URL.startswith("sqlite"):
    connect_args = {"check_same_thread": False, "timeout": settings.DB_TIMEOUT_SECONDS}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    pool_recycle=3600,
    connect_args=connect_args,
    echo=False,
    **engine_kwargs,
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
def get_db():
    db = SessionLocal()
    try: yield db
    finally: db.close()
