from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from featureforge.config.settings import settings


class DatabaseUnavailableError(RuntimeError):
    """Raised when a session is requested but no database is configured."""


def build_engine(database_url: str):
    if not database_url:
        return None
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(
        database_url,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine
) if engine is not None else None

def get_db():
    if SessionLocal is None:
        raise DatabaseUnavailableError("Database is not configured")
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
