import os
from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Application configuration settings.
    Loads from environment variables with defaults.
    """
    PROJECT_NAME: str = "FeatureForge API"
    PROJECT_VERSION: str = "1.0.0"

    # Empty means the database is not configured; requests get a 503.
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")
    DB_POOL_SIZE: int = int(os.getenv("DB_POOL_SIZE", "5"))
    DB_MAX_OVERFLOW: int = int(os.getenv("DB_MAX_OVERFLOW", "10"))
    DB_POOL_TIMEOUT: int = int(os.getenv("DB_POOL_TIMEOUT", "30"))
    DB_POOL_RECYCLE: int = int(os.getenv("DB_POOL_RECYCLE", "1800"))

    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    MAX_TEAM_SIZE: int = int(os.getenv("MAX_TEAM_SIZE", "10"))
    MAX_TEAMS_PER_USER: int = int(os.getenv("MAX_TEAMS_PER_USER", "5"))
    NOTIFICATION_RETENTION_DAYS: int = int(os.getenv("NOTIFICATION_RETENTION_DAYS", "30"))

    MAIL_USERNAME: str = os.getenv("MAIL_USERNAME", "")
    MAIL_PASSWORD: str = os.getenv("MAIL_PASSWORD", "")
    MAIL_FROM: str = os.getenv("MAIL_FROM", "")
    MAIL_SERVER: str = os.getenv("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT: int = int(os.getenv("MAIL_PORT", "587"))
    EMAIL_SEND_TIMEOUT: float = float(os.getenv("EMAIL_SEND_TIMEOUT", "30"))
    EMAIL_USE_BACKGROUND: bool = _env_bool("EMAIL_USE_BACKGROUND", True)

    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    ALLOWED_ORIGINS: list = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

settings = Settings()
