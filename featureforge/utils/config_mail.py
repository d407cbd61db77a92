from typing import Optional

from fastapi_mail import ConnectionConfig

from featureforge.config.settings import settings


def get_mail_config() -> Optional[ConnectionConfig]:
    """
    Builds the SMTP connection config, or None when mail is not configured.
    """
    if not (settings.MAIL_USERNAME and settings.MAIL_FROM):
        return None

    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,

        MAIL_STARTTLS=True,
        MAIL_SSL_TLS=False,

        USE_CREDENTIALS=True,
        VALIDATE_CERTS=True,
    )
