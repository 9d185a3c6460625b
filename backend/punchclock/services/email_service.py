import os
import logging
from fastapi_mail import FastMail, MessageSchema, MessageType, ConnectionConfig

logger = logging.getLogger(__name__)

SMTP_SERVER = os.getenv("SMTP_SERVER")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
FROM_EMAIL = os.getenv("FROM_EMAIL", "no-reply@example.com")

_mailer = None


def smtp_configured() -> bool:
    return bool(SMTP_SERVER and SMTP_USERNAME and SMTP_PASSWORD)


def _get_mailer() -> FastMail:
    global _mailer
    if _mailer is None:
        conf = ConnectionConfig(
            MAIL_USERNAME=SMTP_USERNAME,
            MAIL_PASSWORD=SMTP_PASSWORD,
            MAIL_FROM=FROM_EMAIL,
            MAIL_PORT=SMTP_PORT,
            MAIL_SERVER=SMTP_SERVER,
            MAIL_STARTTLS=True,
            MAIL_SSL_TLS=False,
            USE_CREDENTIALS=True,
        )
        _mailer = FastMail(conf)
    return _mailer


async def send_email(to: str, subject: str, body: str) -> bool:
    """Send a plain-text email, best-effort.

    Never raises: failures are logged and reported through the return value
    so the calling operation is not rolled back. Without SMTP settings the
    message is only logged.
    """
    if not smtp_configured():
        logger.info("SMTP not configured; email to %s not sent. Subject: %s\n%s", to, subject, body)
        return False

    message = MessageSchema(
        subject=subject,
        recipients=[to],
        body=body,
        subtype=MessageType.plain,
    )
    try:
        await _get_mailer().send_message(message)
    except Exception as e:
        logger.error("Failed to send email to %s: %s", to, e)
        return False

    logger.info("Email sent to %s", to)
    return True
