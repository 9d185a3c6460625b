import os
import secrets
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable

from punchclock.services.auth_service import hash_password
from punchclock.services.email_service import send_email
from punchclock.services.hours_service import utcnow
from punchclock.store.base import AttendanceStore
from punchclock.utils.errors import NotFoundError, ValidationError
from punchclock.utils.logger import EventTypes, log_event

logger = logging.getLogger(__name__)

RESET_TOKEN_EXPIRE_HOURS = int(os.getenv("RESET_TOKEN_EXPIRE_HOURS", "24"))
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

INVALID_TOKEN_MESSAGE = "Invalid or expired token."


class PasswordSetupService:
    """Single-use password setup links.

    ``initiate`` stores a random token with an expiry on the credential and
    emails it. ``set_password`` redeems it: the new hash is written and the
    token cleared in one store call, so a token can only be used once.
    """

    def __init__(
        self,
        store: AttendanceStore,
        sender: Callable[[str, str, str], Awaitable[bool]] = send_email,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.sender = sender
        self.clock = clock

    async def initiate(self, email: str) -> str:
        credential = await self.store.find_credential_by_email(email)
        if credential is None:
            raise NotFoundError(f"No account found for {email}.")

        token = secrets.token_urlsafe(32)
        expires_at = self.clock() + timedelta(hours=RESET_TOKEN_EXPIRE_HOURS)
        await self.store.set_reset_token(credential.id, token, expires_at)
        await log_event(EventTypes.PASSWORD_SETUP_INITIATED, {"credential_id": credential.id})

        setup_link = f"{FRONTEND_URL}/set-password?token={token}"
        body = (
            f"Dear {credential.email},\n\n"
            "Please use the link below to set up your password:\n\n"
            f"{setup_link}\n\n"
            f"This link will expire in {RESET_TOKEN_EXPIRE_HOURS} hours.\n\n"
            "If you did not expect this, please ignore this email.\n"
        )
        try:
            await self.sender(credential.email, "Set up your password", body)
        except Exception as e:
            # delivery is best-effort; the token stays valid
            logger.error("Password setup email to %s failed: %s", credential.email, e)
            await log_event(EventTypes.EMAIL_FAILED, {"credential_id": credential.id})
        return token

    async def set_password(self, token: str, new_password: str):
        if not token:
            raise ValidationError(INVALID_TOKEN_MESSAGE)

        credential = await self.store.find_credential_by_reset_token(token)
        if credential is None:
            raise ValidationError(INVALID_TOKEN_MESSAGE)

        expires_at = credential.reset_token_expires_at
        if expires_at is None or expires_at < self.clock():
            logger.info("Expired password setup token for credential %s", credential.id)
            await self.store.clear_reset_token(credential.id)
            raise ValidationError(INVALID_TOKEN_MESSAGE)

        if not await self.store.redeem_reset_token(token, hash_password(new_password)):
            # redeemed by a concurrent request
            raise ValidationError(INVALID_TOKEN_MESSAGE)

        await log_event(EventTypes.PASSWORD_SET, {"credential_id": credential.id})
