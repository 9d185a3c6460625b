import os
import secrets
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from passlib.context import CryptContext
from jose import JWTError, jwt

from punchclock.models.credential import Credential
from punchclock.models.enums import Role
from punchclock.store.base import AttendanceStore
from punchclock.utils.errors import InvalidCredentialsError
from punchclock.utils.logger import EventTypes, log_event

logger = logging.getLogger(__name__)

# Salted one-way hashing; pbkdf2_sha256 needs no native backend
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    logger.warning("SECRET_KEY not set; using a random per-process key, tokens will not survive a restart")
    SECRET_KEY = secrets.token_urlsafe(64)
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_HOURS = int(os.getenv("ACCESS_TOKEN_EXPIRE_HOURS", "24"))


class TokenError(Exception):
    """Raised for any token that must not authenticate a request."""


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # unknown or malformed hash
        return False


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(subject: str, role: Role, now: Optional[datetime] = None) -> str:
    """Sign a bearer token for ``subject`` (an email) carrying its role."""
    issued_at = now or datetime.now(timezone.utc)
    expire = issued_at + timedelta(hours=ACCESS_TOKEN_EXPIRE_HOURS)
    to_encode = {
        "sub": subject,
        "role": Role(role).value,
        "iat": int(issued_at.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str, now: Optional[datetime] = None) -> dict:
    """Verify signature and expiry and return the claims.

    Expiry is checked here rather than by jose so the reference time can be
    supplied; a token is valid strictly before its ``exp`` second.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM], options={"verify_exp": False})
    except JWTError as e:
        raise TokenError(f"Invalid token: {e}")

    if not payload.get("sub") or payload.get("role") not in {r.value for r in Role}:
        raise TokenError("Token is missing required claims")

    exp = payload.get("exp")
    if not isinstance(exp, (int, float)):
        raise TokenError("Token has no expiry")
    current = (now or datetime.now(timezone.utc)).timestamp()
    if current >= exp:
        raise TokenError("Token expired")
    return payload


async def authenticate(store: AttendanceStore, email: str, password: str) -> Credential:
    credential = await store.find_credential_by_email(email)
    if credential is None or not verify_password(password, credential.password_hash):
        await log_event(EventTypes.AUTH_FAILED, {"email": email})
        raise InvalidCredentialsError()
    await log_event(EventTypes.AUTH_SUCCESS, {"credential_id": credential.id}, user_id=credential.employee_id)
    return credential
