"""
Password reset token helpers.

The plain token is mailed to the user exactly once; only its SHA-256 digest
is stored. A presented token is checked by hashing it again and comparing
digests.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone, timedelta

from core.config import settings
from core.exceptions import CredentialError


@dataclass(frozen=True)
class PasswordResetToken:
    token_hash: str
    plain_token: str
    expires_at: datetime


def hash_token(token: str) -> str:
    if not isinstance(token, str) or not token:
        raise CredentialError()
    return hashlib.sha256(token.encode()).hexdigest()


def generate_password_reset_token(minutes: int | None = None) -> PasswordResetToken:
    if minutes is None:
        minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES

    # 32 random bytes -> 256 bits of entropy
    plain_token = secrets.token_hex(32)

    return PasswordResetToken(
        token_hash=hash_token(plain_token),
        plain_token=plain_token,
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=minutes),
    )


def build_reset_url(token: str, base_url: str | None = None) -> str:
    base_url = (base_url or settings.FRONTEND_URL).rstrip("/")
    return f"{base_url}/reset-password?token={token}"
