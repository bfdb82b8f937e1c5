import secrets
from datetime import datetime, timezone, timedelta

from core.config import settings


def generate_verification_code() -> str:
    return str(100000 + secrets.randbelow(900000))


def get_code_expiry_time(minutes: int | None = None) -> datetime:
    if minutes is None:
        minutes = settings.VERIFICATION_CODE_EXPIRE_MINUTES
    return datetime.now(timezone.utc) + timedelta(minutes=minutes)


def as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def is_expired(expires_at: datetime | None, now: datetime | None = None) -> bool:
    if expires_at is None:
        return True
    now = now or datetime.now(timezone.utc)
    return as_utc(expires_at) <= now
