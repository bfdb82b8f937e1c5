import hashlib
import json
import secrets
from datetime import datetime, timezone, timedelta
from sqlalchemy.orm import Session
from jose import jws, JWSError
from models.sessions import UserSession
from models.users import User
from core.config import settings
from core.exceptions import Unauthorized
from utils.verification import as_utc
from utils.logger import get_logger

logger = get_logger(__name__)


def _hash_session_id(session_id: str) -> str:
    return hashlib.sha256(session_id.encode()).hexdigest()


class SessionService:
    """
    Server-side login sessions.

    The cookie value is a JWS (signed with SESSION_SECRET) wrapping a random
    session id. Only the id's SHA-256 digest is stored. Expiry is checked
    lazily when a session is read, and the sliding expiry is written back at
    most once per SESSION_TOUCH_AFTER_HOURS.
    """

    @staticmethod
    def sign(session_id: str) -> str:
        return jws.sign({"sid": session_id}, settings.SESSION_SECRET, algorithm="HS256")

    @staticmethod
    def unsign(cookie_value: str) -> str:
        """
        Returns the session id inside a signed cookie.

        Raises:
            Unauthorized: If the signature does not verify
        """
        try:
            payload = json.loads(jws.verify(cookie_value, settings.SESSION_SECRET, algorithms=["HS256"]))
        except (JWSError, ValueError):
            raise Unauthorized("Invalid session")

        session_id = payload.get("sid") if isinstance(payload, dict) else None
        if not session_id:
            raise Unauthorized("Invalid session")
        return session_id

    @staticmethod
    def create(db: Session, user: User, now: datetime = None) -> str:
        """
        Persists a new session for the user.

        Returns:
            Signed cookie value to hand to the browser
        """
        now = now or datetime.now(timezone.utc)
        session_id = secrets.token_urlsafe(32)

        db_session = UserSession(
            user_id=user.id,
            session_hash=_hash_session_id(session_id),
            expires_at=now + timedelta(days=settings.SESSION_MAX_AGE_DAYS),
            last_touched_at=now,
        )
        db.add(db_session)
        db.commit()

        logger.info("Session created", extra={"user_id": user.id})
        return SessionService.sign(session_id)

    @staticmethod
    def resolve(db: Session, cookie_value: str, now: datetime = None) -> UserSession:
        """
        Loads the live session behind a signed cookie.

        Expired sessions are deleted on sight. A session used after the touch
        window has its expiry pushed forward.

        Raises:
            Unauthorized: Bad signature, unknown session or expired session
        """
        now = now or datetime.now(timezone.utc)
        session_id = SessionService.unsign(cookie_value)

        db_session = db.query(UserSession).filter(
            UserSession.session_hash == _hash_session_id(session_id)
        ).first()

        if not db_session:
            raise Unauthorized("Session not found")

        if as_utc(db_session.expires_at) <= now:
            db.delete(db_session)
            db.commit()
            logger.info("Expired session removed", extra={"user_id": db_session.user_id})
            raise Unauthorized("Session expired")

        touch_after = timedelta(hours=settings.SESSION_TOUCH_AFTER_HOURS)
        if now - as_utc(db_session.last_touched_at) >= touch_after:
            db_session.last_touched_at = now
            db_session.expires_at = now + timedelta(days=settings.SESSION_MAX_AGE_DAYS)
            db.commit()

        return db_session

    @staticmethod
    def destroy(db: Session, cookie_value: str) -> None:
        """
        Deletes the session behind a cookie. Unknown or tampered cookies are
        ignored since there is nothing to revoke.
        """
        try:
            session_id = SessionService.unsign(cookie_value)
        except Unauthorized:
            return

        db.query(UserSession).filter(
            UserSession.session_hash == _hash_session_id(session_id)
        ).delete()
        db.commit()

    @staticmethod
    def destroy_all(db: Session, user_id: int) -> None:
        """Logs the user out everywhere (used after a password reset)."""
        db.query(UserSession).filter(UserSession.user_id == user_id).delete()
        db.commit()
