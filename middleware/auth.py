"""
Request authentication and role gates.

An ``Authenticator`` inspects a request and either returns ``None`` (its
credential is not present, let the next one try), returns an ``Identity``, or
raises ``Unauthorized`` (its credential is present but bad, stop here). The
chain tries its authenticators in order; when none applies the request is
rejected with 401.

Admin header bundle
-------------------
``AdminAuthorization`` / ``Admin-Authorization`` + ``X-Admin-Role`` +
``X-Admin-Email`` are accepted on presence and shape alone. Deployments must
only expose them behind a perimeter that sets or strips these headers.
"""

from dataclasses import dataclass
from typing import Iterable

from fastapi import Request
from sqlalchemy.orm import Session

from core.config import settings
from core.exceptions import Forbidden, Unauthorized
from models.enums import UserRole
from models.users import User
from services.session_service import SessionService
from services.token_service import TokenService
from utils.logger import get_logger

logger = get_logger(__name__)

ADMIN_AUTH_HEADERS = ("adminauthorization", "admin-authorization")
ADMIN_ROLE_HEADER = "x-admin-role"
ADMIN_EMAIL_HEADER = "x-admin-email"


@dataclass
class Identity:
    role: str
    email: str
    user_id: int | None = None
    user: User | None = None
    channel: str = "bearer"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


def _bearer_credentials(value: str | None) -> str | None:
    """Token part of a ``Bearer`` value (scheme matched case-insensitively), else None."""
    scheme, _, token = (value or "").strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip()


def _strip_bearer(value: str) -> str:
    token = _bearer_credentials(value)
    return value.strip() if token is None else token


def _identity_for(user: User, channel: str) -> Identity:
    return Identity(role=user.role, email=user.email, user_id=user.id, user=user, channel=channel)


class Authenticator:
    def authenticate(self, request: Request, db: Session) -> Identity | None:
        raise NotImplementedError


class BearerTokenAuthenticator(Authenticator):
    """``Authorization: Bearer <jwt>`` issued at login."""

    def authenticate(self, request: Request, db: Session) -> Identity | None:
        token = _bearer_credentials(request.headers.get("Authorization"))
        if token is None:
            return None

        payload = TokenService.decode_access_token(token)

        user = db.query(User).filter(User.id == payload["id"]).first()
        if not user:
            logger.warning("Bearer token for unknown user", extra={"user_id": payload["id"]})
            raise Unauthorized("Not authorized, user not found")

        if not user.is_active:
            logger.warning("Bearer token for inactive user", extra={"user_id": user.id})
            raise Unauthorized("User account is not active")

        return _identity_for(user, "bearer")


class AdminHeaderAuthenticator(Authenticator):
    """The admin header bundle (see module docstring)."""

    def authenticate(self, request: Request, db: Session) -> Identity | None:
        headers = request.headers
        names = (*ADMIN_AUTH_HEADERS, ADMIN_ROLE_HEADER, ADMIN_EMAIL_HEADER)
        if not any(name in headers for name in names):
            return None

        auth_value = next((headers[name] for name in ADMIN_AUTH_HEADERS if headers.get(name)), "")
        role = (headers.get(ADMIN_ROLE_HEADER) or "").strip()
        email = (headers.get(ADMIN_EMAIL_HEADER) or "").strip()

        if not _strip_bearer(auth_value):
            logger.warning("Admin authentication failed: missing authorization header")
            raise Unauthorized("Admin authentication failed: Missing authorization header")

        if role.lower() != UserRole.ADMIN.value:
            logger.warning("Admin authentication failed: invalid role", extra={"role": role})
            raise Unauthorized("Admin authentication failed: Invalid admin role")

        if not email:
            logger.warning("Admin authentication failed: missing email")
            raise Unauthorized("Admin authentication failed: Missing admin email")

        # attach the account when one exists so admin actions can own records
        user = db.query(User).filter(User.email == email.lower()).first()
        return Identity(
            role=UserRole.ADMIN.value,
            email=email,
            user_id=user.id if user else None,
            user=user,
            channel="admin-header",
        )


class SessionAuthenticator(Authenticator):
    """Signed ``sessionId`` cookie pointing at a server-side session."""

    def authenticate(self, request: Request, db: Session) -> Identity | None:
        cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
        if not cookie:
            return None

        db_session = SessionService.resolve(db, cookie)
        user = db_session.user
        if not user or not user.is_active:
            logger.warning("Session for inactive user", extra={"user_id": db_session.user_id})
            raise Unauthorized("User account is not active")

        return _identity_for(user, "session")


class AuthenticatorChain:
    def __init__(self, authenticators: Iterable[Authenticator]):
        self.authenticators = list(authenticators)

    def resolve(self, request: Request, db: Session) -> Identity:
        for authenticator in self.authenticators:
            identity = authenticator.authenticate(request, db)
            if identity is not None:
                request.state.identity = identity
                return identity

        raise Unauthorized("Not authorized, please login again")


default_chain = AuthenticatorChain([
    BearerTokenAuthenticator(),
    AdminHeaderAuthenticator(),
    SessionAuthenticator(),
])

admin_chain = AuthenticatorChain([AdminHeaderAuthenticator()])


def ensure_role(identity: Identity, roles: Iterable[str]) -> Identity:
    """Admin passes every gate; anyone else must hold one of ``roles``."""
    allowed = set(roles)
    if identity.is_admin or identity.role in allowed:
        return identity

    logger.warning(
        "Role gate rejected request",
        extra={"role": identity.role, "allowed": sorted(allowed), "user_id": identity.user_id},
    )
    raise Forbidden(f"Access denied. Role {identity.role} is not authorized to access this resource")
