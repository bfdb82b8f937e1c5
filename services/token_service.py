from datetime import datetime, timezone, timedelta
from jose import jwt, JWTError
from core.config import settings
from core.exceptions import Unauthorized


class TokenService:
    """
    Issues and verifies the JWT access tokens handed out at login.
    """

    @staticmethod
    def create_access_token(user_id: int, email: str, role: str, expires_delta: timedelta = None) -> str:
        """
        Creates a JWT access token.

        Args:
            user_id: User's ID
            email: User's email
            role: User's role
            expires_delta: Token lifetime (default: ACCESS_TOKEN_EXPIRE_MINUTES, 30 days)

        Returns:
            JWT access token string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        expire = datetime.now(timezone.utc) + expires_delta

        payload = {
            "sub": email,
            "id": user_id,
            "role": role,
            "type": "access",
            "exp": expire
        }

        return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_access_token(token: str) -> dict:
        """
        Verifies signature, expiry and token type.

        Raises:
            Unauthorized: If the token is malformed, expired, tampered with
                or is not an access token
        """
        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        except JWTError:
            raise Unauthorized("Not authorized, token failed")

        if payload.get("type") != "access":
            raise Unauthorized("Invalid token type")

        if payload.get("id") is None or not payload.get("sub"):
            raise Unauthorized("Invalid token payload")

        return payload
