import re
from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from jose import jwt, JWTError
from core.config import settings


def get_client_ip(request: Request) -> str:
    """
    Client address as seen through TRUST_PROXY_HOPS reverse proxies.

    Each trusted proxy appends the address it received the request from to
    X-Forwarded-For, so the client is the entry that many positions from the
    end. Entries further left are client-supplied and not trusted.
    """
    hops = settings.TRUST_PROXY_HOPS
    forwarded = request.headers.get("X-Forwarded-For")
    if hops > 0 and forwarded:
        chain = [part.strip() for part in forwarded.split(",") if part.strip()]
        if chain:
            return chain[-hops] if len(chain) >= hops else chain[0]

    return get_remote_address(request)


def get_user_id(request: Request):
    token = request.headers.get("Authorization")
    if token:
        try:
            token = re.sub(r"^\s*bearer\s+", "", token, flags=re.IGNORECASE)
            # Decode JWT
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            user_id = payload.get("id")
            if user_id:
                return str(user_id)
        except JWTError:
            pass

    return get_client_ip(request)


limiter = Limiter(
    key_func=get_user_id,
    default_limits=["200/hour"],
    enabled=settings.ENV != "testing"
)
