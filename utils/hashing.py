from passlib.context import CryptContext

from core.exceptions import CredentialError

bcrypt_context = CryptContext(schemes=['bcrypt'], deprecated='auto')


def get_password_hash(password: str) -> str:
    if not isinstance(password, str):
        raise CredentialError()
    try:
        # Bcrypt has a 72-byte limit, truncate if necessary
        return bcrypt_context.hash(password[:72])
    except (TypeError, ValueError):
        raise CredentialError()


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not isinstance(plain_password, str) or not isinstance(hashed_password, str):
        raise CredentialError()
    try:
        return bcrypt_context.verify(plain_password[:72], hashed_password)
    except (TypeError, ValueError):
        # Unknown or malformed hash
        raise CredentialError()
