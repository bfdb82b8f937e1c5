"""
Logging helpers shared by routers and services.
"""

import logging
from typing import Any, Dict

SENSITIVE_FIELDS = {
    'password', 'token', 'secret', 'api_key', 'authorization',
    'verification_code', 'sessionid',
}


def get_logger(name: str) -> logging.Logger:
    """
    Usage:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


def sanitize_log_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of ``data`` that is safe to attach to a log record.

    Passwords and codes are fully redacted, tokens keep their first 8
    characters so they can still be correlated. Nested dictionaries are
    sanitized recursively.
    """
    sanitized = data.copy()

    for key, value in sanitized.items():
        lowered = key.lower()
        if any(sensitive in lowered for sensitive in SENSITIVE_FIELDS):
            if isinstance(value, str):
                if 'token' in lowered and len(value) > 8:
                    sanitized[key] = f"{value[:8]}..."
                else:
                    sanitized[key] = "***REDACTED***"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_log_data(value)

    return sanitized
