"""
Declarative request body validation.

A rule set is a list of field chains built with ``check(path)``::

    rules = [
        check("productName").not_empty("Product name is required").trim(),
        check("minOrderQuantity").is_int(min=1, message="Must be at least 1"),
        check("flavorType.*").optional().is_in(FlavorType.values()),
    ]

Paths may be nested (``contact.email``) or address every element of an array
(``ingredients.*``). Each chain reports at most one error, its first failing
check. Every chain runs, so a client gets the full list of problems in one
response.
"""

import json
import re
from datetime import date, datetime
from typing import Any, Callable, Iterable
from urllib.parse import urlparse

from fastapi import Request

from core.exceptions import ValidationError
from utils.logger import get_logger, sanitize_log_data

logger = get_logger(__name__)

MISSING = object()

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")


def _is_absent(value: Any) -> bool:
    return value is MISSING or value is None


def _is_bool(value: Any) -> bool:
    return isinstance(value, bool)


def _to_number(value: Any) -> float | None:
    if _is_bool(value):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _to_int(value: Any) -> int | None:
    if _is_bool(value):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and re.fullmatch(r"[+-]?\d+", value.strip()):
        return int(value.strip())
    return None


def _in_range(number: float, min: float | None, max: float | None) -> bool:
    if min is not None and number < min:
        return False
    if max is not None and number > max:
        return False
    return True


class FieldRule:
    """An ordered chain of checks and sanitizers bound to one field path."""

    def __init__(self, path: str):
        self.path = path
        self.is_optional = False
        self._steps: list[tuple[str, Callable[[Any], Any], str]] = []

    # modifiers ------------------------------------------------------------

    def optional(self) -> "FieldRule":
        self.is_optional = True
        return self

    def _check(self, predicate: Callable[[Any], bool], message: str) -> "FieldRule":
        self._steps.append(("check", predicate, message))
        return self

    # sanitizers -----------------------------------------------------------

    def trim(self) -> "FieldRule":
        self._steps.append(("sanitize", lambda v: v.strip() if isinstance(v, str) else v, ""))
        return self

    # checks ---------------------------------------------------------------

    def exists(self, message: str = "Field is required") -> "FieldRule":
        return self._check(lambda v: v is not MISSING, message)

    def not_empty(self, message: str = "Field cannot be empty") -> "FieldRule":
        def predicate(value):
            if _is_absent(value):
                return False
            if isinstance(value, str):
                return bool(value.strip())
            if isinstance(value, (list, dict)):
                return bool(value)
            return True
        return self._check(predicate, message)

    def is_string(self, message: str = "Must be a string") -> "FieldRule":
        return self._check(lambda v: isinstance(v, str), message)

    def is_int(self, min: int | None = None, max: int | None = None,
               message: str = "Must be an integer") -> "FieldRule":
        def predicate(value):
            number = _to_int(value)
            return number is not None and _in_range(number, min, max)
        return self._check(predicate, message)

    def is_float(self, min: float | None = None, max: float | None = None,
                 message: str = "Must be a number") -> "FieldRule":
        def predicate(value):
            number = _to_number(value)
            return number is not None and _in_range(number, min, max)
        return self._check(predicate, message)

    def is_numeric(self, message: str = "Must be a valid number") -> "FieldRule":
        return self._check(lambda v: _to_number(v) is not None, message)

    def non_negative(self, message: str = "Cannot be negative") -> "FieldRule":
        return self._check(lambda v: (_to_number(v) or 0) >= 0, message)

    def is_boolean(self, message: str = "Must be a boolean value") -> "FieldRule":
        return self._check(
            lambda v: _is_bool(v) or (isinstance(v, str) and v.lower() in {"true", "false"}),
            message,
        )

    def is_array(self, message: str = "Must be an array") -> "FieldRule":
        return self._check(lambda v: isinstance(v, list), message)

    def is_in(self, choices: Iterable[Any], message: str = "Invalid value") -> "FieldRule":
        allowed = set(choices)
        return self._check(lambda v: isinstance(v, (str, int, float)) and v in allowed, message)

    def is_length(self, min: int | None = None, max: int | None = None,
                  message: str = "Invalid length") -> "FieldRule":
        return self._check(
            lambda v: isinstance(v, str) and _in_range(len(v), min, max),
            message,
        )

    def matches(self, pattern: str, message: str = "Invalid format") -> "FieldRule":
        compiled = re.compile(pattern)
        return self._check(lambda v: isinstance(v, str) and compiled.search(v) is not None, message)

    def is_email(self, message: str = "Must be a valid email") -> "FieldRule":
        return self._check(lambda v: isinstance(v, str) and EMAIL_RE.match(v.strip()) is not None, message)

    def is_url(self, message: str = "Must be a valid URL") -> "FieldRule":
        def predicate(value):
            if not isinstance(value, str) or " " in value.strip():
                return False
            candidate = value.strip()
            if "://" not in candidate:
                candidate = f"http://{candidate}"
            parsed = urlparse(candidate)
            return parsed.scheme in {"http", "https"} and "." in parsed.netloc
        return self._check(predicate, message)

    def is_date(self, message: str = "Must be a valid ISO date") -> "FieldRule":
        def predicate(value):
            if isinstance(value, (date, datetime)):
                return True
            if not isinstance(value, str):
                return False
            try:
                datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            except ValueError:
                return False
            return True
        return self._check(predicate, message)

    def custom(self, predicate: Callable[[Any], bool], message: str = "Invalid value") -> "FieldRule":
        return self._check(predicate, message)

    # evaluation -----------------------------------------------------------

    def run(self, payload: dict) -> list[dict[str, Any]]:
        errors = []
        for location, container, key, value in _resolve(payload, self.path):
            if self.is_optional and _is_absent(value):
                continue
            for kind, step, message in self._steps:
                if kind == "sanitize":
                    if value is not MISSING and container is not None:
                        value = step(value)
                        container[key] = value
                    continue
                if not step(value):
                    errors.append({
                        "field": location,
                        "message": message,
                        "value": None if value is MISSING else value,
                    })
                    break
        return errors


def check(path: str) -> FieldRule:
    return FieldRule(path)


def _resolve(payload: Any, path: str):
    """
    Yield ``(location, container, key, value)`` for every concrete field the
    path addresses. ``container[key]`` is where a sanitized value is written.
    """
    parts = path.split(".")

    def walk(node, index, location):
        part = parts[index]
        last = index == len(parts) - 1

        if part == "*":
            if not isinstance(node, list):
                return
            for position, item in enumerate(node):
                here = f"{location}[{position}]"
                if last:
                    yield here, node, position, item
                else:
                    yield from walk(item, index + 1, here)
            return

        here = f"{location}.{part}" if location else part
        if isinstance(node, dict):
            value = node.get(part, MISSING)
            container = node
        else:
            value, container = MISSING, None

        if last:
            yield here, container, part, value
        elif isinstance(value, (dict, list)):
            yield from walk(value, index + 1, here)
        elif parts[index + 1] != "*":
            # intermediate object missing, so the leaf is missing too
            yield ".".join([here, *parts[index + 1:]]), None, None, MISSING

    yield from walk(payload, 0, "")


def validate(payload: dict, rules: list[FieldRule]) -> list[dict[str, Any]]:
    """Run every chain against ``payload`` and return all violations."""
    errors: list[dict[str, Any]] = []
    for rule in rules:
        errors.extend(rule.run(payload))
    return errors


def validate_body(rules: list[FieldRule] | Callable[[dict], list[FieldRule]]):
    """
    FastAPI dependency: parse the JSON body, run ``rules`` and hand the
    (sanitized) payload to the route, or raise one ``ValidationError`` with
    every violation found.

    ``rules`` may also be a callable that picks the rule set from the payload.
    """
    async def dependency(request: Request) -> dict:
        try:
            payload = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError.single("body", "Request body must be valid JSON")

        if not isinstance(payload, dict):
            raise ValidationError.single("body", "Request JSON payload must be an object")

        errors = validate(payload, rules(payload) if callable(rules) else rules)
        if errors:
            logger.info(
                "Request validation failed",
                extra={
                    "path": request.url.path,
                    "fields": [error["field"] for error in errors],
                    "payload": sanitize_log_data(payload),
                },
            )
            raise ValidationError(errors)

        return payload

    return dependency
