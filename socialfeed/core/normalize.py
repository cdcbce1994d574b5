from __future__ import annotations

import re
from typing import Optional

from socialfeed.errors import FieldValidationError

MAX_FIELD_LEN = 50

_NAME_CHARS = re.compile(r"[A-Za-z\s'-]+")
_USERNAME = re.compile(r"[A-Za-z][A-Za-z0-9_-]{0,49}")
_WHITESPACE_RUN = re.compile(r"\s+")

_VALUE_ERROR_PREFIX = "Value error, "


def _require_str(field: str, value, message: str) -> str:
    if not isinstance(value, str):
        raise FieldValidationError(field, message)
    return value


def collapse_whitespace(s: str) -> str:
    return _WHITESPACE_RUN.sub(" ", s)


def capitalize_first(s: str) -> str:
    return s[:1].upper() + s[1:]


def normalize_person_name(value, *, field: str, label: str) -> str:
    s = _require_str(field, value, f"{label} is required").strip()
    if len(s) < 1:
        raise FieldValidationError(field, f"{label} is required")
    if len(s) > MAX_FIELD_LEN:
        raise FieldValidationError(field, f"{label} cannot exceed {MAX_FIELD_LEN} characters in length")
    if not _NAME_CHARS.fullmatch(s):
        raise FieldValidationError(
            field, f"{label} can only contain letters, spaces, hyphens, and apostrophes"
        )
    s = capitalize_first(collapse_whitespace(s))
    if not s.strip():
        raise FieldValidationError(field, f"{label} cannot be just whitespace")
    return s


def normalize_first_name(value) -> str:
    return normalize_person_name(value, field="first_name", label="First name")


def normalize_last_name(value) -> str:
    return normalize_person_name(value, field="last_name", label="Last name")


def normalize_username(value) -> str:
    s = _require_str("username", value, "Username required").strip()
    if len(s) < 1:
        raise FieldValidationError("username", "Username required")
    if len(s) > MAX_FIELD_LEN:
        raise FieldValidationError("username", f"Username cannot exceed {MAX_FIELD_LEN} characters in length")
    if not _USERNAME.fullmatch(s):
        raise FieldValidationError(
            "username",
            "Username must start with a letter and can only contain letters, numbers, hyphens, and underscores",
        )
    if not s.strip():
        raise FieldValidationError("username", "Username cannot be just whitespace")
    return s


def error_message(err) -> Optional[str]:
    """Human message for one entry of a pydantic ``errors()`` list."""
    inner = (err.get("ctx") or {}).get("error")
    if isinstance(inner, FieldValidationError):
        return inner.message
    msg = err.get("msg")
    if not msg:
        return None
    return msg[len(_VALUE_ERROR_PREFIX):] if msg.startswith(_VALUE_ERROR_PREFIX) else msg


def first_error_message(errors) -> Optional[str]:
    """First human message out of a pydantic ``errors()`` list."""
    for err in errors or []:
        msg = error_message(err)
        if msg:
            return msg
    return None
