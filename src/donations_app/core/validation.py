"""Pure credential-shape checks run before any network call."""

from __future__ import annotations

import re
from typing import Dict, Optional

from donations_app.models.auth import Field, ValidationError

PASSWORD_MIN_LENGTH = 8

# local-part "@" domain with at least one dot, no whitespace anywhere
_EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@.]+(?:\.[^\s@.]+)+")


def validate_email(email: Optional[str]) -> Optional[ValidationError]:
    candidate = (email or "").strip()
    if not candidate:
        return ValidationError.EMAIL_REQUIRED
    if not _EMAIL_PATTERN.fullmatch(candidate):
        return ValidationError.EMAIL_INVALID
    return None


def validate_password(
    password: Optional[str], *, min_length: int = PASSWORD_MIN_LENGTH
) -> Optional[ValidationError]:
    candidate = password or ""
    if not candidate:
        return ValidationError.PASSWORD_REQUIRED
    if len(candidate) < min_length:
        return ValidationError.PASSWORD_TOO_SHORT
    return None


def validate(
    email: Optional[str],
    password: Optional[str],
    *,
    min_password_length: int = PASSWORD_MIN_LENGTH,
) -> Dict[Field, ValidationError]:
    """Return at most one error per field; an empty mapping means valid."""

    errors: Dict[Field, ValidationError] = {}
    email_error = validate_email(email)
    if email_error is not None:
        errors[Field.EMAIL] = email_error
    password_error = validate_password(password, min_length=min_password_length)
    if password_error is not None:
        errors[Field.PASSWORD] = password_error
    return errors


def normalise_email(email: str) -> str:
    return email.strip()
