"""Credential, validation and login payload contracts."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from donations_app.core import exceptions


class Field(str, enum.Enum):
    EMAIL = "email"
    PASSWORD = "password"


class ValidationError(str, enum.Enum):
    """Field-level rule violations reported by the validator."""

    EMAIL_REQUIRED = "email_required"
    EMAIL_INVALID = "email_invalid"
    PASSWORD_REQUIRED = "password_required"
    PASSWORD_TOO_SHORT = "password_too_short"

    @property
    def field(self) -> Field:
        return Field.EMAIL if self.value.startswith("email") else Field.PASSWORD

    @property
    def message_key(self) -> str:
        return f"validation_message_{self.value}"


@dataclass(frozen=True, slots=True)
class Credentials:
    email: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(email={self.email!r}, password='***')"


@dataclass(frozen=True, slots=True)
class ValidationOutcome:
    """Synchronous answer returned by ``SessionController.submit``."""

    errors: Mapping[Field, ValidationError] = field(default_factory=dict)
    accepted: bool = False

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error_for(self, field_name: Field) -> Optional[ValidationError]:
        return self.errors.get(field_name)


@dataclass(frozen=True, slots=True)
class UserProfile:
    id: str
    name: str
    email: str
    image_url: Optional[str] = None

    @classmethod
    def fake(cls) -> "UserProfile":
        return cls(
            id="1",
            name="Test User",
            email="test@test.com",
            image_url="https://picsum.photos/200",
        )

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "UserProfile":
        return cls(
            id=str(payload["id"]),
            name=str(payload.get("name") or ""),
            email=str(payload.get("email") or ""),
            image_url=payload.get("image_url"),
        )


@dataclass(frozen=True, slots=True)
class LoginResult:
    """Payload carried by a successful login ``done`` event."""

    token: str
    user: UserProfile

    @classmethod
    def from_payload(cls, payload: Any) -> "LoginResult":
        try:
            token = payload["token"]
            user = UserProfile.from_payload(payload["user"])
        except (KeyError, TypeError) as error:
            raise exceptions.GatewayError(
                code=exceptions.MALFORMED_PAYLOAD,
                message="Login response is missing required fields",
                details={"missing": str(error)},
            ) from error
        if not isinstance(token, str) or not token:
            raise exceptions.GatewayError(
                code=exceptions.MALFORMED_PAYLOAD,
                message="Login response carries an empty token",
            )
        return cls(token=token, user=user)
