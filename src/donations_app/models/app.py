"""Screen-level state containers rendered by the UI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from donations_app.models.auth import Field, LoginResult, ValidationError
from donations_app.models.donation import Donation

LOGIN_PATH = "/"
HOME_PATH = "/home"


@dataclass(frozen=True, slots=True)
class LoginFormState:
    """Form values plus everything the login page draws from the session."""

    email: str = ""
    password: str = ""
    field_errors: Dict[Field, ValidationError] = field(default_factory=dict)
    loading: bool = False
    error_message: Optional[str] = None


@dataclass(frozen=True, slots=True)
class HomeState:
    loading: bool = False
    donations: tuple[Donation, ...] = ()
    error_message: Optional[str] = None
    loaded: bool = False


@dataclass(frozen=True, slots=True)
class AppState:
    route: str = LOGIN_PATH
    login: Optional[LoginResult] = None

    @property
    def is_authenticated(self) -> bool:
        return self.login is not None
