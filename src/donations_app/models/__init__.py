"""Data contracts used across the application."""

from .app import HOME_PATH, LOGIN_PATH, AppState, HomeState, LoginFormState
from .auth import Credentials, Field, LoginResult, UserProfile, ValidationError, ValidationOutcome
from .donation import Donation, DonationImage, parse_donations
from .events import EventState, LifecycleEvent

__all__ = [
    "HOME_PATH",
    "LOGIN_PATH",
    "AppState",
    "HomeState",
    "LoginFormState",
    "Credentials",
    "Field",
    "LoginResult",
    "UserProfile",
    "ValidationError",
    "ValidationOutcome",
    "Donation",
    "DonationImage",
    "parse_donations",
    "EventState",
    "LifecycleEvent",
]
