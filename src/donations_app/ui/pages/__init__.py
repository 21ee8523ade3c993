"""Screens rendered by the application router."""

from . import home, login

__all__ = ["home", "login"]
