"""Reactive state controllers for the application."""

from .app import AppController, create_controller
from .home import HomeController
from .login import LoginScreenController
from .operation import OperationRunner
from .session import SessionController

__all__ = [
    "AppController",
    "HomeController",
    "LoginScreenController",
    "OperationRunner",
    "SessionController",
    "create_controller",
]
