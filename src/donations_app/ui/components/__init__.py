"""Reusable Solara components."""

from . import app_bar

__all__ = ["app_bar"]
