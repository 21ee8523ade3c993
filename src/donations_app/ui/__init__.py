"""UI components and screens for the donations app."""

from . import components, pages

__all__ = ["components", "pages"]
