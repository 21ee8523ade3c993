"""Donations client: login flow and donation feed built on Solara."""

__version__ = "0.1.0"
