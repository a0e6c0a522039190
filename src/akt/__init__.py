"""Authorized Keys Tool: finds SSH authorized keys that have not been used recently."""

__version__ = "0.2.0"
