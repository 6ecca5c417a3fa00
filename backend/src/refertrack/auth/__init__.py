"""Credential handling."""

from refertrack.auth.passwords import PasswordHasher

__all__ = ["PasswordHasher"]
