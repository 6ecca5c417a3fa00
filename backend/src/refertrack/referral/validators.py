"""Registration input validation."""

import re
from dataclasses import dataclass

from refertrack.errors import ValidationError

PASSWORD_MIN_LENGTH = 8

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


@dataclass(frozen=True)
class RegistrationInput:
    """Normalized registration fields."""
    name: str
    email: str
    password: str
    referral_code: str | None = None


def normalize_email(email: str) -> str:
    """Strip surrounding whitespace and lower-case an email."""
    return email.strip().lower()


def validate_email(email: str) -> str:
    """Validate email has a local@domain.tld shape."""
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Invalid email format")
    return email


def validate_password_length(password: str) -> str:
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    return password


def validate_password_complexity(password: str) -> str:
    if not re.search(r"[A-Za-z]", password) or not re.search(r"[0-9]", password):
        raise ValidationError("Password must contain at least one letter and one number")
    return password


def validate_registration(
    name: str | None,
    email: str | None,
    password: str | None,
    referral_code: str | None = None,
) -> RegistrationInput:
    """Validate and normalize a signup request.

    Checks run in a fixed order and the first failure wins: required
    fields, password length, email format, password complexity.

    Raises:
        ValidationError: With a message suitable for the end user
    """
    name = (name or "").strip()
    email = normalize_email(email or "")
    password = password or ""

    if not name or not email or not password:
        raise ValidationError("All fields are required")

    validate_password_length(password)
    validate_email(email)
    validate_password_complexity(password)

    referral_code = (referral_code or "").strip() or None

    return RegistrationInput(
        name=name,
        email=email,
        password=password,
        referral_code=referral_code,
    )
