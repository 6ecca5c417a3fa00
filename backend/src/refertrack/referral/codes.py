"""Referral code generation."""

import uuid

from refertrack.settings import settings


def generate_referral_code(length: int | None = None) -> str:
    """Generate a short referral code.

    Takes the leading hex digits of a random UUID4, e.g. ``3f9a0c1b``.
    Uniqueness is enforced by the store; callers retry on collision.

    Args:
        length: Number of characters (defaults to settings, max 32)

    Returns:
        Lowercase hex string
    """
    length = length or settings.referral_code_length
    if not 1 <= length <= 32:
        raise ValueError(f"referral code length must be between 1 and 32, got {length}")
    return uuid.uuid4().hex[:length]
