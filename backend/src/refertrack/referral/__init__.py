"""Referral module for refertrack.

Every user gets a referral code at signup. When somebody registers with
that code, the code's owner earns one point.
"""

from refertrack.referral.codes import generate_referral_code
from refertrack.referral.schemas import RegistrationResult, UserPublic
from refertrack.referral.service import RegistrationService

__all__ = ["RegistrationResult", "RegistrationService", "UserPublic", "generate_referral_code"]
