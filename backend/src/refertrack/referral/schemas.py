"""Pydantic models returned by the registration service."""

from pydantic import BaseModel, ConfigDict, Field


class UserPublic(BaseModel):
    """Public projection of a user. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    name: str
    email: str
    referral_code: str = Field(serialization_alias="referralCode")
    points: int


class RegistrationResult(BaseModel):
    """Outcome of a successful registration."""

    user_id: int
    referral_code: str
    referred_by: int | None = None
