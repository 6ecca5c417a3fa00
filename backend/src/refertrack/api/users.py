"""Registration and user lookup endpoints."""

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict, Field

from refertrack.errors import NotFoundError
from refertrack.logging_config import get_logger
from refertrack.referral.schemas import UserPublic
from refertrack.referral.service import RegistrationService

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["users"])


# ==================== MODELS ====================


class RegisterRequest(BaseModel):
    """User registration request.

    Fields are optional here so that missing values are reported by the
    service with its own message instead of a schema error.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    email: str | None = None
    password: str | None = None
    referral_code: str | None = Field(default=None, alias="referralCode")


class RegisterResponse(BaseModel):
    """Response for a successful registration."""
    success: bool = True
    message: str = "User registered successfully"
    user_id: int = Field(serialization_alias="userId")
    referral_code: str = Field(serialization_alias="referralCode")


# ==================== DEPENDENCIES ====================


def get_registration_service(request: Request) -> RegistrationService:
    """Service instance built by the app factory."""
    return request.app.state.registration_service


# ==================== ENDPOINTS ====================


@router.post("/register", response_model=RegisterResponse)
def register(
    payload: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
):
    """Register a new user, crediting the referrer if the code resolves."""
    result = service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        referral_code=payload.referral_code,
    )
    return RegisterResponse(user_id=result.user_id, referral_code=result.referral_code)


@router.get("/user/{user_id}", response_model=UserPublic)
def get_user(
    user_id: str,
    service: RegistrationService = Depends(get_registration_service),
):
    """Get a user's public profile by id."""
    # Non-numeric or out-of-range ids cannot exist
    if not (user_id.isascii() and user_id.isdigit()) or len(user_id) > 18:
        raise NotFoundError("User not found")
    return service.get_user_by_id(int(user_id))


@router.get("/user-by-code/{code}", response_model=UserPublic)
def get_user_by_code(
    code: str,
    service: RegistrationService = Depends(get_registration_service),
):
    """Get the owner of a referral code (shown on the signup page)."""
    return service.get_user_by_referral_code(code)
