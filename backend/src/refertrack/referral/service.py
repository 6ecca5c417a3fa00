"""Registration service: signup, referral attribution and user lookups."""

from refertrack.auth.passwords import PasswordHasher
from refertrack.errors import (
    ConflictError,
    DuplicateKeyError,
    InternalError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from refertrack.logging_config import get_logger
from refertrack.referral.codes import generate_referral_code
from refertrack.referral.schemas import RegistrationResult, UserPublic
from refertrack.referral.validators import validate_registration
from refertrack.settings import settings
from refertrack.storage.repo import UserStore

logger = get_logger(__name__)


class RegistrationService:
    """Service for registering users and crediting their referrers."""

    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher | None = None,
        code_length: int | None = None,
        max_code_attempts: int | None = None,
    ):
        """Initialize registration service.

        Args:
            store: User store
            hasher: Password hasher (defaults to bcrypt with settings rounds)
            code_length: Referral code length (defaults to settings)
            max_code_attempts: Code generation attempts before giving up
        """
        self.store = store
        self.hasher = hasher or PasswordHasher()
        self.code_length = code_length or settings.referral_code_length
        self.max_code_attempts = max_code_attempts or settings.referral_code_max_attempts
        self.logger = get_logger(__name__)

    def register(
        self,
        name: str | None,
        email: str | None,
        password: str | None,
        referral_code: str | None = None,
    ) -> RegistrationResult:
        """Register a new user.

        If ``referral_code`` resolves to an existing user, that user becomes
        the referrer and gains one point in the same transaction that creates
        the new user. An unknown code is ignored.

        Args:
            name: Display name
            email: Email address (unique)
            password: Plain password
            referral_code: Optional code of the referring user

        Returns:
            New user's id and generated referral code

        Raises:
            ValidationError: Missing or malformed input
            ConflictError: Email already registered
            InternalError: Store or hashing failure, or no free code found
        """
        try:
            data = validate_registration(name, email, password, referral_code)
        except ValidationError as exc:
            self.logger.info("registration_rejected", reason=exc.message)
            raise

        try:
            with self.store.transaction() as users:
                existing = users.find_by_email(data.email)
        except StoreError as exc:
            self.logger.exception("registration_email_check_failed", error=str(exc))
            raise InternalError() from exc

        if existing:
            self.logger.info("registration_email_taken", email=data.email)
            raise ConflictError("Email already registered")

        try:
            password_hash = self.hasher.hash(data.password)
        except Exception as exc:
            self.logger.exception("password_hash_failed", error=str(exc))
            raise InternalError() from exc

        for attempt in range(1, self.max_code_attempts + 1):
            code = generate_referral_code(self.code_length)
            try:
                with self.store.transaction() as users:
                    referrer = None
                    if data.referral_code:
                        referrer = users.find_by_referral_code(data.referral_code)
                        if referrer is None:
                            self.logger.info("referral_code_unknown", code=data.referral_code)

                    user = users.insert_user(
                        name=data.name,
                        email=data.email,
                        password_hash=password_hash,
                        referral_code=code,
                        referred_by=referrer.id if referrer else None,
                    )
                    if referrer:
                        users.increment_points(referrer.id)
            except DuplicateKeyError as exc:
                if exc.field == "email":
                    self.logger.info("registration_email_taken", email=data.email)
                    raise ConflictError("Email already registered") from exc
                self.logger.warning("referral_code_collision", attempt=attempt, code=code)
                continue
            except StoreError as exc:
                self.logger.exception("registration_failed", email=data.email, error=str(exc))
                raise InternalError() from exc

            self.logger.info(
                "user_registered",
                user_id=user.id,
                referral_code=user.referral_code,
                referred_by=user.referred_by,
            )
            if referrer:
                self.logger.info(
                    "referral_attributed",
                    referrer_id=referrer.id,
                    referred_id=user.id,
                )

            return RegistrationResult(
                user_id=user.id,
                referral_code=user.referral_code,
                referred_by=user.referred_by,
            )

        self.logger.error("referral_code_exhausted", attempts=self.max_code_attempts)
        raise InternalError()

    def get_user_by_id(self, user_id: int) -> UserPublic:
        """Get the public projection of a user.

        Raises:
            NotFoundError: No user with this id
            InternalError: Store failure
        """
        try:
            with self.store.transaction() as users:
                user = users.find_by_id(user_id)
        except StoreError as exc:
            self.logger.exception("user_lookup_failed", user_id=user_id, error=str(exc))
            raise InternalError() from exc

        if user is None:
            self.logger.debug("user_not_found", user_id=user_id)
            raise NotFoundError("User not found")
        return UserPublic.model_validate(user)

    def get_user_by_referral_code(self, code: str) -> UserPublic:
        """Get the public projection of the user owning a referral code.

        Used to show the referrer's name before signup. An unknown code is an
        expected outcome (stale or mistyped link).

        Raises:
            NotFoundError: No user with this code
            InternalError: Store failure
        """
        code = (code or "").strip()
        if not code:
            raise NotFoundError("Invalid referral code")

        try:
            with self.store.transaction() as users:
                user = users.find_by_referral_code(code)
        except StoreError as exc:
            self.logger.exception("referral_lookup_failed", code=code, error=str(exc))
            raise InternalError() from exc

        if user is None:
            self.logger.debug("referral_code_not_found", code=code)
            raise NotFoundError("Invalid referral code")
        return UserPublic.model_validate(user)
