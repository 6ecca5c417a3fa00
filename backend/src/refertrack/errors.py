"""Error taxonomy shared by the service, the stores and the API."""


class RefertrackError(Exception):
    """Base class for errors that are reported to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RefertrackError):
    """Missing or malformed input."""

    status_code = 400


class ConflictError(RefertrackError):
    """Unique value already taken (duplicate email)."""

    status_code = 400


class NotFoundError(RefertrackError):
    """User id or referral code does not resolve."""

    status_code = 404


class InternalError(RefertrackError):
    """Store, hashing or code generation failure.

    The message is always generic; details go to the log.
    """

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class StoreError(Exception):
    """Raised by user stores when an operation cannot complete."""
    pass


class DuplicateKeyError(StoreError):
    """Unique constraint violated on insert."""

    def __init__(self, field: str):
        super().__init__(f"duplicate value for unique field '{field}'")
        self.field = field
