"""Password hashing (bcrypt via passlib)."""

from passlib.context import CryptContext

from refertrack.settings import settings

# bcrypt only looks at the first 72 bytes
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """One-way, cost-factored password hashing."""

    def __init__(self, rounds: int | None = None):
        """Initialize hasher.

        Args:
            rounds: bcrypt cost factor (defaults to settings)
        """
        self.rounds = rounds or settings.bcrypt_rounds
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=self.rounds,
        )

    def _truncate_password(self, password: str) -> str:
        """Truncate password to 72 bytes (bcrypt limit).

        Args:
            password: Plain password

        Returns:
            Truncated password
        """
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES].decode("utf-8", errors="ignore")

    def hash(self, password: str) -> str:
        """Hash a password.

        Args:
            password: Plain password

        Returns:
            Hashed password
        """
        return self.pwd_context.hash(self._truncate_password(password))

    def verify(self, password: str, hashed: str) -> bool:
        """Verify a password against hash.

        Args:
            password: Plain password
            hashed: Hashed password

        Returns:
            True if matches
        """
        return self.pwd_context.verify(self._truncate_password(password), hashed)
