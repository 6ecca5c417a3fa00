"""User store interface and its SQLAlchemy implementation."""

from contextlib import contextmanager
from typing import ContextManager, Generator, Protocol

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from refertrack.errors import DuplicateKeyError, StoreError
from refertrack.logging_config import get_logger
from refertrack.storage.db import Database
from refertrack.storage.models import User

logger = get_logger(__name__)

# Constraint names and the "table.column" form SQLite reports; email is checked first
_UNIQUE_FIELDS = {
    "email": ("uq_users_email", "users.email"),
    "referral_code": ("uq_users_referral_code", "users.referral_code"),
}


class UserRepository(Protocol):
    """User operations bound to one open transaction."""

    def find_by_id(self, user_id: int) -> User | None: ...

    def find_by_email(self, email: str) -> User | None: ...

    def find_by_referral_code(self, code: str) -> User | None: ...

    def insert_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        referral_code: str,
        referred_by: int | None = None,
    ) -> User: ...

    def increment_points(self, user_id: int) -> None: ...


class UserStore(Protocol):
    """Persistent collection of users.

    ``transaction()`` yields a :class:`UserRepository`; everything done
    through it is committed on clean exit and rolled back otherwise.
    Failures surface as :class:`StoreError` (``DuplicateKeyError`` for
    unique constraint violations).
    """

    def initialize(self) -> None: ...

    def close(self) -> None: ...

    def transaction(self) -> ContextManager[UserRepository]: ...


class SqlUserRepository:
    """Repository for User operations."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, user_id: int) -> User | None:
        """Get user by ID."""
        return self.db.query(User).filter(User.id == user_id).first()

    def find_by_email(self, email: str) -> User | None:
        """Get user by email."""
        return self.db.query(User).filter(User.email == email).first()

    def find_by_referral_code(self, code: str) -> User | None:
        """Get user by exact referral code."""
        return self.db.query(User).filter(User.referral_code == code).first()

    def insert_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        referral_code: str,
        referred_by: int | None = None,
    ) -> User:
        """Add a new user and flush it so the generated id is available."""
        user = User(
            name=name,
            email=email,
            password_hash=password_hash,
            referral_code=referral_code,
            points=0,
            referred_by=referred_by,
        )
        self.db.add(user)
        self.db.flush()
        self.db.refresh(user)
        return user

    def increment_points(self, user_id: int) -> None:
        """Add one point as a relative update, never from a fetched value."""
        result = self.db.execute(
            update(User)
            .where(User.id == user_id)
            .values(points=User.points + 1)
        )
        if result.rowcount != 1:
            raise StoreError(f"cannot credit points: user {user_id} does not exist")


def _duplicate_field(exc: IntegrityError) -> str | None:
    """Name the unique field an IntegrityError refers to, if any.

    Only constraint identifiers are matched, never the offending value.
    psycopg exposes the constraint name directly; other drivers only give a
    message, whose first line names the constraint or column.
    """
    diag = getattr(exc.orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        for field, tokens in _UNIQUE_FIELDS.items():
            if constraint_name == tokens[0]:
                return field
        return None

    message = next(iter(str(exc.orig).splitlines()), "")
    for field, tokens in _UNIQUE_FIELDS.items():
        if any(token in message for token in tokens):
            return field
    return None


class SqlUserStore:
    """User store backed by a SQLAlchemy database."""

    def __init__(self, database: Database):
        self.database = database

    def initialize(self) -> None:
        """Create tables if they do not exist."""
        self.database.create_tables()

    def close(self) -> None:
        """Release pooled connections."""
        self.database.engine.dispose()

    @contextmanager
    def transaction(self) -> Generator[SqlUserRepository, None, None]:
        """Open a session-scoped transaction.

        Raises:
            DuplicateKeyError: On a unique constraint violation
            StoreError: On any other database failure
        """
        try:
            with self.database.session() as session:
                yield SqlUserRepository(session)
        except IntegrityError as exc:
            field = _duplicate_field(exc)
            if field is None:
                raise StoreError(str(exc.orig)) from exc
            logger.debug("unique_constraint_violated", field=field)
            raise DuplicateKeyError(field) from exc
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
