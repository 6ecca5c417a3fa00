"""In-memory user store.

Same interface as :class:`refertrack.storage.repo.SqlUserStore`. One lock
serializes transactions; writes are staged and only applied on commit, so a
failed transaction leaves nothing behind.
"""

import threading
from collections import Counter
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator

from refertrack.errors import DuplicateKeyError, StoreError
from refertrack.storage.models import User


def _clone(user: User, extra_points: int = 0) -> User:
    return User(
        id=user.id,
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
        referral_code=user.referral_code,
        points=user.points + extra_points,
        referred_by=user.referred_by,
        created_at=user.created_at,
    )


class InMemoryUserRepository:
    """Staged view over an :class:`InMemoryUserStore`."""

    def __init__(self, store: "InMemoryUserStore"):
        self._store = store
        self._inserted: dict[int, User] = {}
        self._increments: Counter = Counter()

    def _get(self, user_id: int) -> User | None:
        return self._inserted.get(user_id) or self._store._users.get(user_id)

    def _all(self) -> list[User]:
        return [*self._store._users.values(), *self._inserted.values()]

    def _find(self, **criteria) -> User | None:
        for user in self._all():
            if all(getattr(user, key) == value for key, value in criteria.items()):
                return _clone(user, self._increments[user.id])
        return None

    def find_by_id(self, user_id: int) -> User | None:
        return self._find(id=user_id)

    def find_by_email(self, email: str) -> User | None:
        return self._find(email=email)

    def find_by_referral_code(self, code: str) -> User | None:
        return self._find(referral_code=code)

    def insert_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        referral_code: str,
        referred_by: int | None = None,
    ) -> User:
        for field, value in (("email", email), ("referral_code", referral_code)):
            if any(getattr(user, field) == value for user in self._all()):
                raise DuplicateKeyError(field)
        if referred_by is not None and self._get(referred_by) is None:
            raise StoreError(f"referred_by {referred_by} does not reference a user")

        user = User(
            id=self._store._next_id + len(self._inserted),
            name=name,
            email=email,
            password_hash=password_hash,
            referral_code=referral_code,
            points=0,
            referred_by=referred_by,
            created_at=datetime.now(timezone.utc),
        )
        self._inserted[user.id] = user
        return _clone(user)

    def increment_points(self, user_id: int) -> None:
        if self._get(user_id) is None:
            raise StoreError(f"cannot credit points: user {user_id} does not exist")
        self._increments[user_id] += 1

    def commit(self) -> None:
        store = self._store
        store._users.update(self._inserted)
        store._next_id += len(self._inserted)
        for user_id, amount in self._increments.items():
            store._users[user_id].points += amount


class InMemoryUserStore:
    """Dictionary-backed user store, safe to share between threads."""

    def __init__(self):
        self._users: dict[int, User] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def initialize(self) -> None:
        pass

    def close(self) -> None:
        pass

    @contextmanager
    def transaction(self) -> Generator[InMemoryUserRepository, None, None]:
        with self._lock:
            repo = InMemoryUserRepository(self)
            yield repo
            repo.commit()

    def __len__(self) -> int:
        return len(self._users)
