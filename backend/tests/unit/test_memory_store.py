"""Unit tests for the in-memory user store."""

import pytest

from refertrack.errors import DuplicateKeyError, StoreError


def _insert(users, email="ana@example.com", code="aaaa1111", referred_by=None):
    return users.insert_user(
        name="Ana",
        email=email,
        password_hash="hash",
        referral_code=code,
        referred_by=referred_by,
    )


class TestInMemoryUserStore:
    """Tests for transactions on the in-memory store."""

    def test_insert_assigns_sequential_ids(self, memory_store):
        with memory_store.transaction() as users:
            first = _insert(users)
            second = _insert(users, email="bia@example.com", code="bbbb2222")

        assert (first.id, second.id) == (1, 2)
        assert first.points == 0
        assert first.created_at is not None
        assert len(memory_store) == 2

    def test_lookups(self, memory_store):
        with memory_store.transaction() as users:
            user = _insert(users)

        with memory_store.transaction() as users:
            assert users.find_by_id(user.id).email == "ana@example.com"
            assert users.find_by_email("ana@example.com").id == user.id
            assert users.find_by_referral_code("aaaa1111").id == user.id
            assert users.find_by_referral_code("AAAA1111") is None
            assert users.find_by_id(99) is None

    def test_failed_transaction_leaves_nothing(self, memory_store):
        """Writes are discarded when the transaction body raises."""
        with memory_store.transaction() as users:
            referrer = _insert(users)

        with pytest.raises(RuntimeError):
            with memory_store.transaction() as users:
                _insert(users, email="bia@example.com", code="bbbb2222", referred_by=referrer.id)
                users.increment_points(referrer.id)
                raise RuntimeError("boom")

        assert len(memory_store) == 1
        with memory_store.transaction() as users:
            assert users.find_by_id(referrer.id).points == 0
            assert users.find_by_email("bia@example.com") is None

    @pytest.mark.parametrize(
        "email, code, field",
        [
            ("ana@example.com", "bbbb2222", "email"),
            ("bia@example.com", "aaaa1111", "referral_code"),
        ],
    )
    def test_duplicate_key(self, memory_store, email, code, field):
        with memory_store.transaction() as users:
            _insert(users)

        with pytest.raises(DuplicateKeyError) as exc_info:
            with memory_store.transaction() as users:
                _insert(users, email=email, code=code)
        assert exc_info.value.field == field

    def test_increment_unknown_user(self, memory_store):
        with pytest.raises(StoreError):
            with memory_store.transaction() as users:
                users.increment_points(42)

    def test_referred_by_must_exist(self, memory_store):
        with pytest.raises(StoreError):
            with memory_store.transaction() as users:
                _insert(users, referred_by=42)

    def test_returned_users_are_copies(self, memory_store):
        """Mutating a returned user does not touch the stored row."""
        with memory_store.transaction() as users:
            user = _insert(users)
        user.points = 100

        with memory_store.transaction() as users:
            assert users.find_by_id(user.id).points == 0
