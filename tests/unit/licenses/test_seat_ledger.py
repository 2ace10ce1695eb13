"""
Tests for the SeatLedger user counter.

The ledger runs against the real repository: its guarantees come from
the conditional UPDATEs issued there.
"""
import random
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest
from asgiref.sync import async_to_sync
from django.db import connection

from core.domain.exceptions import (
    InvalidInputError,
    LicenseNotFoundError,
    SeatLimitExceededError,
)
from core.domain.value_objects import LicenseStatus
from licenses.domain.services import SeatLedger


@pytest.fixture
def ledger(license_repository, subscription_repository):
    return SeatLedger(license_repository, subscription_repository)


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestSeatLedger:
    """Tests for SeatLedger."""

    async def test_increment_until_limit(self, ledger, license_factory):
        """Test increments stop at the user limit."""
        license = await license_factory.create(user_limit=2)

        first = await ledger.increment_user_count(license.id)
        second = await ledger.increment_user_count(license.id)
        with pytest.raises(SeatLimitExceededError, match=r"User limit reached \(2/2\)"):
            await ledger.increment_user_count(license.id)

        assert (first.user_count, second.user_count) == (1, 2)
        assert second.message == "User created successfully. Current users: 2/2"

    async def test_decrement_at_zero_is_noop(self, ledger, license_factory):
        """Test the count never goes below zero."""
        license = await license_factory.create()

        result = await ledger.decrement_user_count(license.id)

        assert result.success is True
        assert result.user_count == 0
        assert result.message == "User count is already at 0."

    async def test_sync_is_idempotent_and_clamped(self, ledger, license_factory):
        """Test sync overwrites the count, clamped to the limit."""
        license = await license_factory.create(user_limit=3, user_count=1)

        first = await ledger.sync_user_count(license.id, 2)
        second = await ledger.sync_user_count(license.id, 2)
        clamped = await ledger.sync_user_count(license.id, 10)

        assert first.user_count == second.user_count == 2
        assert clamped.user_count == 3

    async def test_check_user_creation(self, ledger, license_factory):
        """Test the creation check reflects free seats."""
        license = await license_factory.create(user_limit=2, user_count=1)

        check = await ledger.check_user_creation(license.id)

        assert check.allowed is True
        assert check.to_dict()["message"] == "You can create 1 more user(s)."

    async def test_check_user_creation_at_limit(self, ledger, license_factory):
        """Test a full license refuses new users."""
        license = await license_factory.create(user_limit=2, user_count=2)
        check = await ledger.check_user_creation(license.id)
        assert check.allowed is False
        assert "User limit reached (2/2)" in check.message

    async def test_check_user_creation_unusable_license(self, ledger, license_factory):
        """Test an expired or revoked license refuses new users."""
        expired = await license_factory.create(days_left=-3)
        revoked = await license_factory.create(status=LicenseStatus.REVOKED)

        assert (await ledger.check_user_creation(expired.id)).allowed is False
        result = await ledger.check_user_creation(revoked.id)
        assert result.message == "License has been revoked"

    async def test_increase_user_limit(self, ledger, license_factory):
        """Test raising the limit keeps the count."""
        license = await license_factory.create(user_limit=2, user_count=2)

        result = await ledger.increase_user_limit(license.id, 3)

        assert (result.user_count, result.user_limit) == (2, 5)
        with pytest.raises(InvalidInputError):
            await ledger.increase_user_limit(license.id, 0)

    async def test_unknown_license(self, ledger):
        """Test operations on a missing license fail with not found."""
        with pytest.raises(LicenseNotFoundError):
            await ledger.increment_user_count(uuid.uuid4())
        with pytest.raises(LicenseNotFoundError):
            await ledger.sync_user_count(uuid.uuid4(), 1)
    async def test_increase_then_fill_to_limit(self, ledger, license_factory):
        """Test a raised limit admits exactly that many users, then refuses."""
        license = await license_factory.create(user_limit=2)
        raised = await ledger.increase_user_limit(license.id, 3)

        counts = [
            (await ledger.increment_user_count(license.id)).user_count
            for _ in range(raised.user_limit)
        ]
        with pytest.raises(SeatLimitExceededError, match=r"User limit reached \(5/5\)"):
            await ledger.increment_user_count(license.id)

        assert counts == [1, 2, 3, 4, 5]


def _on_threads(calls, workers=8):
    """Run the calls concurrently on a thread pool; every thread uses its own DB connection."""

    def run(call):
        try:
            return call()
        except SeatLimitExceededError as exc:
            return exc
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(run, calls))


@pytest.mark.django_db(transaction=True)
class TestSeatLedgerThreads:
    """Seat counter guarantees under writers racing on separate threads."""

    def test_concurrent_increments_respect_limit(self, ledger, license_factory, license_repository):
        """Test racing increments never overshoot the limit."""
        license = async_to_sync(license_factory.create)(user_limit=5)
        increment = async_to_sync(ledger.increment_user_count)

        results = _on_threads([lambda: increment(license.id)] * 12)

        rejected = [r for r in results if isinstance(r, SeatLimitExceededError)]
        accepted = sorted(r.user_count for r in results if not isinstance(r, Exception))
        assert len(rejected) == 7
        assert len(accepted) == 5
        assert async_to_sync(license_repository.get_seat_counts)(license.id) == (5, 5)

    def test_concurrent_mixed_operations_lose_nothing(
        self, ledger, license_factory, license_repository
    ):
        """Test equal numbers of racing increments and decrements leave the count unchanged."""
        license = async_to_sync(license_factory.create)(user_limit=50, user_count=25)
        increment = async_to_sync(ledger.increment_user_count)
        decrement = async_to_sync(ledger.decrement_user_count)
        operations = [lambda: increment(license.id)] * 20 + [lambda: decrement(license.id)] * 20
        random.shuffle(operations)

        results = _on_threads(operations)

        assert not [r for r in results if isinstance(r, Exception)]
        assert async_to_sync(license_repository.get_seat_counts)(license.id) == (25, 50)
