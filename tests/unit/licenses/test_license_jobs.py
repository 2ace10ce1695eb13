"""
Tests for the expiry sweep and expiration warning jobs.
"""
import pytest

from core.domain.exceptions import JobAlreadyRunningError
from core.domain.value_objects import LicenseStatus, SubscriptionStatus
from core.infrastructure.leases import CacheLease
from licenses.application.handlers.expiration_warning_handler import ExpirationWarningJob
from licenses.application.handlers.expiry_sweep_handler import SWEEP_LEASE_NAME, ExpirySweepJob
from licenses.ports.expiration_notifier import ExpirationNotifier


class RecordingNotifier(ExpirationNotifier):
    def __init__(self):
        self.warnings = []

    async def notify(self, warning):
        self.warnings.append(warning)
        return True


@pytest.fixture
def sweep(license_repository, subscription_repository):
    return ExpirySweepJob(license_repository, subscription_repository)


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestExpirySweepJob:
    """Tests for ExpirySweepJob."""

    async def test_expires_lapsed_licenses(
        self, sweep, license_factory, license_repository, subscription_repository
    ):
        """Test lapsed licenses are expired and grace windows recorded."""
        lapsed = await license_factory.create(days_left=-2)
        in_grace = await license_factory.create(days_left=-1, grace_days=5)
        active = await license_factory.create(days_left=30)

        result = await sweep.run()

        assert (result.updated, result.grace_period) == (1, 1)
        assert result.message == "Successfully updated 1 expired license(s)"
        assert (await license_repository.find_by_id(lapsed.id)).status == LicenseStatus.EXPIRED
        assert (await license_repository.find_by_id(in_grace.id)).status == LicenseStatus.ACTIVE
        assert (await license_repository.find_by_id(active.id)).status == LicenseStatus.ACTIVE
        grace_subscription = await subscription_repository.find_current_for_license(in_grace.id)
        assert grace_subscription.status == SubscriptionStatus.GRACE_PERIOD
        lapsed_subscription = await subscription_repository.find_current_for_license(lapsed.id)
        assert lapsed_subscription.status == SubscriptionStatus.EXPIRED

    async def test_second_run_is_noop(self, sweep, license_factory):
        """Test re-running the sweep changes nothing."""
        await license_factory.create(days_left=-2)
        await license_factory.create(days_left=-1, grace_days=5)
        await sweep.run()

        result = await sweep.run()

        assert (result.updated, result.grace_period) == (0, 0)

    async def test_dry_run_writes_nothing(self, sweep, license_factory, license_repository):
        """Test a dry run reports without writing."""
        lapsed = await license_factory.create(days_left=-2)

        result = await sweep.run(dry_run=True)

        assert result.updated == 1
        assert (await license_repository.find_by_id(lapsed.id)).status == LicenseStatus.ACTIVE

    async def test_revoked_licenses_untouched(self, sweep, license_factory, license_repository):
        """Test the sweep only moves active licenses."""
        revoked = await license_factory.create(days_left=-2, status=LicenseStatus.REVOKED)

        result = await sweep.run()

        assert result.updated == 0
        assert (await license_repository.find_by_id(revoked.id)).status == LicenseStatus.REVOKED

    async def test_concurrent_run_rejected(self, sweep):
        """Test a run is refused while another holds the lease."""
        other = CacheLease(SWEEP_LEASE_NAME, ttl_seconds=60)
        assert await other.acquire()

        with pytest.raises(JobAlreadyRunningError):
            await sweep.run()

        await other.release()
        assert (await sweep.run()).updated == 0

    async def test_lease_released_after_run(self, sweep):
        """Test the lease is free once a run finishes."""
        await sweep.run()
        assert await CacheLease(SWEEP_LEASE_NAME, ttl_seconds=60).acquire() is True


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestExpirationWarningJob:
    """Tests for ExpirationWarningJob."""

    async def test_warns_on_configured_days(
        self, license_factory, license_repository, subscription_repository, fixed_clock
    ):
        """Test warnings go out exactly N days before expiry."""
        now = fixed_clock.now()
        three_days = await license_factory.create(days_left=3, now=now)
        one_day = await license_factory.create(days_left=1, now=now, is_free_trial=True)
        await license_factory.create(days_left=5, now=now)
        await license_factory.create(days_left=2, now=now)
        await license_factory.create(days_left=3, now=now, status=LicenseStatus.SUSPENDED)
        notifier = RecordingNotifier()
        job = ExpirationWarningJob(
            license_repository,
            subscription_repository,
            notifier,
            clock=fixed_clock,
            warning_days=(3, 1),
        )

        result = await job.run()

        warned = {(w.license_id, w.days_remaining) for w in notifier.warnings}
        assert warned == {(three_days.id, 3), (one_day.id, 1)}
        assert result["notified"] == 2
        assert [w.is_free_trial for w in notifier.warnings if w.license_id == one_day.id] == [True]
