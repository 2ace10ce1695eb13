"""
Unit tests for License and Subscription domain entities.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.domain.exceptions import InvalidLicenseStatusError
from core.domain.value_objects import LicenseStatus, SubscriptionStatus
from licenses.domain.license import License
from licenses.domain.license_key import generate_license_key
from licenses.domain.subscription import Subscription, add_years


def _license(**overrides):
    start = datetime(2025, 1, 1, tzinfo=timezone.utc)
    values = dict(
        key=generate_license_key(),
        start_date=start,
        end_date=start + timedelta(days=364),
        initial_price=Decimal("350.00"),
        annual_price=Decimal("50.00"),
        price_per_user=Decimal("25.00"),
        user_limit=2,
    )
    values.update(overrides)
    return License.create(**values)


class TestLicenseEntity:
    """Tests for License domain entity."""

    def test_create_license(self):
        """Test creating a license entity."""
        license = _license(location_name="Main", location_address="1 Main Street")

        assert license.status == LicenseStatus.ACTIVE
        assert license.user_count == 0
        assert license.user_limit == 2
        assert license.is_free_trial is False
        assert license.free_trial_end_date is None
        assert license.has_location is True

    def test_free_trial_records_trial_end(self):
        """Test a trial license remembers when the trial ends."""
        license = _license(is_free_trial=True)
        assert license.free_trial_end_date == license.end_date

    def test_has_location_requires_name_and_address(self):
        """Test location information needs both fields."""
        assert _license(location_name="Main").has_location is False
        assert _license().has_location is False

    def test_malformed_key_rejected(self):
        """Test the key must be well formed."""
        with pytest.raises(ValueError, match="Malformed license key"):
            _license(key="not-a-key")

    def test_user_count_cannot_exceed_limit(self):
        """Test the seat invariant is enforced on construction."""
        license = _license()
        with pytest.raises(ValueError, match="cannot exceed"):
            replace(license, user_count=3)

    def test_end_before_start_rejected(self):
        """Test end date before start date is rejected."""
        start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        with pytest.raises(ValueError, match="End date"):
            _license(start_date=start, end_date=start - timedelta(days=1))

    def test_revoke_from_any_status(self):
        """Test revoke is allowed from every status."""
        for status in LicenseStatus:
            license = replace(_license(), status=status)
            assert license.revoke().status == LicenseStatus.REVOKED

    def test_suspend_revoked_license_fails(self):
        """Test a revoked license cannot be suspended."""
        license = _license().revoke()
        with pytest.raises(InvalidLicenseStatusError):
            license.suspend()

    def test_reinstate(self):
        """Test revoked and suspended licenses return to active."""
        assert _license().revoke().reinstate().status == LicenseStatus.ACTIVE
        assert _license().suspend().reinstate().status == LicenseStatus.ACTIVE

    def test_reinstate_active_license_fails(self):
        """Test reinstating an active license is rejected."""
        with pytest.raises(InvalidLicenseStatusError):
            _license().reinstate()

    def test_extend_reactivates_expired_license(self):
        """Test a renewal moves an expired license back to active."""
        license = _license().mark_expired()
        new_end = license.end_date + timedelta(days=365)

        extended = license.extend_to(new_end)

        assert extended.status == LicenseStatus.ACTIVE
        assert extended.end_date == new_end

    def test_extend_keeps_suspension(self):
        """Test a renewal does not lift a suspension."""
        license = _license().suspend()
        assert license.extend_to(license.end_date).status == LicenseStatus.SUSPENDED

    def test_convert_to_paid(self):
        """Test a payment clears the free-trial flag."""
        trial = _license(is_free_trial=True)
        paid = trial.convert_to_paid()

        assert paid.is_free_trial is False
        assert paid.free_trial_end_date is None
        assert _license().convert_to_paid().is_free_trial is False


class TestSubscriptionEntity:
    """Tests for Subscription domain entity."""

    def test_grace_period_end(self):
        """Test grace window is derived from grace days."""
        end = datetime(2025, 12, 31, tzinfo=timezone.utc)
        subscription = Subscription.create(
            uuid.uuid4(), end - timedelta(days=365), end, Decimal("50.00"), grace_days=7
        )
        assert subscription.grace_period_end == end + timedelta(days=7)
        assert subscription.status == SubscriptionStatus.ACTIVE

    def test_no_grace_window_by_default(self):
        """Test zero grace days leaves no grace window."""
        end = datetime(2025, 12, 31, tzinfo=timezone.utc)
        subscription = Subscription.create(uuid.uuid4(), end - timedelta(days=1), end, Decimal("50"))
        assert subscription.grace_period_end is None

    def test_renew_from_end_date(self):
        """Test renewal adds a year to the current end date."""
        end = datetime(2025, 3, 1, tzinfo=timezone.utc)
        subscription = Subscription.create(uuid.uuid4(), end - timedelta(days=365), end, Decimal("50"))

        renewed = subscription.renew(extend_from_now=False, now=end + timedelta(days=30))

        assert renewed.end_date == datetime(2026, 3, 1, tzinfo=timezone.utc)

    def test_renew_from_now(self):
        """Test renewal can count the year from now."""
        end = datetime(2025, 3, 1, tzinfo=timezone.utc)
        now = datetime(2025, 5, 10, tzinfo=timezone.utc)
        subscription = Subscription.create(uuid.uuid4(), end - timedelta(days=365), end, Decimal("50"))
        subscription = subscription.mark_expired()

        renewed = subscription.renew(extend_from_now=True, now=now, grace_days=3)

        assert renewed.end_date == datetime(2026, 5, 10, tzinfo=timezone.utc)
        assert renewed.status == SubscriptionStatus.ACTIVE
        assert renewed.grace_period_end == renewed.end_date + timedelta(days=3)

    def test_add_years_leap_day(self):
        """Test 29 February clamps to the 28th."""
        assert add_years(datetime(2024, 2, 29, tzinfo=timezone.utc)) == datetime(
            2025, 2, 28, tzinfo=timezone.utc
        )
