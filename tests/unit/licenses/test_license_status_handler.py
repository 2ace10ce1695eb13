"""
Tests for the cached license status query.
"""
from datetime import timedelta

import pytest

from licenses.application.handlers.get_license_status_handler import GetLicenseStatusHandler
from licenses.application.queries.get_license_status import GetLicenseStatusQuery
from licenses.application.services.license_cache_service import LicenseCacheService


@pytest.fixture
def cached_ttls(monkeypatch):
    """Record the TTL of every status written to the cache."""
    ttls = []
    store = LicenseCacheService.set_license_status

    async def recording_set(license_key, status, ttl=None):
        ttls.append(ttl)
        await store(license_key, status, ttl=ttl)

    monkeypatch.setattr(LicenseCacheService, "set_license_status", recording_set)
    return ttls


@pytest.fixture
def status_handler(license_repository, subscription_repository, fixed_clock):
    return GetLicenseStatusHandler(license_repository, subscription_repository, clock=fixed_clock)


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestGetLicenseStatusHandler:
    """Tests for GetLicenseStatusHandler."""

    async def test_status_is_cached(
        self, status_handler, license_factory, fixed_clock, cached_ttls
    ):
        """Test a status far from any change is cached for the full minute."""
        license = await license_factory.create(days_left=30, now=fixed_clock.now())

        first = await status_handler.handle(GetLicenseStatusQuery(license.key))
        second = await status_handler.handle(GetLicenseStatusQuery(license.key))

        assert first == second
        assert first["status"] == "active"
        assert cached_ttls == [60]

    async def test_ttl_stops_at_expiry(
        self, status_handler, license_factory, fixed_clock, cached_ttls
    ):
        """Test an active status is not cached past the end date."""
        end_date = fixed_clock.now() + timedelta(seconds=30)
        license = await license_factory.create(days_left=0, now=end_date)

        result = await status_handler.handle(GetLicenseStatusQuery(license.key))

        assert result["status"] == "active"
        assert cached_ttls == [30]

    async def test_ttl_stops_at_day_change(
        self, status_handler, license_factory, fixed_clock, cached_ttls
    ):
        """Test the day count is not cached past the moment it ticks down."""
        end_date = fixed_clock.now() + timedelta(days=3, seconds=45)
        license = await license_factory.create(days_left=0, now=end_date)

        result = await status_handler.handle(GetLicenseStatusQuery(license.key))

        assert result["daysRemaining"] == 4
        assert cached_ttls == [45]

    async def test_grace_period_ttl(
        self, status_handler, license_factory, fixed_clock, cached_ttls
    ):
        """Test a grace period status is not cached past the end of the grace window."""
        end_date = fixed_clock.now() - timedelta(days=3) + timedelta(seconds=20)
        license = await license_factory.create(days_left=0, now=end_date, grace_days=3)

        result = await status_handler.handle(GetLicenseStatusQuery(license.key))

        assert result["status"] == "grace_period"
        assert cached_ttls == [20]

    async def test_not_cached_just_before_expiry(
        self, status_handler, license_factory, fixed_clock, cached_ttls
    ):
        """Test a status about to change within the second is served uncached."""
        end_date = fixed_clock.now() + timedelta(milliseconds=500)
        license = await license_factory.create(days_left=0, now=end_date)

        result = await status_handler.handle(GetLicenseStatusQuery(license.key))

        assert result["status"] == "active"
        assert cached_ttls == []
        assert await LicenseCacheService.get_license_status(license.key) is None

    async def test_expired_status_uses_full_ttl(
        self, status_handler, license_factory, fixed_clock, cached_ttls
    ):
        """Test statuses that only change through a write keep the full TTL."""
        license = await license_factory.create(days_left=-5, now=fixed_clock.now())

        result = await status_handler.handle(GetLicenseStatusQuery(license.key))

        assert result["status"] == "expired"
        assert cached_ttls == [60]

    async def test_unknown_key_not_cached(self, status_handler, cached_ttls):
        """Test not_found answers are never cached."""
        result = await status_handler.handle(GetLicenseStatusQuery("AAAA-AAAA-AAAA-AAAA-00SW"))

        assert result["status"] == "not_found"
        assert cached_ttls == []
