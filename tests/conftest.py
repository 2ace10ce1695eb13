"""
Pytest configuration and shared fixtures.
"""

from dataclasses import replace
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone

from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from core.domain.clock import FixedClock
from core.infrastructure.tokens import AdminTokenService, JwtSigner
from licenses.domain.license import License
from licenses.domain.license_key import generate_license_key
from licenses.domain.subscription import Subscription
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository
from licenses.infrastructure.repositories.django_subscription_repository import (
    DjangoSubscriptionRepository,
)
from payments.infrastructure.repositories.django_payment_repository import DjangoPaymentRepository

FIXED_NOW = datetime(2025, 6, 15, 12, 0, tzinfo=dt_timezone.utc)


@pytest.fixture(autouse=True)
def clear_cache():
    """Rate limit counters, leases and cached statuses must not leak between tests."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def license_repository():
    """Fixture for LicenseRepository."""
    return DjangoLicenseRepository()


@pytest.fixture
def subscription_repository():
    """Fixture for SubscriptionRepository."""
    return DjangoSubscriptionRepository()


@pytest.fixture
def activation_repository():
    """Fixture for ActivationRepository."""
    return DjangoActivationRepository()


@pytest.fixture
def payment_repository():
    """Fixture for PaymentRepository."""
    return DjangoPaymentRepository()


@pytest.fixture
def fixed_clock():
    """Clock pinned to FIXED_NOW."""
    return FixedClock(FIXED_NOW)


def make_license(
    days_left=30,
    now=None,
    status=None,
    is_free_trial=False,
    user_limit=2,
    user_count=0,
    location=True,
    customer_phone="+1 555 0100",
) -> License:
    """Build an unsaved License whose period ends ``days_left`` days from now."""
    now = now or timezone.now()
    end_date = now + timedelta(days=days_left)
    license = License.create(
        key=generate_license_key(),
        start_date=end_date - timedelta(days=365),
        end_date=end_date,
        initial_price=Decimal("350.00"),
        annual_price=Decimal("50.00"),
        price_per_user=Decimal("25.00"),
        user_limit=user_limit,
        is_free_trial=is_free_trial,
        customer_name="Corner Cafe",
        customer_phone=customer_phone,
        location_name="Main Street" if location else None,
        location_address="1 Main Street" if location else None,
    )
    changes = {"user_count": user_count}
    if status is not None:
        changes["status"] = status
    return replace(license, **changes)


@pytest.fixture
def build_license():
    """Builder for unsaved License entities."""
    return make_license


class LicenseFactory:
    """Saves licenses together with their current subscription."""

    def __init__(self, license_repository, subscription_repository):
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository

    async def create(self, grace_days=0, **kwargs) -> License:
        license = await self.license_repository.save(make_license(**kwargs))
        await self.subscription_repository.save(
            Subscription.create(
                license_id=license.id,
                start_date=license.start_date,
                end_date=license.end_date,
                annual_fee=license.annual_price,
                grace_days=grace_days,
            )
        )
        return license


@pytest.fixture
def license_factory(license_repository, subscription_repository):
    """Factory for licenses saved in the database (the test's django_db mark provides access)."""
    return LicenseFactory(license_repository, subscription_repository)


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def admin_token(admin_user):
    """Bearer token for the pytest-django staff user."""
    return AdminTokenService(JwtSigner()).issue(admin_user.username)


@pytest.fixture
def admin_api_client(api_client, admin_token):
    """API client sending the admin bearer token."""
    api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {admin_token}")
    return api_client
