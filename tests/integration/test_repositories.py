"""
Integration tests for repository implementations.
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from activations.domain.activation import Activation
from core.domain.pagination import PageRequest
from core.domain.value_objects import LicenseStatus, PaymentType
from licenses.application.handlers.list_licenses_handler import LICENSE_SORT_FIELDS
from licenses.domain.subscription import Subscription
from payments.domain.payment import Payment


@pytest.mark.django_db(transaction=True)
@pytest.mark.integration
@pytest.mark.asyncio
class TestLicenseRepository:
    """Integration tests for LicenseRepository."""

    async def test_save_and_find(self, license_repository, build_license):
        """Test saving and finding a license by ID and key."""
        license = build_license()

        saved = await license_repository.save(license)

        assert saved.id == license.id
        found = await license_repository.find_by_key(license.key)
        assert found.id == license.id
        assert found.customer_name == "Corner Cafe"
        assert await license_repository.exists_by_key(license.key) is True
        assert await license_repository.find_by_key("AAAA-AAAA-AAAA-AAAA-00SW") is None

    async def test_save_does_not_overwrite_counters(self, license_repository, build_license):
        """Test entity saves never clobber concurrent seat updates."""
        license = await license_repository.save(build_license(user_limit=3))
        await license_repository.increment_user_count(license.id)

        saved = await license_repository.save(license.suspend())

        assert saved.status == LicenseStatus.SUSPENDED
        assert saved.user_count == 1
        assert await license_repository.get_seat_counts(license.id) == (1, 3)

    async def test_find_by_phone_and_location(self, license_repository, build_license):
        """Test phone lookups ignore formatting and location case."""
        license = await license_repository.save(build_license(customer_phone="+1 (555) 0100"))

        found = await license_repository.find_by_phone_and_location("15550100", " MAIN street")
        missing = await license_repository.find_by_phone_and_location("15550100", "Elsewhere")

        assert found.id == license.id
        assert missing is None

    async def test_list_filters_and_pages(self, license_repository, build_license):
        """Test listing with filters, search and paging."""
        for _ in range(3):
            await license_repository.save(build_license())
        trial = await license_repository.save(build_license(is_free_trial=True))
        revoked = await license_repository.save(build_license(status=LicenseStatus.REVOKED))
        request = PageRequest.create(LICENSE_SORT_FIELDS, "createdAt", page=1, page_size=2)

        first_page = await license_repository.list(request)
        trials = await license_repository.list(request, is_free_trial=True)
        by_status = await license_repository.list(request, status="revoked")
        by_key = await license_repository.list(request, search=trial.key[:9].lower())

        assert first_page.total_items == 5
        assert len(first_page.items) == 2
        assert first_page.total_pages == 3
        assert [l.id for l in trials.items] == [trial.id]
        assert [l.id for l in by_status.items] == [revoked.id]
        assert trial.id in [l.id for l in by_key.items]

    async def test_sweep_candidates(self, license_repository, license_factory):
        """Test only active licenses past their end date are candidates."""
        lapsed = await license_factory.create(days_left=-1)
        await license_factory.create(days_left=5)
        await license_factory.create(days_left=-1, status=LicenseStatus.SUSPENDED)

        candidates = await license_repository.find_sweep_candidates(timezone.now())

        assert [l.id for l in candidates] == [lapsed.id]

    async def test_sweep_ignores_past_subscriptions(
        self, license_repository, subscription_repository, license_factory
    ):
        """Test an ended subscription row does not make a renewed license a candidate."""
        license = await license_factory.create(days_left=200)
        now = timezone.now()
        await subscription_repository.save(
            Subscription.create(
                license.id, now - timedelta(days=500), now - timedelta(days=135), Decimal("50")
            )
        )

        candidates = await license_repository.find_sweep_candidates(now)

        assert candidates == []

    async def test_sweep_candidate_when_latest_subscription_ended(
        self, license_repository, subscription_repository, build_license
    ):
        """Test a license is a candidate once its latest subscription has ended."""
        license = await license_repository.save(build_license(days_left=10))
        now = timezone.now()
        await subscription_repository.save(
            Subscription.create(
                license.id, now - timedelta(days=300), now - timedelta(days=1), Decimal("50")
            )
        )

        candidates = await license_repository.find_sweep_candidates(now)

        assert [l.id for l in candidates] == [license.id]

    async def test_set_user_count_clamps(self, license_repository, build_license):
        """Test the counter write is clamped to [0, limit]."""
        license = await license_repository.save(build_license(user_limit=2))

        await license_repository.set_user_count(license.id, 9)
        assert await license_repository.get_seat_counts(license.id) == (2, 2)
        await license_repository.set_user_count(license.id, -4)
        assert await license_repository.get_seat_counts(license.id) == (0, 2)


@pytest.mark.django_db(transaction=True)
@pytest.mark.integration
@pytest.mark.asyncio
class TestSubscriptionRepository:
    """Integration tests for SubscriptionRepository."""

    async def test_current_subscription_has_latest_end(
        self, license_repository, subscription_repository, build_license
    ):
        """Test the subscription ending last governs the license."""
        license = await license_repository.save(build_license())
        now = timezone.now()
        older = Subscription.create(
            license.id, now - timedelta(days=400), now - timedelta(days=35), Decimal("50")
        )
        newer = Subscription.create(
            license.id, now - timedelta(days=35), now + timedelta(days=330), Decimal("50")
        )
        await subscription_repository.save(newer)
        await subscription_repository.save(older)

        current = await subscription_repository.find_current_for_license(license.id)

        assert current.id == newer.id
        assert len(await subscription_repository.find_by_license(license.id)) == 2

    async def test_find_ending_between(self, subscription_repository, license_factory):
        """Test the warning window lookup."""
        now = timezone.now()
        soon = await license_factory.create(days_left=2)
        await license_factory.create(days_left=20)

        ending = await subscription_repository.find_ending_between(now, now + timedelta(days=4))

        assert [s.license_id for s in ending] == [soon.id]


@pytest.mark.django_db(transaction=True)
@pytest.mark.integration
@pytest.mark.asyncio
class TestActivationRepository:
    """Integration tests for ActivationRepository."""

    async def test_save_and_find(self, activation_repository, license_factory):
        """Test saving and finding an activation."""
        license = await license_factory.create()
        activation = Activation.create(license.id, "HW-1", timezone.now(), "Till 1")

        await activation_repository.save(activation)

        found = await activation_repository.find_by_license_and_hardware(license.id, "HW-1")
        assert found.id == activation.id
        assert str(found.hardware_id) == "HW-1"
        assert found.machine_name == "Till 1"
        assert await activation_repository.find_by_license_and_hardware(license.id, "HW-2") is None

    async def test_update_in_place(self, activation_repository, license_factory):
        """Test saving the same activation again updates it."""
        license = await license_factory.create()
        activation = await activation_repository.save(
            Activation.create(license.id, "HW-1", timezone.now())
        )

        await activation_repository.save(activation.deactivate())

        activations = await activation_repository.find_by_license(license.id)
        assert len(activations) == 1
        assert activations[0].is_active is False


@pytest.mark.django_db(transaction=True)
@pytest.mark.integration
@pytest.mark.asyncio
class TestPaymentRepository:
    """Integration tests for PaymentRepository."""

    async def test_has_initial_payment(self, payment_repository, license_factory):
        """Test the initial payment lookup."""
        license = await license_factory.create()
        assert await payment_repository.has_initial_payment(license.id) is False

        await payment_repository.save(Payment.create(license.id, Decimal("50"), PaymentType.ANNUAL))
        assert await payment_repository.has_initial_payment(license.id) is False

        await payment_repository.save(Payment.create(license.id, Decimal("350"), PaymentType.INITIAL))
        assert await payment_repository.has_initial_payment(license.id) is True
