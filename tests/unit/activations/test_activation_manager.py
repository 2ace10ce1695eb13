"""
Tests for ActivationManager.
"""
import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from activations.domain.activation import Activation
from activations.domain.services import ActivationManager
from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from activations.infrastructure.token_issuer import JwtActivationTokenIssuer
from core.domain.exceptions import ActivationNotFoundError, AuthorizationDeniedError
from core.domain.value_objects import EffectiveStatus, LicenseStatus
from core.infrastructure.tokens import JwtSigner
from licenses.infrastructure.repositories.django_license_repository import DjangoLicenseRepository

SECRET = "activation-test-secret"


@pytest.fixture
def manager(license_repository, subscription_repository, activation_repository):
    return ActivationManager(
        license_repository,
        subscription_repository,
        activation_repository,
        JwtActivationTokenIssuer(JwtSigner(secret=SECRET)),
    )


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestActivate:
    """Tests for ActivationManager.activate."""

    async def test_first_activation(self, manager, license_factory, license_repository):
        """Test a first activation binds the machine and creates the default user."""
        license = await license_factory.create(days_left=30)

        result = await manager.activate(license.key, "HW-1", "Till 1")

        assert result.activation.is_active is True
        assert result.is_reactivating_active is False
        assert result.message == "License activated successfully"
        assert result.expires_at == license.end_date
        claims = JwtSigner(secret=SECRET).verify(result.token)
        assert claims["licenseKey"] == license.key
        assert claims["hardwareId"] == "HW-1"
        assert (await license_repository.find_by_id(license.id)).user_count == 1

    async def test_reactivating_active_machine_keeps_data(self, manager, license_factory, license_repository):
        """Test activating an active machine again refreshes it in place."""
        license = await license_factory.create()
        first = await manager.activate(license.key, "HW-1", "Till 1")
        await license_repository.set_user_count(license.id, 2)

        second = await manager.activate(license.key, "HW-1")

        assert second.is_reactivating_active is True
        assert second.activation.id == first.activation.id
        assert second.activation.activated_at == first.activation.activated_at
        assert second.activation.machine_name == "Till 1"
        assert (await license_repository.find_by_id(license.id)).user_count == 2

    async def test_reactivating_inactive_machine(self, manager, license_factory, activation_repository):
        """Test a deactivated machine can be activated again."""
        license = await license_factory.create()
        first = await manager.activate(license.key, "HW-1")
        await ActivationManager.deactivate(first.activation.id, activation_repository)

        second = await manager.activate(license.key, "HW-1")

        assert second.is_reactivating_active is False
        assert second.activation.id == first.activation.id
        assert second.activation.is_active is True

    async def test_no_machine_cap(self, manager, license_factory, activation_repository):
        """Test any number of machines may be activated."""
        license = await license_factory.create(user_limit=1)
        for index in range(5):
            await manager.activate(license.key, f"HW-{index}")
        assert len(await activation_repository.find_by_license(license.id)) == 5

    async def test_unknown_key(self, manager):
        """Test unknown keys are denied."""
        with pytest.raises(AuthorizationDeniedError, match="not found"):
            await manager.activate("AAAA-AAAA-AAAA-AAAA-00SW", "HW-1")

    async def test_revoked_license(self, manager, license_factory):
        """Test revoked licenses are denied."""
        license = await license_factory.create(status=LicenseStatus.REVOKED)
        with pytest.raises(AuthorizationDeniedError, match="revoked"):
            await manager.activate(license.key, "HW-1")

    async def test_expired_license(self, manager, license_factory):
        """Test expired licenses are denied."""
        license = await license_factory.create(days_left=-1)
        with pytest.raises(AuthorizationDeniedError, match="expired"):
            await manager.activate(license.key, "HW-1")

    async def test_grace_period_allows_activation(self, manager, license_factory):
        """Test a license in its grace window can still be activated."""
        license = await license_factory.create(days_left=-1, grace_days=7)
        result = await manager.activate(license.key, "HW-1")
        assert result.grace_period_end is not None

    async def test_missing_location(self, manager, license_factory):
        """Test licenses without location information are denied."""
        license = await license_factory.create(location=False)
        with pytest.raises(AuthorizationDeniedError, match="location information"):
            await manager.activate(license.key, "HW-1")


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestValidate:
    """Tests for ActivationManager.validate."""

    async def test_valid_license(self, manager, license_factory):
        """Test a usable license validates."""
        license = await license_factory.create(days_left=10)

        result = await manager.validate(license.key)

        assert result.valid is True
        assert result.status == EffectiveStatus.ACTIVE

    async def test_unknown_key_is_not_raised(self, manager):
        """Test unknown keys come back as an invalid result."""
        result = await manager.validate("AAAA-AAAA-AAAA-AAAA-00SW")
        assert result.status == EffectiveStatus.NOT_FOUND
        assert result.valid is False

    async def test_client_time_is_used(self, manager, license_factory):
        """Test the client clock drives the evaluation."""
        license = await license_factory.create(days_left=10)

        result = await manager.validate(
            license.key, current_time=timezone.now() + timedelta(days=11)
        )

        assert result.status == EffectiveStatus.EXPIRED

    async def test_location_address_mismatch(self, manager, license_factory):
        """Test a different address invalidates the result."""
        license = await license_factory.create()

        mismatch = await manager.validate(license.key, location_address="2 High Street")
        match = await manager.validate(license.key, location_address="  1 MAIN   street ")

        assert mismatch.valid is False
        assert mismatch.message == "Location address does not match the activated location"
        assert match.valid is True

    async def test_validation_touches_activation(self, manager, license_factory, activation_repository):
        """Test validating from an active machine records the check-in."""
        license = await license_factory.create()
        activation = (await manager.activate(license.key, "HW-1")).activation

        await manager.validate(license.key, hardware_id="HW-1")

        refreshed = await activation_repository.find_by_id(activation.id)
        assert refreshed.last_validation >= activation.last_validation


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestDeactivate:
    """Tests for deactivation and reset."""

    async def test_deactivate_twice(self, manager, license_factory, activation_repository):
        """Test deactivating twice is a no-op."""
        license = await license_factory.create()
        activation = (await manager.activate(license.key, "HW-1")).activation

        first = await ActivationManager.deactivate(activation.id, activation_repository)
        second = await ActivationManager.deactivate(activation.id, activation_repository)

        assert first.is_active is False
        assert second.is_active is False

    async def test_deactivate_unknown(self, activation_repository):
        """Test deactivating a missing activation fails."""
        with pytest.raises(ActivationNotFoundError):
            await ActivationManager.deactivate(uuid.uuid4(), activation_repository)

    async def test_reset_activations(self, manager, license_factory, activation_repository):
        """Test reset deactivates every active machine of the license."""
        license = await license_factory.create()
        for hardware_id in ("HW-1", "HW-2", "HW-3"):
            await manager.activate(license.key, hardware_id)

        count = await ActivationManager.reset_activations(license.id, activation_repository)

        assert count == 3
        activations = await activation_repository.find_by_license(license.id)
        assert not any(a.is_active for a in activations)
        assert await ActivationManager.reset_activations(license.id, activation_repository) == 0


class SeatsTakenAfterRead(DjangoLicenseRepository):
    """Other users are created between the key lookup and the activation."""

    async def find_by_key(self, key):
        license = await super().find_by_key(key)
        if license:
            await self.increment_user_count(license.id)
            await self.increment_user_count(license.id)
        return license


class ResetAfterLookup(DjangoActivationRepository):
    """An admin reset lands between the lookup and the check-in write."""

    async def find_by_license_and_hardware(self, license_id, hardware_id):
        activation = await super().find_by_license_and_hardware(license_id, hardware_id)
        await self.deactivate_all_for_license(license_id)
        return activation


class BoundByOtherRequest(DjangoActivationRepository):
    """Another request binds the machine right after the first lookup misses."""

    def __init__(self):
        self.raced = False

    async def find_by_license_and_hardware(self, license_id, hardware_id):
        found = await super().find_by_license_and_hardware(license_id, hardware_id)
        if found is None and not self.raced:
            self.raced = True
            await self.insert(Activation.create(license_id, hardware_id, timezone.now()))
        return found


def _manager(license_repository, subscription_repository, activation_repository):
    return ActivationManager(
        license_repository,
        subscription_repository,
        activation_repository,
        JwtActivationTokenIssuer(JwtSigner(secret=SECRET)),
    )


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestInterleavedWrites:
    """Tests for writes racing the activation manager."""

    async def test_first_activation_keeps_concurrent_seats(
        self, license_factory, license_repository, subscription_repository, activation_repository
    ):
        """Test the default-user seat never overwrites seats taken meanwhile."""
        license = await license_factory.create(user_limit=5)
        manager = _manager(SeatsTakenAfterRead(), subscription_repository, activation_repository)

        await manager.activate(license.key, "HW-NEW")

        assert await license_repository.get_seat_counts(license.id) == (2, 5)

    async def test_validation_does_not_undo_reset(
        self, manager, license_factory, subscription_repository, license_repository
    ):
        """Test a check-in racing an admin reset leaves the machine inactive."""
        license = await license_factory.create()
        activation = (await manager.activate(license.key, "HW-1")).activation
        racing_repository = ResetAfterLookup()
        racing = _manager(license_repository, subscription_repository, racing_repository)

        await racing.validate(license.key, hardware_id="HW-1")

        stored = await racing_repository.find_by_id(activation.id)
        assert stored.is_active is False

    async def test_concurrent_first_activation(
        self, license_factory, license_repository, subscription_repository
    ):
        """Test losing the race to bind a machine reuses the winner's activation."""
        license = await license_factory.create()
        racing_repository = BoundByOtherRequest()
        manager = _manager(license_repository, subscription_repository, racing_repository)

        result = await manager.activate(license.key, "HW-1", "Till 1")

        assert result.is_reactivating_active is True
        assert result.activation.machine_name == "Till 1"
        assert len(await racing_repository.find_by_license(license.id)) == 1
