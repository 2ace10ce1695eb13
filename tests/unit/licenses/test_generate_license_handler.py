"""
Tests for GenerateLicenseHandler.
"""
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.domain.exceptions import DuplicateLicenseError, InvalidInputError
from core.domain.pagination import PageRequest
from core.domain.value_objects import PaymentType
from licenses.application.commands.generate_license import GenerateLicenseCommand
from licenses.application.handlers.generate_license_handler import GenerateLicenseHandler
from licenses.domain.license_key import is_valid_license_key


@pytest.fixture
def handler(license_repository, subscription_repository, payment_repository, fixed_clock):
    return GenerateLicenseHandler(
        license_repository, subscription_repository, payment_repository, clock=fixed_clock
    )


@pytest.mark.django_db(transaction=True)
@pytest.mark.asyncio
class TestGenerateLicenseHandler:
    """Tests for GenerateLicenseHandler."""

    async def test_paid_license(self, handler, payment_repository):
        """Test a paid license gets a year, a subscription and its initial payment."""
        result = await handler.handle(
            GenerateLicenseCommand(
                customer_name="Corner Cafe",
                customer_phone="+1 555 0100",
                location_name="Main Street",
                location_address="1 Main Street",
            )
        )

        assert is_valid_license_key(result.license_key)
        assert result.status == "active"
        assert result.user_count == 0
        assert result.user_limit == 2
        assert result.initial_price == Decimal("350.00")
        assert result.end_date.date() == datetime(2026, 6, 14).date()
        assert len(result.subscriptions) == 1
        assert result.subscriptions[0].end_date == result.end_date
        assert await payment_repository.has_initial_payment(result.id) is True
        page = await payment_repository.list(
            PageRequest.create({"paymentDate": "payment_date"}, "paymentDate"), license_id=result.id
        )
        assert [p.payment_type for p in page.items] == [PaymentType.INITIAL]

    async def test_free_trial(self, handler, payment_repository):
        """Test a trial lasts the configured days and records no payment."""
        result = await handler.handle(GenerateLicenseCommand(is_free_trial=True))

        assert result.is_free_trial is True
        assert result.free_trial_end_date == result.end_date
        assert result.end_date.date() == datetime(2025, 6, 24).date()
        assert await payment_repository.has_initial_payment(result.id) is False

    async def test_explicit_dates(self, handler):
        """Test caller supplied dates are honoured to the end of the day."""
        start = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)
        end = datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)

        result = await handler.handle(GenerateLicenseCommand(start_date=start, end_date=end))

        assert result.start_date == start
        assert result.end_date.date() == end.date()
        assert result.end_date.hour == 23

    async def test_end_before_start(self, handler):
        """Test an end date before the start date is rejected."""
        start = datetime(2025, 3, 1, tzinfo=timezone.utc)
        with pytest.raises(InvalidInputError):
            await handler.handle(
                GenerateLicenseCommand(
                    start_date=start, end_date=datetime(2025, 1, 1, tzinfo=timezone.utc)
                )
            )

    async def test_duplicate_phone_and_location(self, handler):
        """Test one license per phone number and location."""
        await handler.handle(
            GenerateLicenseCommand(customer_phone="+1 (555) 0100", location_name="Main Street")
        )

        with pytest.raises(DuplicateLicenseError):
            await handler.handle(
                GenerateLicenseCommand(customer_phone="1-555-0100", location_name=" main street ")
            )

    async def test_same_phone_other_location(self, handler):
        """Test a customer may license several branches."""
        await handler.handle(GenerateLicenseCommand(customer_phone="5550100", location_name="North"))
        result = await handler.handle(
            GenerateLicenseCommand(customer_phone="5550100", location_name="South")
        )
        assert result.location_name == "South"
