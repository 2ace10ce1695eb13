"""
License domain entity.

This is the core domain entity representing a POS license.
It contains business logic and is independent of infrastructure.
"""
import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from core.domain.exceptions import InvalidInputError, InvalidLicenseStatusError
from core.domain.value_objects import LicenseStatus
from licenses.domain.license_key import is_well_formed

EDITABLE_FIELDS = frozenset(
    {
        "customer_name",
        "customer_phone",
        "location_name",
        "location_address",
        "initial_price",
        "annual_price",
        "price_per_user",
        "start_date",
        "end_date",
    }
)


@dataclass(frozen=True)
class License:
    """
    License domain entity.

    A license is the aggregate root: subscriptions, activations and
    payments all hang off it. It is never deleted; revocation is a
    status transition.
    """

    id: uuid.UUID
    key: str
    status: LicenseStatus
    purchase_date: datetime
    initial_price: Decimal
    annual_price: Decimal
    price_per_user: Decimal
    is_free_trial: bool
    start_date: datetime
    end_date: datetime
    user_count: int
    user_limit: int
    created_at: datetime
    updated_at: datetime
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    location_name: Optional[str] = None
    location_address: Optional[str] = None
    free_trial_end_date: Optional[datetime] = None

    def __post_init__(self):
        """Validate license entity."""
        if not is_well_formed(self.key):
            raise ValueError(f"Malformed license key: {self.key!r}")
        if self.user_limit < 1:
            raise ValueError("User limit must be at least 1")
        if self.user_count < 0:
            raise ValueError("User count cannot be negative")
        if self.user_count > self.user_limit:
            raise ValueError("User count cannot exceed user limit")
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")

    @classmethod
    def create(
        cls,
        key: str,
        start_date: datetime,
        end_date: datetime,
        initial_price: Decimal,
        annual_price: Decimal,
        price_per_user: Decimal,
        user_limit: int,
        is_free_trial: bool = False,
        customer_name: Optional[str] = None,
        customer_phone: Optional[str] = None,
        location_name: Optional[str] = None,
        location_address: Optional[str] = None,
        license_id: Optional[uuid.UUID] = None,
    ) -> "License":
        """
        Create a new active License.

        Args:
            key: Canonical license key
            start_date: Start of the licensed period
            end_date: End of the licensed period
            initial_price: One-off purchase price
            annual_price: Yearly subscription fee
            price_per_user: Price of one extra seat
            user_limit: Seats included
            is_free_trial: Whether the license is a free trial
            customer_name: Optional customer name
            customer_phone: Optional customer phone
            location_name: Optional branch name
            location_address: Optional branch address
            license_id: Optional UUID (generated if not provided)

        Returns:
            License entity instance
        """
        now = timezone.now()
        return cls(
            id=license_id or uuid.uuid4(),
            key=key,
            status=LicenseStatus.ACTIVE,
            purchase_date=now,
            initial_price=initial_price,
            annual_price=annual_price,
            price_per_user=price_per_user,
            is_free_trial=is_free_trial,
            free_trial_end_date=end_date if is_free_trial else None,
            start_date=start_date,
            end_date=end_date,
            user_count=0,
            user_limit=user_limit,
            customer_name=customer_name,
            customer_phone=customer_phone,
            location_name=location_name,
            location_address=location_address,
            created_at=now,
            updated_at=now,
        )

    @property
    def has_location(self) -> bool:
        return bool(self.location_name) and bool(self.location_address)

    def _with(self, **changes) -> "License":
        return replace(self, updated_at=timezone.now(), **changes)

    def revoke(self) -> "License":
        """Revoke the license; allowed from any status."""
        return self._with(status=LicenseStatus.REVOKED)

    def suspend(self) -> "License":
        """
        Suspend the license.

        Raises:
            InvalidLicenseStatusError: If the license is not active or expired
        """
        if self.status not in (LicenseStatus.ACTIVE, LicenseStatus.EXPIRED):
            raise InvalidLicenseStatusError(f"Cannot suspend a {self.status} license")
        return self._with(status=LicenseStatus.SUSPENDED)

    def reinstate(self) -> "License":
        """
        Return a revoked or suspended license to active.

        The state machine still derives expiry from the dates, so a
        reinstated license past its end date evaluates as expired.
        """
        if self.status not in (LicenseStatus.REVOKED, LicenseStatus.SUSPENDED):
            raise InvalidLicenseStatusError(
                f"Only revoked or suspended licenses can be reinstated (status: {self.status})"
            )
        return self._with(status=LicenseStatus.ACTIVE)

    def mark_expired(self) -> "License":
        """Record that the licensed period has run out."""
        return self._with(status=LicenseStatus.EXPIRED)

    def extend_to(self, end_date: datetime) -> "License":
        """Move the end date after a renewal; an expired license becomes active."""
        status = LicenseStatus.ACTIVE if self.status == LicenseStatus.EXPIRED else self.status
        return self._with(end_date=end_date, status=status)

    def convert_to_paid(self) -> "License":
        """Drop the free-trial flag once any payment is recorded."""
        if not self.is_free_trial:
            return self
        return self._with(is_free_trial=False, free_trial_end_date=None)

    def with_initial_price(self, amount) -> "License":
        return self._with(initial_price=amount)

    def update_details(self, **changes) -> "License":
        """
        Apply admin edits to customer, location, price and date fields.

        Status and seat counters are not editable here; they change through
        their own transitions.

        Raises:
            InvalidInputError: If the edited end date falls before the start date
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Not editable: {', '.join(sorted(unknown))}")
        start_date = changes.get("start_date", self.start_date)
        end_date = changes.get("end_date", self.end_date)
        if end_date < start_date:
            raise InvalidInputError("End date cannot be before start date")
        if "end_date" in changes and self.status == LicenseStatus.EXPIRED:
            changes["status"] = LicenseStatus.ACTIVE
        return self._with(**changes)
