"""
License domain events.

Domain events represent something that happened in the license domain.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from django.utils import timezone

from core.domain.events import DomainEvent


class LicenseGenerated(DomainEvent):
    """Event raised when a license is issued."""

    payload_fields = ("license_id", "license_key", "is_free_trial", "end_date")

    def __init__(
        self,
        license_id: uuid.UUID,
        license_key: str,
        is_free_trial: bool,
        end_date: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize LicenseGenerated event.

        Args:
            license_id: License UUID
            license_key: Canonical license key
            is_free_trial: Whether the license is a trial
            end_date: End of the licensed period
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(license_id),
            event_type="LicenseGenerated",
        )
        self.license_id = license_id
        self.license_key = license_key
        self.is_free_trial = is_free_trial
        self.end_date = end_date


class LicenseStatusChanged(DomainEvent):
    """Event raised on an admin status transition (revoke, suspend, reinstate)."""

    payload_fields = ("license_id", "previous_status", "new_status")

    def __init__(
        self,
        license_id: uuid.UUID,
        previous_status: str,
        new_status: str,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(license_id),
            event_type="LicenseStatusChanged",
        )
        self.license_id = license_id
        self.previous_status = previous_status
        self.new_status = new_status


class LicenseExpired(DomainEvent):
    """Event raised when the sweep job marks a license expired."""

    payload_fields = ("license_id", "end_date")

    def __init__(
        self,
        license_id: uuid.UUID,
        end_date: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(license_id),
            event_type="LicenseExpired",
        )
        self.license_id = license_id
        self.end_date = end_date


class SubscriptionRenewed(DomainEvent):
    """Event raised when a subscription is renewed."""

    payload_fields = ("license_id", "subscription_id", "new_end_date")

    def __init__(
        self,
        license_id: uuid.UUID,
        subscription_id: uuid.UUID,
        new_end_date: datetime,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize SubscriptionRenewed event.

        Args:
            license_id: License UUID
            subscription_id: Subscription UUID
            new_end_date: New end of the licensed period
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(license_id),
            event_type="SubscriptionRenewed",
        )
        self.license_id = license_id
        self.subscription_id = subscription_id
        self.new_end_date = new_end_date


class UserLimitIncreased(DomainEvent):
    """Event raised when seats are added to a license."""

    payload_fields = ("license_id", "additional_users", "user_limit")

    def __init__(
        self,
        license_id: uuid.UUID,
        additional_users: int,
        user_limit: int,
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(license_id),
            event_type="UserLimitIncreased",
        )
        self.license_id = license_id
        self.additional_users = additional_users
        self.user_limit = user_limit


class LicenseUpdated(DomainEvent):
    """Event raised when an admin edits license details."""

    payload_fields = ("license_id", "fields")

    def __init__(
        self,
        license_id: uuid.UUID,
        fields: List[str],
        occurred_at: Optional[datetime] = None,
    ):
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or timezone.now(),
            aggregate_id=str(license_id),
            event_type="LicenseUpdated",
        )
        self.license_id = license_id
        self.fields = fields
