"""
Subscription repository port (interface).
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
import uuid

from core.domain.pagination import Page, PageRequest
from licenses.domain.subscription import Subscription


@dataclass(frozen=True)
class SubscriptionCounts:
    """Subscription totals for the admin dashboard."""

    total: int
    active: int
    expired: int
    grace_period: int
    expiring_soon: int


class SubscriptionRepository(ABC):
    """Abstract repository for Subscription entities."""

    @abstractmethod
    async def save(self, subscription: Subscription) -> Subscription:
        """
        Save a subscription entity.

        Args:
            subscription: Subscription entity to save

        Returns:
            Saved subscription entity
        """
        pass

    @abstractmethod
    async def find_by_id(self, subscription_id: uuid.UUID) -> Optional[Subscription]:
        pass

    @abstractmethod
    async def find_current_for_license(self, license_id: uuid.UUID) -> Optional[Subscription]:
        """
        Find the subscription that governs a license.

        The subscription with the latest end date wins.

        Args:
            license_id: License UUID

        Returns:
            Subscription entity or None if the license has none
        """
        pass

    @abstractmethod
    async def find_by_license(self, license_id: uuid.UUID) -> List[Subscription]:
        pass

    @abstractmethod
    async def find_ending_between(self, start: datetime, end: datetime) -> List[Subscription]:
        """
        Active subscriptions whose end date falls in [start, end).

        Args:
            start: Window start
            end: Window end

        Returns:
            List of Subscription entities
        """
        pass

    @abstractmethod
    async def list(
        self,
        page_request: PageRequest,
        now: datetime,
        license_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        expiring_soon: bool = False,
        expired: bool = False,
    ) -> Page[Subscription]:
        """
        List subscriptions page by page.

        Args:
            page_request: Paging and ordering
            now: Reference time for the date filters
            license_id: Optional owning license filter
            status: Optional stored status filter
            expiring_soon: Only subscriptions ending within 30 days
            expired: Only subscriptions whose end date has passed

        Returns:
            Page of Subscription entities
        """
        pass

    @abstractmethod
    async def counts(self, now: datetime, expiring_before: datetime) -> SubscriptionCounts:
        pass
