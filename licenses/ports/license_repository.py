"""
License repository port (interface).

This defines the contract for license persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple
import uuid

from core.domain.pagination import Page, PageRequest
from licenses.domain.license import License


@dataclass(frozen=True)
class LicenseCounts:
    """License totals for the admin dashboard."""

    total: int
    active: int
    expired: int
    revoked: int
    suspended: int
    free_trial: int
    expiring_soon: int
    created_recently: int


class LicenseRepository(ABC):
    """
    Abstract repository for License entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    Seat counter methods must be atomic per license: each is a single
    conditional update in the backing store.
    """

    @abstractmethod
    async def save(self, license: License) -> License:
        """
        Save a license entity.

        Seat counters are not written by save(); use the counter
        methods below.

        Args:
            license: License entity to save

        Returns:
            Saved license entity
        """
        pass

    @abstractmethod
    async def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[License]:
        """
        Find a license by its canonical key.

        Args:
            key: Normalized license key

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def exists_by_key(self, key: str) -> bool:
        pass

    @abstractmethod
    async def find_by_phone_and_location(
        self, phone_digits: str, location_name: str
    ) -> Optional[License]:
        """
        Find a license issued to the same phone number and branch.

        Args:
            phone_digits: Customer phone reduced to digits
            location_name: Branch name, compared case-insensitively

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def list(
        self,
        page_request: PageRequest,
        status: Optional[str] = None,
        search: Optional[str] = None,
        is_free_trial: Optional[bool] = None,
    ) -> Page[License]:
        """
        List licenses page by page.

        Args:
            page_request: Paging and ordering
            status: Optional stored status filter
            search: Optional text matched against key, customer and location
            is_free_trial: Optional trial flag filter

        Returns:
            Page of License entities
        """
        pass

    @abstractmethod
    async def find_sweep_candidates(self, now: datetime) -> List[License]:
        """
        Active licenses whose licensed period may have ended by now.

        Args:
            now: Sweep time

        Returns:
            List of License entities
        """
        pass

    @abstractmethod
    async def get_seat_counts(self, license_id: uuid.UUID) -> Optional[Tuple[int, int]]:
        """
        Read the seat counters.

        Returns:
            (user_count, user_limit) or None if the license does not exist
        """
        pass

    @abstractmethod
    async def increment_user_count(self, license_id: uuid.UUID) -> bool:
        """
        Add one seat if the license is below its limit.

        Returns:
            True if the counter was incremented
        """
        pass

    @abstractmethod
    async def decrement_user_count(self, license_id: uuid.UUID) -> bool:
        """
        Remove one seat if the counter is above zero.

        Returns:
            True if the counter was decremented
        """
        pass

    @abstractmethod
    async def set_user_count(self, license_id: uuid.UUID, user_count: int) -> bool:
        """
        Overwrite the counter, clamped to [0, user_limit].

        Returns:
            True if the license exists
        """
        pass

    @abstractmethod
    async def increase_user_limit(self, license_id: uuid.UUID, additional_users: int) -> bool:
        """
        Raise the user limit.

        Returns:
            True if the license exists
        """
        pass

    @abstractmethod
    async def claim_first_seat(self, license_id: uuid.UUID) -> bool:
        """
        Set the counter to 1 only if it is still 0.

        Returns:
            True if the counter was 0 and is now 1
        """
        pass

    @abstractmethod
    async def find_all(
        self,
        ordering: str,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
        is_free_trial: Optional[bool] = None,
    ) -> List[License]:
        """
        Licenses matching the listing filters, unpaged.

        Args:
            ordering: Django order_by expression
            limit: Maximum number of licenses returned
            status: Optional stored status filter
            search: Optional text matched against key, customer and location
            is_free_trial: Optional trial flag filter

        Returns:
            List of License entities
        """
        pass

    @abstractmethod
    async def counts(
        self, now: datetime, expiring_before: datetime, created_since: datetime
    ) -> LicenseCounts:
        """
        Count licenses by stored status.

        Args:
            now: Reference time
            expiring_before: Active licenses whose active subscription ends
                in (now, expiring_before] count as expiring soon
            created_since: Licenses created at or after this count as recent

        Returns:
            LicenseCounts
        """
        pass
