"""
License and subscription listing handlers (admin).
"""

from core.domain.clock import Clock, system_clock
from core.domain.exceptions import LicenseNotFoundError, SubscriptionNotFoundError
from core.domain.pagination import Page, PageRequest
from licenses.application.dto.license_dto import LicenseDTO, SubscriptionDTO
from licenses.application.queries.list_licenses import (
    GetLicenseDetailQuery,
    GetSubscriptionQuery,
    ListLicensesQuery,
    ListSubscriptionsQuery,
)
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository

LICENSE_SORT_FIELDS = {
    "id": "id",
    "licenseKey": "key",
    "customerName": "customer_name",
    "customerPhone": "customer_phone",
    "status": "status",
    "purchaseDate": "purchase_date",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

SUBSCRIPTION_SORT_FIELDS = {
    "id": "id",
    "startDate": "start_date",
    "endDate": "end_date",
    "status": "status",
    "annualFee": "annual_fee",
    "createdAt": "created_at",
}


class ListLicensesHandler:
    """Handler for ListLicensesQuery."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repositories."""
        self.license_repository = license_repository

    async def handle(self, query: ListLicensesQuery) -> Page[LicenseDTO]:
        """
        Handle list licenses query.

        Args:
            query: ListLicensesQuery

        Returns:
            Page of LicenseDTO

        Raises:
            InvalidInputError: If paging or sorting parameters are invalid
        """
        page_request = PageRequest.create(
            LICENSE_SORT_FIELDS,
            "createdAt",
            page=query.page,
            page_size=query.page_size,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )
        page = await self.license_repository.list(
            page_request,
            status=query.status,
            search=query.search,
            is_free_trial=query.is_free_trial,
        )
        return page.map(LicenseDTO.from_entity)


class GetLicenseDetailHandler:
    """Handler for GetLicenseDetailQuery."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository

    async def handle(self, query: GetLicenseDetailQuery) -> LicenseDTO:
        license = await self.license_repository.find_by_id(query.license_id)
        if not license:
            raise LicenseNotFoundError(f"License {query.license_id} not found")
        subscriptions = await self.subscription_repository.find_by_license(license.id)
        return LicenseDTO.from_entity(license, subscriptions)


class ListSubscriptionsHandler:
    """Handler for ListSubscriptionsQuery."""

    def __init__(self, subscription_repository: SubscriptionRepository, clock: Clock = None):
        """Initialize handler with repositories."""
        self.subscription_repository = subscription_repository
        self.clock = clock or system_clock

    async def handle(self, query: ListSubscriptionsQuery) -> Page[SubscriptionDTO]:
        page_request = PageRequest.create(
            SUBSCRIPTION_SORT_FIELDS,
            "endDate",
            page=query.page,
            page_size=query.page_size,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )
        page = await self.subscription_repository.list(
            page_request,
            now=self.clock.now(),
            license_id=query.license_id,
            status=query.status,
            expiring_soon=query.expiring_soon,
            expired=query.expired,
        )
        return page.map(SubscriptionDTO.from_entity)


class GetSubscriptionHandler:
    """Handler for GetSubscriptionQuery."""

    def __init__(self, subscription_repository: SubscriptionRepository):
        """Initialize handler with repositories."""
        self.subscription_repository = subscription_repository

    async def handle(self, query: GetSubscriptionQuery) -> SubscriptionDTO:
        subscription = await self.subscription_repository.find_by_id(query.subscription_id)
        if not subscription:
            raise SubscriptionNotFoundError(f"Subscription {query.subscription_id} not found")
        return SubscriptionDTO.from_entity(subscription)
