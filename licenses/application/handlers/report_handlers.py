"""
Admin dashboard and report handlers.

Statistics are computed on demand from the repositories; calendar
boundaries (this month, this year, the last seven days) follow the
server's TIME_ZONE.
"""
from datetime import timedelta

from django.utils import timezone

from activations.ports.activation_repository import ActivationRepository
from core.domain.clock import Clock, system_clock
from core.domain.exceptions import InvalidInputError
from core.domain.pagination import PageRequest
from licenses.application.dto.license_dto import LicenseDTO
from licenses.application.dto.report_dto import (
    DashboardStatsDTO,
    LicenseExportDTO,
    RevenueReportDTO,
)
from licenses.application.handlers.list_licenses_handler import LICENSE_SORT_FIELDS
from licenses.application.queries.reports import ExportLicensesQuery, RevenueReportQuery
from licenses.domain.services import end_of_day
from licenses.domain.subscription import add_years
from licenses.ports.license_repository import LicenseRepository
from licenses.ports.subscription_repository import SubscriptionRepository
from payments.ports.payment_repository import PaymentRepository

EXPIRING_SOON_DAYS = 30
RECENT_ACTIVITY_DAYS = 7
EXPORT_LIMIT = 10000

ONE_MICROSECOND = timedelta(microseconds=1)


class DashboardStatsHandler:
    """Handler for the admin dashboard statistics."""

    def __init__(
        self,
        license_repository: LicenseRepository,
        subscription_repository: SubscriptionRepository,
        activation_repository: ActivationRepository,
        payment_repository: PaymentRepository,
        clock: Clock = None,
    ):
        """Initialize handler with repositories."""
        self.license_repository = license_repository
        self.subscription_repository = subscription_repository
        self.activation_repository = activation_repository
        self.payment_repository = payment_repository
        self.clock = clock or system_clock

    async def handle(self) -> DashboardStatsDTO:
        """
        Collect license, subscription, activation and revenue totals.

        Licenses and subscriptions count as expiring soon when they end
        before the close of the 30th day from now; recent activity covers
        the last seven calendar days.

        Returns:
            DashboardStatsDTO
        """
        now = self.clock.now()
        local_now = timezone.localtime(now)
        expiring_before = end_of_day(local_now + timedelta(days=EXPIRING_SOON_DAYS))
        recent_since = (local_now - timedelta(days=RECENT_ACTIVITY_DAYS)).replace(
            hour=0, minute=0, second=0, microsecond=0
        )
        month_start = local_now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        next_month = (month_start + timedelta(days=32)).replace(day=1)
        year_start = month_start.replace(month=1)

        licenses = await self.license_repository.counts(now, expiring_before, recent_since)
        subscriptions = await self.subscription_repository.counts(now, expiring_before)
        activations = await self.activation_repository.counts(recent_since)
        revenue_total = await self.payment_repository.statistics()
        revenue_month = await self.payment_repository.statistics(
            start_date=month_start, end_date=next_month - ONE_MICROSECOND
        )
        revenue_year = await self.payment_repository.statistics(
            start_date=year_start, end_date=add_years(year_start) - ONE_MICROSECOND
        )
        recent_payments = await self.payment_repository.statistics(start_date=recent_since)

        return DashboardStatsDTO(
            licenses=licenses,
            subscriptions=subscriptions,
            activations=activations,
            revenue_total=revenue_total,
            revenue_month=revenue_month,
            revenue_year=revenue_year,
            recent_payments=recent_payments.total_payments,
        )


class RevenueReportHandler:
    """Handler for RevenueReportQuery."""

    def __init__(self, payment_repository: PaymentRepository, clock: Clock = None):
        """Initialize handler with repositories."""
        self.payment_repository = payment_repository
        self.clock = clock or system_clock

    async def handle(self, query: RevenueReportQuery) -> RevenueReportDTO:
        """
        Handle revenue report query.

        An end date includes the whole of that day.

        Raises:
            InvalidInputError: If the start date is after the end date
        """
        now = self.clock.now()
        end_date = end_of_day(query.end_date) if query.end_date else now
        start_date = query.start_date or add_years(now, -1)
        if start_date > end_date:
            raise InvalidInputError("startDate must not be after endDate")
        periods = await self.payment_repository.revenue_by_month(start_date, end_date)
        return RevenueReportDTO(periods)


class ExportLicensesHandler:
    """Handler for ExportLicensesQuery."""

    def __init__(self, license_repository: LicenseRepository):
        """Initialize handler with repositories."""
        self.license_repository = license_repository

    async def handle(self, query: ExportLicensesQuery) -> LicenseExportDTO:
        # Paging is ignored; PageRequest only validates the sort
        page_request = PageRequest.create(
            LICENSE_SORT_FIELDS,
            "createdAt",
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )
        licenses = await self.license_repository.find_all(
            page_request.ordering,
            EXPORT_LIMIT,
            status=query.status,
            search=query.search,
            is_free_trial=query.is_free_trial,
        )
        return LicenseExportDTO([LicenseDTO.from_entity(license) for license in licenses])
