"""
Payment listing and statistics handlers (admin).
"""

from core.domain.pagination import Page, PageRequest
from licenses.domain.services import end_of_day
from payments.application.dto.payment_dto import PaymentDTO, PaymentStatisticsDTO
from payments.application.queries.list_payments import ListPaymentsQuery, PaymentStatisticsQuery
from payments.ports.payment_repository import PaymentRepository

PAYMENT_SORT_FIELDS = {
    "id": "id",
    "amount": "amount",
    "paymentDate": "payment_date",
    "createdAt": "created_at",
}


class ListPaymentsHandler:
    """Handler for ListPaymentsQuery."""

    def __init__(self, payment_repository: PaymentRepository):
        """Initialize handler with repositories."""
        self.payment_repository = payment_repository

    async def handle(self, query: ListPaymentsQuery) -> Page[PaymentDTO]:
        """
        Handle list payments query.

        An end date includes the whole of that day.
        """
        page_request = PageRequest.create(
            PAYMENT_SORT_FIELDS,
            "paymentDate",
            page=query.page,
            page_size=query.page_size,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )
        page = await self.payment_repository.list(
            page_request,
            license_id=query.license_id,
            payment_type=query.payment_type,
            start_date=query.start_date,
            end_date=end_of_day(query.end_date) if query.end_date else None,
        )
        return page.map(PaymentDTO.from_entity)


class PaymentStatisticsHandler:
    """Handler for PaymentStatisticsQuery."""

    def __init__(self, payment_repository: PaymentRepository):
        """Initialize handler with repositories."""
        self.payment_repository = payment_repository

    async def handle(self, query: PaymentStatisticsQuery) -> PaymentStatisticsDTO:
        statistics = await self.payment_repository.statistics(
            license_id=query.license_id,
            start_date=query.start_date,
            end_date=end_of_day(query.end_date) if query.end_date else None,
        )
        return PaymentStatisticsDTO(statistics)
