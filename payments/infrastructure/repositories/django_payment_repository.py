"""
Django implementation of PaymentRepository port.
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncMonth

from core.domain.pagination import Page, PageRequest
from core.domain.value_objects import PaymentType
from payments.domain.payment import Payment
from payments.infrastructure.models import Payment as PaymentModel
from payments.ports.payment_repository import (
    PaymentRepository,
    PaymentStatistics,
    RevenuePeriod,
)

ZERO = Decimal("0.00")


class DjangoPaymentRepository(PaymentRepository):
    """Django ORM implementation of PaymentRepository."""

    def _to_domain(self, model: PaymentModel) -> Payment:
        return Payment(
            id=model.id,
            license_id=model.license_id,
            amount=model.amount,
            payment_type=PaymentType(model.payment_type),
            payment_date=model.payment_date,
            additional_users=model.additional_users,
            created_at=model.created_at,
        )

    def _filtered(
        self,
        license_id: Optional[uuid.UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ):
        queryset = PaymentModel.objects.all()
        if license_id:
            queryset = queryset.filter(license_id=license_id)
        if start_date:
            queryset = queryset.filter(payment_date__gte=start_date)
        if end_date:
            queryset = queryset.filter(payment_date__lte=end_date)
        return queryset

    @sync_to_async
    def save(self, payment: Payment) -> Payment:
        """
        Save a new payment.

        Args:
            payment: Payment entity to save

        Returns:
            Saved payment entity
        """
        model = PaymentModel.objects.create(
            id=payment.id,
            license_id=payment.license_id,
            amount=payment.amount,
            payment_date=payment.payment_date,
            is_annual_subscription=payment.is_annual_subscription,
            payment_type=payment.payment_type.value,
            additional_users=payment.additional_users,
            created_at=payment.created_at,
        )
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, payment_id: uuid.UUID) -> Optional[Payment]:
        try:
            return self._to_domain(PaymentModel.objects.get(id=payment_id))
        except PaymentModel.DoesNotExist:
            return None

    @sync_to_async
    def has_initial_payment(self, license_id: uuid.UUID) -> bool:
        return PaymentModel.objects.filter(
            license_id=license_id, payment_type=PaymentType.INITIAL.value
        ).exists()

    @sync_to_async
    def list(
        self,
        page_request: PageRequest,
        license_id: Optional[uuid.UUID] = None,
        payment_type: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Page[Payment]:
        queryset = self._filtered(license_id, start_date, end_date)
        if payment_type:
            queryset = queryset.filter(payment_type=payment_type)
        total = queryset.count()
        models = queryset.order_by(page_request.ordering, "id")[
            page_request.offset:page_request.offset + page_request.page_size
        ]
        return Page(
            items=[self._to_domain(model) for model in models],
            page=page_request.page,
            page_size=page_request.page_size,
            total_items=total,
        )

    @sync_to_async
    def statistics(
        self,
        license_id: Optional[uuid.UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> PaymentStatistics:
        annual = Q(is_annual_subscription=True)
        totals = self._filtered(license_id, start_date, end_date).aggregate(
            total_payments=Count("id"),
            total_amount=Sum("amount"),
            annual_count=Count("id", filter=annual),
            annual_amount=Sum("amount", filter=annual),
            one_off_count=Count("id", filter=~annual),
            one_off_amount=Sum("amount", filter=~annual),
        )
        count = totals["total_payments"]
        total_amount = totals["total_amount"] or ZERO
        average = (total_amount / count).quantize(Decimal("0.01")) if count else ZERO
        return PaymentStatistics(
            total_payments=count,
            total_amount=total_amount,
            average_amount=average,
            annual_subscription_payments=totals["annual_count"],
            one_off_payments=totals["one_off_count"],
            total_annual_amount=totals["annual_amount"] or ZERO,
            total_one_off_amount=totals["one_off_amount"] or ZERO,
        )

    @sync_to_async
    def revenue_by_month(self, start_date: datetime, end_date: datetime) -> List[RevenuePeriod]:
        annual = Q(is_annual_subscription=True)
        rows = (
            self._filtered(start_date=start_date, end_date=end_date)
            .annotate(month=TruncMonth("payment_date"))
            .values("month")
            .annotate(
                amount=Sum("amount"),
                count=Count("id"),
                subscription_payments=Sum("amount", filter=annual),
                initial_payments=Sum("amount", filter=~annual),
            )
            .order_by("month")
        )
        return [
            RevenuePeriod(
                period=row["month"].strftime("%Y-%m"),
                amount=row["amount"] or ZERO,
                count=row["count"],
                initial_payments=row["initial_payments"] or ZERO,
                subscription_payments=row["subscription_payments"] or ZERO,
            )
            for row in rows
        ]
