"""
Django implementation of SubscriptionRepository port.
"""
import uuid
from datetime import datetime, timedelta
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db.models import Count, Q

from core.domain.pagination import Page, PageRequest
from core.domain.value_objects import SubscriptionStatus
from licenses.domain.subscription import Subscription
from licenses.infrastructure.models import Subscription as SubscriptionModel
from licenses.ports.subscription_repository import SubscriptionCounts, SubscriptionRepository

EXPIRING_SOON_WINDOW = timedelta(days=30)


class DjangoSubscriptionRepository(SubscriptionRepository):
    """Django ORM implementation of SubscriptionRepository."""

    def _to_domain(self, model: SubscriptionModel) -> Subscription:
        return Subscription(
            id=model.id,
            license_id=model.license_id,
            start_date=model.start_date,
            end_date=model.end_date,
            annual_fee=model.annual_fee,
            status=SubscriptionStatus(model.status),
            grace_period_end=model.grace_period_end,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @sync_to_async
    def save(self, subscription: Subscription) -> Subscription:
        """
        Save a subscription entity.

        Args:
            subscription: Subscription entity to save

        Returns:
            Saved subscription entity
        """
        model, _ = SubscriptionModel.objects.update_or_create(
            id=subscription.id,
            defaults={
                "license_id": subscription.license_id,
                "start_date": subscription.start_date,
                "end_date": subscription.end_date,
                "annual_fee": subscription.annual_fee,
                "status": subscription.status.value,
                "grace_period_end": subscription.grace_period_end,
                "created_at": subscription.created_at,
                "updated_at": subscription.updated_at,
            },
        )
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, subscription_id: uuid.UUID) -> Optional[Subscription]:
        try:
            return self._to_domain(SubscriptionModel.objects.get(id=subscription_id))
        except SubscriptionModel.DoesNotExist:
            return None

    @sync_to_async
    def find_current_for_license(self, license_id: uuid.UUID) -> Optional[Subscription]:
        model = (
            SubscriptionModel.objects.filter(license_id=license_id)
            .order_by("-end_date", "-created_at")
            .first()
        )
        return self._to_domain(model) if model else None

    @sync_to_async
    def find_by_license(self, license_id: uuid.UUID) -> List[Subscription]:
        models = SubscriptionModel.objects.filter(license_id=license_id).order_by("-end_date")
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def find_ending_between(self, start: datetime, end: datetime) -> List[Subscription]:
        models = SubscriptionModel.objects.filter(
            status=SubscriptionStatus.ACTIVE.value,
            end_date__gte=start,
            end_date__lt=end,
        ).order_by("end_date")
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def list(
        self,
        page_request: PageRequest,
        now: datetime,
        license_id: Optional[uuid.UUID] = None,
        status: Optional[str] = None,
        expiring_soon: bool = False,
        expired: bool = False,
    ) -> Page[Subscription]:
        queryset = SubscriptionModel.objects.all()
        if license_id:
            queryset = queryset.filter(license_id=license_id)
        if status:
            queryset = queryset.filter(status=status)
        if expiring_soon:
            queryset = queryset.filter(end_date__gt=now, end_date__lte=now + EXPIRING_SOON_WINDOW)
        if expired:
            queryset = queryset.filter(end_date__lte=now)
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
    def counts(self, now: datetime, expiring_before: datetime) -> SubscriptionCounts:
        active = Q(status=SubscriptionStatus.ACTIVE.value)
        totals = SubscriptionModel.objects.aggregate(
            total=Count("id"),
            active=Count("id", filter=active),
            expired=Count("id", filter=Q(status=SubscriptionStatus.EXPIRED.value)),
            grace_period=Count("id", filter=Q(status=SubscriptionStatus.GRACE_PERIOD.value)),
            expiring_soon=Count(
                "id", filter=active & Q(end_date__gt=now, end_date__lte=expiring_before)
            ),
        )
        return SubscriptionCounts(**totals)
