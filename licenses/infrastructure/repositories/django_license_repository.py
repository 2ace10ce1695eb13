"""
Django implementation of LicenseRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from asgiref.sync import sync_to_async
from django.db.models import Count, Exists, F, IntegerField, OuterRef, Q, Value
from django.db.models.functions import Coalesce, Greatest, Least, Lower, Replace, Trim

from core.domain.pagination import Page, PageRequest
from core.domain.value_objects import LicenseStatus, SubscriptionStatus
from licenses.domain.license import License
from licenses.infrastructure.models import License as LicenseModel
from licenses.infrastructure.models import Subscription as SubscriptionModel
from licenses.ports.license_repository import LicenseCounts, LicenseRepository

# Columns written by save(); the seat counters are only touched by the
# conditional updates below.
_MUTABLE_FIELDS = [
    "customer_name",
    "customer_phone",
    "location_name",
    "location_address",
    "status",
    "initial_price",
    "annual_price",
    "price_per_user",
    "is_free_trial",
    "free_trial_end_date",
    "start_date",
    "end_date",
    "updated_at",
]

_PHONE_SEPARATORS = (" ", "-", "(", ")", "+")


def _digits_only_phone():
    expression = Trim(Coalesce("customer_phone", Value("")))
    for separator in _PHONE_SEPARATORS:
        expression = Replace(expression, Value(separator), Value(""))
    return expression


class DjangoLicenseRepository(LicenseRepository):
    """
    Django ORM implementation of LicenseRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements the seat counters as single conditional UPDATEs
    """

    def _to_domain(self, model: LicenseModel) -> License:
        """
        Convert Django model to domain entity.

        Args:
            model: Django License model

        Returns:
            License domain entity
        """
        return License(
            id=model.id,
            key=model.key,
            status=LicenseStatus(model.status),
            purchase_date=model.purchase_date,
            initial_price=model.initial_price,
            annual_price=model.annual_price,
            price_per_user=model.price_per_user,
            is_free_trial=model.is_free_trial,
            free_trial_end_date=model.free_trial_end_date,
            start_date=model.start_date,
            end_date=model.end_date,
            user_count=model.user_count,
            user_limit=model.user_limit,
            customer_name=model.customer_name,
            customer_phone=model.customer_phone,
            location_name=model.location_name,
            location_address=model.location_address,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    @sync_to_async
    def save(self, license: License) -> License:
        """
        Save a license entity.

        Args:
            license: License entity to save

        Returns:
            Saved license entity
        """
        values = {field: getattr(license, field) for field in _MUTABLE_FIELDS}
        values["status"] = license.status.value
        model, created = LicenseModel.objects.get_or_create(
            id=license.id,
            defaults={
                **values,
                "key": license.key,
                "purchase_date": license.purchase_date,
                "user_count": license.user_count,
                "user_limit": license.user_limit,
                "created_at": license.created_at,
            },
        )
        if not created:
            for field, value in values.items():
                setattr(model, field, value)
            model.save(update_fields=_MUTABLE_FIELDS)
            model.refresh_from_db(fields=["user_count", "user_limit"])
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            License entity or None if not found
        """
        try:
            return self._to_domain(LicenseModel.objects.get(id=license_id))
        except LicenseModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_key(self, key: str) -> Optional[License]:
        try:
            return self._to_domain(LicenseModel.objects.get(key=key))
        except LicenseModel.DoesNotExist:
            return None

    @sync_to_async
    def exists_by_key(self, key: str) -> bool:
        return LicenseModel.objects.filter(key=key).exists()

    @sync_to_async
    def find_by_phone_and_location(
        self, phone_digits: str, location_name: str
    ) -> Optional[License]:
        model = (
            LicenseModel.objects.annotate(
                phone_digits=_digits_only_phone(),
                location_key=Lower(Trim(Coalesce("location_name", Value("")))),
            )
            .filter(phone_digits=phone_digits, location_key=location_name.strip().lower())
            .first()
        )
        return self._to_domain(model) if model else None

    def _filtered(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        is_free_trial: Optional[bool] = None,
    ):
        queryset = LicenseModel.objects.all()
        if status:
            queryset = queryset.filter(status=status)
        if is_free_trial is not None:
            queryset = queryset.filter(is_free_trial=is_free_trial)
        if search:
            queryset = queryset.filter(
                Q(key__icontains=search)
                | Q(customer_name__icontains=search)
                | Q(customer_phone__icontains=search)
                | Q(location_name__icontains=search)
                | Q(location_address__icontains=search)
            )
        return queryset

    @sync_to_async
    def list(
        self,
        page_request: PageRequest,
        status: Optional[str] = None,
        search: Optional[str] = None,
        is_free_trial: Optional[bool] = None,
    ) -> Page[License]:
        queryset = self._filtered(status, search, is_free_trial)
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
    def find_sweep_candidates(self, now: datetime) -> List[License]:
        # Only the latest subscription counts; older rows that ended are history
        subscriptions = SubscriptionModel.objects.filter(license=OuterRef("pk"))
        still_paid = subscriptions.filter(end_date__gt=now)
        lapsed_subscription = Exists(subscriptions) & ~Exists(still_paid)
        models = LicenseModel.objects.filter(status=LicenseStatus.ACTIVE.value).filter(
            Q(end_date__lte=now) | lapsed_subscription
        )
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def get_seat_counts(self, license_id: uuid.UUID) -> Optional[Tuple[int, int]]:
        row = (
            LicenseModel.objects.filter(id=license_id)
            .values_list("user_count", "user_limit")
            .first()
        )
        return tuple(row) if row else None

    @sync_to_async
    def increment_user_count(self, license_id: uuid.UUID) -> bool:
        updated = LicenseModel.objects.filter(
            id=license_id, user_count__lt=F("user_limit")
        ).update(user_count=F("user_count") + 1)
        return updated == 1

    @sync_to_async
    def decrement_user_count(self, license_id: uuid.UUID) -> bool:
        updated = LicenseModel.objects.filter(
            id=license_id, user_count__gt=0
        ).update(user_count=F("user_count") - 1)
        return updated == 1

    @sync_to_async
    def set_user_count(self, license_id: uuid.UUID, user_count: int) -> bool:
        clamped = Least(
            Greatest(Value(user_count), Value(0)),
            F("user_limit"),
            output_field=IntegerField(),
        )
        updated = LicenseModel.objects.filter(id=license_id).update(user_count=clamped)
        return updated == 1

    @sync_to_async
    def increase_user_limit(self, license_id: uuid.UUID, additional_users: int) -> bool:
        updated = LicenseModel.objects.filter(id=license_id).update(
            user_limit=F("user_limit") + additional_users
        )
        return updated == 1

    @sync_to_async
    def claim_first_seat(self, license_id: uuid.UUID) -> bool:
        updated = LicenseModel.objects.filter(
            id=license_id, user_count=0, user_limit__gt=0
        ).update(user_count=1)
        return updated == 1

    @sync_to_async
    def find_all(
        self,
        ordering: str,
        limit: int,
        status: Optional[str] = None,
        search: Optional[str] = None,
        is_free_trial: Optional[bool] = None,
    ) -> List[License]:
        models = self._filtered(status, search, is_free_trial).order_by(ordering, "id")[:limit]
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def counts(
        self, now: datetime, expiring_before: datetime, created_since: datetime
    ) -> LicenseCounts:
        active = Q(status=LicenseStatus.ACTIVE.value)
        ending_soon = SubscriptionModel.objects.filter(
            license=OuterRef("pk"),
            status=SubscriptionStatus.ACTIVE.value,
            end_date__gt=now,
            end_date__lte=expiring_before,
        )
        totals = LicenseModel.objects.annotate(ending_soon=Exists(ending_soon)).aggregate(
            total=Count("id"),
            active=Count("id", filter=active),
            expired=Count("id", filter=Q(status=LicenseStatus.EXPIRED.value)),
            revoked=Count("id", filter=Q(status=LicenseStatus.REVOKED.value)),
            suspended=Count("id", filter=Q(status=LicenseStatus.SUSPENDED.value)),
            free_trial=Count("id", filter=active & Q(is_free_trial=True)),
            expiring_soon=Count("id", filter=active & Q(ending_soon=True)),
            created_recently=Count("id", filter=Q(created_at__gte=created_since)),
        )
        return LicenseCounts(**totals)
