"""
Django implementation of ActivationRepository port.

This adapter converts between domain entities and Django ORM models.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.db.models import Count, Q

from activations.domain.activation import Activation
from activations.infrastructure.models import Activation as ActivationModel
from activations.ports.activation_repository import ActivationCounts, ActivationRepository
from core.domain.pagination import Page, PageRequest
from core.domain.value_objects import HardwareId


class DjangoActivationRepository(ActivationRepository):
    """
    Django ORM implementation of ActivationRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements repository interface
    """

    def _to_domain(self, model: ActivationModel) -> Activation:
        """
        Convert Django model to domain entity.

        Args:
            model: Django Activation model

        Returns:
            Activation domain entity
        """
        return Activation(
            id=model.id,
            license_id=model.license_id,
            hardware_id=HardwareId(model.hardware_id),
            machine_name=model.machine_name,
            activated_at=model.activated_at,
            last_validation=model.last_validation,
            is_active=model.is_active,
        )

    @sync_to_async
    def save(self, activation: Activation) -> Activation:
        """
        Save an activation entity.

        Args:
            activation: Activation entity to save

        Returns:
            Saved activation entity
        """
        # pylint: disable=no-member
        model, _ = ActivationModel.objects.update_or_create(
            id=activation.id,
            defaults={
                "license_id": activation.license_id,
                "hardware_id": str(activation.hardware_id),
                "machine_name": activation.machine_name,
                "activated_at": activation.activated_at,
                "last_validation": activation.last_validation,
                "is_active": activation.is_active,
            },
        )
        return self._to_domain(model)

    @sync_to_async
    def insert(self, activation: Activation) -> Optional[Activation]:
        """
        Create an activation unless the license is already bound to the machine.

        Args:
            activation: Activation entity to create

        Returns:
            Created activation or None on a (license, hardware) conflict
        """
        try:
            with transaction.atomic():
                model = ActivationModel.objects.create(
                    id=activation.id,
                    license_id=activation.license_id,
                    hardware_id=str(activation.hardware_id),
                    machine_name=activation.machine_name,
                    activated_at=activation.activated_at,
                    last_validation=activation.last_validation,
                    is_active=activation.is_active,
                )
        except IntegrityError:
            return None
        return self._to_domain(model)

    @sync_to_async
    def touch_validation(self, activation_id: uuid.UUID, validated_at: datetime) -> bool:
        updated = ActivationModel.objects.filter(id=activation_id, is_active=True).update(
            last_validation=validated_at
        )
        return updated == 1

    @sync_to_async
    def find_by_id(self, activation_id: uuid.UUID) -> Optional[Activation]:
        """
        Find an activation by ID.

        Args:
            activation_id: Activation UUID

        Returns:
            Activation entity or None if not found
        """
        try:
            return self._to_domain(ActivationModel.objects.get(id=activation_id))
        except ActivationModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_license_and_hardware(
        self, license_id: uuid.UUID, hardware_id: str
    ) -> Optional[Activation]:
        try:
            model = ActivationModel.objects.get(license_id=license_id, hardware_id=hardware_id)
            return self._to_domain(model)
        except ActivationModel.DoesNotExist:
            return None

    @sync_to_async
    def find_by_license(self, license_id: uuid.UUID) -> List[Activation]:
        models = ActivationModel.objects.filter(license_id=license_id).order_by("-activated_at")
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def deactivate_all_for_license(self, license_id: uuid.UUID) -> int:
        return ActivationModel.objects.filter(
            license_id=license_id, is_active=True
        ).update(is_active=False)

    @sync_to_async
    def list(
        self,
        page_request: PageRequest,
        license_id: Optional[uuid.UUID] = None,
        is_active: Optional[bool] = None,
    ) -> Page[Activation]:
        queryset = ActivationModel.objects.all()
        if license_id:
            queryset = queryset.filter(license_id=license_id)
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
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
    def counts(self, activated_since: datetime) -> ActivationCounts:
        totals = ActivationModel.objects.aggregate(
            total=Count("id"),
            active=Count("id", filter=Q(is_active=True)),
            created_recently=Count("id", filter=Q(activated_at__gte=activated_since)),
        )
        return ActivationCounts(**totals)
