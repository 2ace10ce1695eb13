"""
License, Subscription and AuditLog models.
"""
import uuid
from decimal import Decimal

from django.db import models
from django.db.models import F, Q


class License(models.Model):
    """
    A license issued to one POS branch.
    Seats (user_count) are bounded by user_limit at every committed state.
    """

    STATUS_CHOICES = [
        ("active", "Active"),
        ("expired", "Expired"),
        ("revoked", "Revoked"),
        ("suspended", "Suspended"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.CharField(max_length=24, unique=True, db_index=True)
    customer_name = models.CharField(max_length=255, null=True, blank=True)
    customer_phone = models.CharField(max_length=32, null=True, blank=True, db_index=True)
    location_name = models.CharField(max_length=255, null=True, blank=True)
    location_address = models.CharField(max_length=500, null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    purchase_date = models.DateTimeField()
    initial_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("350.00"))
    annual_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("50.00"))
    price_per_user = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("25.00"))
    is_free_trial = models.BooleanField(default=False)
    free_trial_end_date = models.DateTimeField(null=True, blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    user_count = models.PositiveIntegerField(default=0)
    user_limit = models.PositiveIntegerField(default=2)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        db_table = "licenses"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["status", "end_date"]),
            models.Index(fields=["customer_phone", "location_name"]),
            models.Index(fields=["created_at"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(user_count__lte=F("user_limit")),
                name="license_user_count_within_limit",
            ),
            models.CheckConstraint(
                condition=Q(user_limit__gte=1),
                name="license_user_limit_positive",
            ),
        ]

    def __str__(self):
        return self.key


class Subscription(models.Model):
    """
    The paid period of a license, with an optional grace window.
    """

    STATUS_CHOICES = [
        ("active", "Active"),
        ("expired", "Expired"),
        ("grace_period", "Grace Period"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(License, on_delete=models.PROTECT, related_name="subscriptions")
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    annual_fee = models.DecimalField(max_digits=10, decimal_places=2)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    grace_period_end = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        db_table = "subscriptions"
        ordering = ["-end_date"]
        indexes = [
            models.Index(fields=["license", "end_date"]),
            models.Index(fields=["status", "end_date"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(grace_period_end__isnull=True) | Q(grace_period_end__gt=F("end_date")),
                name="subscription_grace_after_end",
            ),
        ]

    def __str__(self):
        return f"{self.license.key} until {self.end_date:%Y-%m-%d}"


class AuditLog(models.Model):
    """
    Immutable audit trail of all license-related changes.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(
        License, on_delete=models.PROTECT, null=True, blank=True, related_name="audit_logs"
    )
    entity_type = models.CharField(max_length=50)
    entity_id = models.CharField(max_length=64)
    action = models.CharField(max_length=50)
    changes = models.JSONField(default=dict, help_text="Details of the change")
    actor = models.CharField(max_length=255, help_text="Who performed the action")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "audit_logs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["license", "created_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["action"]),
        ]

    def __str__(self):
        return f"{self.action} - {self.entity_type} {self.entity_id}"
