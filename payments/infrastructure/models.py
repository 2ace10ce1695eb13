"""
Payment Django ORM model.

Domain entities are in payments.domain.payment.
"""
import uuid

from django.db import models
from django.db.models import Q


class Payment(models.Model):
    """
    A payment made against a license. Never updated after creation.
    """

    PAYMENT_TYPE_CHOICES = [
        ("initial", "Initial"),
        ("annual", "Annual"),
        ("user", "User"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(
        "licenses.License",
        on_delete=models.PROTECT,
        related_name="payments",
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_date = models.DateTimeField()
    is_annual_subscription = models.BooleanField(default=False)
    payment_type = models.CharField(max_length=20, choices=PAYMENT_TYPE_CHOICES, default="initial")
    additional_users = models.PositiveIntegerField(null=True, blank=True)
    created_at = models.DateTimeField()

    class Meta:
        db_table = "payments"
        ordering = ["-payment_date"]
        indexes = [
            models.Index(fields=["license", "payment_type"]),
            models.Index(fields=["payment_date"]),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(amount__gt=0), name="payment_amount_positive"),
        ]

    def __str__(self):
        return f"{self.payment_type} {self.amount} ({self.license_id})"
