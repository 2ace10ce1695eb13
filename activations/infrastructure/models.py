"""
Activation Django ORM model.

This is the infrastructure layer model for activations.
Domain entities are in activations.domain.activation.
"""
import uuid

from django.db import models


class Activation(models.Model):
    """
    Binds a license to one POS machine.
    The same hardware may be bound to several licenses.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license = models.ForeignKey(
        "licenses.License",
        on_delete=models.PROTECT,
        related_name="activations",
    )
    hardware_id = models.CharField(max_length=255)
    machine_name = models.CharField(max_length=255, null=True, blank=True)
    activated_at = models.DateTimeField()
    last_validation = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True, db_index=True)

    class Meta:
        db_table = "activations"
        unique_together = [["license", "hardware_id"]]
        ordering = ["-activated_at"]
        indexes = [
            models.Index(fields=["hardware_id"]),
            models.Index(fields=["license", "is_active"]),
        ]

    def __str__(self):
        return f"{self.license.key} @ {self.hardware_id}"
