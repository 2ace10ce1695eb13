"""
Django admin configuration for payments app.
"""

from django.contrib import admin

from payments.infrastructure.models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Admin interface for Payment model. Payments are immutable."""

    list_display = [
        "license",
        "amount",
        "payment_type",
        "additional_users",
        "payment_date",
        "created_at",
    ]
    list_filter = ["payment_type", "is_annual_subscription", "payment_date"]
    search_fields = ["license__key", "license__customer_name"]
    readonly_fields = [
        "id",
        "license",
        "amount",
        "payment_type",
        "is_annual_subscription",
        "additional_users",
        "payment_date",
        "created_at",
    ]

    def has_change_permission(self, request, obj=None):
        """Payments are immutable once recorded."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Payments should not be deleted."""
        return False

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("license")
