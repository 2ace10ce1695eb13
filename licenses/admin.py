"""
Django admin configuration for licenses app.
"""
import json

from django.contrib import admin
from django.utils.html import format_html

from licenses.infrastructure.models import AuditLog, License, Subscription


class SubscriptionInline(admin.TabularInline):
    """Subscriptions shown on the license page."""

    model = Subscription
    extra = 0
    fields = ("start_date", "end_date", "annual_fee", "status", "grace_period_end")
    readonly_fields = ("start_date", "end_date", "annual_fee", "status", "grace_period_end")
    can_delete = False


@admin.register(License)
class LicenseAdmin(admin.ModelAdmin):
    """Admin interface for License model."""

    list_display = [
        "key",
        "customer_name",
        "location_name",
        "status_display",
        "is_free_trial",
        "user_count",
        "user_limit",
        "end_date",
        "created_at",
    ]
    list_filter = ["status", "is_free_trial", "end_date", "created_at"]
    search_fields = ["key", "customer_name", "customer_phone", "location_name"]
    readonly_fields = ["id", "key", "user_count", "created_at", "updated_at"]
    inlines = [SubscriptionInline]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "key", "status", "is_free_trial", "free_trial_end_date"),
            },
        ),
        (
            "Customer",
            {
                "fields": (
                    "customer_name",
                    "customer_phone",
                    "location_name",
                    "location_address",
                ),
            },
        ),
        (
            "Seats",
            {
                "fields": ("user_count", "user_limit"),
            },
        ),
        (
            "Pricing",
            {
                "fields": ("initial_price", "annual_price", "price_per_user"),
            },
        ),
        (
            "Licensed Period",
            {
                "fields": ("purchase_date", "start_date", "end_date"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            "active": "green",
            "suspended": "orange",
            "revoked": "red",
            "expired": "gray",
        }
        color = colors.get(obj.status, "black")
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.status.upper(),
        )

    status_display.short_description = "Status"


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    """Admin interface for Subscription model."""

    list_display = ["license", "start_date", "end_date", "annual_fee", "status"]
    list_filter = ["status", "end_date"]
    search_fields = ["license__key", "license__customer_name"]
    readonly_fields = ["id", "created_at", "updated_at"]

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("license")


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Admin interface for AuditLog model."""

    list_display = ["action", "entity_type", "entity_id", "actor", "created_at"]
    list_filter = ["action", "entity_type", "created_at"]
    search_fields = ["actor", "entity_id"]
    readonly_fields = ["id", "created_at", "changes_display"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "license", "entity_type", "entity_id", "action"),
            },
        ),
        (
            "Details",
            {
                "fields": ("actor", "changes_display", "created_at"),
            },
        ),
    )

    def changes_display(self, obj):
        """Display changes in a formatted way."""
        if obj.changes:
            return format_html(
                '<pre style="background: #f5f5f5; padding: 10px; '
                'border-radius: 4px; overflow-x: auto;">{}</pre>',
                json.dumps(obj.changes, indent=2),
            )
        return "-"

    changes_display.short_description = "Changes"

    def has_add_permission(self, request):
        """Audit logs are read-only."""
        return False

    def has_change_permission(self, request, obj=None):
        """Audit logs are read-only."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Audit logs should not be deleted."""
        return False
