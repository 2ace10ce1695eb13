"""
Django admin configuration for activations app.
"""

from django.contrib import admin
from django.utils.html import format_html

from activations.infrastructure.models import Activation


@admin.register(Activation)
class ActivationAdmin(admin.ModelAdmin):
    """Admin interface for Activation model."""

    list_display = [
        "license",
        "hardware_id_display",
        "machine_name",
        "is_active_display",
        "activated_at",
        "last_validation",
    ]
    list_filter = ["is_active", "activated_at", "last_validation"]
    search_fields = [
        "hardware_id",
        "machine_name",
        "license__key",
        "license__customer_name",
    ]
    readonly_fields = ["id", "activated_at", "last_validation"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "license", "is_active"),
            },
        ),
        (
            "Machine",
            {
                "fields": ("hardware_id", "machine_name"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("activated_at", "last_validation"),
                "classes": ("collapse",),
            },
        ),
    )

    def hardware_id_display(self, obj):
        """Display hardware identifier with truncation."""
        if len(obj.hardware_id) > 40:
            return format_html(
                '<span title="{}">{}</span>',
                obj.hardware_id,
                obj.hardware_id[:37] + "...",
            )
        return obj.hardware_id

    hardware_id_display.short_description = "Hardware"

    def is_active_display(self, obj):
        """Display active status with color."""
        if obj.is_active:
            return format_html('<span style="color: green; font-weight: bold;">Active</span>')
        return format_html('<span style="color: red; font-weight: bold;">Inactive</span>')

    is_active_display.short_description = "Status"

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("license")
