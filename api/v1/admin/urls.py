"""
URL configuration for the Admin API.
"""

from django.urls import path

from api.v1.admin import views

app_name = "admin_api"

urlpatterns = [
    path("login", views.AdminLoginView.as_view(), name="admin-login"),
    path("licenses", views.LicenseListView.as_view(), name="admin-list-licenses"),
    path(
        "licenses/<uuid:license_id>",
        views.LicenseDetailView.as_view(),
        name="admin-get-license",
    ),
    path(
        "licenses/<uuid:license_id>/activations",
        views.LicenseActivationsView.as_view(),
        name="admin-license-activations",
    ),
    path(
        "licenses/<uuid:license_id>/revoke",
        views.RevokeLicenseView.as_view(),
        name="revoke-license",
    ),
    path(
        "licenses/<uuid:license_id>/suspend",
        views.SuspendLicenseView.as_view(),
        name="suspend-license",
    ),
    path(
        "licenses/<uuid:license_id>/reinstate",
        views.ReinstateLicenseView.as_view(),
        name="reinstate-license",
    ),
    path(
        "licenses/<uuid:license_id>/reactivate",
        views.ReactivateLicenseView.as_view(),
        name="reactivate-license",
    ),
    path(
        "licenses/<uuid:license_id>/increase-user-limit",
        views.IncreaseUserLimitView.as_view(),
        name="increase-user-limit",
    ),
    path(
        "licenses/<uuid:license_id>/renew",
        views.RenewSubscriptionView.as_view(),
        name="renew-subscription",
    ),
    path("activations", views.ActivationListView.as_view(), name="admin-list-activations"),
    path(
        "activations/<uuid:activation_id>",
        views.ActivationDetailView.as_view(),
        name="admin-get-activation",
    ),
    path(
        "activations/<uuid:activation_id>/deactivate",
        views.DeactivateActivationView.as_view(),
        name="deactivate-activation",
    ),
    path("subscriptions", views.SubscriptionListView.as_view(), name="admin-list-subscriptions"),
    path(
        "subscriptions/<uuid:subscription_id>",
        views.SubscriptionDetailView.as_view(),
        name="admin-get-subscription",
    ),
    path("payments", views.PaymentListView.as_view(), name="admin-payments"),
    path(
        "payments/statistics",
        views.PaymentStatisticsView.as_view(),
        name="payment-statistics",
    ),
    path("stats", views.DashboardStatsView.as_view(), name="dashboard-stats"),
    path("reports/revenue", views.RevenueReportView.as_view(), name="revenue-report"),
    path("reports/licenses", views.LicenseExportView.as_view(), name="export-licenses"),
    path(
        "jobs/update-expired-licenses",
        views.UpdateExpiredLicensesView.as_view(),
        name="update-expired-licenses",
    ),
]
