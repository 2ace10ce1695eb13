"""
URL configuration for the public License API.
"""

from django.urls import path

from api.v1.license import views

app_name = "license_api"

urlpatterns = [
    path("generate", views.GenerateLicenseView.as_view(), name="generate-license"),
    path("activate", views.ActivateLicenseView.as_view(), name="activate-license"),
    path("validate", views.ValidateLicenseView.as_view(), name="validate-license"),
    path(
        "check-user-creation",
        views.CheckUserCreationView.as_view(),
        name="check-user-creation",
    ),
    path(
        "increment-user-count",
        views.IncrementUserCountView.as_view(),
        name="increment-user-count",
    ),
    path(
        "decrement-user-count",
        views.DecrementUserCountView.as_view(),
        name="decrement-user-count",
    ),
    path(
        "sync-user-count",
        views.SyncUserCountView.as_view(),
        name="sync-user-count",
    ),
    path("<str:license_key>/status", views.LicenseStatusView.as_view(), name="license-status"),
]
