"""
Django models for the licenses app.

The models live in licenses.infrastructure.models; importing them here
registers them with the app so migrate and syncdb create their tables.
"""
from licenses.infrastructure.models import AuditLog, License, Subscription  # noqa: F401
