"""
Django models for the payments app.

The models live in payments.infrastructure.models; importing them here
registers them with the app so migrate and syncdb create their tables.
"""
from payments.infrastructure.models import Payment  # noqa: F401
