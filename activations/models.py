"""
Django models for the activations app.

The models live in activations.infrastructure.models; importing them here
registers them with the app so migrate and syncdb create their tables.
"""
from activations.infrastructure.models import Activation  # noqa: F401
