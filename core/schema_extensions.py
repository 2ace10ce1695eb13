"""
Custom schema extensions for drf-spectacular to add admin bearer authentication.
"""

from drf_spectacular.extensions import OpenApiAuthenticationExtension
from drf_spectacular.plumbing import build_bearer_security_scheme_object


class AdminTokenAuthenticationExtension(OpenApiAuthenticationExtension):
    """Extension to add admin JWT authentication to OpenAPI schema."""

    target_class = "api.authentication.AdminTokenAuthentication"
    name = "AdminBearerAuth"

    def get_security_definition(self, auto_schema):
        """Return security scheme definition."""
        return build_bearer_security_scheme_object(
            header_name="Authorization",
            token_prefix="Bearer",
            bearer_format="JWT",
        )
