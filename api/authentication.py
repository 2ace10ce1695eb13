"""
Admin authentication for DRF views.
"""

from dataclasses import dataclass

from rest_framework.authentication import BaseAuthentication

from core.infrastructure.tokens import AdminTokenService
from core.middleware.auth import bearer_token


@dataclass(frozen=True)
class AdminPrincipal:
    """Authenticated administrator."""

    username: str

    @property
    def is_authenticated(self) -> bool:
        return True


class AdminTokenAuthentication(BaseAuthentication):
    """
    Bearer JWT authentication for the admin API.

    Reuses the identity resolved by AdminAuthenticationMiddleware when it
    is present, so the token is verified once per request.
    """

    keyword = "Bearer"

    def authenticate(self, request):
        token = bearer_token(request._request)
        if not token:
            return None

        identity = getattr(request._request, "admin_identity", None)
        if identity is None:
            identity = AdminTokenService().identity(token)
        if identity is None:
            return None
        return AdminPrincipal(username=identity), token

    def authenticate_header(self, request):
        return self.keyword
