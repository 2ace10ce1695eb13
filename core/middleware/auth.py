"""
Admin authentication middleware.

Resolves the admin bearer token, when present, to the admin identity
and stores it on the request. The middleware never rejects a request:
admin views enforce authentication through the IsAdminToken permission,
and the rate limiter keys admin traffic by the identity set here.
"""

import logging
from typing import Callable, Optional

from django.http import HttpRequest, HttpResponse

from core.infrastructure.tokens import AdminTokenService

logger = logging.getLogger(__name__)


def bearer_token(request: HttpRequest) -> Optional[str]:
    """Extract the bearer token from the Authorization header."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class AdminAuthenticationMiddleware:
    """Annotates ``request.admin_identity`` from an admin bearer token."""

    def __init__(self, get_response: Callable, token_service: AdminTokenService = None):
        """Initialize middleware."""
        self.get_response = get_response
        self.token_service = token_service

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request.admin_identity = None  # type: ignore
        token = bearer_token(request)
        if token:
            service = self.token_service or AdminTokenService()
            request.admin_identity = service.identity(token)  # type: ignore
            if request.admin_identity is None:
                logger.debug("Ignoring invalid bearer token", extra={"path": request.path})
        return self.get_response(request)
