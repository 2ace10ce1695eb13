"""
Rate limiting middleware.

Admits or rejects each request against the general tier and the tier
matching its path, with counters in the shared Django cache.
"""

import json
import logging
from typing import Callable, List

from django.conf import settings
from django.http import HttpRequest, HttpResponse, JsonResponse

from core.domain.rate_limit import RateLimitPolicy, RequestIdentity, default_policy, redact_secrets
from core.infrastructure.rate_limiter import FixedWindowRateLimiter, RateLimitDecision
from core.metrics import rate_limit_rejections_total

logger = logging.getLogger(__name__)


def client_ip(request: HttpRequest) -> str:
    """
    Client address of the request.

    X-Forwarded-For is honoured only when RATE_LIMIT_TRUST_PROXY is set,
    since clients can forge it.
    """
    if getattr(settings, "RATE_LIMIT_TRUST_PROXY", False):
        forwarded = request.META.get("HTTP_X_FORWARDED_FOR", "")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR", "")


def redacted_body(request: HttpRequest):
    """Request JSON body with secret fields masked, for logging."""
    if request.content_type != "application/json":
        return None
    try:
        return redact_secrets(json.loads(request.body or b"{}"))
    except ValueError:
        return None


class RateLimitMiddleware:
    """
    Fixed-window rate limiting per tier.

    Adds X-RateLimit-* headers for the most specific tier to every
    limited response and answers 429 with Retry-After on rejection.
    """

    def __init__(
        self,
        get_response: Callable,
        policy: RateLimitPolicy = None,
        limiter: FixedWindowRateLimiter = None,
    ):
        """Initialize middleware."""
        self.get_response = get_response
        self.policy = policy or default_policy
        self.limiter = limiter or FixedWindowRateLimiter()

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """
        Process request with rate limiting.

        Args:
            request: HTTP request

        Returns:
            HTTP response with rate limit headers
        """
        if not getattr(settings, "RATE_LIMIT_ENABLED", True):
            return self.get_response(request)

        tiers = self.policy.tiers_for(request.path)
        if not tiers:
            return self.get_response(request)

        identity = RequestIdentity(
            client_ip=client_ip(request),
            admin_identity=getattr(request, "admin_identity", None),
        )
        decisions: List[RateLimitDecision] = []
        for tier in tiers:
            decision = self.limiter.hit(tier, identity)
            decisions.append(decision)
            if not decision.allowed:
                return self._reject(request, identity, decision)

        response = self.get_response(request)

        for decision in decisions:
            if decision.tier.skip_successful and response.status_code < 400:
                self.limiter.refund(decision)
        self._add_headers(response, decisions[-1])
        return response

    def _reject(
        self, request: HttpRequest, identity: RequestIdentity, decision: RateLimitDecision
    ) -> HttpResponse:
        rate_limit_rejections_total.labels(tier=decision.tier.name).inc()
        logger.warning(
            "Rate limit exceeded",
            extra={
                "tier": decision.tier.name,
                "path": request.path,
                "method": request.method,
                "client_ip": identity.client_ip,
                "admin": identity.admin_identity,
                "count": decision.count,
                "limit": decision.limit,
                "body": redacted_body(request),
            },
        )
        response = JsonResponse(
            {"error": {"code": "RATE_LIMITED", "message": decision.tier.message}},
            status=429,
        )
        response["Retry-After"] = str(decision.retry_after)
        self._add_headers(response, decision)
        return response

    def _add_headers(self, response: HttpResponse, decision: RateLimitDecision) -> None:
        response["X-RateLimit-Limit"] = str(decision.limit)
        response["X-RateLimit-Remaining"] = str(decision.remaining)
        response["X-RateLimit-Reset"] = str(decision.reset_at)
