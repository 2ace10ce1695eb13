"""
Admission control policy.

Defines the rate-limit tiers, how a counter key is derived for a request
(client IP or authenticated admin identity) and which tiers apply to a
request path. Counting itself lives in core.infrastructure.rate_limiter.
"""
import ipaddress
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

# IPv6 clients commonly rotate addresses inside their delegated prefix,
# so they are keyed by /56 network.
IPV6_SUBNET = 56

REDACTED = "***"
SECRET_FIELDS = frozenset(
    {"licensekey", "license_key", "password", "token", "secret", "authorization"}
)


def normalize_ip(raw_ip: Optional[str]) -> str:
    """
    Canonicalize a client address for use as a counter key.

    Equivalent IPv6 spellings collapse to one compressed form, IPv4-mapped
    IPv6 addresses collapse to their IPv4 address and IPv6 addresses are
    reduced to their /56 network.
    """
    if not raw_ip:
        return "unknown"
    candidate = raw_ip.strip().split("%", 1)[0]
    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return candidate.lower() or "unknown"

    if address.version == 6:
        if address.ipv4_mapped:
            return str(address.ipv4_mapped)
        network = ipaddress.ip_network(f"{address}/{IPV6_SUBNET}", strict=False)
        return str(network)
    return str(address)


def redact_secrets(data: Any) -> Any:
    """Return a copy of data with secret-bearing fields replaced by '***'."""
    if isinstance(data, dict):
        return {
            key: (REDACTED if str(key).lower() in SECRET_FIELDS and value else redact_secrets(value))
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact_secrets(item) for item in data]
    return data


@dataclass(frozen=True)
class RequestIdentity:
    """What a key strategy may look at for one request."""

    client_ip: Optional[str]
    admin_identity: Optional[str] = None


class KeyStrategy(ABC):
    """Derives the counter key for a request."""

    @abstractmethod
    def derive(self, identity: RequestIdentity) -> str:
        """Return the counter key for the given request identity."""
        pass


class IpKeyStrategy(KeyStrategy):
    """Counts per normalized client IP."""

    def derive(self, identity: RequestIdentity) -> str:
        return f"ip:{normalize_ip(identity.client_ip)}"


class AdminOrIpKeyStrategy(KeyStrategy):
    """Counts per admin when authenticated, otherwise per client IP."""

    def __init__(self, fallback: KeyStrategy = None):
        self.fallback = fallback or IpKeyStrategy()

    def derive(self, identity: RequestIdentity) -> str:
        if identity.admin_identity:
            return f"admin:{identity.admin_identity}"
        return self.fallback.derive(identity)


@dataclass(frozen=True)
class RateLimitTier:
    """One fixed-window limit."""

    name: str
    window_seconds: int
    limit: int
    message: str
    key_strategy: KeyStrategy = field(default_factory=IpKeyStrategy)
    skip_paths: Tuple[str, ...] = ()
    skip_prefixes: Tuple[str, ...] = ()
    skip_successful: bool = False

    def skips(self, path: str) -> bool:
        """True when the path is exempt from this tier."""
        if path in self.skip_paths:
            return True
        return any(path.startswith(prefix) for prefix in self.skip_prefixes)


ADMIN_LOGIN_PATH = "/api/v1/admin/login"

GENERAL = RateLimitTier(
    name="general",
    window_seconds=60 * 60,
    limit=1000,
    message="Too many requests from this IP, please try again later.",
    skip_paths=("/",),
    skip_prefixes=("/health",),
)

ACTIVATION = RateLimitTier(
    name="activation",
    window_seconds=60 * 60,
    limit=20,
    message="Too many activation attempts from this IP. Please try again in an hour.",
)

VALIDATION = RateLimitTier(
    name="validation",
    window_seconds=60 * 60,
    limit=1000,
    message="Too many validation requests from this IP, please try again later.",
)

ADMIN = RateLimitTier(
    name="admin",
    window_seconds=60 * 60,
    limit=2000,
    message="Too many requests. Please try again later.",
    key_strategy=AdminOrIpKeyStrategy(),
    skip_prefixes=(ADMIN_LOGIN_PATH,),
)

ADMIN_LOGIN = RateLimitTier(
    name="admin-login",
    window_seconds=15 * 60,
    limit=20,
    message="Too many login attempts. Please try again in 15 minutes.",
    skip_successful=True,
)

LICENSE_GENERATION = RateLimitTier(
    name="license-generation",
    window_seconds=60 * 60,
    limit=200,
    message="Too many license generation requests, please try again later.",
    key_strategy=AdminOrIpKeyStrategy(),
)


class RateLimitPolicy:
    """Maps request paths to the tiers that guard them."""

    def __init__(self, general: RateLimitTier = GENERAL, routes=None):
        self.general = general
        # Most specific prefix first.
        self.routes: List[Tuple[str, RateLimitTier]] = routes or [
            ("/api/v1/license/activate", ACTIVATION),
            ("/api/v1/license/generate", LICENSE_GENERATION),
            ("/api/v1/license/", VALIDATION),
            (ADMIN_LOGIN_PATH, ADMIN_LOGIN),
            ("/api/v1/admin/", ADMIN),
        ]

    def tiers_for(self, path: str) -> List[RateLimitTier]:
        """Return the tiers a request must pass, in evaluation order."""
        tiers = []
        if not self.general.skips(path):
            tiers.append(self.general)
        for prefix, tier in self.routes:
            if path.startswith(prefix):
                if not tier.skips(path):
                    tiers.append(tier)
                break
        return tiers


default_policy = RateLimitPolicy()
