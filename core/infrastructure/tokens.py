"""
Signed token helpers (HS256 JWT via python-jose).

Used for activation credentials handed to POS installations and for
admin bearer tokens.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

from django.conf import settings
from jose import JWTError, jwt

from core.domain.clock import Clock, system_clock

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class JwtSigner:
    """Issues and verifies HS256 tokens with a shared secret."""

    def __init__(self, secret: str = None, clock: Clock = None):
        self.secret = secret or settings.JWT_SECRET
        self.clock = clock or system_clock

    def sign(self, claims: Dict[str, Any], expires_in: timedelta) -> str:
        """
        Sign a set of claims.

        Args:
            claims: JSON-serializable claims
            expires_in: Lifetime of the token

        Returns:
            Encoded JWT string
        """
        now = self.clock.now()
        payload = dict(claims)
        payload["iat"] = int(now.timestamp())
        payload["exp"] = int((now + expires_in).timestamp())
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Decode a token, checking signature and expiry.

        Returns:
            The claims, or None if the token is invalid or expired
        """
        try:
            return jwt.decode(token, self.secret, algorithms=[ALGORITHM])
        except JWTError as e:
            logger.debug("Rejected token: %s", e)
            return None


ADMIN_TOKEN_TYPE = "admin"


class AdminTokenService:
    """Bearer tokens for the admin API; the subject is the staff username."""

    def __init__(self, signer: JwtSigner = None):
        self.signer = signer or JwtSigner()

    def issue(self, username: str) -> str:
        return self.signer.sign(
            {"sub": username, "typ": ADMIN_TOKEN_TYPE},
            timedelta(hours=settings.ADMIN_TOKEN_TTL_HOURS),
        )

    def identity(self, token: str) -> Optional[str]:
        """Return the admin username carried by a valid token, else None."""
        claims = self.signer.verify(token)
        if not claims or claims.get("typ") != ADMIN_TOKEN_TYPE:
            return None
        return claims.get("sub")
