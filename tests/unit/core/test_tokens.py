"""
Unit tests for signed tokens.
"""
from datetime import timedelta

from django.utils import timezone

from core.domain.clock import FixedClock
from core.infrastructure.tokens import AdminTokenService, JwtSigner


class TestJwtSigner:
    """Tests for JwtSigner."""

    def test_round_trip(self):
        """Test signed claims verify with the same secret."""
        signer = JwtSigner(secret="s3cret")
        claims = signer.verify(signer.sign({"sub": "alice"}, timedelta(minutes=5)))
        assert claims["sub"] == "alice"

    def test_wrong_secret(self):
        """Test tokens from another secret are rejected."""
        token = JwtSigner(secret="one").sign({"sub": "alice"}, timedelta(minutes=5))
        assert JwtSigner(secret="two").verify(token) is None

    def test_expired(self):
        """Test expired tokens are rejected."""
        clock = FixedClock(timezone.now() - timedelta(days=2))
        token = JwtSigner(secret="s3cret", clock=clock).sign({"sub": "a"}, timedelta(hours=1))
        assert JwtSigner(secret="s3cret").verify(token) is None


class TestAdminTokenService:
    """Tests for AdminTokenService."""

    def test_identity(self):
        """Test the admin username is recovered from the token."""
        service = AdminTokenService(JwtSigner(secret="s3cret"))
        assert service.identity(service.issue("alice")) == "alice"

    def test_non_admin_token_rejected(self):
        """Test tokens of another type are not admin tokens."""
        signer = JwtSigner(secret="s3cret")
        token = signer.sign({"sub": "alice", "typ": "activation"}, timedelta(hours=1))
        assert AdminTokenService(signer).identity(token) is None

    def test_garbage(self):
        """Test malformed tokens are rejected."""
        assert AdminTokenService(JwtSigner(secret="s3cret")).identity("not-a-jwt") is None
