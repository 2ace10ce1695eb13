"""
JWT implementation of the ActivationTokenIssuer port.
"""
from datetime import timedelta

from django.conf import settings

from activations.domain.activation import Activation
from activations.ports.token_issuer import ActivationTokenIssuer
from core.infrastructure.tokens import JwtSigner
from licenses.domain.license import License


class JwtActivationTokenIssuer(ActivationTokenIssuer):
    """Signs activation credentials as HS256 JWTs."""

    def __init__(self, signer: JwtSigner = None):
        self.signer = signer or JwtSigner()

    def issue(self, license: License, activation: Activation) -> str:
        claims = {
            "licenseId": str(license.id),
            "licenseKey": license.key,
            "hardwareId": str(activation.hardware_id),
            "locationId": str(license.id),
        }
        return self.signer.sign(claims, timedelta(days=settings.ACTIVATION_TOKEN_TTL_DAYS))
