"""
Activation token issuer port (interface).
"""
from abc import ABC, abstractmethod

from activations.domain.activation import Activation
from licenses.domain.license import License


class ActivationTokenIssuer(ABC):
    """Issues the signed credential a POS keeps after activating."""

    @abstractmethod
    def issue(self, license: License, activation: Activation) -> str:
        """
        Issue a token for an activation.

        Args:
            license: Activated license
            activation: The activation record

        Returns:
            Signed token string
        """
        pass
