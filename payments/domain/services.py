"""
Payment domain services.
"""
from decimal import Decimal
from typing import Optional

from core.domain.exceptions import PaymentRejectedError
from core.domain.value_objects import LicenseStatus, PaymentType
from licenses.domain.license import License


class PaymentPolicy:
    """Billing rules checked before a payment is recorded."""

    @staticmethod
    def check(
        license: License,
        amount: Decimal,
        payment_type: PaymentType,
        has_initial_payment: bool,
        additional_users: Optional[int] = None,
    ) -> None:
        """
        Reject payments that break a billing rule.

        Args:
            license: License being paid for
            amount: Amount paid
            payment_type: Payment type
            has_initial_payment: Whether the license already has an initial payment
            additional_users: Seats bought by a user payment

        Raises:
            PaymentRejectedError: If the payment is not allowed
        """
        if amount <= 0:
            raise PaymentRejectedError("Payment amount must be greater than 0")

        if payment_type == PaymentType.INITIAL and has_initial_payment:
            raise PaymentRejectedError(
                "Initial payment already exists for this license. "
                "Please add an annual subscription payment or user payment instead."
            )

        if payment_type == PaymentType.USER:
            if not has_initial_payment:
                raise PaymentRejectedError(
                    "Initial payment not paid yet. "
                    "Please make an initial payment first before adding user payments."
                )
            if license.status == LicenseStatus.EXPIRED:
                raise PaymentRejectedError(
                    "Cannot add user payments for expired licenses. Please renew the license first."
                )
        elif additional_users is not None:
            raise PaymentRejectedError("additionalUsers is only allowed for user payments")

        if payment_type == PaymentType.ANNUAL and license.is_free_trial and not has_initial_payment:
            raise PaymentRejectedError(
                "Initial payment not paid yet. "
                "Please make an initial payment first before adding annual subscription payments."
            )
