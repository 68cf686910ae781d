"""Base payment gateway interface.

Adapters only talk to the payment provider. Booking and payment state
changes stay in the services.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class PaymentResult:
    """Result of a charge attempt."""

    success: bool
    transaction_id: str | None = None
    error_message: str | None = None
    raw_response: dict | None = None


@dataclass
class RefundResult:
    """Result of a refund attempt."""

    success: bool
    refund_id: str | None = None
    error_message: str | None = None


class PaymentGateway(ABC):
    """Abstract base class for payment gateways."""

    name: str = "abstract"

    @abstractmethod
    async def charge(
        self,
        amount: int,
        currency: str,
        reference: str,
        payment_method: str,
    ) -> PaymentResult:
        """Charge a booking.

        Args:
            amount: Amount in minor units
            currency: ISO 4217 currency code
            reference: Booking reference the charge belongs to
            payment_method: ``online`` or ``cash``

        Returns:
            PaymentResult with the provider transaction id on success
        """

    @abstractmethod
    async def refund(
        self,
        transaction_id: str,
        amount: int,
        reason: str,
    ) -> RefundResult:
        """Refund a previous charge.

        Args:
            transaction_id: Transaction id returned by ``charge``
            amount: Refund amount in minor units
            reason: Free-text refund reason

        Returns:
            RefundResult with refund details
        """
