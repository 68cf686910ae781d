"""Simulated payment gateway.

Every charge succeeds. Used until a real provider is wired in, and in tests.
"""

import secrets
import string
import time

from .base import PaymentGateway, PaymentResult, RefundResult

_BASE36 = string.digits + string.ascii_lowercase


def generate_transaction_id() -> str:
    """``TXN`` + epoch milliseconds + 9 random base-36 characters."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"TXN{int(time.time() * 1000)}{suffix}"


class SimulatedGateway(PaymentGateway):
    """Gateway that approves every charge and refund."""

    name = "simulated"

    async def charge(
        self,
        amount: int,
        currency: str,
        reference: str,
        payment_method: str,
    ) -> PaymentResult:
        transaction_id = generate_transaction_id()
        return PaymentResult(
            success=True,
            transaction_id=transaction_id,
            raw_response={
                "reference": reference,
                "amount": amount,
                "currency": currency,
                "payment_method": payment_method,
            },
        )

    async def refund(
        self,
        transaction_id: str,
        amount: int,
        reason: str,
    ) -> RefundResult:
        return RefundResult(success=True, refund_id=f"refund_{transaction_id}")
