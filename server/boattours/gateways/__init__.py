"""Payment gateway adapters."""

from .base import PaymentGateway, PaymentResult, RefundResult
from .simulated import SimulatedGateway

__all__ = [
    "PaymentGateway",
    "PaymentResult",
    "RefundResult",
    "SimulatedGateway",
]
