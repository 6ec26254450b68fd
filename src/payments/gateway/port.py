"""Payment gateway port (abstract interface).

Defines the contract the checkout, webhook and refund workflows rely on.
Amounts cross this boundary in the smallest currency unit (pesewas for GHS).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of looking up a transaction by reference."""

    success: bool
    amount: int = 0
    status: str | None = None
    paid_at: datetime | None = None
    authorization_code: str | None = None
    gateway_response: str | None = None
    channel: str | None = None


@dataclass(frozen=True)
class RefundResult:
    """Outcome of a refund request."""

    status: str
    message: str | None = None

    @property
    def success(self) -> bool:
        return self.status in ("processed", "pending", "success")


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def verify_payment(self, reference: str) -> VerificationResult:
        """Verify a transaction with the gateway."""
        ...

    @abstractmethod
    def refund_payment(self, reference: str, amount: int) -> RefundResult:
        """Refund ``amount`` minor units of the transaction ``reference``."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: str, signature: str) -> bool:
        """Verify that a webhook payload is authentically from the gateway."""
        ...
