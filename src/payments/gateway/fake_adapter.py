"""Configurable fake payment gateway for development and testing.

Transactions are registered up front with the amount the customer
"paid"; verification then reports them back like the real gateway would.
Unknown references verify as failed. Refunds succeed unless the gateway
is configured to fail. Webhooks are accepted with the fixed test signature.
"""

from dataclasses import replace
from datetime import UTC, datetime
from uuid import uuid4

from payments.gateway.port import PaymentGateway, RefundResult, VerificationResult


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    WEBHOOK_SIGNATURE = "test-signature"

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Declined"
        self.transactions: dict[str, VerificationResult] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Declined") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def register_transaction(
        self,
        reference: str,
        amount: int,
        success: bool = True,
        channel: str = "card",
    ) -> VerificationResult:
        result = VerificationResult(
            success=success,
            amount=amount,
            status="success" if success else "failed",
            paid_at=datetime.now(UTC) if success else None,
            authorization_code=f"AUTH_{uuid4().hex[:10]}" if success else None,
            gateway_response="Approved" if success else self.failure_reason,
            channel=channel,
        )
        self.transactions[reference] = result
        return result

    def verify_payment(self, reference: str) -> VerificationResult:
        self.calls.append({"method": "verify_payment", "reference": reference})

        result = self.transactions.get(reference)
        if result is None:
            return VerificationResult(success=False, status="not_found", gateway_response="Transaction not found")
        if not self.should_succeed:
            return replace(result, success=False, status="failed", gateway_response=self.failure_reason)
        return result

    def refund_payment(self, reference: str, amount: int) -> RefundResult:
        self.calls.append({"method": "refund_payment", "reference": reference, "amount": amount})

        if self.should_succeed:
            return RefundResult(status="processed", message=f"fake_ref_{uuid4().hex[:12]}")
        return RefundResult(status="failed", message=self.failure_reason)

    def verify_webhook_signature(self, payload: str, signature: str) -> bool:  # noqa: ARG002
        return signature == self.WEBHOOK_SIGNATURE
