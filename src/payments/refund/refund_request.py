"""Refund request — a customer's ask for their money back, and the admin decision.

One request per (order, user). A rejected request may be resubmitted
while the refund window is still open; an approved one is final.

State Machine:
    pending → approved | rejected
    rejected → pending (resubmission)
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import Field

from shared.document import Document, utcnow
from shared.exceptions import InvalidStateError, ValidationError
from shared.repository import Repository

MAX_REASON_LENGTH = 500


class RefundRequestStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class RefundRequest(Document):
    order_id: str
    user_id: str
    reason: str | None = None
    amount: float = 0.0
    status: RefundRequestStatus = RefundRequestStatus.PENDING
    admin_note: str | None = None
    processed_by: str | None = None
    processed_at: datetime | None = None
    is_instant: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_pending(self) -> bool:
        return self.status == RefundRequestStatus.PENDING.value

    def resubmit(self, reason: str | None):
        if self.status != RefundRequestStatus.REJECTED.value:
            raise InvalidStateError({"status": [f"Cannot resubmit a refund request that is {self.status}"]})
        self.status = RefundRequestStatus.PENDING.value
        if reason is not None:
            self.reason = reason
        self.admin_note = None
        self.processed_by = None
        self.processed_at = None
        self.updated_at = datetime.now(UTC)

    def decide(self, status: RefundRequestStatus, admin_id: str | None, note: str | None = None):
        if not self.is_pending:
            raise InvalidStateError({"status": ["Refund request already processed"]})
        now = datetime.now(UTC)
        self.status = status.value
        self.admin_note = note
        self.processed_by = admin_id
        self.processed_at = now
        self.updated_at = now


class RefundRequestRepository(Repository[RefundRequest]):
    model = RefundRequest
    collection_name = "refund_requests"

    def for_order(self, order_id: str, user_id: str) -> RefundRequest | None:
        return self.find_one({"order_id": order_id, "user_id": user_id})

    def listing(self, status: str | None = None, limit: int = 50, skip: int = 0) -> list[RefundRequest]:
        query = {}
        if status:
            if status not in {s.value for s in RefundRequestStatus}:
                raise ValidationError({"status": [f"Unknown refund status: {status}"]})
            query["status"] = status
        return self.find(query, sort=[("created_at", -1)], limit=limit, skip=skip)
