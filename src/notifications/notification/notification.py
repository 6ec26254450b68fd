"""Notification tasks — customer notifications with an explicit lifecycle.

Business actions (order status changes, refunds, payments) never notify
customers inline. They submit a task and move on; the task runs after the
HTTP response has been sent, and whatever happens to it is recorded here
rather than surfacing to the caller.

State Machine (4 states):
    SUBMITTED → RUNNING → COMPLETED
    SUBMITTED → RUNNING → FAILED
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import Field
from pymongo import ReturnDocument

from shared.document import Document, as_naive, utcnow
from shared.exceptions import InvalidStateError
from shared.repository import Repository


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class NotificationType(Enum):
    WELCOME = "welcome"
    ORDER_CONFIRMATION = "order_confirmation"
    ORDER_PROCESSING = "order_processing"
    ORDER_SHIPPED = "order_shipped"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"
    PAYMENT_FAILED = "payment_failed"
    REFUND_APPROVED = "refund_approved"
    REFUND_REJECTED = "refund_rejected"


class NotificationChannel(Enum):
    EMAIL = "email"
    SMS = "sms"


class TaskStatus(Enum):
    SUBMITTED = "submitted"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


_VALID_TRANSITIONS = {
    TaskStatus.SUBMITTED: {TaskStatus.RUNNING},
    TaskStatus.RUNNING: {TaskStatus.COMPLETED, TaskStatus.FAILED},
    TaskStatus.COMPLETED: set(),
    TaskStatus.FAILED: set(),
}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
class NotificationTask(Document):
    kind: NotificationType
    payload: dict[str, Any] = Field(default_factory=dict)
    status: TaskStatus = TaskStatus.SUBMITTED
    results: dict[str, str] = Field(default_factory=dict)
    error: str | None = None
    submitted_at: datetime = Field(default_factory=utcnow)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    def _assert_can_transition(self, target_status):
        current = TaskStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidStateError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def complete(self, results: dict[str, str]):
        self._assert_can_transition(TaskStatus.COMPLETED)
        self.status = TaskStatus.COMPLETED.value
        self.results = results
        self.finished_at = datetime.now(UTC)

    def fail(self, error: str):
        self._assert_can_transition(TaskStatus.FAILED)
        self.status = TaskStatus.FAILED.value
        self.error = error
        self.finished_at = datetime.now(UTC)


class NotificationTaskRepository(Repository[NotificationTask]):
    model = NotificationTask
    collection_name = "notification_tasks"

    def claim(self, task_id: str) -> NotificationTask | None:
        """Atomically move a submitted task to running; None if someone else has it."""
        document = self.collection.find_one_and_update(
            {"_id": task_id, "status": TaskStatus.SUBMITTED.value},
            {"$set": as_naive({"status": TaskStatus.RUNNING.value, "started_at": utcnow()})},
            return_document=ReturnDocument.AFTER,
        )
        return self._load(document)
