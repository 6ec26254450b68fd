"""Outbound SMS queue with priority, deferred sends and bounded retries.

Request handlers only enqueue; delivery happens when an external cron
trigger calls ``SMSQueue.tick()``. Each tick is a single bounded pass:

1. Claim the most urgent due entry (lowest priority number, then earliest
   ``scheduled_at``) by atomically flipping it from PENDING to PROCESSING,
   so overlapping ticks never send the same message twice. An entry stuck
   in PROCESSING past the lease (its tick crashed) is claimed again.
2. Send it through the SMS channel.
3. SENT on success. On failure bump ``retry_count``; below ``max_retries``
   the entry goes back to PENDING, rescheduled 2^retry_count minutes out,
   otherwise it is FAILED for good. Terminal outcomes are written to the
   SMS log.

State Machine:
    PENDING → PROCESSING → SENT | PENDING (retry) | FAILED
    PENDING → CANCELLED
    PROCESSING → PROCESSING (stale claim recovered after the lease)
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from pydantic import Field
from pymongo import ReturnDocument

from notifications.channel import get_channel
from notifications.notification.notification import NotificationChannel
from notifications.sms.log import SMSLog, SMSLogRepository
from notifications.utils.logging import logger
from shared.config import get_settings
from shared.document import Document, as_naive, utcnow
from shared.exceptions import ValidationError
from shared.repository import Repository

HIGH_PRIORITY = 1
DEFAULT_PRIORITY = 2
LOW_PRIORITY = 3


class SMSType(Enum):
    ORDER_CONFIRMATION = "ORDER_CONFIRMATION"
    ORDER_PROCESSING = "ORDER_PROCESSING"
    ORDER_SHIPPED = "ORDER_SHIPPED"
    ORDER_DELIVERED = "ORDER_DELIVERED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    REFUND_APPROVED = "REFUND_APPROVED"
    PAYMENT_FAILED = "PAYMENT_FAILED"
    WELCOME = "WELCOME"
    PASSWORD_RESET = "PASSWORD_RESET"
    ORDER_REMINDER = "ORDER_REMINDER"
    STOCK_ALERT = "STOCK_ALERT"
    PROMOTIONAL = "PROMOTIONAL"
    MANUAL = "MANUAL"


class SMSStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SENT = "SENT"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


def retry_delay(retry_count: int) -> timedelta:
    """Exponential backoff: 2, 4, 8 ... minutes."""
    return timedelta(minutes=2**retry_count)


class SMSQueueEntry(Document):
    to: str
    content: str
    type: SMSType = SMSType.MANUAL
    priority: int = DEFAULT_PRIORITY
    scheduled_at: datetime = Field(default_factory=utcnow)
    status: SMSStatus = SMSStatus.PENDING
    retry_count: int = 0
    max_retries: int = 3
    last_error: str | None = None
    message_id: str | None = None
    order_id: str | None = None
    user_id: str | None = None
    sent_at: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class SMSQueueRepository(Repository[SMSQueueEntry]):
    model = SMSQueueEntry
    collection_name = "sms_queue"

    def claim_next_due(self, now: datetime, lease: timedelta) -> SMSQueueEntry | None:
        """Claim the most urgent due entry, or one whose previous claim went stale.

        An entry left in PROCESSING longer than ``lease`` belongs to a tick
        that died before writing back; it is claimed again.
        """
        document = self.collection.find_one_and_update(
            {
                "$or": [
                    {"status": SMSStatus.PENDING.value, "scheduled_at": {"$lte": as_naive(now)}},
                    {"status": SMSStatus.PROCESSING.value, "updated_at": {"$lte": as_naive(now - lease)}},
                ]
            },
            {"$set": {"status": SMSStatus.PROCESSING.value, "updated_at": as_naive(now)}},
            sort=[("priority", 1), ("scheduled_at", 1)],
            return_document=ReturnDocument.BEFORE,
        )
        if document is None:
            return None
        if document["status"] == SMSStatus.PROCESSING.value:
            logger.warning("sms_stale_claim_recovered", sms_id=document["_id"], claimed_at=document["updated_at"])
        document.update(status=SMSStatus.PROCESSING.value, updated_at=as_naive(now))
        return self._load(document)


class SMSQueue:
    def __init__(self) -> None:
        self.entries = SMSQueueRepository()
        self.logs = SMSLogRepository()

    # -------------------------------------------------------------------
    # Enqueueing
    # -------------------------------------------------------------------
    def _build(
        self,
        to: str,
        content: str,
        sms_type: str = SMSType.MANUAL.value,
        priority: int = DEFAULT_PRIORITY,
        scheduled_at: datetime | None = None,
        order_id: str | None = None,
        user_id: str | None = None,
    ) -> SMSQueueEntry:
        if not to or not to.strip():
            raise ValidationError({"to": ["Recipient phone number is required"]})
        if not content or not content.strip():
            raise ValidationError({"content": ["Message content is required"]})
        if priority not in (HIGH_PRIORITY, DEFAULT_PRIORITY, LOW_PRIORITY):
            raise ValidationError({"priority": ["Priority must be 1 (high), 2 (medium) or 3 (low)"]})

        return SMSQueueEntry(
            to=to.strip(),
            content=content,
            type=SMSType(sms_type).value,
            priority=priority,
            scheduled_at=scheduled_at or datetime.now(UTC),
            max_retries=get_settings().sms_max_retries,
            order_id=order_id,
            user_id=user_id,
        )

    def enqueue(self, to: str, content: str, **options) -> SMSQueueEntry:
        entry = self._build(to, content, **options)
        self.entries.add(entry)
        logger.info("sms_queued", sms_id=entry.id, type=entry.type, priority=entry.priority)
        return entry

    def enqueue_bulk(self, messages: list[dict]) -> list[SMSQueueEntry]:
        entries = [self._build(**message) for message in messages]
        if entries:
            self.entries.collection.insert_many([e.to_document() for e in entries])
        logger.info("sms_bulk_queued", count=len(entries))
        return entries

    # -------------------------------------------------------------------
    # Processing
    # -------------------------------------------------------------------
    def pending_count(self) -> int:
        return self.entries.count({"status": SMSStatus.PENDING.value})

    def tick(self, now: datetime | None = None, batch_size: int | None = None) -> dict:
        """Process due entries once and report what happened."""
        now = now or datetime.now(UTC)
        batch_size = batch_size or get_settings().sms_batch_size
        lease = timedelta(minutes=get_settings().sms_processing_lease_minutes)
        summary = {"pending_before": self.pending_count(), "processed": 0, "sent": 0, "retried": 0, "failed": 0}

        while summary["processed"] < batch_size:
            entry = self.entries.claim_next_due(now, lease)
            if entry is None:
                break
            summary["processed"] += 1
            outcome = self._deliver(entry, now)
            summary[outcome] += 1

        summary["pending_after"] = self.pending_count()
        summary["ran"] = summary["processed"] > 0
        logger.info("sms_tick_completed", **summary)
        return summary

    def _deliver(self, entry: SMSQueueEntry, now: datetime) -> str:
        try:
            result = get_channel(NotificationChannel.SMS.value).send(to=entry.to, body=entry.content)
        except Exception as e:
            result = {"message_id": None, "status": "failed", "error": str(e)}

        if result.get("status") == "sent":
            entry.status = SMSStatus.SENT.value
            entry.message_id = result.get("message_id")
            entry.sent_at = now
            entry.last_error = None
            entry.updated_at = now
            self.entries.add(entry)
            self._log(entry, SMSStatus.SENT.value)
            return "sent"

        error = result.get("error") or "SMS delivery failed"
        entry.retry_count += 1
        entry.last_error = error
        entry.updated_at = now

        if entry.retry_count < entry.max_retries:
            entry.status = SMSStatus.PENDING.value
            entry.scheduled_at = now + retry_delay(entry.retry_count)
            self.entries.add(entry)
            logger.warning(
                "sms_retry_scheduled",
                sms_id=entry.id,
                retry_count=entry.retry_count,
                max_retries=entry.max_retries,
                error=error,
            )
            return "retried"

        entry.status = SMSStatus.FAILED.value
        self.entries.add(entry)
        self._log(entry, SMSStatus.FAILED.value, error=error)
        logger.error("sms_failed", sms_id=entry.id, retry_count=entry.retry_count, error=error)
        return "failed"

    def _log(self, entry: SMSQueueEntry, status: str, error: str | None = None) -> None:
        self.logs.add(
            SMSLog(
                to=entry.to,
                content=entry.content,
                type=entry.type,
                status=status,
                message_id=entry.message_id,
                error=error,
                order_id=entry.order_id,
                user_id=entry.user_id,
            )
        )

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def status(self) -> dict:
        counts = {status.value: 0 for status in SMSStatus}
        for row in self.entries.collection.aggregate([{"$group": {"_id": "$status", "count": {"$sum": 1}}}]):
            counts[row["_id"]] = row["count"]
        return counts

    def clear(self) -> int:
        """Cancel everything still waiting to be sent."""
        result = self.entries.collection.update_many(
            {"status": SMSStatus.PENDING.value},
            {"$set": {"status": SMSStatus.CANCELLED.value, "updated_at": as_naive(utcnow())}},
        )
        logger.info("sms_queue_cleared", cancelled=result.modified_count)
        return result.modified_count
