"""Delivery log of SMS messages that reached a terminal outcome."""

from datetime import datetime

from pydantic import Field

from shared.document import Document, utcnow
from shared.repository import Repository


class SMSLog(Document):
    to: str
    content: str
    type: str
    status: str
    message_id: str | None = None
    error: str | None = None
    order_id: str | None = None
    user_id: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class SMSLogRepository(Repository[SMSLog]):
    model = SMSLog
    collection_name = "sms_logs"

    def recent(self, limit: int = 50, status: str | None = None) -> list[SMSLog]:
        query = {"status": status} if status else {}
        return self.find(query, sort=[("created_at", -1)], limit=limit)
