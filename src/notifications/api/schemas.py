"""Pydantic request schemas for the Notifications API."""

from datetime import datetime

from pydantic import BaseModel, Field

from notifications.sms.queue import DEFAULT_PRIORITY, SMSType


class SMSMessage(BaseModel):
    to: str
    content: str = Field(max_length=1600)
    sms_type: SMSType = SMSType.MANUAL
    priority: int = Field(default=DEFAULT_PRIORITY, ge=1, le=3)
    scheduled_at: datetime | None = None


class SendSMSRequest(BaseModel):
    """Either a single message or a batch under ``messages``."""

    to: str | None = None
    content: str | None = None
    priority: int = Field(default=DEFAULT_PRIORITY, ge=1, le=3)
    scheduled_at: datetime | None = None
    messages: list[SMSMessage] = Field(default_factory=list)

    model_config = {
        "json_schema_extra": {
            "examples": [{"to": "0241234567", "content": "Your order is on its way!", "priority": 2}]
        }
    }
