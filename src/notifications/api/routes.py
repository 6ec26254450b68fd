"""FastAPI routes for the Notifications domain — the SMS queue trigger and admin SMS tools."""

import hmac

from fastapi import APIRouter, Depends, Header

from identity.auth import require_admin
from notifications.api.schemas import SendSMSRequest
from notifications.sms.log import SMSLogRepository
from notifications.sms.queue import SMSQueue, SMSType
from notifications.utils.logging import logger
from shared.config import get_settings
from shared.exceptions import AuthenticationRequired, ValidationError

# ---------------------------------------------------------------------------
# Cron Router
# ---------------------------------------------------------------------------
cron_router = APIRouter(prefix="/cron", tags=["cron"])


def require_cron_token(token: str | None = None, authorization: str | None = Header(default=None)) -> None:
    """Accept the shared secret as ``?token=`` or ``Authorization: Bearer``."""
    secret = get_settings().cron_secret
    supplied = token
    if not supplied and authorization and authorization.lower().startswith("bearer "):
        supplied = authorization[len("bearer ") :].strip()

    if not secret or not supplied or not hmac.compare_digest(supplied, secret):
        logger.warning("cron_unauthorized")
        raise AuthenticationRequired("Unauthorized")


@cron_router.api_route("/sms-tick", methods=["GET", "POST"], dependencies=[Depends(require_cron_token)])
async def sms_tick() -> dict:
    return {"success": True, **SMSQueue().tick()}


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_sms_router = APIRouter(prefix="/admin/sms", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_sms_router.get("/queue")
async def queue_status() -> dict:
    return {"status": SMSQueue().status()}


@admin_sms_router.delete("/queue")
async def clear_queue() -> dict:
    return {"success": True, "cancelled": SMSQueue().clear()}


@admin_sms_router.get("")
async def sms_logs(limit: int = 50, status: str | None = None) -> dict:
    logs = SMSLogRepository().recent(limit=max(1, min(limit, 200)), status=status)
    return {"logs": [entry.to_dict() for entry in logs]}


@admin_sms_router.post("")
async def send_sms(body: SendSMSRequest) -> dict:
    queue = SMSQueue()
    if body.messages:
        entries = queue.enqueue_bulk(
            [
                {
                    "to": m.to,
                    "content": m.content,
                    "sms_type": SMSType(m.sms_type).value,
                    "priority": m.priority,
                    "scheduled_at": m.scheduled_at,
                }
                for m in body.messages
            ]
        )
        return {"success": True, "queued": len(entries), "ids": [e.id for e in entries]}

    if not body.to or not body.content:
        raise ValidationError({"sms": ["Provide a recipient and content, or a list of messages"]})
    entry = queue.enqueue(body.to, body.content, priority=body.priority, scheduled_at=body.scheduled_at)
    return {"success": True, "queued": 1, "ids": [entry.id]}
