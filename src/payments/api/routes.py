"""FastAPI routes for the Payments domain — refund requests and admin refunds."""

from fastapi import APIRouter, BackgroundTasks, Depends

from identity.auth import CurrentUser, get_current_user, require_admin
from notifications.notification.dispatch import run_notification_task
from payments.api.schemas import ConfigureGatewayRequest, RefundDecisionBody, RefundRequestBody
from payments.gateway import get_gateway
from payments.gateway.fake_adapter import FakeGateway
from payments.refund.approval import ApproveRefund, MarkRefunded, RefundApprovalHandler, RejectRefund
from payments.refund.instant import InstantRefund, InstantRefundHandler
from payments.refund.refund_request import RefundRequestRepository
from payments.refund.request import RefundRequestHandler, RequestRefund
from shared.config import get_settings
from shared.exceptions import AuthorizationError, InvalidStateError


def _schedule(background_tasks: BackgroundTasks, task) -> None:
    if task is not None:
        background_tasks.add_task(run_notification_task, task.id)


# ---------------------------------------------------------------------------
# Customer Refund Router
# ---------------------------------------------------------------------------
refund_router = APIRouter(prefix="/orders", tags=["refunds"])


@refund_router.post("/{order_id}/refund-request")
async def request_refund(
    order_id: str, body: RefundRequestBody | None = None, user: CurrentUser = Depends(get_current_user)
) -> dict:
    reason = body.reason if body else None
    refund = RefundRequestHandler().request_refund(RequestRefund(order_id=order_id, user_id=user.user_id, reason=reason))
    return {"success": True, "data": refund.to_dict()}


@refund_router.get("/{order_id}/refund-request")
async def refund_request_status(order_id: str, user: CurrentUser = Depends(get_current_user)) -> dict:
    refund = RefundRequestHandler().refund_status(order_id, user.user_id)
    if refund is None:
        return {"success": True, "exists": False}
    return {"success": True, "exists": True, "status": refund.status, "data": refund.to_dict()}


# ---------------------------------------------------------------------------
# Admin Refund Router
# ---------------------------------------------------------------------------
admin_refund_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_refund_router.get("/refunds")
async def list_refund_requests(status: str | None = None, limit: int = 50, skip: int = 0) -> dict:
    refunds = RefundRequestRepository().listing(status=status, limit=min(limit, 200), skip=skip)
    return {"refunds": [r.to_dict() for r in refunds]}


@admin_refund_router.post("/refunds/{refund_id}/approve")
async def approve_refund(
    refund_id: str,
    background_tasks: BackgroundTasks,
    body: RefundDecisionBody | None = None,
    admin: CurrentUser = Depends(require_admin),
) -> dict:
    command = ApproveRefund(refund_id=refund_id, admin_id=admin.user_id, note=body.note if body else None)
    decision = RefundApprovalHandler().approve_refund(command)
    _schedule(background_tasks, decision.notification)
    return {"success": True, "message": "Refund approved", "refund": decision.refund.to_dict(), "order_id": decision.order.id}


@admin_refund_router.post("/refunds/{refund_id}/reject")
async def reject_refund(
    refund_id: str,
    background_tasks: BackgroundTasks,
    body: RefundDecisionBody | None = None,
    admin: CurrentUser = Depends(require_admin),
) -> dict:
    command = RejectRefund(refund_id=refund_id, admin_id=admin.user_id, note=body.note if body else None)
    decision = RefundApprovalHandler().reject_refund(command)
    _schedule(background_tasks, decision.notification)
    return {"success": True, "message": "Refund rejected", "refund": decision.refund.to_dict()}


@admin_refund_router.post("/refunds/{refund_id}/mark-refunded")
async def mark_refunded(
    refund_id: str,
    background_tasks: BackgroundTasks,
    body: RefundDecisionBody | None = None,
    admin: CurrentUser = Depends(require_admin),
) -> dict:
    command = MarkRefunded(refund_id=refund_id, admin_id=admin.user_id, note=body.note if body else None)
    decision = RefundApprovalHandler().mark_refunded(command)
    _schedule(background_tasks, decision.notification)
    return {"success": True, "message": "Marked as refunded", "refund": decision.refund.to_dict(), "order_id": decision.order.id}


@admin_refund_router.post("/orders/{order_id}/instant-refund")
async def instant_refund(order_id: str, background_tasks: BackgroundTasks, admin: CurrentUser = Depends(require_admin)) -> dict:
    result = InstantRefundHandler().instant_refund(InstantRefund(order_id=order_id, admin_id=admin.user_id))
    _schedule(background_tasks, result.notification)
    return {"success": True, "message": "Instant refund processed", "order": result.order.to_dict()}


# ---------------------------------------------------------------------------
# Fake Gateway Router (development only)
# ---------------------------------------------------------------------------
gateway_router = APIRouter(prefix="/payments/gateway", tags=["dev"], dependencies=[Depends(require_admin)])


@gateway_router.post("/configure")
async def configure_gateway(body: ConfigureGatewayRequest) -> dict:
    """Configure the fake gateway for local end-to-end testing."""
    if not get_settings().allows_dev_tools:
        raise AuthorizationError("Access denied")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise InvalidStateError({"gateway": ["The active payment gateway cannot be configured"]})

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    if body.reference and body.amount is not None:
        gateway.register_transaction(body.reference, body.amount, success=body.success)
    return {"status": "ok"}
