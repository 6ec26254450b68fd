"""FastAPI routes for the Ordering domain — carts, orders and checkout payments."""

import json
from uuid import uuid4

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Response
from fastapi.responses import JSONResponse

from identity.auth import SESSION_COOKIE, CurrentUser, get_current_user, get_optional_user, get_session_id, require_admin
from notifications.notification.dispatch import run_notification_task
from ordering.api.schemas import (
    AddToCartRequest,
    CancelOrderRequest,
    InitializePaymentRequest,
    PaymentWebhookRequest,
    PlaceOrderRequest,
    RemoveCartItemRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    VerifyPaymentRequest,
)
from ordering.cart.cart import Cart, CartRepository
from ordering.cart.management import (
    AddToCart,
    ClearCart,
    ManageCartHandler,
    MergeGuestCart,
    RemoveCartItem,
    UpdateCartItem,
)
from ordering.cart.reconciliation import CartReconciler
from ordering.checkout.confirmation import (
    CheckoutPaymentHandler,
    ConfirmPayment,
    InitializePayment,
    ProcessPaymentWebhook,
)
from ordering.order.creation import PlaceOrder, PlaceOrderHandler
from ordering.order.lifecycle import CancelOrder, OrderLifecycleHandler, UpdateOrderStatus
from ordering.order.order import OrderRepository
from payments.gateway import get_gateway
from shared.exceptions import AuthenticationRequired, ValidationError

SESSION_MAX_AGE = 60 * 60 * 24 * 30


def _schedule(background_tasks: BackgroundTasks, task) -> None:
    if task is not None:
        background_tasks.add_task(run_notification_task, task.id)


def _cart_payload(cart: Cart | None) -> dict:
    if cart is None:
        return {"items": [], "subtotal": 0.0, "item_count": 0}
    return cart.to_dict()


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


def cart_owner(
    response: Response,
    user: CurrentUser | None = Depends(get_optional_user),
    session_id: str | None = Depends(get_session_id),
) -> dict:
    """Signed-in users own their cart; guests get a ``sessionId`` cookie on first use."""
    if user is not None:
        return {"user_id": user.user_id, "session_id": None}
    if not session_id:
        session_id = str(uuid4())
        response.set_cookie(SESSION_COOKIE, session_id, max_age=SESSION_MAX_AGE, httponly=True, samesite="lax")
    return {"user_id": None, "session_id": session_id}


@cart_router.get("")
async def get_cart(owner: dict = Depends(cart_owner)) -> dict:
    cart = CartRepository().for_owner(**owner)
    if cart is None or cart.is_empty:
        return {"cart": _cart_payload(cart), "validation": {"is_valid": True, "removed_items": [], "updated_items": [], "errors": []}}

    validation = CartReconciler().reconcile(cart)
    return {"cart": _cart_payload(cart), "validation": validation.to_dict()}


@cart_router.post("/items")
async def add_cart_item(body: AddToCartRequest, owner: dict = Depends(cart_owner)) -> dict:
    command = AddToCart(**owner, product_id=body.product_id, variant_id=body.variant_id, quantity=body.quantity)
    cart = ManageCartHandler().add_to_cart(command)
    return {"cart": _cart_payload(cart), "message": "Item added to cart"}


@cart_router.put("/items")
async def update_cart_item(body: UpdateCartItemRequest, owner: dict = Depends(cart_owner)) -> dict:
    cart = ManageCartHandler().update_cart_item(UpdateCartItem(**owner, item_id=body.item_id, quantity=body.quantity))
    return {"cart": _cart_payload(cart)}


@cart_router.delete("/items")
async def remove_cart_item(body: RemoveCartItemRequest, owner: dict = Depends(cart_owner)) -> dict:
    cart = ManageCartHandler().remove_cart_item(RemoveCartItem(**owner, item_id=body.item_id))
    return {"cart": _cart_payload(cart)}


@cart_router.delete("")
async def clear_cart(owner: dict = Depends(cart_owner)) -> dict:
    cart = ManageCartHandler().clear_cart(ClearCart(**owner))
    return {"cart": _cart_payload(cart), "message": "Cart cleared"}


@cart_router.post("/merge")
async def merge_guest_cart(
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    session_id: str | None = Depends(get_session_id),
) -> dict:
    if not session_id:
        raise ValidationError({"session": ["No guest cart to merge"]})
    cart = ManageCartHandler().merge_guest_cart(MergeGuestCart(user_id=user.user_id, session_id=session_id))
    response.delete_cookie(SESSION_COOKIE)
    return {"cart": _cart_payload(cart)}


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def place_order(body: PlaceOrderRequest, user: CurrentUser = Depends(get_current_user)) -> dict:
    command = PlaceOrder(user_id=user.user_id, **body.model_dump())
    order = PlaceOrderHandler().place_order(command)
    return {"order": order.to_dict()}


@order_router.get("")
async def list_orders(limit: int = 20, skip: int = 0, user: CurrentUser = Depends(get_current_user)) -> dict:
    orders = OrderRepository().find(
        {"user_id": user.user_id}, sort=[("created_at", -1)], limit=min(limit, 100), skip=skip
    )
    return {"orders": [o.to_dict() for o in orders]}


@order_router.get("/{order_id}")
async def get_order(order_id: str, user: CurrentUser = Depends(get_current_user)) -> dict:
    return {"order": OrderRepository().for_user(user.user_id, order_id).to_dict()}


@order_router.post("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    background_tasks: BackgroundTasks,
    user: CurrentUser = Depends(get_current_user),
) -> dict:
    change = OrderLifecycleHandler().cancel_order(CancelOrder(order_id=order_id, user_id=user.user_id, reason=body.reason))
    _schedule(background_tasks, change.notification)
    return {"order": change.order.to_dict(), "message": "Order cancelled"}


# ---------------------------------------------------------------------------
# Checkout Payment Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/payments", tags=["payments"])


@checkout_router.post("/initialize")
async def initialize_payment(body: InitializePaymentRequest, user: CurrentUser = Depends(get_current_user)) -> dict:
    result = CheckoutPaymentHandler().initialize_payment(InitializePayment(order_id=body.order_id, user_id=user.user_id))
    return {
        "order_id": result.order.id,
        "order_number": result.order.order_number,
        "reference": result.reference,
        "amount": result.amount,
    }


@checkout_router.post("/verify")
async def verify_payment(
    body: VerifyPaymentRequest,
    background_tasks: BackgroundTasks,
    user: CurrentUser = Depends(get_current_user),
    session_id: str | None = Depends(get_session_id),
):
    command = ConfirmPayment(
        reference=body.reference,
        order_id=body.order_id,
        user_id=user.user_id,
        session_id=session_id,
    )
    result = CheckoutPaymentHandler().confirm_payment(command)
    _schedule(background_tasks, result.notification)

    order = result.order
    data = {
        "order_id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "payment_status": order.payment_status,
        "amount": order.total,
        "reference": body.reference,
    }
    if not result.success:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": result.failure_reason or "Payment verification failed", "data": data},
            background=background_tasks,
        )

    response = JSONResponse(
        content={
            "success": True,
            "message": "Payment already confirmed" if result.already_paid else "Payment verified successfully",
            "already_paid": result.already_paid,
            "data": data,
        },
        background=background_tasks,
    )
    if session_id:
        response.delete_cookie(SESSION_COOKIE, httponly=True, samesite="lax")
    return response


@checkout_router.post("/webhook")
async def payment_webhook(
    body: PaymentWebhookRequest,
    background_tasks: BackgroundTasks,
    x_gateway_signature: str = Header(default=""),
) -> dict:
    """Gateway callback for charge events, authenticated by its signature."""
    if not get_gateway().verify_webhook_signature(json.dumps(body.model_dump()), x_gateway_signature):
        raise AuthenticationRequired("Invalid webhook signature")

    command = ProcessPaymentWebhook(
        event=body.event,
        reference=body.data.reference,
        order_id=body.data.metadata.get("order_id"),
    )
    result = CheckoutPaymentHandler().process_webhook(command)
    if result is None:
        return {"success": True, "processed": False}

    _schedule(background_tasks, result.notification)
    return {
        "success": True,
        "processed": True,
        "already_paid": result.already_paid,
        "order_id": result.order.id,
        "payment_status": result.order.payment_status,
    }


# ---------------------------------------------------------------------------
# Admin Order Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/admin/orders", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_order_router.get("")
async def admin_list_orders(status: str | None = None, limit: int = 50, skip: int = 0) -> dict:
    query = {"status": status} if status else {}
    orders = OrderRepository().find(query, sort=[("created_at", -1)], limit=min(limit, 200), skip=skip)
    return {"orders": [o.to_dict() for o in orders]}


@admin_order_router.patch("/{order_id}")
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest, background_tasks: BackgroundTasks) -> dict:
    command = UpdateOrderStatus(order_id=order_id, **body.model_dump())
    change = OrderLifecycleHandler().update_order_status(command)
    _schedule(background_tasks, change.notification)
    return {"order": change.order.to_dict()}
