"""Pydantic request schemas for the Ordering API.

These are external contracts, kept separate from the internal commands so
that identity (user id, session cookie) always comes from the request
context rather than the body.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ordering.order.order import OrderStatus, PaymentMethod, ShippingAddress


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    variant_id: str | None = None
    quantity: int = Field(default=1, ge=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "3f0c9a52-7b1e-4d8e-9f0a-2a6f0b1c4d11",
                    "variant_id": "b8e1d0a4-52c3-4f7e-8a19-0c6d2e4f7a90",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    item_id: str
    quantity: int = Field(ge=0)


class RemoveCartItemRequest(BaseModel):
    item_id: str


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    shipping_address: ShippingAddress
    payment_method: PaymentMethod = PaymentMethod.CARD
    tax: float = Field(default=0.0, ge=0)
    shipping: float = Field(default=0.0, ge=0)
    discount: float = Field(default=0.0, ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "recipient_name": "Ama Mensah",
                        "recipient_phone": "0241234567",
                        "street": "12 Oxford Street",
                        "city": "Accra",
                        "country": "Ghana",
                    },
                    "payment_method": "card",
                    "shipping": 20.0,
                }
            ]
        }
    }


class CancelOrderRequest(BaseModel):
    reason: str


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatus
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None
    cancel_reason: str | None = None

    model_config = {"json_schema_extra": {"examples": [{"status": "shipped", "tracking_number": "TRK-20260101-AB12CD34"}]}}


# ---------------------------------------------------------------------------
# Payment Request Schemas
# ---------------------------------------------------------------------------
class InitializePaymentRequest(BaseModel):
    order_id: str


class VerifyPaymentRequest(BaseModel):
    reference: str
    order_id: str | None = None

    model_config = {"json_schema_extra": {"examples": [{"reference": "PSK-ORD-20260101-123456-9f3a1c2b"}]}}


class PaymentWebhookData(BaseModel):
    reference: str
    status: str | None = None
    metadata: dict = Field(default_factory=dict)


class PaymentWebhookRequest(BaseModel):
    event: str
    data: PaymentWebhookData

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "event": "charge.success",
                    "data": {
                        "reference": "PSK-ORD-20260101-123456-9f3a1c2b",
                        "status": "success",
                        "metadata": {"order_id": "5d7f3b1e-0c2a-4e8f-9b61-7a3c2d1e0f42"},
                    },
                }
            ]
        }
    }
