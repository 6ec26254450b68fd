"""Pydantic request schemas for the Payments API."""

from pydantic import BaseModel, Field


class RefundRequestBody(BaseModel):
    reason: str | None = Field(default=None, max_length=500)

    model_config = {"json_schema_extra": {"examples": [{"reason": "Ordered the wrong size"}]}}


class RefundDecisionBody(BaseModel):
    note: str | None = Field(default=None, max_length=500)


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Declined"
    reference: str | None = None
    amount: int | None = Field(default=None, ge=0)
    success: bool = True

    model_config = {
        "json_schema_extra": {
            "examples": [{"reference": "PSK-ORD-20260101-123456-9f3a1c2b", "amount": 500000, "success": True}]
        }
    }
