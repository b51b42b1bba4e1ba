"""Pydantic request/response schemas for the storefront API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    unit_price: float = Field(ge=0)


class ShippingAddressSchema(BaseModel):
    full_name: str
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str
    phone: str | None = None


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    customer_id: str
    email: str | None = None
    items: list[OrderItemSchema] = Field(min_length=1)
    shipping_address: ShippingAddressSchema
    payment_method: Literal["gateway", "pay_on_delivery"]
    total: float | None = Field(default=None, ge=0)
    currency: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "email": "asha@example.com",
                    "items": [{"product_id": "prod-001", "quantity": 2, "unit_price": 249.5}],
                    "shipping_address": {
                        "full_name": "Asha Rao",
                        "street": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "KA",
                        "postal_code": "560001",
                        "country": "IN",
                    },
                    "payment_method": "gateway",
                }
            ]
        }
    }


class ConfirmPaymentRequest(BaseModel):
    gateway_payment_ref: str
    gateway_order_ref: str | None = None


class ChangeStatusRequest(BaseModel):
    status: str
    reason: str | None = Field(default=None, max_length=500)
    carrier: str | None = None
    tracking_id: str | None = None
    tracking_url: str | None = None


class UpdateTrackingRequest(BaseModel):
    tracking_id: str
    carrier: str | None = None
    tracking_url: str | None = None


class SubmitRequestBody(BaseModel):
    type: Literal["cancel", "exchange"]
    reason: str | None = None


_DECISION_ALIASES = {"approved": "approve", "rejected": "reject"}


class RespondRequestBody(BaseModel):
    decision: Literal["approve", "reject", "approved", "rejected"]
    admin_response: str | None = None

    @field_validator("decision")
    @classmethod
    def normalize_decision(cls, value: str) -> str:
        return _DECISION_ALIASES.get(value, value)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class RequestIdResponse(BaseModel):
    request_id: str


class StatusResponse(BaseModel):
    status: str


class GatewaySessionResponse(BaseModel):
    gateway_order_ref: str
    client_key: str
    amount: int
    currency: str


class WebhookResponse(BaseModel):
    status: str
    order_id: str | None = None
    event: str | None = None


class PaymentResponse(BaseModel):
    method: str
    payment_status: str
    gateway_order_ref: str | None = None
    gateway_payment_ref: str | None = None
    paid_at: datetime | None = None
    amount_paid: float | None = None
    confirmed_via: str | None = None


class TrackingResponse(BaseModel):
    carrier: str | None = None
    tracking_id: str
    tracking_url: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    customer_id: str
    status: str
    total: float
    currency: str
    items: list[OrderItemSchema]
    shipping_address: ShippingAddressSchema | None = None
    payment: PaymentResponse | None = None
    tracking: TrackingResponse | None = None
    open_request_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderStatsResponse(BaseModel):
    counts: dict[str, int]
    total: int


class CancellationRequestResponse(BaseModel):
    request_id: str
    order_id: str
    customer_id: str
    type: str
    reason: str | None = None
    status: str
    admin_response: str | None = None
    created_at: datetime | None = None
    decided_at: datetime | None = None


class NotificationResponse(BaseModel):
    notification_id: str
    type: str
    title: str
    message: str
    payload: dict = Field(default_factory=dict)
    is_read: bool
    read_at: datetime | None = None
    created_at: datetime | None = None


class UnreadCountResponse(BaseModel):
    unread: int


class MarkedReadResponse(BaseModel):
    marked: int
