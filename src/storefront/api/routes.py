"""FastAPI routes for the storefront — orders, payments, requests and inbox."""

import json

from fastapi import APIRouter, Depends, HTTPException, Request
from protean.utils.globals import current_domain

from storefront.api.dependencies import is_admin, require_admin, require_session_user, session_user
from storefront.api.schemas import (
    CancellationRequestResponse,
    ChangeStatusRequest,
    ConfirmPaymentRequest,
    GatewaySessionResponse,
    MarkedReadResponse,
    NotificationResponse,
    OrderIdResponse,
    OrderResponse,
    OrderStatsResponse,
    PlaceOrderRequest,
    RequestIdResponse,
    RespondRequestBody,
    StatusResponse,
    SubmitRequestBody,
    UnreadCountResponse,
    UpdateTrackingRequest,
    WebhookResponse,
)
from storefront.cancellation.request import CancellationRequest
from storefront.cancellation.response import RespondToCancellationRequest
from storefront.cancellation.submission import SubmitCancellationRequest
from storefront.exceptions import OrderAccessDenied
from storefront.notification.inbox import MarkAllNotificationsRead, MarkNotificationRead
from storefront.notification.notification import UserNotification
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.order.status_change import ChangeOrderStatus
from storefront.order.tracking import UpdateTracking
from storefront.payment.confirmation import ConfirmClientPayment
from storefront.payment.session import OpenGatewaySession
from storefront.payment.webhook import PaymentWebhookProcessor


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------
def _order_response(order) -> OrderResponse:
    address = order.shipping_address
    payment = order.payment
    tracking = order.tracking
    return OrderResponse(
        order_id=str(order.id),
        customer_id=str(order.customer_id),
        status=order.status,
        total=order.total,
        currency=order.currency,
        items=[
            {"product_id": str(item.product_id), "quantity": item.quantity, "unit_price": item.unit_price}
            for item in order.items
        ],
        shipping_address=address.to_dict() if address else None,
        payment=payment.to_dict() if payment else None,
        tracking=tracking.to_dict() if tracking else None,
        open_request_id=str(order.open_request_id) if order.open_request_id else None,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _request_response(request) -> CancellationRequestResponse:
    return CancellationRequestResponse(
        request_id=str(request.id),
        order_id=str(request.order_id),
        customer_id=str(request.customer_id),
        type=request.request_type,
        reason=request.reason,
        status=request.status,
        admin_response=request.admin_response,
        created_at=request.created_at,
        decided_at=request.decided_at,
    )


def _notification_response(notification) -> NotificationResponse:
    return NotificationResponse(
        notification_id=str(notification.id),
        type=notification.notification_type,
        title=notification.title,
        message=notification.message,
        payload=json.loads(notification.payload) if notification.payload else {},
        is_read=notification.is_read,
        read_at=notification.read_at,
        created_at=notification.created_at,
    )


def _load_visible_order(order_id: str, user_id: str | None, admin: bool):
    order = current_domain.repository_for(Order).load(order_id)
    if user_id and not admin and str(order.customer_id) != user_id:
        raise OrderAccessDenied("Order belongs to another customer", order_id=order_id)
    return order


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    """Place a new order. It starts pending with an unpaid payment record."""
    command = PlaceOrder(
        customer_id=body.customer_id,
        email=body.email,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method,
        total=body.total,
        currency=body.currency,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=order_id)


@order_router.get("/stats", response_model=OrderStatsResponse, dependencies=[Depends(require_admin)])
async def order_stats() -> OrderStatsResponse:
    counts = current_domain.repository_for(Order).count_by_status()
    return OrderStatsResponse(counts=counts, total=sum(counts.values()))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    user_id: str | None = Depends(session_user),
    admin: bool = Depends(is_admin),
) -> OrderResponse:
    return _order_response(_load_visible_order(order_id, user_id, admin))


@order_router.post("/{order_id}/gateway-session", response_model=GatewaySessionResponse)
async def open_gateway_session(
    order_id: str,
    user_id: str = Depends(require_session_user),
) -> GatewaySessionResponse:
    """Open a payment order on the gateway for the checkout widget."""
    command = OpenGatewaySession(order_id=order_id, customer_id=user_id)
    session = current_domain.process(command, asynchronous=False)
    return GatewaySessionResponse(**session)


@order_router.post("/{order_id}/confirm", response_model=StatusResponse)
async def confirm_payment(
    order_id: str,
    body: ConfirmPaymentRequest,
    user_id: str = Depends(require_session_user),
) -> StatusResponse:
    """Report a successful checkout from the browser."""
    command = ConfirmClientPayment(
        order_id=order_id,
        gateway_payment_ref=body.gateway_payment_ref,
        gateway_order_ref=body.gateway_order_ref,
        customer_id=user_id,
    )
    outcome = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=outcome)


@order_router.patch("/{order_id}/status", response_model=StatusResponse, dependencies=[Depends(require_admin)])
async def change_order_status(order_id: str, body: ChangeStatusRequest) -> StatusResponse:
    command = ChangeOrderStatus(
        order_id=order_id,
        status=body.status,
        reason=body.reason,
        carrier=body.carrier,
        tracking_id=body.tracking_id,
        tracking_url=body.tracking_url,
    )
    new_status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=new_status)


@order_router.patch("/{order_id}/tracking", response_model=StatusResponse, dependencies=[Depends(require_admin)])
async def update_tracking(order_id: str, body: UpdateTrackingRequest) -> StatusResponse:
    command = UpdateTracking(
        order_id=order_id,
        tracking_id=body.tracking_id,
        carrier=body.carrier,
        tracking_url=body.tracking_url,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="tracking_updated")


@order_router.post("/{order_id}/cancellation-requests", status_code=201, response_model=RequestIdResponse)
async def submit_cancellation_request(
    order_id: str,
    body: SubmitRequestBody,
    user_id: str = Depends(require_session_user),
) -> RequestIdResponse:
    command = SubmitCancellationRequest(
        order_id=order_id,
        request_type=body.type,
        reason=body.reason,
        customer_id=user_id,
    )
    request_id = current_domain.process(command, asynchronous=False)
    return RequestIdResponse(request_id=request_id)


@order_router.get("/{order_id}/cancellation-requests", response_model=list[CancellationRequestResponse])
async def list_order_requests(
    order_id: str,
    user_id: str | None = Depends(session_user),
    admin: bool = Depends(is_admin),
) -> list[CancellationRequestResponse]:
    order = _load_visible_order(order_id, user_id, admin)
    requests = current_domain.repository_for(CancellationRequest).for_order(order.id)
    return [_request_response(request) for request in requests]


# ---------------------------------------------------------------------------
# Webhook Router
# ---------------------------------------------------------------------------
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.post("/payment", response_model=WebhookResponse)
async def payment_webhook(request: Request) -> WebhookResponse:
    """Gateway callback. The raw body is verified before it is parsed."""
    raw_body = await request.body()
    signature = request.headers.get("X-Razorpay-Signature")
    result = PaymentWebhookProcessor().process(raw_body, signature)
    return WebhookResponse(**result)


# ---------------------------------------------------------------------------
# Cancellation Request Router
# ---------------------------------------------------------------------------
cancellation_router = APIRouter(
    prefix="/cancellation-requests",
    tags=["cancellation-requests"],
    dependencies=[Depends(require_admin)],
)


@cancellation_router.get("", response_model=list[CancellationRequestResponse])
async def list_requests(status: str | None = None) -> list[CancellationRequestResponse]:
    requests = current_domain.repository_for(CancellationRequest).list_all(status=status)
    return [_request_response(request) for request in requests]


@cancellation_router.patch("/{request_id}", response_model=StatusResponse)
async def respond_to_request(request_id: str, body: RespondRequestBody) -> StatusResponse:
    command = RespondToCancellationRequest(
        request_id=request_id,
        decision=body.decision,
        admin_response=body.admin_response,
    )
    status = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=status)


# ---------------------------------------------------------------------------
# Notification Router
# ---------------------------------------------------------------------------
notification_router = APIRouter(prefix="/users/{user_id}/notifications", tags=["notifications"])


def _ensure_own_inbox(user_id: str, session_user_id: str | None) -> None:
    if session_user_id and session_user_id != user_id:
        raise HTTPException(status_code=403, detail="Cannot access another user's notifications")


@notification_router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    user_id: str,
    unread_only: bool = False,
    limit: int = 50,
    session_user_id: str | None = Depends(session_user),
) -> list[NotificationResponse]:
    _ensure_own_inbox(user_id, session_user_id)
    notifications = current_domain.repository_for(UserNotification).for_user(
        user_id, unread_only=unread_only, limit=min(limit, 200)
    )
    return [_notification_response(notification) for notification in notifications]


@notification_router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    user_id: str,
    session_user_id: str | None = Depends(session_user),
) -> UnreadCountResponse:
    _ensure_own_inbox(user_id, session_user_id)
    return UnreadCountResponse(unread=current_domain.repository_for(UserNotification).unread_count(user_id))


@notification_router.post("/read-all", response_model=MarkedReadResponse)
async def mark_all_read(
    user_id: str,
    session_user_id: str | None = Depends(session_user),
) -> MarkedReadResponse:
    _ensure_own_inbox(user_id, session_user_id)
    marked = current_domain.process(MarkAllNotificationsRead(user_id=user_id), asynchronous=False)
    return MarkedReadResponse(marked=marked)


@notification_router.post("/{notification_id}/read", response_model=StatusResponse)
async def mark_read(
    user_id: str,
    notification_id: str,
    session_user_id: str | None = Depends(session_user),
) -> StatusResponse:
    _ensure_own_inbox(user_id, session_user_id)
    command = MarkNotificationRead(user_id=user_id, notification_id=notification_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="read")
