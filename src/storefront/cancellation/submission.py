"""Submitting a cancellation or exchange request — command and handler.

A cancel request is accepted while the order can still be cancelled; an
exchange request only once it has been delivered. At most one request per
order may be pending. The order's ``open_request_id`` is claimed with a
conditional write in the same unit of work that stores the request.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cancellation.request import CancellationRequest, RequestType
from storefront.domain import storefront
from storefront.exceptions import (
    Conflict,
    DuplicatePendingRequest,
    OrderAccessDenied,
    OrderNotEligible,
)
from storefront.order.order import Order
from storefront.order.transitions import OrderStatus, is_transition_allowed, parse_status

logger = structlog.get_logger(__name__)

_ELIGIBILITY = {
    RequestType.CANCEL: lambda status: is_transition_allowed(status, OrderStatus.CANCELLED),
    RequestType.EXCHANGE: lambda status: parse_status(status) == OrderStatus.DELIVERED,
}


def is_eligible(request_type: RequestType, status) -> bool:
    return _ELIGIBILITY[request_type](status)


@storefront.command(part_of="CancellationRequest")
class SubmitCancellationRequest:
    order_id = Identifier(required=True)
    request_type = String(required=True, choices=RequestType)
    reason = Text()
    customer_id = Identifier(required=True)  # Session user


@storefront.command_handler(part_of=CancellationRequest)
class SubmitCancellationRequestHandler:
    @handle(SubmitCancellationRequest)
    def submit(self, command):
        order_repo = current_domain.repository_for(Order)
        request_repo = current_domain.repository_for(CancellationRequest)
        request_type = RequestType(command.request_type)

        order = order_repo.load(command.order_id)
        if str(order.customer_id) != str(command.customer_id):
            raise OrderAccessDenied("Order belongs to another customer", order_id=str(order.id))

        if order.open_request_id or request_repo.find_pending(order.id):
            raise DuplicatePendingRequest(
                f"Order {order.id} already has a pending request",
                order_id=str(order.id),
            )

        if not is_eligible(request_type, order.status):
            raise OrderNotEligible(
                f"A {request_type.value} request is not allowed while the order is {order.status}",
                order_id=str(order.id),
                current_status=order.status,
                request_type=request_type.value,
            )

        request = CancellationRequest.submit(
            order_id=order.id,
            customer_id=order.customer_id,
            request_type=request_type,
            reason=command.reason,
            email=order.email,
        )

        observed_status = order.status
        order.claim_request(request.id)
        try:
            order_repo.compare_and_set(
                order,
                expected_status=observed_status,
                expected_open_request_id=None,
            )
        except Conflict as exc:
            if "open_request_id" in exc.context.get("current", {}):
                raise DuplicatePendingRequest(
                    f"Order {order.id} already has a pending request",
                    order_id=str(order.id),
                ) from exc
            raise

        request_repo.add(request)

        logger.info(
            "Cancellation request submitted",
            request_id=str(request.id),
            order_id=str(order.id),
            request_type=request_type.value,
        )
        return str(request.id)
