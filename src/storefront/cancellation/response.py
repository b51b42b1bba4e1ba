"""Deciding a cancellation or exchange request — command and handler.

Approving a cancel request re-reads the order and cancels it through the
state machine. If the order has moved on (for example it was shipped after
the request was filed) the approval fails with ``Conflict`` and the request
stays pending. Exchange approvals and rejections never touch order status.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cancellation.request import (
    CancellationRequest,
    Decision,
    RequestStatus,
    RequestType,
)
from storefront.domain import storefront
from storefront.exceptions import AlreadyDecided, Conflict, InvalidTransition
from storefront.order.order import Order
from storefront.order.repository import UNCHECKED
from storefront.order.state_machine import OrderStateMachine
from storefront.order.transitions import OrderStatus, TransitionActor

logger = structlog.get_logger(__name__)


@storefront.command(part_of="CancellationRequest")
class RespondToCancellationRequest:
    request_id = Identifier(required=True)
    decision = String(required=True, choices=Decision)
    admin_response = Text()


@storefront.command_handler(part_of=CancellationRequest)
class RespondToCancellationRequestHandler:
    @handle(RespondToCancellationRequest)
    def respond(self, command):
        request_repo = current_domain.repository_for(CancellationRequest)
        order_repo = current_domain.repository_for(Order)
        decision = Decision(command.decision)

        request = request_repo.get(command.request_id)
        if not request.is_pending:
            raise AlreadyDecided(
                f"Request {request.id} was already {request.status}",
                request_id=str(request.id),
                status=request.status,
            )

        order = order_repo.reload(request.order_id)
        observed_status = order.status
        holds_claim = bool(order.open_request_id) and str(order.open_request_id) == str(request.id)
        cancels_order = decision == Decision.APPROVE and request.kind == RequestType.CANCEL

        if cancels_order:
            try:
                OrderStateMachine(order_repo).apply(
                    order,
                    OrderStatus.CANCELLED,
                    TransitionActor.ADMIN,
                    reason=(command.admin_response or request.reason or "")[:500] or None,
                )
            except InvalidTransition as exc:
                logger.info(
                    "Cancellation approval lost to an order change",
                    request_id=str(request.id),
                    order_id=str(order.id),
                    current_status=observed_status,
                )
                raise Conflict(
                    f"Order {order.id} can no longer be cancelled",
                    order_id=str(order.id),
                    current_status=observed_status,
                ) from exc

        if holds_claim:
            order.release_request(request.id)
        if cancels_order or holds_claim:
            order_repo.compare_and_set(
                order,
                expected_status=observed_status,
                expected_open_request_id=request.id if holds_claim else UNCHECKED,
            )

        request.decide(decision, admin_response=command.admin_response)
        request_repo.compare_and_set(request, expected_status=RequestStatus.PENDING.value)

        logger.info(
            "Cancellation request decided",
            request_id=str(request.id),
            order_id=str(order.id),
            request_type=request.request_type,
            status=request.status,
        )
        return request.status
