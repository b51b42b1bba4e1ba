"""CancellationRequest aggregate — a customer's request to cancel or exchange an order.

Lifecycle:
    PENDING → APPROVED
    PENDING → REJECTED

A request is decided exactly once and never changes afterwards.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from storefront.cancellation.events import CancellationDecided, CancellationRequested
from storefront.domain import storefront
from storefront.exceptions import AlreadyDecided


class RequestType(Enum):
    CANCEL = "cancel"
    EXCHANGE = "exchange"


class RequestStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Decision(Enum):
    APPROVE = "approve"
    REJECT = "reject"


_DECISION_OUTCOME = {
    Decision.APPROVE: RequestStatus.APPROVED,
    Decision.REJECT: RequestStatus.REJECTED,
}


@storefront.aggregate
class CancellationRequest:
    order_id: Identifier(required=True)
    customer_id: Identifier(required=True)
    email: String(max_length=255)
    request_type: String(choices=RequestType, required=True)
    reason: Text()
    status: String(choices=RequestStatus, default=RequestStatus.PENDING.value)
    admin_response: Text()
    created_at: DateTime()
    updated_at: DateTime()
    decided_at: DateTime()

    @classmethod
    def submit(cls, order_id, customer_id, request_type, reason=None, email=None):
        now = datetime.now(UTC)
        request = cls(
            order_id=order_id,
            customer_id=customer_id,
            email=email,
            request_type=request_type.value,
            reason=reason,
            status=RequestStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        request.raise_(
            CancellationRequested(
                request_id=str(request.id),
                order_id=str(order_id),
                customer_id=str(customer_id),
                email=email,
                request_type=request_type.value,
                reason=reason,
                requested_at=now,
            )
        )
        return request

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING.value

    @property
    def kind(self) -> RequestType:
        return RequestType(self.request_type)

    def decide(self, decision, admin_response=None):
        """Record the admin's decision. Raises AlreadyDecided on a second call."""
        if not self.is_pending:
            raise AlreadyDecided(
                f"Request {self.id} was already {self.status}",
                request_id=str(self.id),
                status=self.status,
            )

        now = datetime.now(UTC)
        self.status = _DECISION_OUTCOME[decision].value
        self.admin_response = admin_response
        self.decided_at = now
        self.updated_at = now

        self.raise_(
            CancellationDecided(
                request_id=str(self.id),
                order_id=str(self.order_id),
                customer_id=str(self.customer_id),
                email=self.email,
                request_type=self.request_type,
                status=self.status,
                admin_response=admin_response,
                decided_at=now,
            )
        )
