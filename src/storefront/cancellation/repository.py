"""Repository for CancellationRequest with a conditional decision write."""

import structlog

from storefront.cancellation.request import CancellationRequest, RequestStatus
from storefront.domain import storefront
from storefront.exceptions import AlreadyDecided

logger = structlog.get_logger(__name__)


@storefront.repository(part_of=CancellationRequest)
class CancellationRequestRepository:
    def find_pending(self, order_id) -> CancellationRequest | None:
        items = self._dao.query.filter(order_id=str(order_id), status=RequestStatus.PENDING.value).all().items
        return items[0] if items else None

    def for_order(self, order_id) -> list:
        return self._dao.query.filter(order_id=str(order_id)).order_by("-created_at").all().items

    def list_all(self, status=None, limit=100) -> list:
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        return query.order_by("-created_at").limit(limit).all().items

    def compare_and_set(self, request: CancellationRequest, expected_status: str) -> CancellationRequest:
        """Persist ``request`` only if its stored status is still ``expected_status``."""
        persisted = self._dao.get(request.id)
        if persisted.status != expected_status:
            logger.info(
                "Conditional request write lost",
                request_id=str(request.id),
                expected_status=expected_status,
                current_status=persisted.status,
            )
            raise AlreadyDecided(
                f"Request {request.id} was already {persisted.status}",
                request_id=str(request.id),
                status=persisted.status,
            )
        self.add(request)
        return request
