"""Repository for the Order aggregate with conditional (compare-and-set) writes.

Callers of the engine may be different processes with no shared memory, so
every mutation is persisted only if the stored order still holds the values
the caller read. Protean's aggregate version check backs the explicit
comparison; both outcomes surface as ``Conflict``.
"""

import structlog
from protean.exceptions import ExpectedVersionError

from storefront.domain import storefront
from storefront.exceptions import Conflict, RepositoryUnavailable
from storefront.order.order import Order
from storefront.order.transitions import OrderStatus

logger = structlog.get_logger(__name__)

UNCHECKED = object()

_TRANSIENT_ERRORS = (ConnectionError, TimeoutError)


@storefront.repository(part_of=Order)
class OrderRepository:
    def load(self, order_id) -> Order:
        """Fetch an order, translating storage outages into RepositoryUnavailable."""
        try:
            return self.get(order_id)
        except _TRANSIENT_ERRORS as exc:
            raise RepositoryUnavailable(
                "Order storage is temporarily unavailable",
                order_id=str(order_id),
            ) from exc

    def compare_and_set(
        self,
        order: Order,
        expected_status=UNCHECKED,
        expected_payment_status=UNCHECKED,
        expected_open_request_id=UNCHECKED,
    ) -> Order:
        """Persist ``order`` only if the stored record still matches the expectations."""
        try:
            persisted = self._dao.get(order.id)
        except _TRANSIENT_ERRORS as exc:
            raise RepositoryUnavailable(
                "Order storage is temporarily unavailable",
                order_id=str(order.id),
            ) from exc

        current = {
            "status": persisted.status,
            "payment_status": persisted.payment.payment_status if persisted.payment else None,
            "open_request_id": str(persisted.open_request_id) if persisted.open_request_id else None,
        }
        expected = {
            "status": expected_status,
            "payment_status": expected_payment_status,
            "open_request_id": (
                str(expected_open_request_id)
                if expected_open_request_id not in (UNCHECKED, None)
                else expected_open_request_id
            ),
        }

        mismatched = {
            key: current[key] for key, value in expected.items() if value is not UNCHECKED and current[key] != value
        }
        if mismatched:
            logger.info(
                "Conditional order write lost",
                order_id=str(order.id),
                expected={k: v for k, v in expected.items() if v is not UNCHECKED},
                current=current,
            )
            raise Conflict(
                f"Order {order.id} was changed concurrently",
                order_id=str(order.id),
                current=mismatched,
            )

        try:
            self.add(order)
        except ExpectedVersionError as exc:
            logger.info("Order version moved underneath writer", order_id=str(order.id))
            raise Conflict(f"Order {order.id} was changed concurrently", order_id=str(order.id)) from exc
        except _TRANSIENT_ERRORS as exc:
            raise RepositoryUnavailable(
                "Order storage is temporarily unavailable",
                order_id=str(order.id),
            ) from exc

        return order

    def count_by_status(self) -> dict:
        """Number of orders per status, for the admin dashboard."""
        return {status.value: self._dao.query.filter(status=status.value).all().total for status in OrderStatus}

    def reload(self, order_id) -> Order:
        """Read the stored order, bypassing anything cached in the current unit of work."""
        try:
            return self._dao.get(order_id)
        except _TRANSIENT_ERRORS as exc:
            raise RepositoryUnavailable(
                "Order storage is temporarily unavailable",
                order_id=str(order_id),
            ) from exc
