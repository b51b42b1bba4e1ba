"""BDD tests for admin-driven order fulfilment."""

from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

from storefront.exceptions import StorefrontError
from storefront.order.order import Order
from storefront.order.status_change import ChangeOrderStatus
from storefront.order.tracking import UpdateTracking

scenarios("features/order_lifecycle.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the admin moves the order to "{status}"'))
def admin_moves_order(order_id, status, error):
    try:
        current_domain.process(ChangeOrderStatus(order_id=order_id, status=status), asynchronous=False)
    except StorefrontError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the admin ships the order with tracking "{tracking_id}" via "{carrier}"'))
def admin_ships_order(order_id, tracking_id, carrier, error):
    try:
        current_domain.process(
            ChangeOrderStatus(order_id=order_id, status="shipped", tracking_id=tracking_id, carrier=carrier),
            asynchronous=False,
        )
    except StorefrontError as exc:
        error["exc"] = exc


@when(parsers.cfparse('the admin updates tracking to "{tracking_id}" via "{carrier}"'))
def admin_updates_tracking(order_id, tracking_id, carrier, error):
    try:
        current_domain.process(
            UpdateTracking(order_id=order_id, tracking_id=tracking_id, carrier=carrier),
            asynchronous=False,
        )
    except (StorefrontError, ValidationError) as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the tracking number is "{tracking_id}"'))
def tracking_number_is(order_id, tracking_id):
    order = current_domain.repository_for(Order).get(order_id)
    assert order.tracking.tracking_id == tracking_id
