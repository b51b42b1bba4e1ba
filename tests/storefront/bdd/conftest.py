"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then, when

from storefront.exceptions import StorefrontError
from storefront.gateway import get_gateway
from storefront.notification.notification import UserNotification
from storefront.order.order import Order
from storefront.payment.confirmation import ConfirmClientPayment
from storefront.payment.webhook import PaymentWebhookProcessor


def _owner_of(order_id):
    return str(current_domain.repository_for(Order).get(order_id).customer_id)


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for the error raised by the last When step."""
    return {"exc": None}


@pytest.fixture()
def outcome():
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a "{payment_method}" order placed by "{customer_id}"'),
    target_fixture="order_id",
)
def placed_order(place_order, payment_method, customer_id):
    return place_order(payment_method=payment_method, customer_id=customer_id)


@given(parsers.cfparse('the order is moved to "{status}"'))
def order_moved_to(order_id, status, change_status):
    change_status(order_id, status)


@given(parsers.cfparse('the gateway has delivered a signed "{event}" webhook for the order'))
def webhook_delivered(order_id, event, webhook_body):
    body = webhook_body(order_id, event=event)
    PaymentWebhookProcessor().process(body, get_gateway().sign(body))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer confirms payment "{payment_ref}"'))
def customer_confirms(order_id, payment_ref, outcome, error):
    try:
        outcome["confirmation"] = current_domain.process(
            ConfirmClientPayment(
                order_id=order_id,
                gateway_payment_ref=payment_ref,
                customer_id=_owner_of(order_id),
            ),
            asynchronous=False,
        )
    except StorefrontError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def payment_status_is(order_id, status):
    assert current_domain.repository_for(Order).get(order_id).payment.payment_status == status


@then(parsers.cfparse('the payment was confirmed via "{channel}"'))
def payment_confirmed_via(order_id, channel):
    assert current_domain.repository_for(Order).get(order_id).payment.confirmed_via == channel


@then(parsers.cfparse('the operation fails with "{error_name}"'))
def operation_fails(error, error_name):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_name


@then("the operation succeeds")
def operation_succeeds(error):
    assert error["exc"] is None


@then(parsers.cfparse('"{customer_id}" has a "{notification_type}" notification'))
def has_notification(customer_id, notification_type):
    inbox = current_domain.repository_for(UserNotification).for_user(customer_id)
    assert notification_type in [n.notification_type for n in inbox]
