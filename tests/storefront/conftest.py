import json

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(storefront_bed):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    from storefront.channel import reset_channels
    from storefront.gateway import reset_gateway

    reset_gateway()
    reset_channels()

    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Order helpers
# ---------------------------------------------------------------------------
SHIPPING_ADDRESS = {
    "full_name": "Asha Rao",
    "street": "12 MG Road",
    "city": "Bengaluru",
    "state": "KA",
    "postal_code": "560001",
    "country": "IN",
    "phone": "+91-9800000000",
}

ITEMS = [
    {"product_id": "prod-001", "quantity": 2, "unit_price": 249.5},
    {"product_id": "prod-002", "quantity": 1, "unit_price": 100.0},
]


@pytest.fixture
def place_order():
    """Place an order through the PlaceOrder command and return its id."""
    from protean import current_domain

    from storefront.order.placement import PlaceOrder

    def _place(payment_method="gateway", customer_id="cust-001", email="asha@example.com", items=None):
        command = PlaceOrder(
            customer_id=customer_id,
            email=email,
            items=json.dumps(items or ITEMS),
            shipping_address=json.dumps(SHIPPING_ADDRESS),
            payment_method=payment_method,
        )
        return current_domain.process(command, asynchronous=False)

    return _place


@pytest.fixture
def load_order():
    from protean import current_domain

    from storefront.order.order import Order

    def _load(order_id):
        return current_domain.repository_for(Order).get(order_id)

    return _load


@pytest.fixture
def pay_order():
    """Confirm payment for an order from the client side."""
    from protean import current_domain

    from storefront.payment.confirmation import ConfirmClientPayment

    def _pay(order_id, gateway_payment_ref="pay_client_001", customer_id="cust-001"):
        command = ConfirmClientPayment(
            order_id=order_id,
            gateway_payment_ref=gateway_payment_ref,
            customer_id=customer_id,
        )
        return current_domain.process(command, asynchronous=False)

    return _pay


@pytest.fixture
def change_status():
    from protean import current_domain

    from storefront.order.status_change import ChangeOrderStatus

    def _change(order_id, status, **kwargs):
        return current_domain.process(ChangeOrderStatus(order_id=order_id, status=status, **kwargs), asynchronous=False)

    return _change


def _webhook_body(order_id, event="payment.captured", payment_id="pay_hook_001", amount=59900, gateway_order_ref=None):
    payload = {
        "entity": "event",
        "event": event,
        "payload": {
            "payment": {
                "entity": {
                    "id": payment_id,
                    "order_id": gateway_order_ref,
                    "amount": amount,
                    "currency": "INR",
                    "status": "captured",
                    "notes": {"order_id": str(order_id)},
                }
            }
        },
    }
    return json.dumps(payload).encode("utf-8")


@pytest.fixture
def sign():
    """Sign a webhook body the way the configured gateway expects."""
    from storefront.gateway import get_gateway

    def _sign(body: bytes) -> str:
        return get_gateway().sign(body)

    return _sign


@pytest.fixture
def webhook_body():
    return _webhook_body
