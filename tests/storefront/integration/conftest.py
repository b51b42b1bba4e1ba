import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from protean.integrations.fastapi import register_exception_handlers
from storefront.api import (
    cancellation_router,
    notification_router,
    order_router,
    register_storefront_error_handlers,
    webhook_router,
)

ADMIN = {"X-Admin-Key": "test-admin-key"}


@pytest.fixture()
def client():
    from storefront.domain import storefront

    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with storefront.domain_context():
            return await call_next(request)

    register_exception_handlers(app)
    register_storefront_error_handlers(app)
    app.include_router(order_router)
    app.include_router(webhook_router)
    app.include_router(cancellation_router)
    app.include_router(notification_router)
    return TestClient(app)


@pytest.fixture()
def admin_headers():
    return dict(ADMIN)


@pytest.fixture()
def create_order(client):
    def _create(payment_method="gateway", customer_id="cust-001"):
        response = client.post(
            "/orders",
            json={
                "customer_id": customer_id,
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
                "payment_method": payment_method,
            },
        )
        assert response.status_code == 201, response.text
        return response.json()["order_id"]

    return _create
