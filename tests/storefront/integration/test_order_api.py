"""Integration tests for the order endpoints."""

CUSTOMER = {"X-User-Id": "cust-001"}


class TestPlaceAndRead:
    def test_place_order(self, client, create_order):
        order_id = create_order()
        response = client.get(f"/orders/{order_id}", headers={"X-User-Id": "cust-001"})

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "pending"
        assert data["total"] == 499.0
        assert data["payment"]["payment_status"] == "pending"
        assert data["shipping_address"]["city"] == "Bengaluru"

    def test_order_needs_items(self, client):
        response = client.post(
            "/orders",
            json={
                "customer_id": "cust-001",
                "items": [],
                "shipping_address": {
                    "full_name": "A",
                    "street": "B",
                    "city": "C",
                    "postal_code": "1",
                    "country": "IN",
                },
                "payment_method": "gateway",
            },
        )
        assert response.status_code == 422

    def test_other_customer_cannot_read_order(self, client, create_order):
        order_id = create_order(customer_id="cust-001")
        response = client.get(f"/orders/{order_id}", headers={"X-User-Id": "cust-002"})
        assert response.status_code == 403
        assert response.json()["error"] == "OrderAccessDenied"

    def test_admin_can_read_any_order(self, client, create_order, admin_headers):
        order_id = create_order(customer_id="cust-001")
        response = client.get(f"/orders/{order_id}", headers={**admin_headers, "X-User-Id": "admin-1"})
        assert response.status_code == 200

    def test_unknown_order(self, client):
        response = client.get("/orders/missing-order")
        assert response.status_code == 404


class TestPaymentEndpoints:
    def test_gateway_session_and_confirm(self, client, create_order):
        order_id = create_order()

        session = client.post(f"/orders/{order_id}/gateway-session", headers=CUSTOMER)
        assert session.status_code == 200
        session_data = session.json()
        assert session_data["amount"] == 49900
        assert session_data["currency"] == "INR"

        confirm = client.post(
            f"/orders/{order_id}/confirm",
            json={"gateway_payment_ref": "pay_001", "gateway_order_ref": session_data["gateway_order_ref"]},
            headers=CUSTOMER,
        )
        assert confirm.status_code == 200
        assert confirm.json() == {"status": "paid"}

        again = client.post(f"/orders/{order_id}/confirm", json={"gateway_payment_ref": "pay_001"}, headers=CUSTOMER)
        assert again.json() == {"status": "already_paid"}

    def test_confirm_without_session_is_unauthorized(self, client, create_order, admin_headers):
        order_id = create_order()

        response = client.post(f"/orders/{order_id}/confirm", json={"gateway_payment_ref": "pay_forged"})

        assert response.status_code == 401
        order = client.get(f"/orders/{order_id}", headers=admin_headers).json()
        assert order["status"] == "pending"
        assert order["payment"]["payment_status"] == "pending"

    def test_confirm_by_other_customer_is_forbidden(self, client, create_order, admin_headers):
        order_id = create_order(customer_id="cust-001")

        response = client.post(
            f"/orders/{order_id}/confirm",
            json={"gateway_payment_ref": "pay_forged"},
            headers={"X-User-Id": "cust-002"},
        )

        assert response.status_code == 403
        assert client.get(f"/orders/{order_id}", headers=admin_headers).json()["status"] == "pending"

    def test_gateway_session_without_session_is_unauthorized(self, client, create_order):
        order_id = create_order()
        assert client.post(f"/orders/{order_id}/gateway-session").status_code == 401

    def test_confirm_with_wrong_gateway_order(self, client, create_order):
        order_id = create_order()
        client.post(f"/orders/{order_id}/gateway-session", headers=CUSTOMER)

        response = client.post(
            f"/orders/{order_id}/confirm",
            json={"gateway_payment_ref": "pay_001", "gateway_order_ref": "order_forged"},
            headers=CUSTOMER,
        )
        assert response.status_code == 400
        assert response.json()["error"] == "GatewayReferenceMismatch"

    def test_confirm_cancelled_order(self, client, create_order, admin_headers):
        order_id = create_order()
        client.patch(f"/orders/{order_id}/status", json={"status": "cancelled"}, headers=admin_headers)

        response = client.post(f"/orders/{order_id}/confirm", json={"gateway_payment_ref": "pay_001"}, headers=CUSTOMER)
        assert response.status_code == 409
        assert response.json()["error"] == "OrderNotPayable"

    def test_gateway_failure_is_bad_gateway(self, client, create_order):
        from storefront.gateway import get_gateway

        get_gateway().configure(should_succeed=False)
        order_id = create_order()

        response = client.post(f"/orders/{order_id}/gateway-session", headers=CUSTOMER)
        assert response.status_code == 502


class TestAdminEndpoints:
    def test_status_change_requires_admin_key(self, client, create_order):
        order_id = create_order(payment_method="pay_on_delivery")
        response = client.patch(f"/orders/{order_id}/status", json={"status": "processing"})
        assert response.status_code == 401

        response = client.patch(
            f"/orders/{order_id}/status",
            json={"status": "processing"},
            headers={"X-Admin-Key": "wrong"},
        )
        assert response.status_code == 401

    def test_status_change(self, client, create_order, admin_headers):
        order_id = create_order(payment_method="pay_on_delivery")
        response = client.patch(f"/orders/{order_id}/status", json={"status": "processing"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"status": "processing"}

    def test_invalid_transition_is_unprocessable(self, client, create_order, admin_headers):
        order_id = create_order(payment_method="pay_on_delivery")
        response = client.patch(f"/orders/{order_id}/status", json={"status": "delivered"}, headers=admin_headers)

        assert response.status_code == 422
        body = response.json()
        assert body["error"] == "InvalidTransition"
        assert body["current_status"] == "pending"
        assert body["target_status"] == "delivered"

    def test_unpaid_gateway_order_cannot_be_processed(self, client, create_order, admin_headers):
        order_id = create_order(payment_method="gateway")
        response = client.patch(f"/orders/{order_id}/status", json={"status": "processing"}, headers=admin_headers)
        assert response.status_code == 422

    def test_ship_then_update_tracking(self, client, create_order, admin_headers):
        order_id = create_order(payment_method="pay_on_delivery")
        client.patch(f"/orders/{order_id}/status", json={"status": "processing"}, headers=admin_headers)
        client.patch(
            f"/orders/{order_id}/status",
            json={"status": "shipped", "tracking_id": "AWB1", "carrier": "BlueDart"},
            headers=admin_headers,
        )

        response = client.patch(
            f"/orders/{order_id}/tracking",
            json={"tracking_id": "AWB2", "carrier": "Delhivery", "tracking_url": "https://track.example/AWB2"},
            headers=admin_headers,
        )
        assert response.status_code == 200

        order = client.get(f"/orders/{order_id}", headers=admin_headers).json()
        assert order["tracking"] == {
            "carrier": "Delhivery",
            "tracking_id": "AWB2",
            "tracking_url": "https://track.example/AWB2",
        }

    def test_tracking_on_pending_order_is_rejected(self, client, create_order, admin_headers):
        order_id = create_order(payment_method="pay_on_delivery")
        response = client.patch(f"/orders/{order_id}/tracking", json={"tracking_id": "AWB1"}, headers=admin_headers)
        assert response.status_code == 400

    def test_stats(self, client, create_order, admin_headers):
        create_order()
        create_order(payment_method="pay_on_delivery")

        response = client.get("/orders/stats", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["counts"]["pending"] == 2
        assert response.json()["total"] == 2

    def test_stats_requires_admin(self, client):
        assert client.get("/orders/stats").status_code == 401
