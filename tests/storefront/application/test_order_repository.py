"""Tests for conditional writes on the order repository."""

import pytest
from protean import current_domain
from storefront.exceptions import Conflict, RepositoryUnavailable
from storefront.order.order import Order


@pytest.fixture
def repo():
    return current_domain.repository_for(Order)


class TestCompareAndSet:
    def test_matching_expectations_persist(self, repo, place_order):
        order_id = place_order()
        order = repo.get(order_id)
        order.claim_request("req-1")

        repo.compare_and_set(order, expected_status="pending", expected_open_request_id=None)

        assert repo.get(order_id).open_request_id == "req-1"

    def test_payment_status_mismatch_conflicts(self, repo, place_order, pay_order):
        order_id = place_order()
        stale = repo.get(order_id)
        pay_order(order_id)

        stale.claim_request("req-1")
        with pytest.raises(Conflict) as exc:
            repo.compare_and_set(stale, expected_payment_status="pending")

        assert exc.value.context["current"] == {"payment_status": "paid"}
        assert repo.get(order_id).open_request_id is None

    def test_open_request_mismatch_conflicts(self, repo, place_order):
        order_id = place_order()
        first = repo.get(order_id)
        second = repo.get(order_id)

        first.claim_request("req-1")
        repo.compare_and_set(first, expected_open_request_id=None)

        second.claim_request("req-2")
        with pytest.raises(Conflict):
            repo.compare_and_set(second, expected_open_request_id=None)
        assert repo.get(order_id).open_request_id == "req-1"

    def test_storage_outage_is_transient(self, repo, place_order, monkeypatch):
        order_id = place_order()
        order = repo.get(order_id)

        def _down(self, *args, **kwargs):
            raise TimeoutError("statement timeout")

        monkeypatch.setattr(type(repo._dao), "get", _down)
        with pytest.raises(RepositoryUnavailable):
            repo.compare_and_set(order, expected_status="pending")


class TestStatusCounts:
    def test_counts_every_status(self, repo, place_order, pay_order, change_status):
        first = place_order()
        place_order()
        third = place_order(payment_method="pay_on_delivery")
        pay_order(first)
        change_status(third, "cancelled")

        assert repo.count_by_status() == {
            "pending": 1,
            "processing": 1,
            "shipped": 0,
            "delivered": 0,
            "cancelled": 1,
        }
