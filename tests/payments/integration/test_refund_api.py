"""Integration tests for refund endpoints via TestClient."""

from dataclasses import replace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from notifications.sms.queue import SMSQueueRepository
from ordering.order.order import OrderRepository
from payments.api.routes import admin_refund_router, gateway_router, refund_router
from shared.api import register_exception_handlers
from shared.config import get_settings, set_settings

ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(refund_router)
    app.include_router(admin_refund_router)
    app.include_router(gateway_router)
    return TestClient(app)


@pytest.fixture
def paid_order(make_user, make_product, make_order):
    user = make_user()
    return make_order(user.id, [(make_product(price=25.0), 2)], paid=True)


def _customer(order):
    return {"X-User-Id": order.user_id}


class TestCustomerRefunds:
    def test_request_and_status(self, client, paid_order):
        response = client.post(
            f"/orders/{paid_order.id}/refund-request", json={"reason": "Wrong colour"}, headers=_customer(paid_order)
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "pending"

        status = client.get(f"/orders/{paid_order.id}/refund-request", headers=_customer(paid_order)).json()
        assert status["exists"] is True
        assert status["status"] == "pending"

    def test_duplicate_request_conflicts(self, client, paid_order):
        client.post(f"/orders/{paid_order.id}/refund-request", json={"reason": "x"}, headers=_customer(paid_order))
        response = client.post(f"/orders/{paid_order.id}/refund-request", json={"reason": "x"}, headers=_customer(paid_order))
        assert response.status_code == 409

    def test_no_request_yet(self, client, paid_order):
        body = client.get(f"/orders/{paid_order.id}/refund-request", headers=_customer(paid_order)).json()
        assert body["exists"] is False


class TestAdminRefunds:
    def test_customer_cannot_list(self, client, paid_order):
        assert client.get("/admin/refunds", headers=_customer(paid_order)).status_code == 403

    def test_approve_notifies_customer(self, client, paid_order):
        client.post(f"/orders/{paid_order.id}/refund-request", json={"reason": "x"}, headers=_customer(paid_order))
        refund_id = client.get("/admin/refunds?status=pending", headers=ADMIN).json()["refunds"][0]["id"]

        response = client.post(f"/admin/refunds/{refund_id}/approve", headers=ADMIN)

        assert response.status_code == 200
        assert OrderRepository().get(paid_order.id).payment_status == "refunded"
        assert SMSQueueRepository().count({"order_id": paid_order.id, "type": "REFUND_APPROVED"}) == 1

    def test_unknown_status_filter(self, client):
        assert client.get("/admin/refunds?status=bogus", headers=ADMIN).status_code == 400

    def test_approve_with_gateway_down(self, client, paid_order):
        client.post(
            "/payments/gateway/configure", json={"should_succeed": False, "failure_reason": "Gateway down"}, headers=ADMIN
        )
        client.post(f"/orders/{paid_order.id}/refund-request", json={"reason": "x"}, headers=_customer(paid_order))
        refund_id = client.get("/admin/refunds", headers=ADMIN).json()["refunds"][0]["id"]

        response = client.post(f"/admin/refunds/{refund_id}/approve", headers=ADMIN)

        assert response.status_code == 502
        assert OrderRepository().get(paid_order.id).payment_status == "paid"

    def test_instant_refund(self, client, paid_order):
        response = client.post(f"/admin/orders/{paid_order.id}/instant-refund", headers=ADMIN)
        assert response.status_code == 200
        assert response.json()["order"]["status"] == "cancelled"


class TestGatewayConfiguration:
    BODY = {"reference": "PSK-FORGED", "amount": 5000, "success": True}

    def test_anonymous_caller_rejected(self, client, gateway):
        response = client.post("/payments/gateway/configure", json=self.BODY)
        assert response.status_code == 401
        assert "PSK-FORGED" not in gateway.transactions

    def test_customer_rejected(self, client, gateway):
        response = client.post("/payments/gateway/configure", json=self.BODY, headers={"X-User-Id": "customer-1"})
        assert response.status_code == 403
        assert "PSK-FORGED" not in gateway.transactions

    def test_admin_registers_transaction(self, client, gateway):
        response = client.post("/payments/gateway/configure", json=self.BODY, headers=ADMIN)
        assert response.status_code == 200
        assert gateway.transactions["PSK-FORGED"].amount == 5000

    @pytest.mark.parametrize("env", ["staging", "production"])
    def test_refused_outside_local_environments(self, client, gateway, env):
        set_settings(replace(get_settings(), env=env))
        response = client.post("/payments/gateway/configure", json=self.BODY, headers=ADMIN)
        assert response.status_code == 403
        assert "PSK-FORGED" not in gateway.transactions
