from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from storefront.extensions import db
from storefront.models import Order
from tests.base import AppTestCase, ORDER_BODY


class TestCreateOrder(AppTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.make_user()
        self.headers = self.auth_headers(self.user)

    def test_create_cod_order(self):
        resp = self.client.post("/api/order", json=ORDER_BODY, headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertTrue(data["ok"])
        self.assertTrue(data["order_no"].startswith("TP"))

        order = self.reload(data["id"])
        self.assertEqual(order.status, "cod")
        self.assertEqual(order.user_id, self.user.id)
        self.assertEqual(order.order_no, data["order_no"])

    def test_payment_mode_becomes_initial_status(self):
        resp = self.client.post("/api/order", json=dict(ORDER_BODY, payment_mode="upi"), headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.reload(resp.get_json()["id"]).status, "upi")

    def test_gateway_mode_needs_create_order_flow(self):
        resp = self.client.post("/api/order", json=dict(ORDER_BODY, payment_mode="razorpay"), headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Order.query.count(), 0)

    def test_terminal_status_as_payment_mode_rejected(self):
        for mode in ["paid", "failed", "cancelled"]:
            resp = self.client.post("/api/order", json=dict(ORDER_BODY, payment_mode=mode), headers=self.headers)
            self.assertEqual(resp.status_code, 400, mode)
        self.assertEqual(Order.query.count(), 0)

    def test_non_object_json_body_is_400(self):
        for body in [["x"], "text", 42]:
            resp = self.client.post("/api/order", json=body, headers=self.headers)
            self.assertEqual(resp.status_code, 400, body)
            self.assertEqual(resp.get_json()["error"], "Missing fields")
        self.assertEqual(Order.query.count(), 0)

    def test_missing_fields_rejected_before_store(self):
        body = dict(ORDER_BODY)
        del body["pincode"]
        with patch.object(self.store, "create") as create:
            resp = self.client.post("/api/order", json=body, headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["fields"], ["pincode"])
        create.assert_not_called()

    def test_malformed_number_rejected(self):
        resp = self.client.post("/api/order", json=dict(ORDER_BODY, qty="lots"), headers=self.headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(Order.query.count(), 0)

    def test_requires_auth(self):
        resp = self.client.post("/api/order", json=ORDER_BODY)
        self.assertEqual(resp.status_code, 401)
        resp = self.client.post("/api/order", json=ORDER_BODY, headers={"Authorization": "Bearer not-a-jwt"})
        self.assertEqual(resp.status_code, 401)

    def test_store_error_is_generic_500(self):
        boom = OperationalError("INSERT", {}, Exception("database is locked"))
        with patch.object(db.session, "commit", side_effect=boom):
            resp = self.client.post("/api/order", json=ORDER_BODY, headers=self.headers)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json(), {"error": "Server error"})


class TestOrderReads(AppTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.make_user()
        self.other = self.make_user(email="other@example.com")

    def test_my_orders_only_mine_newest_first(self):
        headers = self.auth_headers(self.user)
        first = self.client.post("/api/order", json=ORDER_BODY, headers=headers).get_json()["id"]
        second = self.client.post("/api/order", json=ORDER_BODY, headers=headers).get_json()["id"]
        self.client.post("/api/order", json=ORDER_BODY, headers=self.auth_headers(self.other))

        resp = self.client.get("/api/my-orders", headers=headers)
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertTrue(data["ok"])
        self.assertEqual([o["id"] for o in data["orders"]], [second, first])

    def test_my_orders_requires_auth(self):
        self.assertEqual(self.client.get("/api/my-orders").status_code, 401)

    def test_get_by_id_and_by_gateway_ref(self):
        order = self.make_gateway_order(self.user, ref="order_R1")

        resp = self.client.get(f"/api/orders/{order.id}")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["razorpay_order_id"], "order_R1")

        resp = self.client.get("/api/orders/by-rp/order_R1")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["id"], order.id)

    def test_reads_404(self):
        self.assertEqual(self.client.get("/api/orders/999").status_code, 404)
        self.assertEqual(self.client.get("/api/orders/by-rp/order_none").status_code, 404)


class TestCancelOrder(AppTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.make_user()
        self.other = self.make_user(email="other@example.com")

    def test_owner_cancels_cod_order(self):
        order = self.store.create(dict(ORDER_BODY, user_id=self.user.id))
        resp = self.client.post(f"/api/orders/{order.id}/cancel", headers=self.auth_headers(self.user))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"ok": True})
        self.assertEqual(self.reload(order.id).status, "cancelled")

    def test_other_user_cannot_cancel(self):
        order = self.store.create(dict(ORDER_BODY, user_id=self.user.id))
        resp = self.client.post(f"/api/orders/{order.id}/cancel", headers=self.auth_headers(self.other))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {"ok": False, "error": "Cannot cancel this order"})
        self.assertEqual(self.reload(order.id).status, "cod")

    def test_paid_order_cannot_be_cancelled(self):
        order = self.make_gateway_order(self.user, ref="order_C")
        self.store.apply_payment_result("order_C", "paid", "pay_C", "sig")
        resp = self.client.post(f"/api/orders/{order.id}/cancel", headers=self.auth_headers(self.user))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.reload(order.id).status, "paid")

    def test_cancel_twice(self):
        order = self.store.create(dict(ORDER_BODY, user_id=self.user.id))
        headers = self.auth_headers(self.user)
        self.assertEqual(self.client.post(f"/api/orders/{order.id}/cancel", headers=headers).status_code, 200)
        self.assertEqual(self.client.post(f"/api/orders/{order.id}/cancel", headers=headers).status_code, 400)

    def test_cancel_requires_auth(self):
        order = self.store.create(dict(ORDER_BODY, user_id=self.user.id))
        self.assertEqual(self.client.post(f"/api/orders/{order.id}/cancel").status_code, 401)
