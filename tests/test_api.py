from decimal import Decimal
from urllib.parse import unquote

from fastapi.testclient import TestClient

from campuslink.api.routers.verification import get_throttle
from campuslink.data.models import VerificationCodeModel
from campuslink.main import app
from tests.base import DbTestCase, FakeThrottle


class ApiTestCase(DbTestCase):
    def setUp(self):
        super().setUp()
        self.throttle = FakeThrottle()
        app.dependency_overrides[get_throttle] = lambda: self.throttle
        self.client = TestClient(app)

        self.customer = self.make_user(1, "Awa")
        self.owner = self.make_user(10, "Owner A")
        self.merchant = self.make_merchant(self.owner, "Boutique A", "771234567")
        self.cahier = self.make_product(self.merchant, "Cahier", 1500, stock=10)
        self.stylo = self.make_product(self.merchant, "Stylo", 2000)

    def tearDown(self):
        app.dependency_overrides.clear()
        super().tearDown()

    @staticmethod
    def auth(user):
        return {"X-User-Id": str(user.id)}


class TestHealthAndUsers(ApiTestCase):
    def test_health(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "healthy")

    def test_authentication_required(self):
        resp = self.client.get("/cart/")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "authentication_required")

        resp = self.client.get("/cart/", headers={"X-User-Id": "424242"})
        self.assertEqual(resp.status_code, 401)

    def test_create_and_read_user(self):
        resp = self.client.post("/users/", json={"id": 5, "name": "Fatou"})
        self.assertEqual(resp.status_code, 200)

        resp = self.client.get("/users/me", headers={"X-User-Id": "5"})
        self.assertEqual(resp.json(), {
            "id": 5, "name": "Fatou", "phone": None, "phone_verified": False, "merchant_id": None,
        })

        resp = self.client.get("/users/me", headers=self.auth(self.owner))
        self.assertEqual(resp.json()["merchant_id"], self.merchant.id)


class TestVerificationApi(ApiTestCase):
    def latest_code(self):
        self.db.expire_all()
        return self.db.query(VerificationCodeModel).order_by(VerificationCodeModel.id.desc()).first()

    def test_send_falls_back_to_click_to_send_and_verifies_once(self):
        resp = self.client.post("/verification/send", json={"phone": "77 123 45 67"}, headers=self.auth(self.customer))
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["method"], "click_to_send")

        row = self.latest_code()
        self.assertIn(row.code, unquote(body["whatsapp_url"]))
        self.assertTrue(body["whatsapp_url"].startswith("https://wa.me/221771234567?text="))

        resp = self.client.post("/verification/verify", json={"code": row.code}, headers=self.auth(self.customer))
        self.assertEqual(resp.json(), {"verified": True, "reason": None})

        resp = self.client.post("/verification/verify", json={"code": row.code}, headers=self.auth(self.customer))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["verified"], False)

        me = self.client.get("/users/me", headers=self.auth(self.customer)).json()
        self.assertTrue(me["phone_verified"])
        self.assertEqual(me["phone"], "+221 77 123 45 67")

    def test_invalid_inputs(self):
        resp = self.client.post("/verification/send", json={"phone": "abc"}, headers=self.auth(self.customer))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "invalid_phone")

        resp = self.client.post("/verification/verify", json={"code": "12"}, headers=self.auth(self.customer))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "invalid_code")

    def test_send_requires_auth(self):
        resp = self.client.post("/verification/send", json={"phone": "771234567"})
        self.assertEqual(resp.status_code, 401)

    def test_send_is_rate_limited(self):
        self.throttle.limit = 1
        headers = self.auth(self.customer)
        self.assertEqual(self.client.post("/verification/send", json={"phone": "771234567"}, headers=headers).status_code, 200)

        resp = self.client.post("/verification/send", json={"phone": "771234567"}, headers=headers)
        self.assertEqual(resp.status_code, 429)
        self.assertEqual(resp.json()["error"], "rate_limited")


class TestCartAndHandoffApi(ApiTestCase):
    def test_cart_group_and_handoff(self):
        headers = self.auth(self.customer)
        self.client.post("/cart/items", json={"product_id": self.cahier.id, "quantity": 2}, headers=headers)
        cart = self.client.post("/cart/items", json={"product_id": self.stylo.id, "quantity": 1}, headers=headers).json()
        self.assertEqual(Decimal(cart["total"]), Decimal("5000"))
        stylo_line = next(i for i in cart["items"] if i["product_id"] == self.stylo.id)

        groups = self.client.get("/cart/groups", headers=headers).json()
        self.assertEqual(len(groups), 1)
        self.assertEqual(Decimal(groups[0]["subtotal"]), Decimal("5000"))
        self.assertTrue(groups[0]["has_contact_channel"])

        resp = self.client.post(
            f"/cart/groups/{self.merchant.id}/handoff",
            json={
                "excluded_line_ids": [stylo_line["id"]],
                "contact": {"first_name": "Awa", "last_name": "Diop", "location": "Pavillon A", "phone": "770000000"},
            },
            headers=headers,
        )
        self.assertEqual(resp.status_code, 200)
        handoff = resp.json()
        self.assertEqual(Decimal(handoff["total"]), Decimal("3000"))
        self.assertEqual(handoff["line_count"], 1)
        self.assertIn("Cahier (x2)", handoff["message"])
        self.assertTrue(handoff["deep_link"].startswith("https://wa.me/221771234567?text="))

        # koszyk bez zmian
        cart = self.client.get("/cart/", headers=headers).json()
        self.assertEqual(len(cart["items"]), 2)

    def test_handoff_negative_outcomes(self):
        headers = self.auth(self.customer)
        line = self.client.post("/cart/items", json={"product_id": self.cahier.id, "quantity": 1}, headers=headers).json()["items"][0]
        url = f"/cart/groups/{self.merchant.id}/handoff"
        contact = {"first_name": "Awa", "last_name": "Diop", "location": "Pavillon A", "phone": "770000000"}

        resp = self.client.post(url, json={"excluded_line_ids": [line["id"]], "contact": contact}, headers=headers)
        self.assertEqual((resp.status_code, resp.json()["error"]), (422, "empty_selection"))

        resp = self.client.post(url, json={"contact": {**contact, "location": ""}}, headers=headers)
        self.assertEqual((resp.status_code, resp.json()["error"]), (422, "incomplete_contact_info"))

        self.merchant.contact_whatsapp = None
        self.db.commit()
        resp = self.client.post(url, json={"contact": contact}, headers=headers)
        self.assertEqual((resp.status_code, resp.json()["error"]), (422, "no_contact_channel"))

    def test_update_and_remove_items(self):
        headers = self.auth(self.customer)
        line = self.client.post("/cart/items", json={"product_id": self.cahier.id, "quantity": 1}, headers=headers).json()["items"][0]

        resp = self.client.patch(f"/cart/items/{line['id']}", json={"quantity": 0}, headers=headers)
        self.assertEqual((resp.status_code, resp.json()["error"]), (400, "invalid_quantity"))

        resp = self.client.patch(f"/cart/items/{line['id']}", json={"quantity": 50}, headers=headers)
        self.assertEqual(resp.json()["items"][0]["quantity"], 10)

        resp = self.client.delete(f"/cart/items/{line['id']}", headers=self.auth(self.owner))
        self.assertEqual(resp.status_code, 403)

        resp = self.client.delete(f"/cart/items/{line['id']}", headers=headers)
        self.assertEqual(resp.json()["items"], [])


class TestOrdersApi(ApiTestCase):
    def create_order(self):
        resp = self.client.post(
            "/orders/",
            json={
                "contact": {"first_name": "Awa", "last_name": "Diop", "location": "Pavillon A", "phone": "770000000"},
                "items": [{"product_id": self.cahier.id, "quantity": 2}],
                "customer_user_id": self.customer.id,
            },
            headers=self.auth(self.owner),
        )
        self.assertEqual(resp.status_code, 201)
        return resp.json()

    def test_merchant_drives_lifecycle(self):
        order = self.create_order()
        self.assertEqual(order["status"], "pending")
        self.assertEqual(Decimal(order["total_amount"]), Decimal("3000"))
        self.assertEqual(order["items"][0]["product_name"], "Cahier")

        url = f"/orders/{order['id']}/status"
        resp = self.client.post(url, json={"status": "ready"}, headers=self.auth(self.owner))
        self.assertEqual((resp.status_code, resp.json()["error"]), (409, "illegal_transition"))

        for status in ("confirmed", "preparing", "ready"):
            resp = self.client.post(url, json={"status": status}, headers=self.auth(self.owner))
            self.assertEqual(resp.json()["status"], status)

        resp = self.client.post(url, json={"status": "ready"}, headers=self.auth(self.owner))
        self.assertEqual(resp.status_code, 200)

        transitions = self.client.get(f"/orders/{order['id']}/transitions", headers=self.auth(self.owner)).json()
        self.assertEqual(transitions, {"order_id": order["id"], "status": "ready", "allowed": ["completed", "cancelled"]})

    def test_customer_cannot_change_status_but_can_read(self):
        order = self.create_order()

        resp = self.client.post(f"/orders/{order['id']}/status", json={"status": "confirmed"}, headers=self.auth(self.customer))
        self.assertEqual(resp.status_code, 403)

        resp = self.client.get(f"/orders/{order['id']}", headers=self.auth(self.customer))
        self.assertEqual(resp.status_code, 200)

    def test_list_orders_filters_by_status(self):
        order = self.create_order()
        self.create_order()
        self.client.post(f"/orders/{order['id']}/status", json={"status": "cancelled"}, headers=self.auth(self.owner))

        resp = self.client.get("/orders/", params={"status": "cancelled"}, headers=self.auth(self.owner))
        self.assertEqual([o["id"] for o in resp.json()], [order["id"]])

        resp = self.client.get("/orders/", params={"status": "lost"}, headers=self.auth(self.owner))
        self.assertEqual(resp.status_code, 400)

    def test_customer_lists_own_orders_and_stats(self):
        order = self.create_order()
        self.client.post(f"/orders/{order['id']}/status", json={"status": "confirmed"}, headers=self.auth(self.owner))

        resp = self.client.get("/orders/mine", headers=self.auth(self.customer))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([(o["id"], o["status"]) for o in resp.json()], [(order["id"], "confirmed")])

        resp = self.client.get("/orders/mine", params={"status": "pending"}, headers=self.auth(self.customer))
        self.assertEqual(resp.json(), [])

        stats = self.client.get("/orders/mine/stats", headers=self.auth(self.customer)).json()
        self.assertEqual((stats["total"], stats["by_status"]["confirmed"]), (1, 1))
        self.assertEqual(Decimal(stats["total_amount"]), Decimal("3000"))

        stats = self.client.get("/orders/stats", headers=self.auth(self.owner)).json()
        self.assertEqual(stats["total"], 1)

        self.assertEqual(self.client.get("/orders/stats", headers=self.auth(self.customer)).status_code, 403)
        self.assertEqual(self.client.get("/orders/mine").status_code, 401)
