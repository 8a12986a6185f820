from datetime import datetime

import pytest

from elearning.models import Course, Order, OrderDetail, User
from elearning.services.payment_service import resolve_payment_status
from elearning.utils.security import sign_token


def checkout(client, auth_headers, course_id, **body):
    return client.post("/orders/checkout", headers=auth_headers, json={"courseId": course_id, **body})


class TestCheckout:
    def test_creates_pending_order_and_session(self, client, db, course, auth_headers, fake_payment):
        response = checkout(client, auth_headers, course.id)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Checkout successful"
        assert body["order"]["paymentStatus"] == "pending"
        assert body["order"]["paymentMethod"] == "Credit Card"
        assert body["order"]["totalPrice"] == 1500000
        assert body["order"]["courseName"] == "FastAPI Fundamentals"
        assert body["payment"]["token"] == "snap-token"
        assert body["payment"]["redirectUrl"].startswith("https://app.sandbox.midtrans.com/")

        session = fake_payment.sessions[0]
        assert session["order_id"].startswith(f"ORDER-{body['order']['id']}-")
        assert session["amount"] == 1500000
        assert session["items"][0]["name"] == "FastAPI Fundamentals"

        order = db.get(Order, body["order"]["id"])
        assert order.midtrans_order_id == session["order_id"]
        assert len(order.details) == 1
        assert order.details[0].course_id == course.id

    def test_legacy_field_and_payment_method(self, client, course, auth_headers):
        response = client.post(
            "/orders/checkout",
            headers=auth_headers,
            json={"CourseId": course.id, "paymentMethod": "Bank Transfer"}
        )

        assert response.status_code == 201
        assert response.json()["order"]["paymentMethod"] == "Bank Transfer"

    def test_course_id_from_query(self, client, course, auth_headers):
        response = client.post(f"/orders/checkout?courseId={course.id}", headers=auth_headers)

        assert response.status_code == 201

    def test_missing_course_id(self, client, auth_headers):
        response = client.post("/orders/checkout", headers=auth_headers, json={})

        assert response.status_code == 400
        assert response.json()["message"] == "Course ID is required"

    def test_unknown_course(self, client, auth_headers):
        response = checkout(client, auth_headers, 9999)

        assert response.status_code == 404
        assert response.json()["message"] == "Course not found"

    def test_gateway_failure(self, client, course, auth_headers, fake_payment):
        fake_payment.fail = True

        response = checkout(client, auth_headers, course.id)

        assert response.status_code == 502
        assert response.json() == {
            "error": "payment_gateway_error",
            "message": "Failed to create payment transaction"
        }

    def test_requires_authentication(self, client, course):
        response = client.post("/orders/checkout", json={"courseId": course.id})

        assert response.status_code == 401


class TestNotification:
    def paid_order(self, client, course, auth_headers, fake_payment):
        order_id = checkout(client, auth_headers, course.id).json()["order"]["id"]
        return order_id, fake_payment.sessions[-1]["order_id"]

    def test_settlement_marks_success_and_enrolls(self, client, db, course, auth_headers, fake_payment):
        order_id, gateway_id = self.paid_order(client, course, auth_headers, fake_payment)

        response = client.post("/orders/notification", json={"order_id": gateway_id})

        assert response.status_code == 200
        assert response.json() == {"success": True}

        db.expire_all()
        assert db.get(Order, order_id).payment_status == "success"
        assert db.get(Course, course.id).total_enrollment == 11

    def test_redelivery_counts_enrollment_once(self, client, db, course, auth_headers, fake_payment):
        _, gateway_id = self.paid_order(client, course, auth_headers, fake_payment)

        client.post("/orders/notification", json={"order_id": gateway_id})
        client.post("/orders/notification", json={"order_id": gateway_id})

        db.expire_all()
        assert db.get(Course, course.id).total_enrollment == 11

    def test_failed_payment(self, client, db, course, auth_headers, fake_payment):
        order_id, gateway_id = self.paid_order(client, course, auth_headers, fake_payment)
        fake_payment.notification_status["transaction_status"] = "expire"

        client.post("/orders/notification", json={"order_id": gateway_id})

        db.expire_all()
        assert db.get(Order, order_id).payment_status == "failure"
        assert db.get(Course, course.id).total_enrollment == 10

    def test_unknown_order(self, client):
        response = client.post("/orders/notification", json={"order_id": "ORDER-404-0"})

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Order with Midtrans ID ORDER-404-0 not found"
        }

    def test_is_public(self, client):
        response = client.post("/orders/notification", json={"order_id": "ORDER-1-0"})

        assert response.status_code != 401


@pytest.mark.parametrize("transaction_status, fraud_status, expected", [
    ("capture", "challenge", "challenge"),
    ("capture", "accept", "success"),
    ("capture", None, None),
    ("settlement", None, "success"),
    ("cancel", None, "failure"),
    ("deny", None, "failure"),
    ("expire", None, "failure"),
    ("pending", None, "pending"),
    ("refund", None, None),
])
def test_resolve_payment_status(transaction_status, fraud_status, expected):
    assert resolve_payment_status(transaction_status, fraud_status) == expected


class TestOrderQueries:
    def make_order(self, db, user, course, ordered_at):
        order = Order(
            order_at=ordered_at,
            payment_method="Credit Card",
            payment_status="pending",
            total_price=course.price,
            user_id=user.id
        )
        db.add(order)
        db.flush()
        db.add(OrderDetail(quantity=1, price=course.price, order_id=order.id, course_id=course.id))
        db.commit()
        return order.id

    def test_history_newest_first(self, client, db, user, course, auth_headers):
        older = self.make_order(db, user, course, datetime(2024, 1, 1))
        newer = self.make_order(db, user, course, datetime(2024, 2, 1))

        response = client.get("/orders/history", headers=auth_headers)

        assert response.status_code == 200
        body = response.json()
        assert [order["id"] for order in body] == [newer, older]
        assert body[0]["UserId"] == user.id
        assert body[0]["OrderDetails"][0]["Course"]["title"] == "FastAPI Fundamentals"

    def test_get_own_order(self, client, db, user, course, auth_headers):
        order_id = self.make_order(db, user, course, datetime(2024, 1, 1))

        response = client.get(f"/orders/{order_id}", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["OrderDetails"][0]["CourseId"] == course.id

    def test_other_users_order_forbidden(self, client, db, user, course):
        order_id = self.make_order(db, user, course, datetime(2024, 1, 1))
        stranger = User(email="stranger@example.com", password="secret123", full_name="Stranger")
        db.add(stranger)
        db.commit()

        response = client.get(
            f"/orders/{order_id}",
            headers={"Authorization": f"Bearer {sign_token({'id': stranger.id})}"}
        )

        assert response.status_code == 403
        assert response.json()["message"] == "You don't have permission to view this order"

    def test_missing_order(self, client, auth_headers):
        response = client.get("/orders/9999", headers=auth_headers)

        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"


class FakeMidtransClient:
    def __init__(self):
        self.parameters = []
        self.transactions = self

    def create_transaction(self, parameter):
        self.parameters.append(parameter)
        return {"token": "tok-123", "redirect_url": "https://app.sandbox.midtrans.com/snap/v4/redirection/tok-123"}

    def notification(self, payload):
        return {"order_id": payload["order_id"], "transaction_status": "capture", "fraud_status": "challenge"}

    def status(self, order_id):
        return {"order_id": order_id, "transaction_status": "pending"}


class TestPaymentService:
    @pytest.fixture
    def gateway(self, monkeypatch):
        from elearning.services.payment_service import PaymentService

        fake = FakeMidtransClient()
        service = PaymentService("server-key", "client-key", "http://localhost:5173/")
        monkeypatch.setattr(service, "_snap", lambda: fake)
        monkeypatch.setattr(service, "_core", lambda: fake)
        return service, fake

    def test_create_session_builds_snap_parameters(self, gateway):
        service, fake = gateway

        session = service.create_session(
            order_id="ORDER-1-1700000000000",
            amount=500000,
            name="Budi",
            email="budi@example.com",
            items=[{"id": 1, "name": "Flask Basics", "price": 500000, "quantity": 1}]
        )

        assert session == {
            "token": "tok-123",
            "redirect_url": "https://app.sandbox.midtrans.com/snap/v4/redirection/tok-123"
        }
        parameter = fake.parameters[0]
        assert parameter["transaction_details"] == {"order_id": "ORDER-1-1700000000000", "gross_amount": 500000}
        assert parameter["customer_details"]["email"] == "budi@example.com"
        assert parameter["callbacks"]["finish"] == (
            "http://localhost:5173/payment?status=success&orderId=ORDER-1-1700000000000"
        )

    def test_verify_notification(self, gateway):
        service, _ = gateway

        status = service.verify_notification({"order_id": "ORDER-2-1"})

        assert status == {"order_id": "ORDER-2-1", "transaction_status": "capture", "fraud_status": "challenge"}
        assert resolve_payment_status(status["transaction_status"], status["fraud_status"]) == "challenge"

    def test_check_transaction_status(self, gateway):
        service, _ = gateway

        assert service.check_transaction_status("ORDER-3-1")["transaction_status"] == "pending"
