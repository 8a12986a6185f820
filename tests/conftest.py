import os

# Test environment must be in place before the application modules read settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["REDIS_URL"] = ""
os.environ["RATE_LIMIT_PER_MINUTE"] = "100000"
os.environ["RATE_LIMIT_PER_HOUR"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("GEMINI_API_KEY", None)

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from elearning.database import Base, SessionLocal, engine, init_db  # noqa: E402
from elearning.main import app  # noqa: E402
from elearning.models import Category, Course, User  # noqa: E402
from elearning.services.gemini_service import get_gemini_service  # noqa: E402
from elearning.services.payment_service import get_payment_service  # noqa: E402
from elearning.utils.security import sign_token  # noqa: E402


class FakeGemini:
    """Stands in for GeminiService; replies are consumed in order"""

    def __init__(self):
        self.replies = []
        self.prompts = []

    def queue(self, *replies):
        self.replies.extend(replies)

    async def generate_content(self, prompt):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakePayment:
    """Stands in for PaymentService without touching Midtrans"""

    def __init__(self):
        self.sessions = []
        self.fail = False
        self.notification_status = {
            "order_id": None,
            "transaction_status": "settlement",
            "fraud_status": None,
        }

    def create_session(self, order_id, amount, name, email, items):
        if self.fail:
            raise RuntimeError("Midtrans is down")
        self.sessions.append({"order_id": order_id, "amount": amount, "email": email, "items": items})
        return {"token": "snap-token", "redirect_url": f"https://app.sandbox.midtrans.com/snap/v2/vtweb/{order_id}"}

    def verify_notification(self, payload):
        status = dict(self.notification_status)
        status["order_id"] = status["order_id"] or payload.get("order_id")
        return status


@pytest.fixture
def fake_gemini():
    return FakeGemini()


@pytest.fixture
def fake_payment():
    return FakePayment()


@pytest.fixture
def client(fake_gemini, fake_payment):
    app.dependency_overrides[get_gemini_service] = lambda: fake_gemini
    app.dependency_overrides[get_payment_service] = lambda: fake_payment

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clean_tables():
    init_db()
    yield
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture
def db(client):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user(db):
    user = User(email="budi@example.com", password="secret123", full_name="Budi Santoso", age=25)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {sign_token({'id': user.id})}"}


@pytest.fixture
def category(db):
    category = Category(cat_name="Backend", prog_lang="Python")
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture
def course(db, category):
    course = Course(
        title="FastAPI Fundamentals",
        price=1500000,
        rating=4.5,
        total_enrollment=10,
        start_date=datetime(2024, 3, 1),
        description="Build APIs with FastAPI",
        course_img="https://example.com/fastapi.png",
        duration_hours=12,
        category_id=category.id
    )
    db.add(course)
    db.commit()
    db.refresh(course)
    return course
