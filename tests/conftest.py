"""Pytest fixtures for storefront tests."""

import os

# przed importem storefront: sqlite w pamieci, celery bez brokera
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"

from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import storefront.data.models  # noqa: F401
from storefront.api.deps import get_notification_service, get_order_number_service
from storefront.data.database import Base, get_db
from storefront.data.models.coupon import CouponModel
from storefront.data.models.product import ProductModel
from storefront.domain.pricing import DeliveryPolicy, utcnow
from storefront.main import create_app
from storefront.services.cart_service import CartService
from storefront.services.coupon_service import CouponService
from storefront.services.order_service import OrderService

ADDRESS = {
    "first_name": "Aiko",
    "last_name": "Tanaka",
    "email": "aiko@example.com",
    "phone": "+48 600 100 200",
    "street": "Kwiatowa 1",
    "city": "Warszawa",
    "zip_code": "00-001",
    "country": "Poland",
}


class FakeOrderNumbers:
    """Sekwencja numerow bez redisa."""

    def __init__(self):
        self.seq = 0

    def next_order_number(self) -> str:
        self.seq += 1
        return f"ORD-TEST-{self.seq:04d}"


class RecordingNotifications:
    def __init__(self):
        self.sent = []

    def send_order_notification(self, user_id, order_number, status):
        self.sent.append((user_id, order_number, status))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=True, expire_on_commit=True)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def products(db):
    """Three products: two with legacy numeric ids, one created after the migration."""
    items = {
        "ramen": ProductModel(
            legacy_id=1,
            name="Tonkotsu Ramen",
            description="Pork broth",
            price=Decimal("10.00"),
            image="/img/ramen.png",
            category="ramen",
            badges=["Bestseller"],
            featured=True,
        ),
        "gyoza": ProductModel(
            legacy_id=2,
            name="Gyoza",
            description="Dumplings",
            price=Decimal("25.50"),
            image="/img/gyoza.png",
            category="starters",
        ),
        "platter": ProductModel(
            legacy_id=None,
            name="Sushi Platter",
            description="Chef's selection",
            price=Decimal("120.00"),
            image="/img/platter.png",
            category="sushi",
        ),
    }
    db.add_all(items.values())
    db.commit()
    for product in items.values():
        db.refresh(product)
    return items


def make_coupon(**overrides) -> CouponModel:
    now = utcnow()
    values = {
        "code": "TEST",
        "description": None,
        "discount_type": "percentage",
        "discount_value": Decimal("10"),
        "min_amount": Decimal("0"),
        "max_discount": None,
        "valid_from": now - timedelta(days=1),
        "valid_until": now + timedelta(days=30),
        "usage_limit": None,
        "used_count": 0,
        "is_active": True,
        "applicable_to": "all",
    }
    values.update(overrides)
    return CouponModel(**values)


@pytest.fixture
def coupons(db):
    now = utcnow()
    items = {
        "SAVE20": make_coupon(
            code="SAVE20",
            discount_value=Decimal("20"),
            min_amount=Decimal("30"),
            max_discount=Decimal("100"),
            usage_limit=500,
        ),
        "FLAT50": make_coupon(
            code="FLAT50",
            discount_type="fixed",
            discount_value=Decimal("50"),
            min_amount=Decimal("100"),
            usage_limit=200,
        ),
        "OLD10": make_coupon(
            code="OLD10",
            valid_from=now - timedelta(days=60),
            valid_until=now - timedelta(days=1),
        ),
        "PAUSED": make_coupon(code="PAUSED", is_active=False),
        "SOON": make_coupon(code="SOON", valid_from=now + timedelta(days=2)),
        "LASTONE": make_coupon(code="LASTONE", usage_limit=1, used_count=1),
    }
    db.add_all(items.values())
    db.commit()
    return items


@pytest.fixture
def order_numbers():
    return FakeOrderNumbers()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def delivery_policy():
    return DeliveryPolicy(flat_fee=Decimal("4.99"), free_above=Decimal("50"))


@pytest.fixture
def cart_service(db):
    return CartService(db)


@pytest.fixture
def coupon_service(db):
    return CouponService(db)


@pytest.fixture
def order_service(db, order_numbers, notifications, delivery_policy):
    return OrderService(
        db,
        order_numbers=order_numbers,
        notifications=notifications,
        delivery_policy=delivery_policy,
    )


@pytest.fixture
def address():
    return dict(ADDRESS)


@pytest.fixture
def client(session_factory, products, coupons, order_numbers, notifications):
    """Test client with the database and infrastructure dependencies overridden."""
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_order_number_service] = lambda: order_numbers
    app.dependency_overrides[get_notification_service] = lambda: notifications

    return TestClient(app)


@pytest.fixture
def user_headers():
    return {"X-User-Id": "user-1"}


@pytest.fixture
def admin_headers():
    return {"X-User-Id": "admin-1", "X-User-Role": "admin"}
