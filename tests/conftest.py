# tests/conftest.py
# Общие фикстуры: in-memory SQLite, TestClient и фабрики сущностей.
import os

# Настройки читаются при импорте storefront, поэтому окружение задаём заранее
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["ENVIRONMENT"] = "development"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from storefront.core.security import create_access_token
from storefront.db.base import Base
from storefront.db.session import SessionLocal, engine
from storefront.main import app
from storefront.models.order import Order, OrderItem, OrderStatus, PaymentMethod
from storefront.models.product import Product
from storefront.models.user import RoleEnum, User
from storefront.models.voucher import Voucher


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    app.dependency_overrides.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    # Без контекстного менеджера: lifespan (create_all / dispose) не запускается
    return TestClient(app)


def _make_user(db, email, role=RoleEnum.user, **extra):
    user = User(email=email, hashed_password="not-a-real-hash", role=role, **extra)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return _make_user(db, "buyer@example.com", first_name="Ann", last_name="Buyer")


@pytest.fixture
def other_user(db):
    return _make_user(db, "other@example.com")


@pytest.fixture
def admin(db):
    return _make_user(db, "admin@example.com", role=RoleEnum.admin)


def headers_for(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
def auth():
    return headers_for


@pytest.fixture
def product(db):
    item = Product(name="Linen shirt", sku="SHIRT-1", color="white", cover_image="shirt.jpg", price=25.0)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@pytest.fixture
def voucher(db):
    item = Voucher(code="SPRING10", discount=10)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


@pytest.fixture
def make_order(db):
    """Фабрика заказов напрямую через ORM, минуя API."""

    def factory(owner, status=OrderStatus.new, method=PaymentMethod.cod, total=50.0,
                paid=False, created_at=None, product=None):
        order = Order(
            user_id=owner.id,
            total_price=total,
            payment_method=method,
            order_status=status,
            payment_status=paid,
            created_at=created_at or datetime.utcnow(),
        )
        if product is not None:
            order.items = [OrderItem(product_id=product.id, quantity=2, price=product.price)]
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return factory
