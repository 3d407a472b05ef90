# storefront/models/order.py
# Модели Order и OrderItem: позиции, оплата и статус заказа.
from sqlalchemy import Column, Integer, String, ForeignKey, Float, DateTime, Enum, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
from storefront.db.base import Base
import enum

class OrderStatus(str, enum.Enum):
    new = "new"
    processing = "processing"
    done = "done"
    fail = "fail"

# Из этих статусов переходов нет
TERMINAL_STATUSES = (OrderStatus.done, OrderStatus.fail)
OPEN_STATUSES = (OrderStatus.new, OrderStatus.processing)

class PaymentMethod(str, enum.Enum):
    cod = "COD"
    paypal = "PayPal"

class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    voucher_id = Column(Integer, ForeignKey("vouchers.id"), nullable=True)
    total_price = Column(Float, nullable=False, default=0.0)
    payment_method = Column(Enum(PaymentMethod, values_callable=lambda e: [m.value for m in e]), nullable=False)
    order_status = Column(Enum(OrderStatus), default=OrderStatus.new, nullable=False, index=True)
    shipping_address = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    # paymentResult
    payment_status = Column(Boolean, default=False, nullable=False)
    payment_update_time = Column(DateTime, nullable=True)
    payment_id = Column(String, nullable=True)
    payment_email = Column(String, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User")
    voucher = relationship("Voucher")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    @property
    def is_terminal(self) -> bool:
        return self.order_status in TERMINAL_STATUSES

class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Integer, default=1, nullable=False)
    price = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
