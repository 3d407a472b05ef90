# storefront/schemas/order.py
# Схемы заказов: входные тела запросов и форма ответа.
from datetime import datetime

from pydantic import Field

from storefront.models.order import Order, OrderStatus
from storefront.schemas.base import CamelModel
from storefront.schemas.user import UserBrief


class PaymentResult(CamelModel):
    id: str | None = None
    status: bool = False
    update_time: datetime | None = None
    email_address: str | None = None


class OrderItemIn(CamelModel):
    product: int
    quantity: int = Field(1, ge=1)
    price: float = Field(..., ge=0)


class OrderCreate(CamelModel):
    # paymentMethod проверяется в сервисе, чтобы вернуть 400 с понятным сообщением
    payment_method: str | None = None
    payment_result: PaymentResult | None = None
    order_items: list[OrderItemIn] = []
    total_price: float | None = Field(None, ge=0)
    voucher: int | None = None
    shipping_address: str | None = None
    phone: str | None = None


class OrderUpdate(CamelModel):
    order_status: OrderStatus | None = None
    payment_result: PaymentResult | None = None
    total_price: float | None = Field(None, ge=0)
    shipping_address: str | None = None
    phone: str | None = None


class ProductBrief(CamelModel):
    id: int
    name: str
    sku: str | None = None
    color: str | None = None
    cover_image: str | None = None
    price: float


class VoucherBrief(CamelModel):
    id: int
    discount: float


class OrderItemOut(CamelModel):
    product: ProductBrief | None = None
    quantity: int
    price: float


class OrderOut(CamelModel):
    id: int
    user: UserBrief | None = None
    order_items: list[OrderItemOut] = []
    total_price: float
    payment_method: str
    payment_result: PaymentResult
    order_status: OrderStatus
    voucher: VoucherBrief | None = None
    shipping_address: str | None = None
    phone: str | None = None
    created_at: datetime | None = None


def serialize_order(order: Order) -> dict:
    """ORM Order -> JSON-совместимый dict с подгруженными товарами и ваучером."""
    return OrderOut(
        id=order.id,
        user=UserBrief.model_validate(order.user) if order.user else None,
        order_items=[
            OrderItemOut(
                product=ProductBrief.model_validate(item.product) if item.product else None,
                quantity=item.quantity,
                price=item.price,
            )
            for item in order.items
        ],
        total_price=order.total_price,
        payment_method=order.payment_method.value,
        payment_result=PaymentResult(
            id=order.payment_id,
            status=order.payment_status,
            update_time=order.payment_update_time,
            email_address=order.payment_email,
        ),
        order_status=order.order_status,
        voucher=VoucherBrief.model_validate(order.voucher) if order.voucher else None,
        shipping_address=order.shipping_address,
        phone=order.phone,
        created_at=order.created_at,
    ).dump()
