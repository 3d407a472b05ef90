# storefront/schemas/payment.py
from pydantic import Field

from storefront.schemas.base import CamelModel


class PayPalOrderCreate(CamelModel):
    order_total: float = Field(..., gt=0)


class PayPalCapture(CamelModel):
    # id заказа на стороне PayPal
    paypal_order_id: str = Field(..., alias="orderID", min_length=1)
    # необязательный id нашего заказа: при успешном захвате оплата записывается в него
    order_id: int | None = None
