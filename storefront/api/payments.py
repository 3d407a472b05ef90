# storefront/api/payments.py
# Роуты оплаты через PayPal: создание платежа и его захват.
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.core.security import get_current_user
from storefront.db.session import get_db
from storefront.models.user import User
from storefront.schemas.order import serialize_order
from storefront.schemas.payment import PayPalCapture, PayPalOrderCreate
from storefront.services import orders as order_service
from storefront.services.paypal import PayPalClient, capture_transaction_id, get_paypal_client, payer_email

router = APIRouter()


@router.post("/paypal/orders")
def create_paypal_order(
    payload: PayPalOrderCreate,
    paypal: PayPalClient = Depends(get_paypal_client),
    _: User = Depends(get_current_user),
):
    return {"status": "success", "data": paypal.create_order(payload.order_total)}


@router.post("/paypal/capture")
def capture_paypal_payment(
    payload: PayPalCapture,
    paypal: PayPalClient = Depends(get_paypal_client),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Захват платежа. Если передан orderId, результат записывается в наш заказ.

    Заказ проверяется до захвата: деньги не списываются, если записать их некуда.
    """
    if payload.order_id is not None:
        order_service.get_capturable_order(db, payload.order_id, current_user)

    capture = paypal.capture_order(payload.paypal_order_id)
    response = {"status": "success", "data": capture}
    if payload.order_id is not None:
        order = order_service.record_payment_capture(
            db,
            payload.order_id,
            current_user,
            transaction_id=capture_transaction_id(capture),
            payer_email=payer_email(capture),
        )
        response["order"] = serialize_order(order)
    return response
