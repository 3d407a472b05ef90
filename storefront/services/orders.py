# storefront/services/orders.py
# Бизнес-логика заказов: списки, создание, переходы статусов, статистика.
#
# Переходы статусов выполняются условным UPDATE ... WHERE order_status IN (...),
# поэтому два одновременных запроса (cancel + complete) не перезапишут друг друга.
import logging
from datetime import datetime

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload, selectinload

from storefront.core.errors import Forbidden, InvalidState, NotFound, PaymentRequired, ValidationError
from storefront.models.order import OPEN_STATUSES, Order, OrderItem, OrderStatus, PaymentMethod
from storefront.models.product import Product
from storefront.models.user import User
from storefront.models.voucher import Voucher
from storefront.schemas.order import OrderCreate, OrderUpdate, PaymentResult
from storefront.services.features import Page, Pagination, QueryFeatures

logger = logging.getLogger(__name__)

ORDER_FILTERS = {
    "orderStatus": Order.order_status,
    "paymentMethod": Order.payment_method,
}

ORDER_SORT_FIELDS = {
    "createdAt": Order.created_at,
    "totalPrice": Order.total_price,
    "orderStatus": Order.order_status,
    "paymentMethod": Order.payment_method,
    "id": Order.id,
}


def _with_details(query):
    """Подгружает пользователя, ваучер и товары позиций одним набором запросов."""
    return query.options(
        joinedload(Order.user),
        joinedload(Order.voucher),
        selectinload(Order.items).joinedload(OrderItem.product),
    )


def _get_or_404(db: Session, order_id: int) -> Order:
    order = _with_details(db.query(Order)).filter(Order.id == order_id).first()
    if order is None:
        raise NotFound("No order found with that ID")
    return order


def list_orders(db: Session, params: dict, pagination: Pagination) -> Page:
    """Все заказы с фильтрами orderStatus / paymentMethod, сортировкой и пагинацией.

    totalPages считается от общего числа заказов в коллекции, а не от отфильтрованного.
    """
    features = (
        QueryFeatures(_with_details(db.query(Order)), params, ORDER_FILTERS, ORDER_SORT_FIELDS)
        .filter()
        .sort()
        .paginate(pagination)
    )
    orders = features.all()
    total = db.query(func.count(Order.id)).scalar()
    return Page(items=orders, total=total, pagination=pagination)


def list_orders_for_user(db: Session, user: User, params: dict, pagination: Pagination) -> Page:
    """Заказы текущего пользователя. total считается только по его заказам."""
    base = db.query(Order).filter(Order.user_id == user.id)
    features = (
        QueryFeatures(_with_details(base), params, ORDER_FILTERS, ORDER_SORT_FIELDS)
        .filter()
        .sort()
        .paginate(pagination)
    )
    orders = features.all()
    total = db.query(func.count(Order.id)).filter(Order.user_id == user.id).scalar()
    return Page(items=orders, total=total, pagination=pagination)


def get_order(db: Session, order_id: int, requester: User | None = None) -> Order:
    """Заказ с товарами и ваучером. Обычный пользователь видит только свои заказы."""
    order = _get_or_404(db, order_id)
    if requester is not None and not requester.is_admin and order.user_id != requester.id:
        raise Forbidden("You do not own this order")
    return order


def _apply_payment_result(order: Order, result: PaymentResult) -> None:
    order.payment_id = result.id
    order.payment_status = result.status
    order.payment_update_time = result.update_time
    order.payment_email = result.email_address


def create_order(db: Session, payload: OrderCreate, user: User) -> Order:
    if not payload.payment_method:
        raise ValidationError("Payment method is required")
    try:
        method = PaymentMethod(payload.payment_method)
    except ValueError:
        raise ValidationError("Invalid payment method")

    if method is PaymentMethod.paypal and not (payload.payment_result and payload.payment_result.id):
        raise ValidationError("PayPal payment details required")

    if payload.voucher is not None and db.get(Voucher, payload.voucher) is None:
        raise ValidationError(f"Voucher {payload.voucher} does not exist")

    product_ids = {item.product for item in payload.order_items}
    if product_ids:
        found = {pid for (pid,) in db.query(Product.id).filter(Product.id.in_(product_ids))}
        missing = sorted(product_ids - found)
        if missing:
            raise ValidationError(f"Products do not exist: {', '.join(map(str, missing))}")

    total_price = payload.total_price
    if total_price is None:
        total_price = sum(item.price * item.quantity for item in payload.order_items)

    order = Order(
        user_id=user.id,
        voucher_id=payload.voucher,
        total_price=total_price,
        payment_method=method,
        order_status=OrderStatus.new,
        shipping_address=payload.shipping_address,
        phone=payload.phone,
        items=[
            OrderItem(product_id=item.product, quantity=item.quantity, price=item.price)
            for item in payload.order_items
        ],
    )
    if payload.payment_result is not None:
        _apply_payment_result(order, payload.payment_result)

    db.add(order)
    db.commit()
    logger.info(f"Order {order.id} created by user {user.id} ({method.value})")
    return _get_or_404(db, order.id)


def _transition(db: Session, order: Order, values: dict, *criteria) -> Order:
    """Условный атомарный UPDATE. Если ни одна строка не изменилась, состояние ушло."""
    updated = (
        db.query(Order)
        .filter(Order.id == order.id, *criteria)
        .update(values, synchronize_session=False)
    )
    if updated == 0:
        db.rollback()
        raise InvalidState("Order was modified concurrently, please retry")
    db.commit()
    logger.info(f"Order {order.id} -> {values.get(Order.order_status, order.order_status).value}")
    return _get_or_404(db, order.id)


def _ensure_open(order: Order) -> None:
    if order.is_terminal:
        raise InvalidState("Cannot update completed order")


def accept_order(db: Session, order_id: int) -> Order:
    """new/processing -> processing. Только администратор (проверяется в роутере)."""
    order = _get_or_404(db, order_id)
    _ensure_open(order)
    return _transition(
        db, order,
        {Order.order_status: OrderStatus.processing},
        Order.order_status.in_(OPEN_STATUSES),
    )


def cancel_order(db: Session, order_id: int, requester: User) -> Order:
    """Отмена заказа (-> fail).

    Администратор может отменить любой незавершённый заказ;
    пользователь: только свой и только пока он в статусе new.
    """
    order = _get_or_404(db, order_id)
    _ensure_open(order)

    criteria = [Order.order_status.in_(OPEN_STATUSES)]
    if not requester.is_admin:
        if order.user_id != requester.id:
            raise Forbidden("You do not own this order")
        if order.order_status != OrderStatus.new:
            raise Forbidden("Order cannot be cancelled after processing has started")
        criteria = [Order.order_status == OrderStatus.new, Order.user_id == requester.id]

    return _transition(db, order, {Order.order_status: OrderStatus.fail}, *criteria)


def _complete(db: Session, order: Order) -> Order:
    if order.payment_method != PaymentMethod.cod and not order.payment_status:
        raise PaymentRequired("Please pay for the order through PayPal")

    return _transition(
        db, order,
        {
            Order.order_status: OrderStatus.done,
            Order.payment_status: True,
            Order.payment_update_time: datetime.utcnow(),
        },
        Order.order_status.in_(OPEN_STATUSES),
        or_(Order.payment_method == PaymentMethod.cod, Order.payment_status.is_(True)),
    )


def complete_order(db: Session, order_id: int) -> Order:
    """Завершение заказа (-> done). Не-COD заказ должен быть уже оплачен."""
    order = _get_or_404(db, order_id)
    _ensure_open(order)
    return _complete(db, order)


def _advance(db: Session, order: Order, target: OrderStatus) -> Order:
    """Смена статуса из общего обновления. Только вперёд: new -> processing -> done/fail."""
    _ensure_open(order)
    if target is OrderStatus.new:
        raise InvalidState(f"Cannot move order from {order.order_status.value} back to new")
    if target is OrderStatus.done:
        return _complete(db, order)
    if target is OrderStatus.processing:
        return _transition(
            db, order,
            {Order.order_status: OrderStatus.processing},
            Order.order_status == OrderStatus.new,
        )
    return _transition(
        db, order,
        {Order.order_status: OrderStatus.fail},
        Order.order_status.in_(OPEN_STATUSES),
    )


def update_order(db: Session, order_id: int, changes: OrderUpdate) -> Order:
    """Общее обновление заказа администратором."""
    order = _get_or_404(db, order_id)
    data = changes.model_dump(exclude_unset=True)

    new_status = data.pop("order_status", None)
    payment = data.pop("payment_result", None)
    for key, value in data.items():
        if key == "total_price" and value is None:
            continue
        setattr(order, key, value)
    if payment is not None:
        _apply_payment_result(order, PaymentResult(**payment))

    if new_status is not None and new_status != order.order_status:
        # Остальные изменения уходят в той же транзакции, что и смена статуса
        db.flush()
        return _advance(db, order, new_status)

    db.commit()
    return _get_or_404(db, order.id)


def get_capturable_order(db: Session, order_id: int, requester: User) -> Order:
    """Заказ, в который можно записать захват PayPal. Проверяется до обращения к шлюзу."""
    order = _get_or_404(db, order_id)
    if not requester.is_admin and order.user_id != requester.id:
        raise Forbidden("You do not own this order")
    if order.payment_method != PaymentMethod.paypal:
        raise ValidationError("Order is not paid through PayPal")
    if order.is_terminal:
        raise InvalidState(f"Cannot record payment for a {order.order_status.value} order")
    return order


def record_payment_capture(
    db: Session, order_id: int, requester: User, transaction_id: str, payer_email: str | None = None
) -> Order:
    """Записывает успешный захват PayPal в наш заказ."""
    order = get_capturable_order(db, order_id, requester)
    order.payment_id = transaction_id
    order.payment_status = True
    order.payment_update_time = datetime.utcnow()
    order.payment_email = payer_email
    db.commit()
    logger.info(f"Order {order.id} paid via PayPal ({order.payment_id})")
    return _get_or_404(db, order.id)


def get_order_stats(db: Session) -> dict:
    """Сводка для админ-панели: по статусам, по дням (только done) и число пользователей."""
    by_status = (
        db.query(
            Order.order_status,
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_price), 0.0),
        )
        .group_by(Order.order_status)
        .all()
    )

    day = func.date(Order.created_at)
    daily = (
        db.query(day, func.count(Order.id), func.coalesce(func.sum(Order.total_price), 0.0))
        .filter(Order.order_status == OrderStatus.done)
        .group_by(day)
        .order_by(day)
        .all()
    )

    num_users = db.query(func.count(User.id)).scalar()

    return {
        "orderStats": [
            {"status": status.value, "numOrder": count, "sales": float(sales)}
            for status, count, sales in by_status
        ],
        "dailyOrders": [
            {"date": str(date), "orders": count, "sales": float(sales)}
            for date, count, sales in daily
        ],
        "users": [{"numUsers": num_users}],
    }
