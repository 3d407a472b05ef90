import pytest

from storefront.core.errors import Forbidden, InvalidState, NotFound, PaymentRequired, ValidationError
from storefront.models.order import Order, OrderStatus, PaymentMethod
from storefront.schemas.order import OrderCreate, OrderUpdate
from storefront.services import orders as order_service
from storefront.services.features import Pagination


def test_list_orders_never_exceeds_limit(db, user, make_order):
    for _ in range(7):
        make_order(user)

    for limit in (1, 3, 7, 20):
        page = order_service.list_orders(db, {}, Pagination(page=1, limit=limit))
        assert len(page.items) <= limit
        assert page.total_pages == -(-7 // limit)


def test_create_order_sets_owner_and_status(db, user):
    order = order_service.create_order(db, OrderCreate(payment_method="COD"), user)

    assert order.user_id == user.id
    assert order.order_status == OrderStatus.new
    assert order.payment_method == PaymentMethod.cod


@pytest.mark.parametrize("method", [None, "", "cash", "paypal"])
def test_create_order_rejects_bad_methods(db, user, method):
    with pytest.raises(ValidationError):
        order_service.create_order(db, OrderCreate(payment_method=method), user)


def test_create_order_rejects_unknown_voucher(db, user):
    with pytest.raises(ValidationError):
        order_service.create_order(db, OrderCreate(payment_method="COD", voucher=42), user)


def test_cancel_checks_ownership_before_update(db, user, other_user, make_order):
    order = make_order(other_user)

    with pytest.raises(Forbidden):
        order_service.cancel_order(db, order.id, user)

    db.expire_all()
    assert db.get(Order, order.id).order_status == OrderStatus.new


def test_complete_requires_payment_for_paypal(db, user, make_order):
    order = make_order(user, method=PaymentMethod.paypal)

    with pytest.raises(PaymentRequired):
        order_service.complete_order(db, order.id)


def test_get_missing_order(db):
    with pytest.raises(NotFound):
        order_service.get_order(db, 1)


def test_transition_loses_race_to_concurrent_update(db, user, make_order):
    """Статус изменился между чтением и записью: условный UPDATE не трогает строку."""
    order = make_order(user)
    loaded = order_service.get_order(db, order.id)

    # "другой запрос" успел завершить заказ
    db.query(Order).filter(Order.id == order.id).update({Order.order_status: OrderStatus.fail})
    db.commit()

    with pytest.raises(InvalidState):
        order_service._transition(
            db, loaded,
            {Order.order_status: OrderStatus.done},
            Order.order_status.in_((OrderStatus.new, OrderStatus.processing)),
        )

    db.expire_all()
    assert db.get(Order, order.id).order_status == OrderStatus.fail


def test_record_payment_capture(db, user, make_order):
    order = make_order(user, method=PaymentMethod.paypal)

    updated = order_service.record_payment_capture(db, order.id, user, "TXN-1", "payer@example.com")

    assert updated.payment_status is True
    assert updated.payment_id == "TXN-1"
    assert updated.payment_email == "payer@example.com"
    assert updated.payment_update_time is not None


def test_record_payment_capture_rejects_foreign_order(db, user, other_user, make_order):
    order = make_order(other_user, method=PaymentMethod.paypal)

    with pytest.raises(Forbidden):
        order_service.record_payment_capture(db, order.id, user, "TXN-1")


def test_record_payment_capture_rejects_cod_order(db, user, make_order):
    order = make_order(user, method=PaymentMethod.cod)

    with pytest.raises(ValidationError):
        order_service.record_payment_capture(db, order.id, user, "TXN-1")


def test_record_payment_capture_rejects_cancelled_order(db, user, make_order):
    order = make_order(user, method=PaymentMethod.paypal, status=OrderStatus.fail)

    with pytest.raises(InvalidState):
        order_service.record_payment_capture(db, order.id, user, "TXN-1")

    db.expire_all()
    assert db.get(Order, order.id).payment_status is False


def test_update_order_rejects_backward_status(db, user, make_order):
    order = make_order(user, status=OrderStatus.processing)

    with pytest.raises(InvalidState):
        order_service.update_order(db, order.id, OrderUpdate(order_status=OrderStatus.new))


def test_update_order_done_requires_payment(db, user, make_order):
    order = make_order(user, status=OrderStatus.new, method=PaymentMethod.paypal)

    with pytest.raises(PaymentRequired):
        order_service.update_order(db, order.id, OrderUpdate(order_status=OrderStatus.done))
