# storefront/api/orders.py
# Роуты заказов: списки, создание, переходы статусов и статистика для админки.
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from storefront.core.config import settings
from storefront.core.security import get_current_user, require_admin
from storefront.db.session import get_db
from storefront.models.order import OrderStatus, PaymentMethod
from storefront.models.user import User
from storefront.schemas.order import OrderCreate, OrderUpdate, serialize_order
from storefront.services import orders as order_service
from storefront.services.features import Page, Pagination, limit_fields

router = APIRouter()


def _page_response(page: Page, fields: str | None = None) -> dict:
    return {
        "status": "success",
        "results": len(page.items),
        "totalPages": page.total_pages,
        "currentPage": page.pagination.page,
        "data": {"data": [limit_fields(serialize_order(o), fields) for o in page.items]},
    }


def _order_response(order) -> dict:
    return {"status": "success", "data": {"data": serialize_order(order)}}


@router.get("")
def list_orders(
    order_status: OrderStatus | None = Query(None, alias="orderStatus"),
    payment_method: PaymentMethod | None = Query(None, alias="paymentMethod"),
    sort: str | None = None,
    fields: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.ORDERS_PAGE_LIMIT, ge=1),
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    """Все заказы (админ). Новые сверху, если sort не задан."""
    params = {"orderStatus": order_status, "paymentMethod": payment_method, "sort": sort}
    result = order_service.list_orders(db, params, Pagination(page=page, limit=limit))
    return _page_response(result, fields)


@router.get("/mine")
def list_my_orders(
    order_status: OrderStatus | None = Query(None, alias="orderStatus"),
    payment_method: PaymentMethod | None = Query(None, alias="paymentMethod"),
    sort: str | None = None,
    fields: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.MY_ORDERS_PAGE_LIMIT, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    params = {"orderStatus": order_status, "paymentMethod": payment_method, "sort": sort}
    result = order_service.list_orders_for_user(db, current_user, params, Pagination(page=page, limit=limit))
    return _page_response(result, fields)


@router.get("/stats")
def order_stats(db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return {"status": "success", "data": order_service.get_order_stats(db)}


@router.get("/{order_id}")
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _order_response(order_service.get_order(db, order_id, current_user))


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _order_response(order_service.create_order(db, payload, current_user))


@router.patch("/{order_id}")
def update_order(
    order_id: int,
    payload: OrderUpdate,
    db: Session = Depends(get_db),
    _: User = Depends(require_admin),
):
    return _order_response(order_service.update_order(db, order_id, payload))


@router.patch("/{order_id}/accept")
def accept_order(order_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return _order_response(order_service.accept_order(db, order_id))


@router.patch("/{order_id}/cancel")
def cancel_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _order_response(order_service.cancel_order(db, order_id, current_user))


@router.patch("/{order_id}/complete")
def complete_order(order_id: int, db: Session = Depends(get_db), _: User = Depends(require_admin)):
    return _order_response(order_service.complete_order(db, order_id))
