# storefront/api/reviews.py
# Роуты отзывов. Все требуют авторизации, правка и удаление: только админ.
# Список и создание доступны также как /products/{product_id}/reviews.
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from storefront.core.security import get_current_user, require_admin
from storefront.db.session import get_db
from storefront.models.user import User
from storefront.schemas.review import ReviewCreate, ReviewOut, ReviewUpdate
from storefront.services import reviews as review_service
from storefront.services.features import Pagination

router = APIRouter(dependencies=[Depends(get_current_user)])


def _review_response(review) -> dict:
    return {"status": "success", "data": {"data": ReviewOut.model_validate(review).dump()}}


def _list(db: Session, product: int | None, user: int | None, sort: str | None, page: int, limit: int) -> dict:
    params = {"product": product, "user": user, "sort": sort}
    result = review_service.list_reviews(db, params, Pagination(page=page, limit=limit))
    return {
        "status": "success",
        "results": len(result.items),
        "totalPages": result.total_pages,
        "currentPage": page,
        "data": {"data": [ReviewOut.model_validate(r).dump() for r in result.items]},
    }


@router.get("/reviews")
def list_reviews(
    product: int | None = None,
    user: int | None = None,
    sort: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    return _list(db, product, user, sort, page, limit)


@router.get("/products/{product_id}/reviews")
def list_product_reviews(
    product_id: int,
    user: int | None = None,
    sort: str | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(100, ge=1),
    db: Session = Depends(get_db),
):
    return _list(db, product_id, user, sort, page, limit)


@router.post("/reviews", status_code=status.HTTP_201_CREATED)
def create_review(
    payload: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _review_response(review_service.create_review(db, payload, current_user))


@router.post("/products/{product_id}/reviews", status_code=status.HTTP_201_CREATED)
def create_product_review(
    product_id: int,
    payload: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _review_response(review_service.create_review(db, payload, current_user, product_id=product_id))


@router.get("/reviews/{review_id}")
def get_review(review_id: int, db: Session = Depends(get_db)):
    return _review_response(review_service.get_review(db, review_id))


@router.patch("/reviews/{review_id}", dependencies=[Depends(require_admin)])
def update_review(review_id: int, payload: ReviewUpdate, db: Session = Depends(get_db)):
    return _review_response(review_service.update_review(db, review_id, payload))


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(require_admin)])
def delete_review(review_id: int, db: Session = Depends(get_db)):
    review_service.delete_review(db, review_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
