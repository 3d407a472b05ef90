# storefront/services/reviews.py
# Отзывы о товарах: список, создание с проверками, правка и удаление администратором.
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from storefront.core.errors import NotFound, ValidationError
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.product import Product
from storefront.models.review import Review
from storefront.models.user import User
from storefront.schemas.review import ReviewCreate, ReviewUpdate
from storefront.services.features import Page, Pagination, QueryFeatures

logger = logging.getLogger(__name__)

REVIEW_FILTERS = {
    "product": Review.product_id,
    "user": Review.user_id,
    "rating": Review.rating,
}

REVIEW_SORT_FIELDS = {
    "createdAt": Review.created_at,
    "rating": Review.rating,
    "id": Review.id,
}


def _get_or_404(db: Session, review_id: int) -> Review:
    review = db.query(Review).options(joinedload(Review.user)).filter(Review.id == review_id).first()
    if review is None:
        raise NotFound("No review found with that ID")
    return review


def _recalc_product_ratings(db: Session, product_id: int) -> None:
    """Пересчитывает средний рейтинг и количество отзывов товара."""
    count, average = (
        db.query(func.count(Review.id), func.avg(Review.rating))
        .filter(Review.product_id == product_id)
        .one()
    )
    product = db.get(Product, product_id)
    if product is None:
        return
    product.ratings_quantity = count
    product.ratings_average = round(float(average), 1) if count else 0.0


def list_reviews(db: Session, params: dict, pagination: Pagination) -> Page:
    base = db.query(Review).options(joinedload(Review.user))
    features = QueryFeatures(base, params, REVIEW_FILTERS, REVIEW_SORT_FIELDS).filter()
    total = features.query.order_by(None).count()
    reviews = features.sort().paginate(pagination).all()
    return Page(items=reviews, total=total, pagination=pagination)


def get_review(db: Session, review_id: int) -> Review:
    return _get_or_404(db, review_id)


def _has_purchased(db: Session, user: User, product_id: int) -> bool:
    return (
        db.query(OrderItem.id)
        .join(Order, OrderItem.order_id == Order.id)
        .filter(
            Order.user_id == user.id,
            Order.order_status == OrderStatus.done,
            OrderItem.product_id == product_id,
        )
        .first()
        is not None
    )


def create_review(db: Session, payload: ReviewCreate, user: User, product_id: int | None = None) -> Review:
    """Создаёт отзыв от имени user.

    Товар берётся из пути (вложенный маршрут) или из тела. Отзыв можно оставить
    только на купленный (заказ в статусе done) товар и только один раз.
    """
    product_id = product_id if product_id is not None else payload.product
    if product_id is None:
        raise ValidationError("Review must belong to a product")
    if db.get(Product, product_id) is None:
        raise NotFound("No product found with that ID")
    if not _has_purchased(db, user, product_id):
        raise ValidationError("You can only review products you have purchased")
    if db.query(Review.id).filter(Review.product_id == product_id, Review.user_id == user.id).first():
        raise ValidationError("You have already reviewed this product")

    review = Review(product_id=product_id, user_id=user.id, rating=payload.rating, review=payload.review)
    db.add(review)
    try:
        db.flush()
    except IntegrityError:
        # параллельный запрос успел создать отзыв раньше
        db.rollback()
        raise ValidationError("You have already reviewed this product")
    _recalc_product_ratings(db, product_id)
    db.commit()
    logger.info(f"Review {review.id} created by user {user.id} for product {product_id}")
    return _get_or_404(db, review.id)


def update_review(db: Session, review_id: int, changes: ReviewUpdate) -> Review:
    review = _get_or_404(db, review_id)
    for key, value in changes.model_dump(exclude_unset=True).items():
        if key == "rating" and value is None:
            continue
        setattr(review, key, value)
    db.flush()
    _recalc_product_ratings(db, review.product_id)
    db.commit()
    return _get_or_404(db, review.id)


def delete_review(db: Session, review_id: int) -> None:
    review = _get_or_404(db, review_id)
    product_id = review.product_id
    db.delete(review)
    db.flush()
    _recalc_product_ratings(db, product_id)
    db.commit()
    logger.info(f"Review {review_id} deleted")
