# storefront/schemas/review.py
from datetime import datetime

from pydantic import Field

from storefront.schemas.base import CamelModel
from storefront.schemas.user import UserBrief


class ReviewCreate(CamelModel):
    rating: int = Field(..., ge=1, le=5)
    review: str | None = Field(None, max_length=1000)
    # Для вложенного маршрута /products/{id}/reviews берётся из пути
    product: int | None = None


class ReviewUpdate(CamelModel):
    rating: int | None = Field(None, ge=1, le=5)
    review: str | None = Field(None, max_length=1000)


class ReviewOut(CamelModel):
    id: int
    rating: int
    review: str | None = None
    product: int = Field(validation_alias="product_id")
    user: UserBrief | None = None
    created_at: datetime | None = None
