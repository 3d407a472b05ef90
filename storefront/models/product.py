# storefront/models/product.py
# Модель Product: товар каталога. Рейтинг пересчитывается из отзывов.
from sqlalchemy import Column, Integer, String, Float, DateTime
from datetime import datetime
from storefront.db.base import Base

class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    sku = Column(String, unique=True, nullable=True)
    color = Column(String, nullable=True)
    cover_image = Column(String, nullable=True)
    price = Column(Float, nullable=False)
    ratings_average = Column(Float, default=0.0)
    ratings_quantity = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
