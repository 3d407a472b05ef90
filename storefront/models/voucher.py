# storefront/models/voucher.py
# Модель Voucher: скидочный код, на который ссылается заказ.
from sqlalchemy import Column, Integer, String, Float
from storefront.db.base import Base

class Voucher(Base):
    __tablename__ = "vouchers"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String, unique=True, nullable=False)
    discount = Column(Float, nullable=False)
