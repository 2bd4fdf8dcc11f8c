from datetime import datetime, timezone

from sqlalchemy import BigInteger, CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(String(30), primary_key=True)
    sku = Column(String(32), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)

    # price in naira for display, unit_price in kobo for arithmetic
    price = Column(Numeric(12, 2), nullable=False)
    unit_price = Column(BigInteger, nullable=False)
    currency = Column(String(3), nullable=False, default="NGN")
    stock_level = Column(Integer, nullable=False, default=0)

    created_by = Column(String(30), ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(String(30), ForeignKey("categories.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    category = relationship("CategoryModel")
    creator = relationship("UserModel")

    __table_args__ = (CheckConstraint("stock_level >= 0", name="ck_products_stock_level"),)
