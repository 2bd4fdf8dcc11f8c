from sqlalchemy import Column, String

from storefront.data.database import Base


class CategoryModel(Base):
    __tablename__ = "categories"

    id = Column(String(30), primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
