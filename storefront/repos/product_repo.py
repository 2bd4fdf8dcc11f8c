# storefront/repos/product_repo.py
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, joinedload

from storefront.data.models.product import ProductModel
from storefront.domain.schemas import ProductQuery


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: str, fresh: bool = False) -> ProductModel | None:
        #fresh=True re-reads the row instead of trusting the identity map
        return self.db.get(
            ProductModel,
            product_id,
            options=[joinedload(ProductModel.category)],
            populate_existing=fresh,
        )

    def sku_exists(self, sku: str) -> bool:
        return self.db.execute(
            select(ProductModel.id).where(ProductModel.sku == sku).limit(1)
        ).first() is not None

    def find_duplicate(self, user_id: str, name: str, price: Decimal) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel)
            .where(
                ProductModel.created_by == user_id,
                ProductModel.name == name,
                ProductModel.price == price,
            )
            .limit(1)
        ).scalar_one_or_none()

    def search(self, query: ProductQuery, created_by: str | None = None) -> tuple[list[ProductModel], int]:
        conditions = []

        if created_by:
            conditions.append(ProductModel.created_by == created_by)
        if query.category_id:
            conditions.append(ProductModel.category_id == query.category_id)
        if query.search:
            pattern = f"%{query.search}%"
            conditions.append(
                or_(
                    ProductModel.name.ilike(pattern),
                    ProductModel.description.ilike(pattern),
                    ProductModel.sku.ilike(pattern),
                )
            )
        if query.min_price is not None:
            conditions.append(ProductModel.price >= query.min_price)
        if query.max_price is not None:
            conditions.append(ProductModel.price <= query.max_price)
        if query.in_stock is True:
            conditions.append(ProductModel.stock_level > 0)
        elif query.in_stock is False:
            conditions.append(ProductModel.stock_level == 0)

        total = self.db.execute(
            select(func.count()).select_from(ProductModel).where(*conditions)
        ).scalar_one()

        sort_column = getattr(ProductModel, query.sort_by)
        order = sort_column.asc() if query.sort_order == "asc" else sort_column.desc()

        items = self.db.execute(
            select(ProductModel)
            .options(joinedload(ProductModel.category))
            .where(*conditions)
            .order_by(order, ProductModel.id)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        ).scalars().all()

        return list(items), total

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def save(self, product: ProductModel) -> ProductModel:
        self.db.commit()
        self.db.refresh(product)
        return product

    def delete_product(self, product: ProductModel) -> None:
        self.db.delete(product)
        self.db.commit()

    def rollback(self):
        self.db.rollback()
