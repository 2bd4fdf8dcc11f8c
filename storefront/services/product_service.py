# storefront/services/product_service.py
import math
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from storefront.domain.schemas import ProductCreate, ProductQuery, ProductUpdate
from storefront.repos.category_repo import CategoryRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.idempotency_service import IdempotencyService
from storefront.services.lock_service import LockService
from storefront.services.sku_service import SkuService
from storefront.utils import ids
from storefront.utils.logging import get_logger
from storefront.utils.money import to_minor_units
from storefront.utils.settings import DEFAULT_CURRENCY

logger = get_logger(__name__)


class ProductService:
    """
    Use cases for the product domain.
    Creation goes through the idempotency guard; SKU and unit price
    (kobo) are derived here, never taken from the client.
    """

    def __init__(self, db: Session, lock_service: LockService | None = None):
        self.repo = ProductRepo(db)
        self.categories = CategoryRepo(db)
        self.sku_service = SkuService(db)
        self.idempotency = IdempotencyService(db, lock_service)

    @staticmethod
    def to_dict(product: ProductModel) -> Dict[str, Any]:
        return {
            "id": product.id,
            "sku": product.sku,
            "name": product.name,
            "description": product.description,
            "price": product.price,
            "unit_price": product.unit_price,
            "currency": product.currency,
            "stock_level": product.stock_level,
            "created_by": product.created_by,
            "category_id": product.category_id,
            "category": product.category.name if product.category else None,
            "created_at": product.created_at,
            "updated_at": product.updated_at,
        }

    #commands
    def create_product(
        self,
        user_id: str,
        payload: ProductCreate,
        idempotency_key: str | None = None,
    ) -> Dict[str, Any]:
        product = self.idempotency.create_with_idempotency(
            idempotency_key,
            user_id,
            lambda: self._create(user_id, payload),
        )
        return self.to_dict(product)

    def _create(self, user_id: str, payload: ProductCreate) -> ProductModel:
        if self.repo.find_duplicate(user_id, payload.name, payload.price):
            raise ConflictError("A product with the same name and price already exists")

        if not self.categories.get_category(payload.category_id):
            raise BadRequestError("Category not found")

        product = ProductModel(
            id=ids.new_product_id(),
            sku=self.sku_service.generate_product_sku(payload.category_id, user_id),
            name=payload.name,
            description=payload.description,
            price=payload.price,
            unit_price=to_minor_units(payload.price),
            currency=DEFAULT_CURRENCY,
            stock_level=payload.stock_level,
            created_by=user_id,
            category_id=payload.category_id,
        )

        try:
            created = self.repo.create_product(product)
        except IntegrityError as e:
            self.repo.rollback()
            logger.error(f"Insert of product {product.id} (sku {product.sku}) failed: {e}")
            raise ConflictError("Product could not be created, please retry") from e

        logger.info(f"Created product {created.id} sku {created.sku} for user {user_id}")
        return created

    def update_product(self, product_id: str, user_id: str, payload: ProductUpdate) -> Dict[str, Any]:
        product = self.repo.get_product(product_id)

        if not product:
            raise NotFoundError("Product not found")

        if product.created_by != user_id:
            raise ForbiddenError("You can only update your own products")

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        new_category = changes.get("category_id")
        if new_category and not self.categories.get_category(new_category):
            raise BadRequestError("Category not found")

        if new_category and new_category != product.category_id:
            #category is part of the sku, so a new one is generated
            product.sku = self.sku_service.generate_product_sku(new_category, user_id)
            logger.info(f"Product {product_id} moved to category {new_category}, new sku {product.sku}")

        if "price" in changes:
            product.unit_price = to_minor_units(changes["price"])

        for field, value in changes.items():
            setattr(product, field, value)

        try:
            updated = self.repo.save(product)
        except IntegrityError as e:
            self.repo.rollback()
            logger.error(f"Update of product {product_id} failed: {e}")
            raise ConflictError("Product could not be updated, please retry") from e

        return self.to_dict(updated)

    def delete_product(self, product_id: str, user_id: str) -> None:
        product = self.repo.get_product(product_id)

        if not product:
            raise NotFoundError("Product not found")

        if product.created_by != user_id:
            raise ForbiddenError("You can only delete your own products")

        self.repo.delete_product(product)
        logger.info(f"Deleted product {product_id}")

    #queries
    def get_product(self, product_id: str) -> Dict[str, Any]:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("Product not found")
        return self.to_dict(product)

    def list_products(self, query: ProductQuery, created_by: str | None = None) -> Dict[str, Any]:
        items, total = self.repo.search(query, created_by=created_by)
        return {
            "data": [self.to_dict(p) for p in items],
            "pagination": {
                "page": query.page,
                "limit": query.limit,
                "total": total,
                "total_pages": math.ceil(total / query.limit),
            },
        }

    def list_user_products(self, user_id: str, query: ProductQuery) -> Dict[str, Any]:
        return self.list_products(query, created_by=user_id)
