# storefront/services/cart_service.py
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import BadRequestError, ConflictError, NotFoundError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils import ids
from storefront.utils.logging import get_logger
from storefront.utils.money import to_major_units

logger = get_logger(__name__)


class CartService:
    """
    One cart per user, created lazily on first access.

    commands (add, update, remove) run in a single transaction each:
    the cart row is read (SELECT ... FOR UPDATE), then the product and the
    line are re-read, the stock is checked and the line is written.
    The commit bumps carts.version only if it is still the version that was
    read; a concurrent mutation of the same cart ends in ConflictError.
    A failed check rolls everything back, the stored quantity stays as it was.

    query (get) only reads. Totals are integer kobo; naira is display only.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)

    #query
    def get_cart(self, user_id: str) -> Dict[str, Any]:
        cart = self._get_or_create_cart(user_id)
        return self._build_view(cart.id)

    #commands
    def add_item(self, user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise BadRequestError("Quantity must be at least 1")

        cart = self._get_or_create_cart(user_id)

        with self._transaction(user_id):
            product = self.products.get_product(product_id, fresh=True)
            if not product:
                raise NotFoundError("Product not found")

            if product.created_by == user_id:
                raise BadRequestError("You cannot add your own products to your cart")

            existing = self.repo.get_cart_item(cart.id, product_id)
            new_quantity = (existing.quantity if existing else 0) + quantity

            if new_quantity > product.stock_level:
                raise BadRequestError(
                    f"Requested quantity ({new_quantity}) exceeds available stock ({product.stock_level})"
                )

            if existing:
                logger.info(
                    f"Product {product_id} already in cart {cart.id}, quantity "
                    f"{existing.quantity} -> {new_quantity}"
                )
                existing.quantity = new_quantity
                self.repo.add_cart_item(existing)
            else:
                logger.info(f"Adding product {product_id} x{new_quantity} to cart {cart.id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        id=ids.new_cart_item_id(),
                        cart_id=cart.id,
                        product_id=product_id,
                        quantity=new_quantity,
                    )
                )

        return self._build_view(cart.id)

    def update_item_quantity(self, user_id: str, product_id: str, quantity: int) -> Dict[str, Any]:
        if quantity < 1:
            raise BadRequestError("Quantity must be at least 1")

        cart = self._get_or_create_cart(user_id)

        with self._transaction(user_id):
            product = self.products.get_product(product_id, fresh=True)
            if not product:
                raise NotFoundError("Product not found")

            existing = self.repo.get_cart_item(cart.id, product_id)
            if not existing:
                raise NotFoundError("Item not found in cart")

            if quantity > product.stock_level:
                raise BadRequestError(
                    f"Requested quantity ({quantity}) exceeds available stock ({product.stock_level})"
                )

            # absolute set, not added to the current quantity
            existing.quantity = quantity
            self.repo.add_cart_item(existing)
            logger.info(f"Set product {product_id} quantity to {quantity} in cart {cart.id}")

        return self._build_view(cart.id)

    def remove_item(self, user_id: str, product_id: str) -> Dict[str, Any]:
        cart = self._get_or_create_cart(user_id)

        with self._transaction(user_id):
            existing = self.repo.get_cart_item(cart.id, product_id)
            if not existing:
                raise NotFoundError("Item not found in cart")

            self.repo.delete_cart_item(existing)
            logger.info(f"Removed product {product_id} from cart {cart.id}")

        return self._build_view(cart.id)

    #helpers
    def _get_or_create_cart(self, user_id: str) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        try:
            cart = self.repo.create_cart(CartModel(id=ids.new_cart_id(), created_by=user_id))
        except IntegrityError:
            # a parallel request created it first (created_by is unique)
            self.repo.rollback()
            cart = self.repo.get_cart_by_user(user_id)
            if cart is None:
                raise
            return cart

        logger.info(f"Created cart {cart.id} for user {user_id}")
        return cart

    @contextmanager
    def _transaction(self, user_id: str) -> Iterator[CartModel]:
        try:
            cart = self.repo.get_cart_by_user(user_id, for_update=True)
            read_version = cart.version
            yield cart

            # optimistic locking, the version must not have moved since the read
            if self.repo.update_cart_version(cart.id, read_version) == 0:
                logger.warning(f"Cart {cart.id} changed after version {read_version} was read")
                raise ConflictError("Cart was modified by another request, please retry")
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            logger.error(f"Cart of user {user_id} changed concurrently: {e}")
            raise ConflictError("Cart was modified by another request, please retry") from e
        except Exception:
            self.repo.rollback()
            raise

    def _build_view(self, cart_id: str) -> Dict[str, Any]:
        items = []
        for item in self.repo.get_cart_items(cart_id):
            product = item.product
            line_total = int(product.unit_price) * item.quantity
            items.append(
                {
                    "product_id": item.product_id,
                    "sku": product.sku,
                    "name": product.name,
                    "price": product.price,
                    "unit_price_minor": int(product.unit_price),
                    "currency": product.currency,
                    "quantity": item.quantity,
                    "line_total_minor": line_total,
                    "line_total_major": to_major_units(line_total),
                }
            )

        subtotal = sum(i["line_total_minor"] for i in items)

        return {
            "id": cart_id,
            "items": items,
            "subtotal_minor": subtotal,
            "subtotal_major": to_major_units(subtotal),
        }
