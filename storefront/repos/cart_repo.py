# storefront/repos/cart_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session, joinedload

from storefront.data.models.cart import CartModel
from storefront.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: str, for_update: bool = False) -> CartModel | None:
        stmt = select(CartModel).where(CartModel.created_by == user_id)
        if for_update:
            #SELECT ... FOR UPDATE where the backend has row locks (sqlite ignores it)
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.db.execute(stmt).scalar_one_or_none()

    def update_cart_version(self, cart_id: str, old_version: int) -> int:
        #UPDATE carts SET version = 2 WHERE id = ... AND version = 1
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.id == cart_id, CartModel.version == old_version)
            .values(version=old_version + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.commit()
        self.db.refresh(cart)
        return cart

    def get_cart_item(self, cart_id: str, product_id: str) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel)
            .where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_cart_items(self, cart_id: str) -> list[CartItemModel]:
        #items with products joined, in insertion order (ulid ids sort by time)
        return list(
            self.db.execute(
                select(CartItemModel)
                .options(joinedload(CartItemModel.product))
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, item: CartItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
