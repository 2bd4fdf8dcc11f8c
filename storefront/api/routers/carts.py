#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import get_auth_context, get_db, require_product_id
from storefront.domain.context import AuthContext
from storefront.domain.schemas import AddCartItemIn, CartOut, UpdateCartItemIn
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("/", response_model=CartOut)
def get_cart(
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return get_service(db).get_cart(auth.user_id)


@router.post("/", response_model=CartOut, status_code=201)
def add_item(
    payload: AddCartItemIn,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return get_service(db).add_item(auth.user_id, payload.product_id, payload.quantity)


@router.put("/{product_id}", response_model=CartOut)
def update_item(
    payload: UpdateCartItemIn,
    product_id: str = Depends(require_product_id),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return get_service(db).update_item_quantity(auth.user_id, product_id, payload.quantity)


@router.delete("/{product_id}", response_model=CartOut)
def remove_item(
    product_id: str = Depends(require_product_id),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return get_service(db).remove_item(auth.user_id, product_id)
