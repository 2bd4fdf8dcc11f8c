# storefront/api/routers/products.py
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from storefront.api.deps import (
    get_auth_context,
    get_db,
    get_idempotency_key,
    get_lock_service,
    require_product_id,
)
from storefront.domain.context import AuthContext
from storefront.domain.schemas import ProductCreate, ProductOut, ProductPage, ProductQuery, ProductUpdate
from storefront.services.lock_service import LockService
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["products"])

# wire name -> column
SORT_FIELDS = {
    "createdAt": "created_at",
    "name": "name",
    "price": "price",
    "stockLevel": "stock_level",
}


def get_service(db: Session, lock_service: LockService | None = None):
    return ProductService(db, lock_service=lock_service)


def product_query(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: str = Query("createdAt", alias="sortBy", pattern="^(createdAt|name|price|stockLevel)$"),
    sort_order: str = Query("desc", alias="sortOrder", pattern="^(asc|desc)$"),
    category_id: str | None = Query(None, alias="categoryId"),
    search: str | None = Query(None),
    min_price: Decimal | None = Query(None, alias="minPrice", ge=0),
    max_price: Decimal | None = Query(None, alias="maxPrice", ge=0),
    in_stock: bool | None = Query(None, alias="inStock"),
) -> ProductQuery:
    return ProductQuery(
        page=page,
        limit=limit,
        sort_by=SORT_FIELDS[sort_by],
        sort_order=sort_order,
        category_id=category_id,
        search=search,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
    )


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(
    payload: ProductCreate,
    idempotency_key: str = Depends(get_idempotency_key),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
    lock_service: LockService | None = Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    return svc.create_product(auth.user_id, payload, idempotency_key)


@router.get("/", response_model=ProductPage)
def list_products(
    query: ProductQuery = Depends(product_query),
    db: Session = Depends(get_db),
):
    return get_service(db).list_products(query)


@router.get("/mine", response_model=ProductPage)
def list_my_products(
    query: ProductQuery = Depends(product_query),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return get_service(db).list_user_products(auth.user_id, query)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: str = Depends(require_product_id),
    db: Session = Depends(get_db),
):
    return get_service(db).get_product(product_id)


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    payload: ProductUpdate,
    product_id: str = Depends(require_product_id),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    return get_service(db).update_product(product_id, auth.user_id, payload)


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: str = Depends(require_product_id),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    get_service(db).delete_product(product_id, auth.user_id)
    return Response(status_code=204)
