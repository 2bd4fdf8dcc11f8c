from decimal import Decimal

import pytest

from storefront.domain.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from storefront.domain.schemas import ProductCreate, ProductQuery, ProductUpdate
from storefront.services.cart_service import CartService
from storefront.services.product_service import ProductService


@pytest.fixture
def seller(make_user):
    return make_user("Seller")


@pytest.fixture
def electronics(make_category):
    return make_category("Electronics")


@pytest.fixture
def books(make_category):
    return make_category("Books")


def _payload(category, name="MacBook Pro", price="1299.99", stock=15):
    return ProductCreate(
        name=name,
        description="Apple laptop",
        price=Decimal(price),
        stock_level=stock,
        category_id=category.id,
    )


def test_create_derives_sku_and_kobo_price(db, seller, electronics):
    product = ProductService(db).create_product(seller.id, _payload(electronics))

    assert product["id"].startswith("prd_")
    assert product["sku"].startswith(f"ELEC-{seller.id[-4:]}-")
    assert product["unit_price"] == 129999
    assert product["price"] == Decimal("1299.99")
    assert product["currency"] == "NGN"
    assert product["category"] == "Electronics"
    assert product["created_by"] == seller.id


def test_retry_with_same_key_returns_same_product(db, seller, electronics, lock_service):
    svc = ProductService(db, lock_service)

    first = svc.create_product(seller.id, _payload(electronics), idempotency_key="abc-123")
    second = svc.create_product(seller.id, _payload(electronics), idempotency_key="abc-123")

    assert first["id"] == second["id"]
    assert first["sku"] == second["sku"]


def test_same_product_with_new_key_is_a_duplicate(db, seller, electronics, lock_service):
    svc = ProductService(db, lock_service)
    svc.create_product(seller.id, _payload(electronics), idempotency_key="first")

    with pytest.raises(ConflictError, match="same name and price"):
        svc.create_product(seller.id, _payload(electronics), idempotency_key="second")


def test_same_name_different_price_is_allowed(db, seller, electronics):
    svc = ProductService(db)
    svc.create_product(seller.id, _payload(electronics, price="1299.99"))

    other = svc.create_product(seller.id, _payload(electronics, price="1199.99"))

    assert other["unit_price"] == 119999


def test_unknown_category_is_rejected(db, seller):
    payload = ProductCreate(
        name="Ghost",
        description="no category",
        price=Decimal("1.00"),
        stock_level=1,
        category_id="cat_01K1XAVQNJ9CFYC5TXCRE2S56Z",
    )

    with pytest.raises(BadRequestError, match="Category not found"):
        ProductService(db).create_product(seller.id, payload)


def test_update_price_recomputes_unit_price(db, seller, electronics):
    svc = ProductService(db)
    created = svc.create_product(seller.id, _payload(electronics))

    updated = svc.update_product(created["id"], seller.id, ProductUpdate(price=Decimal("999.50")))

    assert updated["price"] == Decimal("999.50")
    assert updated["unit_price"] == 99950
    assert updated["sku"] == created["sku"]


def test_category_change_regenerates_sku(db, seller, electronics, books):
    svc = ProductService(db)
    created = svc.create_product(seller.id, _payload(electronics))

    updated = svc.update_product(created["id"], seller.id, ProductUpdate(category_id=books.id))

    assert updated["sku"].startswith(f"BOOK-{seller.id[-4:]}-")
    assert updated["category"] == "Books"


def test_update_to_unknown_category_is_rejected(db, seller, electronics):
    svc = ProductService(db)
    created = svc.create_product(seller.id, _payload(electronics))

    with pytest.raises(BadRequestError, match="Category not found"):
        svc.update_product(
            created["id"], seller.id, ProductUpdate(category_id="cat_01K1XAVQNJ9CFYC5TXCRE2S56Z")
        )


def test_only_the_owner_can_change_a_product(db, seller, electronics, make_user):
    intruder = make_user("Intruder")
    svc = ProductService(db)
    created = svc.create_product(seller.id, _payload(electronics))

    with pytest.raises(ForbiddenError, match="only update your own"):
        svc.update_product(created["id"], intruder.id, ProductUpdate(stock_level=0))

    with pytest.raises(ForbiddenError, match="only delete your own"):
        svc.delete_product(created["id"], intruder.id)


def test_missing_product(db, seller):
    svc = ProductService(db)
    missing = "prd_01K1XAVQNJ9CFYC5TXCRE2S56Z"

    with pytest.raises(NotFoundError, match="Product not found"):
        svc.get_product(missing)
    with pytest.raises(NotFoundError, match="Product not found"):
        svc.update_product(missing, seller.id, ProductUpdate(name="x"))
    with pytest.raises(NotFoundError, match="Product not found"):
        svc.delete_product(missing, seller.id)


def test_delete_removes_product_from_carts(db, seller, electronics, make_user):
    buyer = make_user("Buyer")
    svc = ProductService(db)
    created = svc.create_product(seller.id, _payload(electronics))
    CartService(db).add_item(buyer.id, created["id"], 1)

    svc.delete_product(created["id"], seller.id)

    assert CartService(db).get_cart(buyer.id)["items"] == []
    with pytest.raises(NotFoundError):
        svc.get_product(created["id"])


def test_list_filters_sorts_and_paginates(db, seller, electronics, books, make_user):
    other = make_user("Other")
    svc = ProductService(db)
    svc.create_product(seller.id, _payload(electronics, name="Laptop", price="1299.99", stock=3))
    svc.create_product(seller.id, _payload(electronics, name="Phone", price="999.99", stock=0))
    svc.create_product(seller.id, _payload(books, name="Clean Code", price="39.99", stock=60))
    svc.create_product(other.id, _payload(books, name="Refactoring", price="44.95", stock=10))

    page = svc.list_products(ProductQuery(limit=3, sort_by="price", sort_order="asc"))
    assert [p["name"] for p in page["data"]] == ["Clean Code", "Refactoring", "Phone"]
    assert page["pagination"] == {"page": 1, "limit": 3, "total": 4, "total_pages": 2}

    page2 = svc.list_products(ProductQuery(page=2, limit=3, sort_by="price", sort_order="asc"))
    assert [p["name"] for p in page2["data"]] == ["Laptop"]

    in_stock = svc.list_products(ProductQuery(category_id=electronics.id, in_stock=True))
    assert [p["name"] for p in in_stock["data"]] == ["Laptop"]

    cheap = svc.list_products(ProductQuery(max_price=Decimal("50"), sort_by="name", sort_order="asc"))
    assert [p["name"] for p in cheap["data"]] == ["Clean Code", "Refactoring"]

    found = svc.list_products(ProductQuery(search="phone"))
    assert [p["name"] for p in found["data"]] == ["Phone"]

    mine = svc.list_user_products(other.id, ProductQuery())
    assert [p["name"] for p in mine["data"]] == ["Refactoring"]
    assert mine["pagination"]["total"] == 1


def test_empty_listing_has_zero_pages(db):
    page = ProductService(db).list_products(ProductQuery())

    assert page["data"] == []
    assert page["pagination"]["total_pages"] == 0
