# storefront/data/seed.py
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.database import build_engine, build_session_factory, init_db
from storefront.data.models import CategoryModel, ProductModel, UserModel
from storefront.services.sku_service import SkuService
from storefront.utils import ids
from storefront.utils.logging import get_logger
from storefront.utils.money import to_minor_units
from storefront.utils.settings import DATABASE_URL, DEFAULT_CURRENCY

logger = get_logger(__name__)

CATEGORIES = ["Electronics", "Clothing", "Books"]

# (category, owner index, name, description, price, stock)
PRODUCTS = [
    ("Electronics", 0, 'MacBook Pro 13"', "Apple MacBook Pro with M2 chip, 8GB RAM, 256GB SSD", "1299.99", 15),
    ("Electronics", 0, "iPhone 15 Pro", "Apple iPhone 15 Pro with A17 Pro chip, 128GB storage", "999.99", 25),
    ("Clothing", 0, "Denim Jacket", "Classic blue denim jacket", "79.99", 40),
    ("Clothing", 0, "Running Shoes", "Lightweight running shoes", "119.50", 30),
    ("Books", 1, "Clean Code", "A Handbook of Agile Software Craftsmanship", "39.99", 60),
    ("Books", 1, "The Pragmatic Programmer", "Your Journey to Mastery, 20th Anniversary Edition", "44.95", 50),
]


def seed(db: Session) -> bool:
    # only seed an empty database
    if db.execute(select(UserModel.id).limit(1)).first():
        logger.info("Database already seeded, skipping")
        return False

    users = [
        UserModel(id=ids.new_user_id(), name="John Doe", email="john@example.com"),
        UserModel(id=ids.new_user_id(), name="Jane Smith", email="jane@example.com"),
    ]
    categories = {name: CategoryModel(id=ids.new_category_id(), name=name) for name in CATEGORIES}
    db.add_all(users + list(categories.values()))
    db.commit()

    skus = SkuService(db)
    for category, owner, name, description, price, stock in PRODUCTS:
        db.add(
            ProductModel(
                id=ids.new_product_id(),
                sku=skus.generate_product_sku(categories[category].id, users[owner].id),
                name=name,
                description=description,
                price=Decimal(price),
                unit_price=to_minor_units(Decimal(price)),
                currency=DEFAULT_CURRENCY,
                stock_level=stock,
                created_by=users[owner].id,
                category_id=categories[category].id,
            )
        )
        #flush so the next sku collision check sees this one
        db.flush()
    db.commit()

    logger.info(f"Seeded {len(users)} users, {len(categories)} categories, {len(PRODUCTS)} products")
    return True


def main():
    engine = build_engine(DATABASE_URL)
    init_db(engine)
    db = build_session_factory(engine)()
    try:
        seed(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
