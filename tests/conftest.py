from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.data.database import build_engine, build_session_factory, init_db
from storefront.data.models import CategoryModel, ProductModel, UserModel
from storefront.main import create_app
from storefront.utils import ids
from storefront.utils.money import to_minor_units


class FakeLockService:
    """In-memory stand-in for the redis backed LockService."""

    def __init__(self):
        self.held = {}
        self.acquired = []
        self.released = []

    def acquire(self, name, owner, ttl):
        if name in self.held:
            return False
        self.held[name] = owner
        self.acquired.append(name)
        return True

    def release(self, name, owner):
        self.released.append(name)
        if self.held.get(name) == owner:
            del self.held[name]
            return True
        return False


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def lock_service():
    return FakeLockService()


@pytest.fixture
def client(session_factory, lock_service):
    app = create_app(session_factory=session_factory, lock_service=lock_service)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name="Test User"):
        counter["n"] += 1
        user = UserModel(id=ids.new_user_id(), name=name, email=f"user{counter['n']}@example.com")
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture
def make_category(db):
    def _make(name="Electronics"):
        category = CategoryModel(id=ids.new_category_id(), name=name)
        db.add(category)
        db.commit()
        return category

    return _make


@pytest.fixture
def make_product(db):
    counter = {"n": 0}

    def _make(owner, category, price="100.00", stock=10, name=None, sku=None):
        counter["n"] += 1
        product = ProductModel(
            id=ids.new_product_id(),
            sku=sku or f"TEST-{counter['n']:03d}",
            name=name or f"Test Product {counter['n']}",
            description="A test product",
            price=Decimal(price),
            unit_price=to_minor_units(Decimal(price)),
            currency="NGN",
            stock_level=stock,
            created_by=owner.id,
            category_id=category.id,
        )
        db.add(product)
        db.commit()
        return product

    return _make
